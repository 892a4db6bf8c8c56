"""SVG Whitelist Constants

This module defines the default vocabulary accepted by the validator.
Names are stored lower-cased; lookups lower-case the incoming name first.
Entries are lists to keep a stable iteration order for documentation and
tests; the validator converts them to sets.

Usage:
    from safesvg.constants import SVG_ELEMENTS, SVG_ATTRIBUTES

References:
    - https://www.w3.org/TR/SVG11/eltindex.html
    - https://www.w3.org/TR/SVG11/attindex.html
"""

XML_NAMESPACE = "http://www.w3.org/XML/1998/namespace"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"
SVG_NAMESPACE = "http://www.w3.org/2000/svg"

# Namespace URIs rewritten to a short prefix when building attribute keys.
# Any other namespace URI is kept verbatim as the key prefix.
NAMESPACE_PREFIXES = {
    XML_NAMESPACE: "xml",
    XLINK_NAMESPACE: "xlink",
}

# Amplification bound used when a Validator is built without one.
DEFAULT_MAX_REFERENCES = 500

# Attributes that open a new id scope for the element carrying them.
ID_ATTRIBUTES = frozenset(("id", "xml:id"))

# Attributes whose "#name" values are same-document fragment references.
REFERENCE_ATTRIBUTES = frozenset(("href", "xlink:href"))

# MIME types accepted inside data: URIs on href attributes.
DATA_URI_MIME_TYPES = [
    "image/png",
    "image/jpg",
    "image/jpeg",
    "image/pjpeg",
    "image/gif",
]

# Elements whose whitespace is rendered and therefore kept by minify().
TEXT_CONTENT_ELEMENTS = [
    "text",
    "tspan",
    "textpath",
    "tref",
    "title",
    "desc",
]

# Deliberately absent: script, foreignobject, handler, listener, the
# animation elements (set, animate, animatemotion, animatetransform,
# animatecolor) and style. Callers opt in with Validator.add_elements().
SVG_ELEMENTS = [
    # Structure
    "svg",
    "g",
    "defs",
    "desc",
    "title",
    "metadata",
    "symbol",
    "use",
    "switch",
    "view",
    # Hyperlinks and raster content
    "a",
    "image",
    "cursor",
    # Shapes
    "path",
    "rect",
    "circle",
    "ellipse",
    "line",
    "polyline",
    "polygon",
    # Text
    "text",
    "tspan",
    "tref",
    "textpath",
    "altglyph",
    "altglyphdef",
    "altglyphitem",
    "glyphref",
    # Painting
    "marker",
    "pattern",
    "clippath",
    "mask",
    "lineargradient",
    "radialgradient",
    "stop",
    # Fonts
    "font",
    "font-face",
    "font-face-format",
    "font-face-name",
    "font-face-src",
    "font-face-uri",
    "glyph",
    "missing-glyph",
    "hkern",
    "vkern",
    # Filters
    "filter",
    "feblend",
    "fecolormatrix",
    "fecomponenttransfer",
    "fecomposite",
    "feconvolvematrix",
    "fediffuselighting",
    "fedisplacementmap",
    "fedistantlight",
    "fedropshadow",
    "feflood",
    "fefunca",
    "fefuncb",
    "fefuncg",
    "fefuncr",
    "fegaussianblur",
    "feimage",
    "femerge",
    "femergenode",
    "femorphology",
    "feoffset",
    "fepointlight",
    "fespecularlighting",
    "fespotlight",
    "fetile",
    "feturbulence",
]

# Deliberately absent: every on* event handler and xml:base.
SVG_ATTRIBUTES = [
    # Namespace declarations
    "xmlns",
    "xmlns:xlink",
    # Core
    "id",
    "xml:id",
    "xml:lang",
    "xml:space",
    "lang",
    "class",
    "style",
    "tabindex",
    "transform",
    "version",
    "baseprofile",
    "viewbox",
    "preserveaspectratio",
    "zoomandpan",
    "contentscripttype",
    "contentstyletype",
    # Linking
    "href",
    "xlink:href",
    "xlink:title",
    "xlink:type",
    "xlink:role",
    "xlink:arcrole",
    "xlink:show",
    "xlink:actuate",
    "target",
    # Conditional processing
    "requiredfeatures",
    "requiredextensions",
    "systemlanguage",
    "externalresourcesrequired",
    # Geometry
    "x",
    "y",
    "x1",
    "y1",
    "x2",
    "y2",
    "cx",
    "cy",
    "r",
    "rx",
    "ry",
    "fx",
    "fy",
    "fr",
    "width",
    "height",
    "d",
    "points",
    "pathlength",
    # Presentation
    "alignment-baseline",
    "baseline-shift",
    "clip",
    "clip-path",
    "clip-rule",
    "color",
    "color-interpolation",
    "color-interpolation-filters",
    "color-profile",
    "color-rendering",
    "cursor",
    "direction",
    "display",
    "dominant-baseline",
    "enable-background",
    "fill",
    "fill-opacity",
    "fill-rule",
    "filter",
    "flood-color",
    "flood-opacity",
    "font-family",
    "font-size",
    "font-size-adjust",
    "font-stretch",
    "font-style",
    "font-variant",
    "font-weight",
    "glyph-orientation-horizontal",
    "glyph-orientation-vertical",
    "image-rendering",
    "kerning",
    "letter-spacing",
    "lighting-color",
    "marker-end",
    "marker-mid",
    "marker-start",
    "mask",
    "mix-blend-mode",
    "isolation",
    "opacity",
    "overflow",
    "paint-order",
    "pointer-events",
    "shape-rendering",
    "stop-color",
    "stop-opacity",
    "stroke",
    "stroke-dasharray",
    "stroke-dashoffset",
    "stroke-linecap",
    "stroke-linejoin",
    "stroke-miterlimit",
    "stroke-opacity",
    "stroke-width",
    "text-anchor",
    "text-decoration",
    "text-rendering",
    "unicode-bidi",
    "vector-effect",
    "visibility",
    "word-spacing",
    "writing-mode",
    # Gradients and patterns
    "gradientunits",
    "gradienttransform",
    "spreadmethod",
    "offset",
    "patternunits",
    "patterncontentunits",
    "patterntransform",
    # Markers, clipping and masking
    "markerunits",
    "markerwidth",
    "markerheight",
    "refx",
    "refy",
    "orient",
    "clippathunits",
    "maskunits",
    "maskcontentunits",
    # Text
    "dx",
    "dy",
    "rotate",
    "textlength",
    "lengthadjust",
    "startoffset",
    "method",
    "spacing",
    "glyphref",
    "format",
    # Fonts
    "horiz-adv-x",
    "horiz-origin-x",
    "horiz-origin-y",
    "vert-adv-y",
    "vert-origin-x",
    "vert-origin-y",
    "units-per-em",
    "ascent",
    "descent",
    "unicode",
    "unicode-range",
    "glyph-name",
    "arabic-form",
    "u1",
    "u2",
    "g1",
    "g2",
    "k",
    # Filters
    "filterunits",
    "primitiveunits",
    "filterres",
    "in",
    "in2",
    "result",
    "stddeviation",
    "mode",
    "operator",
    "k1",
    "k2",
    "k3",
    "k4",
    "values",
    "type",
    "tablevalues",
    "slope",
    "intercept",
    "amplitude",
    "exponent",
    "scale",
    "xchannelselector",
    "ychannelselector",
    "basefrequency",
    "numoctaves",
    "seed",
    "stitchtiles",
    "kernelmatrix",
    "kernelunitlength",
    "order",
    "divisor",
    "bias",
    "targetx",
    "targety",
    "edgemode",
    "preservealpha",
    "surfacescale",
    "specularconstant",
    "specularexponent",
    "diffuseconstant",
    "azimuth",
    "elevation",
    "pointsatx",
    "pointsaty",
    "pointsatz",
    "limitingconeangle",
    "radius",
]
