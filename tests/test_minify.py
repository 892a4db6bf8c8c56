from __future__ import annotations

import unittest

from safesvg import ParseError, minify
from safesvg.minify import compact_css, serialize_start_tag

SVG_NS = 'xmlns="http://www.w3.org/2000/svg"'


class TestMinify(unittest.TestCase):
    def test_drops_declaration_comments_and_layout_whitespace(self) -> None:
        doc = (
            '<?xml version="1.0"?>\n<!-- exported -->\n'
            f"<svg {SVG_NS}>\n  <g>\n    <path d=\"M0  0\n L1 1\"/>\n  </g>\n</svg>\n"
        )
        assert minify(doc) == f'<svg {SVG_NS}><g><path d="M0 0 L1 1"/></g></svg>'

    def test_output_type_follows_input(self) -> None:
        doc = f"<svg {SVG_NS}><g></g></svg>"
        assert minify(doc) == f"<svg {SVG_NS}><g/></svg>"
        assert minify(doc.encode()) == f"<svg {SVG_NS}><g/></svg>".encode()

    def test_drops_doctype(self) -> None:
        doc = '<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" "http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd">\n<svg/>'
        assert minify(doc) == "<svg/>"

    def test_keep_comments(self) -> None:
        doc = f"<svg {SVG_NS}><!-- keep --><g/></svg>"
        assert minify(doc, keep_comments=True) == f"<svg {SVG_NS}><!-- keep --><g/></svg>"
        assert minify(doc) == f"<svg {SVG_NS}><g/></svg>"

    def test_text_whitespace_is_collapsed_not_removed(self) -> None:
        doc = f"<svg {SVG_NS}><text>a   b\n <tspan>c</tspan></text></svg>"
        assert minify(doc) == f"<svg {SVG_NS}><text>a b <tspan>c</tspan></text></svg>"

    def test_style_is_compacted(self) -> None:
        doc = f"<svg {SVG_NS}><style>\n .a {{ fill: red; }} /* x */\n</style></svg>"
        assert minify(doc) == f"<svg {SVG_NS}><style>.a{{fill:red;}}</style></svg>"

    def test_escaping(self) -> None:
        doc = f"<svg {SVG_NS}><title>a &amp; b &lt; c</title><g class='say \"hi\"'/></svg>"
        assert minify(doc) == f"<svg {SVG_NS}><title>a &amp; b &lt; c</title><g class='say \"hi\"'/></svg>"

    def test_malformed_markup(self) -> None:
        with self.assertRaises(ParseError):
            minify("<svg><g></svg>")


class TestCompactCSS(unittest.TestCase):
    def test_selectors_and_blocks(self) -> None:
        assert compact_css("a > b , c { color:red }") == "a>b,c{color:red}"

    def test_keeps_significant_whitespace(self) -> None:
        assert compact_css("@media screen and (min-width: 10px) { .a { margin: 0 auto } }") == (
            "@media screen and (min-width:10px){.a{margin:0 auto}}"
        )

    def test_functions(self) -> None:
        assert compact_css("fill: rgb( 1 , 2 , 3 )") == "fill:rgb(1,2,3)"


class TestSerializeStartTag(unittest.TestCase):
    def test_quote_choice(self) -> None:
        assert serialize_start_tag("g", [("class", 'a"b')]) == "<g class='a\"b'"
        assert serialize_start_tag("g", [("class", "a'b\"c")]) == '<g class="a\'b&quot;c"'
        assert serialize_start_tag("g", []) == "<g"


if __name__ == "__main__":
    unittest.main()
