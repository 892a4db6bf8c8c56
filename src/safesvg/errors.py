"""Rejection taxonomy for SVG validation.

Every error is terminal for the document being validated: the first one
raised aborts the pass and the document must be discarded as a whole.
"""

from __future__ import annotations

from xml.parsers.expat import ExpatError as ParseError

__all__ = [
    "InvalidAttribute",
    "InvalidElement",
    "ParseError",
    "SVGValidationError",
    "TooManyReferences",
    "UnallowedCSSAttribute",
    "UnallowedCSSAttributeValue",
    "UnallowedEntityAttribute",
    "UnallowedHrefAttributeValue",
]


class SVGValidationError(ValueError):
    """Base class for policy rejections.

    `code` is a stable identifier suitable for metrics or API responses,
    `value` holds the offending element name, attribute key or value.
    `line` and `column` are filled in by the validator when known.
    """

    code = "svg-error"
    message = "invalid svg"

    def __init__(self, value: str | None = None, detail: str | None = None) -> None:
        self.value = value
        self.detail = detail
        self.line: int | None = None
        self.column: int | None = None
        super().__init__(str(self))

    def __str__(self) -> str:
        text = f"[svg] {self.message}"
        if self.value is not None:
            text = f"{text}: {self.value}"
        if self.detail:
            text = f"{text} ({self.detail})"
        return text

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"


class InvalidElement(SVGValidationError):
    code = "invalid-element"
    message = "invalid element"


class InvalidAttribute(SVGValidationError):
    code = "invalid-attribute"
    message = "invalid attribute"


class UnallowedCSSAttributeValue(SVGValidationError):
    code = "unallowed-css-attribute-value"
    message = "unallowed css attribute value"


class UnallowedCSSAttribute(SVGValidationError):
    code = "unallowed-css-attribute"
    message = "unallowed css attribute"


class UnallowedHrefAttributeValue(SVGValidationError):
    code = "unallowed-href-attribute-value"
    message = "unallowed href attribute value"


class UnallowedEntityAttribute(SVGValidationError):
    code = "unallowed-entity-attribute"
    message = "unallowed entity attribute"


class TooManyReferences(SVGValidationError):
    code = "too-many-references"
    message = "too many references"
