import logging

from .constants import DEFAULT_MAX_REFERENCES
from .errors import (
    InvalidAttribute,
    InvalidElement,
    ParseError,
    SVGValidationError,
    TooManyReferences,
    UnallowedCSSAttribute,
    UnallowedCSSAttributeValue,
    UnallowedEntityAttribute,
    UnallowedHrefAttributeValue,
)
from .href import validate_attr_value, validate_href
from .minify import minify
from .references import ReferenceGraph
from .registry import ValueValidator
from .style import validate_style, validate_style_attribute
from .tokenizer import TokenizerOpts
from .validator import Validator

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "DEFAULT_MAX_REFERENCES",
    "InvalidAttribute",
    "InvalidElement",
    "ParseError",
    "ReferenceGraph",
    "SVGValidationError",
    "TokenizerOpts",
    "TooManyReferences",
    "UnallowedCSSAttribute",
    "UnallowedCSSAttributeValue",
    "UnallowedEntityAttribute",
    "UnallowedHrefAttributeValue",
    "Validator",
    "ValueValidator",
    "minify",
    "validate_attr_value",
    "validate_href",
    "validate_style",
    "validate_style_attribute",
]
