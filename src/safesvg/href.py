"""URL-scheme and data-URI policy for attribute values."""

from __future__ import annotations

import re

from .constants import DATA_URI_MIME_TYPES
from .errors import UnallowedHrefAttributeValue

_JAVASCRIPT_SCHEME = "javascript:"
_DATA_SCHEME = "data:"

# "<type>/<subtype>;" right after "data:", e.g. "image/png;base64,..."
_DATA_URI_SHAPE = re.compile(r"^\s*[^/]+/[^/;]+\s*;\s*", re.IGNORECASE)
_DATA_URI_MIME_TYPES = frozenset(DATA_URI_MIME_TYPES)


def validate_attr_value(value: str) -> None:
    """Reject values using the ``javascript:`` scheme, in any letter case.

    Applied to every attribute that has no dedicated validator.
    """
    value = value.strip()
    length = len(value)
    if length > len(_JAVASCRIPT_SCHEME):
        if value[: len(_JAVASCRIPT_SCHEME)].lower() == _JAVASCRIPT_SCHEME:
            raise UnallowedHrefAttributeValue(value)
    elif length == len(_JAVASCRIPT_SCHEME):
        if value.lower() == _JAVASCRIPT_SCHEME:
            raise UnallowedHrefAttributeValue(value)


def validate_href(value: str) -> None:
    """Scheme check plus the data-URI image allowlist.

    ``data:`` values must name one of `DATA_URI_MIME_TYPES`. A ``data:``
    value that does not even have the ``type/subtype;`` shape is let
    through unchanged; see DESIGN.md for why this gap is kept.
    """
    value = value.strip()
    validate_attr_value(value)
    if len(value) <= len(_DATA_SCHEME) or value[: len(_DATA_SCHEME)].lower() != _DATA_SCHEME:
        return
    payload = value[len(_DATA_SCHEME) :]
    if not _DATA_URI_SHAPE.match(payload):
        return
    mime = payload.split(";", 1)[0].strip().lower()
    if mime not in _DATA_URI_MIME_TYPES:
        raise UnallowedHrefAttributeValue(value, detail=f"mime type {mime!r} is not allowed")


class AttributeValueValidator:
    """Registry entry wrapping `validate_attr_value`."""

    __slots__ = ()

    def validate(self, value: str) -> None:
        validate_attr_value(value)

    def __repr__(self) -> str:
        return "AttributeValueValidator()"


class HrefValidator:
    """Registry entry wrapping `validate_href`."""

    __slots__ = ()

    def validate(self, value: str) -> None:
        validate_href(value)

    def __repr__(self) -> str:
        return "HrefValidator()"
