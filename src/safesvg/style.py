"""CSS token policy for embedded style sheets.

The scanner walks the component values produced by tinycss2, descending
into blocks and function arguments, and stops at the first token that
could pull in a remote resource or run code:

- ``url(...)`` whose target contains ``//`` (absolute or protocol-relative)
- ``@import``
- any function call, e.g. ``expression(...)``

Everything else passes uninspected.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

import tinycss2

from .errors import UnallowedCSSAttribute, UnallowedCSSAttributeValue
from .href import validate_attr_value

logger = logging.getLogger(__name__)

# Functions refused even where inline style attributes allow function calls.
SCRIPT_FUNCTIONS = frozenset(("expression", "javascript", "behavior", "-moz-binding"))


def iter_css_tokens(css: str) -> Iterator[object]:
    """Yield tinycss2 nodes in source order, nested content included.

    Nesting depth is attacker controlled, so the walk keeps an explicit stack.
    """
    stack = [iter(tinycss2.parse_component_value_list(css, skip_comments=True))]
    while stack:
        node = next(stack[-1], None)
        if node is None:
            stack.pop()
            continue
        yield node
        if node.type == "function":
            if _url_function_target(node) is None:
                stack.append(iter(node.arguments))
        elif node.type in ("{} block", "() block", "[] block"):
            stack.append(iter(node.content))


def _url_function_target(node) -> str | None:
    # url("...") tokenizes as a function holding one string, unlike url(...).
    if node.lower_name != "url":
        return None
    args = [arg for arg in node.arguments if arg.type not in ("whitespace", "comment")]
    if len(args) == 1 and args[0].type == "string":
        return args[0].value
    return None


def _scan(css: str | bytes, *, allow_functions: bool) -> None:
    if isinstance(css, bytes):
        css = css.decode("utf-8", errors="replace")
    for node in iter_css_tokens(css):
        kind = node.type
        if kind == "whitespace":
            continue
        logger.debug("css token %s: %s", kind, getattr(node, "value", getattr(node, "name", "")))
        if kind == "url":
            if "//" in node.value:
                raise UnallowedCSSAttributeValue(node.value)
        elif kind == "at-keyword":
            if node.lower_value == "import":
                raise UnallowedCSSAttribute("@" + node.value)
        elif kind == "function":
            target = _url_function_target(node)
            if target is not None:
                if "//" in target:
                    raise UnallowedCSSAttributeValue(target)
            elif not allow_functions or node.lower_name in SCRIPT_FUNCTIONS:
                raise UnallowedCSSAttributeValue(node.name + "(")
        elif kind == "error":
            raise UnallowedCSSAttributeValue(node.message, detail=node.kind)


def validate_style(css: str | bytes) -> None:
    """Validate the text content of a ``<style>`` element."""
    _scan(css, allow_functions=False)


def validate_style_attribute(value: str) -> None:
    """Validate an inline ``style="..."`` attribute.

    Presentation values such as ``rgb()`` and ``calc()`` are common here, so
    only `SCRIPT_FUNCTIONS` are refused; remote urls and ``@import`` are
    refused as in style sheets.
    """
    validate_attr_value(value)
    _scan(value, allow_functions=True)


class StyleSheetValidator:
    """Registry entry for style element content."""

    __slots__ = ()

    def validate(self, value: str) -> None:
        validate_style(value)

    def __repr__(self) -> str:
        return "StyleSheetValidator()"


class StyleAttributeValidator:
    """Registry entry for the ``style`` attribute."""

    __slots__ = ()

    def validate(self, value: str) -> None:
        validate_style_attribute(value)

    def __repr__(self) -> str:
        return "StyleAttributeValidator()"
