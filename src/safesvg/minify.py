"""Compact re-serialization of SVG documents.

Meant for documents that already passed validation. It is not part of the
security boundary: it never rejects anything on policy grounds and only
fails on markup expat cannot parse.
"""

# ruff: noqa: PERF401

from __future__ import annotations

import re
from typing import Any

import tinycss2

from .constants import TEXT_CONTENT_ELEMENTS
from .tokenizer import Tokenizer, TokenizerOpts
from .tokens import CharacterTokens, CommentToken, ProcessingInstruction, Tag

_WHITESPACE_RUN = re.compile(r"\s+")
_TEXT_CONTENT_ELEMENTS = frozenset(TEXT_CONTENT_ELEMENTS)

# Whitespace next to these characters carries no meaning in CSS.
_CSS_TIGHT_BEFORE = frozenset("{};:,>(")
_CSS_TIGHT_AFTER = frozenset("{};,>)!")


def _escape_text(text: str | None) -> str:
    if not text:
        return ""
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def _choose_attr_quote(value: str | None) -> str:
    if value is None:
        return '"'
    value = str(value)
    if '"' in value and "'" not in value:
        return "'"
    return '"'


def _escape_attr_value(value: str | None, quote_char: str) -> str:
    if value is None:
        return ""
    value = str(value).replace("&", "&amp;").replace("<", "&lt;")
    if quote_char == '"':
        return value.replace('"', "&quot;")
    return value.replace("'", "&apos;")


def serialize_start_tag(name: str, attrs: list[tuple[str, str]]) -> str:
    """Start tag without its closing ``>``, so the caller can pick ``>`` or ``/>``."""
    parts: list[str] = ["<", name]
    for key, value in attrs:
        value_str = _WHITESPACE_RUN.sub(" ", str(value)).strip()
        quote = _choose_attr_quote(value_str)
        parts.extend([" ", key, "=", quote, _escape_attr_value(value_str, quote), quote])
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def _css_node(node: Any) -> str:
    kind = node.type
    if kind == "{} block":
        return "{" + compact_css(node.content) + "}"
    if kind == "() block":
        return "(" + compact_css(node.content) + ")"
    if kind == "[] block":
        return "[" + compact_css(node.content) + "]"
    if kind == "function":
        return node.name + "(" + compact_css(node.arguments) + ")"
    return node.serialize()


def compact_css(nodes: list[Any] | str) -> str:
    """Serialize CSS component values with comments and spare whitespace removed."""
    if isinstance(nodes, str):
        nodes = tinycss2.parse_component_value_list(nodes, skip_comments=True)
    parts: list[str] = []
    pending_space = False
    for node in nodes:
        if node.type == "whitespace":
            pending_space = True
            continue
        if node.type == "comment":
            continue
        text = _css_node(node)
        if not text:
            continue
        if pending_space and parts and parts[-1][-1] not in _CSS_TIGHT_BEFORE and text[0] not in _CSS_TIGHT_AFTER:
            parts.append(" ")
        pending_space = False
        parts.append(text)
    return "".join(parts)


class _MinifySink:
    __slots__ = ("keep_comments", "open_elements", "parts", "pending_start")

    def __init__(self, keep_comments: bool) -> None:
        self.keep_comments = keep_comments
        self.parts: list[str] = []
        self.open_elements: list[str] = []
        self.pending_start = False

    def _close_start_tag(self) -> None:
        if self.pending_start:
            self.parts.append(">")
            self.pending_start = False

    def process_token(self, token: object) -> None:
        if isinstance(token, Tag):
            if token.kind == Tag.START:
                self._close_start_tag()
                attrs = [(attr.qname, attr.value) for attr in token.attrs]
                self.parts.append(serialize_start_tag(token.qname, attrs))
                self.pending_start = True
                self.open_elements.append(token.name.lower())
            else:
                if self.pending_start:
                    self.parts.append("/>")
                    self.pending_start = False
                else:
                    self.parts.append(serialize_end_tag(token.qname))
                self.open_elements.pop()
        elif isinstance(token, CharacterTokens):
            self._text(token.data)
        elif isinstance(token, CommentToken):
            if self.keep_comments:
                self._close_start_tag()
                self.parts.append(f"<!--{token.data}-->")
        elif isinstance(token, ProcessingInstruction):
            if token.target.lower() != "xml":
                self._close_start_tag()
                data = f" {token.data}" if token.data else ""
                self.parts.append(f"<?{token.target}{data}?>")
        # Directives (the DOCTYPE) and EOF produce no output.

    def _text(self, data: str) -> None:
        element = self.open_elements[-1] if self.open_elements else None
        if element is None:
            return
        if element == "style":
            text = compact_css(data).strip()
        elif element in _TEXT_CONTENT_ELEMENTS:
            text = _WHITESPACE_RUN.sub(" ", data)
        else:
            if not data.strip():
                return
            text = _WHITESPACE_RUN.sub(" ", data).strip()
        if not text:
            return
        self._close_start_tag()
        self.parts.append(_escape_text(text))


def minify(data: bytes | str, *, keep_comments: bool = False, tokenizer_opts: TokenizerOpts | None = None) -> bytes | str:
    """Return a compact serialization of `data`, of the same type as `data`.

    Drops the XML declaration, the DOCTYPE, comments (unless
    `keep_comments`) and whitespace that does not render. Raises
    `ParseError` for malformed markup.
    """
    sink = _MinifySink(keep_comments)
    Tokenizer(sink, tokenizer_opts).run(data)
    out = "".join(sink.parts)
    if isinstance(data, str):
        return out
    return out.encode("utf-8")
