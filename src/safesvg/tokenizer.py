"""Streaming XML tokenizer.

Wraps the expat parser from the standard library and pushes tokens from
`safesvg.tokens` into a sink, one at a time and in document order. The sink
decides what to do with each token. An exception raised by the sink ends
delivery: pyexpat clears its handlers, finishes scanning the chunk it was
given and re-raises, and no further chunk is fed.

Namespace prefixes are resolved here rather than by expat so that
namespace declarations still show up as ordinary attributes.
"""

from xml.parsers import expat

from .constants import XML_NAMESPACE
from .tokens import (
    Attr,
    CharacterTokens,
    CommentToken,
    Directive,
    EOFToken,
    ProcessingInstruction,
    Tag,
)

_XMLNS = "xmlns"


class TokenizerOpts:
    __slots__ = ("chunk_size",)

    def __init__(self, chunk_size=64 * 1024):
        if int(chunk_size) <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size!r}")
        self.chunk_size = int(chunk_size)


def _split_qname(qname):
    prefix, sep, local = qname.partition(":")
    if not sep:
        return "", qname
    return prefix, local


def _quote(value):
    if '"' in value:
        return f"'{value}'"
    return f'"{value}"'


class Tokenizer:
    __slots__ = (
        "_doctype",
        "_namespaces",
        "_parser",
        "_position",
        "_text",
        "_text_position",
        "opts",
        "sink",
    )

    def __init__(self, sink, opts=None):
        self.sink = sink
        self.opts = opts or TokenizerOpts()
        self._parser = None
        self._namespaces = [{"xml": XML_NAMESPACE}]
        self._text = []
        self._text_position = None
        self._doctype = None
        self._position = (None, None)

    # Position of the last token handed to the sink. Expat keeps scanning
    # after a sink error, so its own counters cannot be read afterwards.
    @property
    def line(self):
        return self._position[0]

    @property
    def column(self):
        return self._position[1]

    def _here(self):
        return (self._parser.CurrentLineNumber, self._parser.CurrentColumnNumber)

    def _emit(self, token, position=None):
        self._position = position or self._here()
        self.sink.process_token(token)

    def _create_parser(self, encoding=None):
        parser = expat.ParserCreate(encoding)
        parser.ordered_attributes = True
        parser.StartElementHandler = self._start_element
        parser.EndElementHandler = self._end_element
        parser.CharacterDataHandler = self._character_data
        parser.CommentHandler = self._comment
        parser.ProcessingInstructionHandler = self._processing_instruction
        parser.XmlDeclHandler = self._xml_decl
        parser.StartDoctypeDeclHandler = self._start_doctype
        parser.EndDoctypeDeclHandler = self._end_doctype
        parser.EntityDeclHandler = self._entity_decl
        return parser

    # Input -------------------------------------------------------------

    def run(self, source):
        """Tokenize `source`: bytes, str, or a file object opened in either mode.

        Malformed markup raises `xml.parsers.expat.ExpatError`.
        """
        size = self.opts.chunk_size
        if isinstance(source, (bytes, bytearray, memoryview)):
            self._feed_buffer(bytes(source), None)
        elif isinstance(source, str):
            # Text was already decoded, so any declared encoding is moot.
            self._feed_buffer(source.encode("utf-8"), "utf-8")
        else:
            chunk = source.read(size)
            if isinstance(chunk, str):
                self._parser = self._create_parser("utf-8")
                while chunk:
                    self._parser.Parse(chunk.encode("utf-8"), False)
                    chunk = source.read(size)
            else:
                self._parser = self._create_parser()
                while chunk:
                    self._parser.Parse(chunk, False)
                    chunk = source.read(size)
            self._parser.Parse(b"", True)
        self._flush_text()
        self.sink.process_token(EOFToken())

    def _feed_buffer(self, data, encoding):
        self._parser = self._create_parser(encoding)
        size = self.opts.chunk_size
        for start in range(0, len(data), size):
            self._parser.Parse(data[start : start + size], False)
        self._parser.Parse(b"", True)

    # Namespaces --------------------------------------------------------

    def _resolve(self, prefix, scope):
        if not prefix:
            return scope.get("", "")
        # An undeclared prefix is kept as-is.
        return scope.get(prefix, prefix)

    def _push_scope(self, pairs):
        scope = self._namespaces[-1]
        bindings = None
        for qname, value in pairs:
            if qname == _XMLNS:
                bindings = bindings or {}
                bindings[""] = value
            elif qname.startswith("xmlns:"):
                bindings = bindings or {}
                bindings[qname[6:]] = value
        if bindings:
            scope = {**scope, **bindings}
        self._namespaces.append(scope)
        return scope

    # Expat callbacks ---------------------------------------------------

    def _start_element(self, qname, attributes):
        self._flush_text()
        pairs = list(zip(attributes[::2], attributes[1::2]))
        scope = self._push_scope(pairs)
        attrs = []
        for attr_qname, value in pairs:
            if attr_qname == _XMLNS:
                attrs.append(Attr("", _XMLNS, attr_qname, value))
                continue
            prefix, local = _split_qname(attr_qname)
            if prefix == _XMLNS:
                space = _XMLNS
            elif prefix:
                space = self._resolve(prefix, scope)
            else:
                space = ""
            attrs.append(Attr(space, local, attr_qname, value))
        prefix, local = _split_qname(qname)
        space = self._resolve(prefix, scope)
        self._emit(Tag(Tag.START, local, attrs, space, qname))

    def _end_element(self, qname):
        self._flush_text()
        prefix, local = _split_qname(qname)
        space = self._resolve(prefix, self._namespaces[-1])
        if len(self._namespaces) > 1:
            self._namespaces.pop()
        self._emit(Tag(Tag.END, local, None, space, qname))

    def _character_data(self, data):
        if not self._text:
            self._text_position = self._here()
        self._text.append(data)

    def _flush_text(self):
        if not self._text:
            return
        data = "".join(self._text)
        self._text = []
        self._emit(CharacterTokens(data), self._text_position)

    def _comment(self, data):
        self._flush_text()
        self._emit(CommentToken(data))

    def _processing_instruction(self, target, data):
        self._flush_text()
        self._emit(ProcessingInstruction(target, data or ""))

    def _xml_decl(self, version, encoding, standalone):
        parts = []
        if version:
            parts.append(f'version="{version}"')
        if encoding:
            parts.append(f'encoding="{encoding}"')
        if standalone != -1:
            parts.append(f'standalone="{"yes" if standalone else "no"}"')
        self._emit(ProcessingInstruction("xml", " ".join(parts)))

    def _start_doctype(self, name, system_id, public_id, has_internal_subset):
        self._flush_text()
        head = f"DOCTYPE {name}"
        if public_id:
            head += f" PUBLIC {_quote(public_id)}"
            if system_id:
                head += f" {_quote(system_id)}"
        elif system_id:
            head += f" SYSTEM {_quote(system_id)}"
        self._doctype = [head, []]

    def _entity_decl(self, name, is_parameter_entity, value, base, system_id, public_id, notation_name):
        decl = "<!ENTITY "
        if is_parameter_entity:
            decl += "% "
        decl += name
        if value is not None:
            decl += f" {_quote(value)}"
        elif public_id:
            decl += f" PUBLIC {_quote(public_id)} {_quote(system_id or '')}"
        else:
            decl += f" SYSTEM {_quote(system_id or '')}"
        if notation_name:
            decl += f" NDATA {notation_name}"
        decl += ">"
        if self._doctype is None:
            self._emit(Directive(decl[2:-1]))
            return
        self._doctype[1].append(decl)

    def _end_doctype(self):
        if self._doctype is None:
            return
        head, entities = self._doctype
        self._doctype = None
        if entities:
            head += " [" + "".join(entities) + "]"
        self._emit(Directive(head))
