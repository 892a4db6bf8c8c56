from __future__ import annotations

import io
import unittest

from safesvg.constants import SVG_NAMESPACE, XLINK_NAMESPACE, XML_NAMESPACE
from safesvg.errors import ParseError
from safesvg.tokenizer import Tokenizer, TokenizerOpts
from safesvg.tokens import (
    CharacterTokens,
    CommentToken,
    Directive,
    EOFToken,
    ProcessingInstruction,
    Tag,
)


class RecordingSink:
    def __init__(self) -> None:
        self.tokens: list[object] = []

    def process_token(self, token: object) -> None:
        self.tokens.append(token)

    def of_type(self, kind: type) -> list:
        return [t for t in self.tokens if isinstance(t, kind)]


class StopAt(Exception):
    pass


class StoppingSink(RecordingSink):
    def __init__(self, name: str) -> None:
        super().__init__()
        self.name = name

    def process_token(self, token: object) -> None:
        super().process_token(token)
        if isinstance(token, Tag) and token.kind == Tag.START and token.name == self.name:
            raise StopAt(token.name)


def tokenize(source, chunk_size: int = 64 * 1024) -> RecordingSink:
    sink = RecordingSink()
    Tokenizer(sink, TokenizerOpts(chunk_size=chunk_size)).run(source)
    return sink


class TestNamespaces(unittest.TestCase):
    DOC = (
        '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink">'
        '<use xlink:href="#a" xml:space="preserve" foo:bar="x" width="1"/></svg>'
    )

    def test_element_namespace(self) -> None:
        tags = tokenize(self.DOC).of_type(Tag)
        assert [(t.kind, t.name) for t in tags] == [
            (Tag.START, "svg"),
            (Tag.START, "use"),
            (Tag.END, "use"),
            (Tag.END, "svg"),
        ]
        assert tags[0].space == SVG_NAMESPACE
        assert tags[1].space == SVG_NAMESPACE

    def test_namespace_declarations_are_attributes(self) -> None:
        svg = tokenize(self.DOC).of_type(Tag)[0]
        assert [(a.space, a.local, a.value) for a in svg.attrs] == [
            ("", "xmlns", SVG_NAMESPACE),
            ("xmlns", "xlink", XLINK_NAMESPACE),
        ]

    def test_attribute_namespaces(self) -> None:
        use = tokenize(self.DOC).of_type(Tag)[1]
        assert [(a.space, a.local) for a in use.attrs] == [
            (XLINK_NAMESPACE, "href"),
            (XML_NAMESPACE, "space"),
            ("foo", "bar"),
            ("", "width"),
        ]
        assert use.attrs[0].qname == "xlink:href"

    def test_bindings_are_scoped_to_the_element(self) -> None:
        doc = (
            '<svg xmlns="http://www.w3.org/2000/svg">'
            '<g xmlns:x="urn:one"><rect x:a="1"/></g><rect x:a="2"/></svg>'
        )
        rects = [t for t in tokenize(doc).of_type(Tag) if t.kind == Tag.START and t.name == "rect"]
        assert rects[0].attrs[0].space == "urn:one"
        assert rects[1].attrs[0].space == "x"


class TestTokens(unittest.TestCase):
    def test_text_is_coalesced(self) -> None:
        doc = "<svg><style>a<![CDATA[b{}]]>c&amp;d</style></svg>"
        for chunk_size in (1, 7, 1024):
            with self.subTest(chunk_size=chunk_size):
                texts = tokenize(doc, chunk_size).of_type(CharacterTokens)
                assert [t.data for t in texts] == ["ab{}c&d"]

    def test_comment(self) -> None:
        comments = tokenize("<svg><!-- hi --></svg>").of_type(CommentToken)
        assert [c.data for c in comments] == [" hi "]

    def test_xml_declaration(self) -> None:
        sink = tokenize(b'<?xml version="1.0" encoding="UTF-8" standalone="no"?><svg/>')
        pis = sink.of_type(ProcessingInstruction)
        assert len(pis) == 1
        assert pis[0].target == "xml"
        assert pis[0].data == 'version="1.0" encoding="UTF-8" standalone="no"'

    def test_processing_instruction(self) -> None:
        pis = tokenize('<?xml-stylesheet href="a.css"?><svg/>').of_type(ProcessingInstruction)
        assert [(p.target, p.data) for p in pis] == [("xml-stylesheet", 'href="a.css"')]

    def test_doctype_with_entities(self) -> None:
        doc = '<!DOCTYPE svg [<!ENTITY x SYSTEM "file:///etc/passwd"><!ENTITY y "z">]><svg/>'
        directives = tokenize(doc).of_type(Directive)
        assert [d.data for d in directives] == [
            'DOCTYPE svg [<!ENTITY x SYSTEM "file:///etc/passwd"><!ENTITY y "z">]'
        ]

    def test_public_doctype(self) -> None:
        doc = '<!DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" "http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd"><svg/>'
        directives = tokenize(doc).of_type(Directive)
        assert [d.data for d in directives] == [
            'DOCTYPE svg PUBLIC "-//W3C//DTD SVG 1.1//EN" "http://www.w3.org/Graphics/SVG/1.1/DTD/svg11.dtd"'
        ]

    def test_eof_is_last(self) -> None:
        tokens = tokenize("<svg/>").tokens
        assert isinstance(tokens[-1], EOFToken)
        assert sum(isinstance(t, EOFToken) for t in tokens) == 1


class TestInput(unittest.TestCase):
    DOC = '<svg xmlns="http://www.w3.org/2000/svg"><text>café</text></svg>'

    def test_bytes_and_str_agree(self) -> None:
        from_bytes = tokenize(self.DOC.encode("utf-8"), 2).of_type(CharacterTokens)
        from_str = tokenize(self.DOC, 2).of_type(CharacterTokens)
        assert [t.data for t in from_bytes] == [t.data for t in from_str] == ["café"]

    def test_file_objects(self) -> None:
        for reader in (io.BytesIO(self.DOC.encode("utf-8")), io.StringIO(self.DOC)):
            with self.subTest(reader=type(reader).__name__):
                texts = tokenize(reader, 3).of_type(CharacterTokens)
                assert [t.data for t in texts] == ["café"]

    def test_declared_encoding_is_honoured_for_bytes(self) -> None:
        doc = '<?xml version="1.0" encoding="ISO-8859-1"?><svg><text>café</text></svg>'
        texts = tokenize(doc.encode("latin-1")).of_type(CharacterTokens)
        assert [t.data for t in texts] == ["café"]

    def test_malformed_markup(self) -> None:
        for doc in ("<svg><g></svg>", "<svg", "", "<svg></svg><svg></svg>"):
            with self.subTest(doc=doc):
                with self.assertRaises(ParseError):
                    tokenize(doc)

    def test_sink_exception_stops_parsing(self) -> None:
        sink = StoppingSink("script")
        with self.assertRaises(StopAt):
            Tokenizer(sink).run("<svg><script/><g/><rect/></svg>")
        names = [t.name for t in sink.of_type(Tag)]
        assert names == ["svg", "script"]
        assert not sink.of_type(EOFToken)

    def test_position_of_offending_token_is_kept(self) -> None:
        tokenizer = Tokenizer(StoppingSink("script"))
        with self.assertRaises(StopAt):
            tokenizer.run("<svg>\n<g>\n  <script/>\n</g>\n<rect/>\n</svg>")
        assert tokenizer.line == 3
        assert tokenizer.column == 2

    def test_chunk_size_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            TokenizerOpts(chunk_size=0)


if __name__ == "__main__":
    unittest.main()
