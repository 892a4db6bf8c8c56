from __future__ import annotations

import unittest

from safesvg.constants import DEFAULT_MAX_REFERENCES, SVG_ATTRIBUTES, SVG_ELEMENTS
from safesvg.errors import TooManyReferences
from safesvg.references import ROOT, ReferenceGraph
from safesvg.tokenizer import Tokenizer
from safesvg.validator import ValidationPass, default_attribute_validators, default_content_validators


def run_pass(doc: str, max_references: int = DEFAULT_MAX_REFERENCES) -> ValidationPass:
    validation = ValidationPass(
        frozenset(SVG_ELEMENTS),
        frozenset(SVG_ATTRIBUTES),
        default_content_validators(),
        default_attribute_validators(),
        max_references,
    )
    Tokenizer(validation).run(doc)
    return validation


class TestReferenceGraph(unittest.TestCase):
    def test_declare_is_idempotent(self) -> None:
        graph = ReferenceGraph()
        first = graph.declare("a")
        graph.close()
        assert graph.declare("a") == first
        graph.close()
        assert len(graph) == 1
        assert "a" in graph
        assert graph.get("missing") is None

    def test_declare_opens_a_scope(self) -> None:
        graph = ReferenceGraph()
        a = graph.declare("a")
        b = graph.declare("b")
        assert graph.current_scope == b
        assert graph.depth == 2
        assert graph.get("b").parent == a
        assert graph.close() == b
        assert graph.close() == a
        assert graph.current_scope == ROOT
        with self.assertRaises(ValueError):
            graph.close()

    def test_cost_includes_target_weight(self) -> None:
        graph = ReferenceGraph()
        graph.declare("leaf")
        graph.close()
        graph.declare("group")
        assert graph.reference("leaf") == 1
        assert graph.reference("leaf") == 2
        graph.close()
        assert graph.get("group").weight == 2
        assert graph.reference("group") == 2 + 3
        assert graph.reference("group") == 2 + 3 + 3
        assert graph.get("group").count == 2

    def test_nested_scopes_add_to_their_enclosing_weight(self) -> None:
        graph = ReferenceGraph()
        graph.declare("leaf")
        graph.close()
        graph.declare("outer")
        graph.declare("inner")
        graph.reference("leaf")
        graph.close()
        graph.reference("leaf")
        graph.close()
        assert graph.get("inner").weight == 1
        assert graph.get("outer").weight == 2

    def test_sibling_chain_multiplies(self) -> None:
        graph = ReferenceGraph(max_references=500)
        graph.declare("g0")
        graph.close()
        for level in range(1, 3):
            graph.declare(f"g{level}")
            for _ in range(10):
                graph.reference(f"g{level - 1}")
            graph.close()
        assert graph.get("g1").weight == 10
        assert graph.get("g2").weight == 10 * 11
        graph.declare("g3")
        with self.assertRaises(TooManyReferences) as ctx:
            for _ in range(10):
                graph.reference("g2")
        assert ctx.exception.value == "#g2"

    def test_bound_is_exclusive(self) -> None:
        graph = ReferenceGraph(max_references=10)
        graph.declare("a")
        graph.close()
        for _ in range(9):
            graph.reference("a")
        assert graph.reference("a") == 10
        with self.assertRaises(TooManyReferences) as ctx:
            graph.reference("a")
        assert ctx.exception.value == "#a"

    def test_forward_reference_creates_placeholder(self) -> None:
        graph = ReferenceGraph()
        scope = graph.declare("outer")
        graph.reference("later")
        node = graph.get("later")
        assert node is not None
        assert node.count == 1
        assert node.parent == scope
        assert not node.declared
        graph.close()
        graph.declare("later")
        graph.close()
        assert graph.get("later").parent == ROOT
        assert len(graph) == 2

    def test_forward_references_are_settled_at_finish(self) -> None:
        graph = ReferenceGraph(max_references=100)
        for _ in range(10):
            graph.reference("b")
        graph.declare("b")
        for _ in range(10):
            graph.reference("a")
        graph.close()
        graph.declare("a")
        graph.close()
        assert graph.total == 20
        with self.assertRaises(TooManyReferences):
            graph.finish()

    def test_finish_without_forward_references_keeps_the_total(self) -> None:
        graph = ReferenceGraph()
        graph.declare("a")
        graph.close()
        graph.reference("a")
        graph.reference("a")
        assert graph.finish() == 2

    def test_self_reference_counts_once(self) -> None:
        graph = ReferenceGraph()
        graph.declare("a")
        graph.reference("a")
        graph.reference("a")
        graph.close()
        assert graph.finish() == 2

    def test_repeated_declaration_is_settled_at_finish(self) -> None:
        graph = ReferenceGraph(max_references=30)
        graph.declare("leaf")
        graph.close()
        graph.declare("a")
        graph.close()
        for _ in range(10):
            graph.reference("a")
        graph.declare("a")
        graph.reference("leaf")
        graph.reference("leaf")
        graph.close()
        assert graph.total == 12
        with self.assertRaises(TooManyReferences):
            graph.finish()

    def test_long_chain(self) -> None:
        graph = ReferenceGraph(max_references=DEFAULT_MAX_REFERENCES)
        for level in range(5000):
            graph.declare(f"n{level}")
        assert graph.reference("n0") == 1
        for _ in range(5000):
            graph.close()
        assert graph.finish() == 1

    def test_long_forward_chain(self) -> None:
        graph = ReferenceGraph(max_references=10**8)
        for level in range(5000):
            graph.declare(f"n{level}")
            graph.reference(f"n{level + 1}")
            graph.close()
        assert graph.total == 5000
        # n0 expands n1, which expands n2, and so on.
        assert graph.finish() == 5000 * 5001 // 2


class TestDocumentScopes(unittest.TestCase):
    def test_declaration_parents_follow_nesting(self) -> None:
        validation = run_pass(
            '<svg xmlns="http://www.w3.org/2000/svg">'
            '<g id="outer"><g><rect id="inner"/></g></g><g id="sibling"/></svg>'
        )
        refs = validation.references
        outer = refs.get("outer")
        inner = refs.get("inner")
        sibling = refs.get("sibling")
        assert outer.parent == ROOT
        assert refs.nodes[inner.parent] is outer
        assert sibling.parent == ROOT
        assert validation.scope_depths == []
        assert validation.current_scope == ROOT
        assert validation.open_elements == []

    def test_both_id_attributes_open_scopes(self) -> None:
        validation = run_pass(
            '<svg xmlns="http://www.w3.org/2000/svg"><g id="a" xml:id="b"><use href="#c"/></g><g id="c"/></svg>'
        )
        refs = validation.references
        assert refs.nodes[refs.get("b").parent] is refs.get("a")
        assert refs.get("a").weight == 1
        assert validation.scope_depths == []

    def test_forward_reference_in_document(self) -> None:
        validation = run_pass('<svg xmlns="http://www.w3.org/2000/svg"><use href="#later"/><g id="later"/></svg>')
        node = validation.references.get("later")
        assert node.count == 1
        assert node.parent == ROOT
        assert len(validation.references) == 1

    def test_reference_on_declaring_element_uses_its_scope(self) -> None:
        validation = run_pass('<svg xmlns="http://www.w3.org/2000/svg"><use href="#y" id="x"/></svg>')
        refs = validation.references
        assert refs.nodes[refs.get("y").parent] is refs.get("x")
        assert refs.get("x").weight == 1

    def test_only_fragment_references_count(self) -> None:
        validation = run_pass(
            '<svg xmlns="http://www.w3.org/2000/svg" xmlns:xlink="http://www.w3.org/1999/xlink">'
            '<g id="a"/><use href="#a"/><use xlink:href="#a"/><use href="other.svg#a"/><use href="#"/></svg>'
        )
        assert validation.references.get("a").count == 2
        assert validation.references.total == 2

    def test_empty_ids_are_ignored(self) -> None:
        validation = run_pass('<svg xmlns="http://www.w3.org/2000/svg"><g id=" "><use href="#x"/></g></svg>')
        assert validation.references.get("x").parent == ROOT
        assert len(validation.references) == 1

    def test_nested_bomb(self) -> None:
        inner = '<g id="l0"><rect/></g>'
        for level in range(1, 4):
            inner = f'<g id="l{level}">' + inner + f'<use href="#l{level - 1}"/>' * 10 + "</g>"
        doc = '<svg xmlns="http://www.w3.org/2000/svg">' + inner + "</svg>"
        # l1 = 10, l2 = 10 + 10 * 11, l3 = 120 + 10 * 121
        with self.assertRaises(TooManyReferences):
            run_pass(doc, max_references=1000)
        assert run_pass(doc, max_references=1330).references.total == 1330

    def test_forward_bomb_is_caught_at_end_of_document(self) -> None:
        doc = ['<svg xmlns="http://www.w3.org/2000/svg">']
        doc.append('<use href="#l3"/>' * 10)
        for level in range(3, 0, -1):
            doc.append(f'<g id="l{level}">' + f'<use href="#l{level - 1}"/>' * 10 + "</g>")
        doc.append('<g id="l0"/></svg>')
        validation = ValidationPass(
            frozenset(SVG_ELEMENTS),
            frozenset(SVG_ATTRIBUTES),
            default_content_validators(),
            default_attribute_validators(),
            500,
        )
        tokenizer = Tokenizer(validation)
        with self.assertRaises(TooManyReferences):
            tokenizer.run("".join(doc))
        assert validation.references.total == 40
        assert validation.open_elements == []


if __name__ == "__main__":
    unittest.main()
