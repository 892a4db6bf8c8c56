"""Reference amplification counter.

Guards against the SVG flavour of "billion laughs": groups of ``<use>``
elements that reference other groups, each level multiplying the work a
renderer has to do while the markup only grows linearly.

Every declared or referenced identifier gets a node. Elements carrying an
id open a scope, and each fragment reference is charged to the innermost
open scope. The cost of one reference is one instantiation plus the weight
of its target, where the weight of a node is the summed cost of every
reference made inside its element, nested scopes included. The document
total is the summed cost of all references; it is kept as the pass goes
and checked against the bound on every reference.

A reference to a node whose element has not ended yet (a forward
reference, or one to an enclosing group) is charged one instantiation for
now. Such documents are evaluated once more at the end, over the recorded
graph, so reordering the groups cannot hide their weight. A reference that
leads back into an element still being expanded contributes one
instantiation and nothing more.

The graph is built per validation call and thrown away with it.
"""

from __future__ import annotations

from .constants import DEFAULT_MAX_REFERENCES
from .errors import TooManyReferences

ROOT = 0

_UNSEEN, _OPEN, _DONE = 0, 1, 2


class ReferenceNode:
    __slots__ = ("children", "count", "declared", "ident", "parent", "refs", "settled", "weight")

    def __init__(self, ident: str | None, parent: int | None) -> None:
        self.ident = ident
        self.parent = parent
        self.count = 0
        self.weight = 0
        self.declared = False
        self.settled = False
        # nodes declared directly in this scope
        self.children: list[int] = []
        # target index -> references made directly in this scope
        self.refs: dict[int, int] = {}

    def __repr__(self) -> str:
        return f"ReferenceNode({self.ident!r}, count={self.count}, weight={self.weight}, parent={self.parent})"


class ReferenceGraph:
    """Identifier nodes stored in a flat list; parents are list indices.

    Index 0 is the document root and is the only scope open before the
    first declaration. `declare` opens a scope and `close` ends the
    innermost one; the caller pairs them with element boundaries.
    """

    __slots__ = ("_index", "_pending", "_scopes", "max_references", "nodes", "total")

    def __init__(self, max_references: int = DEFAULT_MAX_REFERENCES) -> None:
        self.max_references = max_references
        root = ReferenceNode(None, None)
        root.declared = True
        self.nodes: list[ReferenceNode] = [root]
        self._index: dict[str, int] = {}
        # [node index, cost gathered since the scope was opened]
        self._scopes: list[list[int]] = [[ROOT, 0]]
        self._pending = False
        self.total = 0

    @property
    def current_scope(self) -> int:
        return self._scopes[-1][0]

    @property
    def depth(self) -> int:
        """Number of open scopes below the root."""
        return len(self._scopes) - 1

    def _node_for(self, ident: str, parent: int) -> int:
        index = self._index.get(ident)
        if index is None:
            index = len(self.nodes)
            self.nodes.append(ReferenceNode(ident, parent))
            self._index[ident] = index
        return index

    def declare(self, ident: str) -> int:
        """Declare `ident` in the current scope and open its scope.

        A placeholder left by an earlier forward reference is adopted by
        the declaring scope. A repeated declaration reopens the existing
        node, so its weight covers every element that carried the id.
        """
        scope = self.current_scope
        index = self._node_for(ident, scope)
        node = self.nodes[index]
        if not node.declared:
            node.declared = True
            node.parent = scope
            self.nodes[scope].children.append(index)
        elif node.settled:
            # References already charged the old weight.
            self._pending = True
        self._scopes.append([index, 0])
        return index

    def close(self) -> int:
        """End the innermost scope and fold its cost into the enclosing one."""
        if len(self._scopes) == 1:
            raise ValueError("no open scope to close")
        index, gathered = self._scopes.pop()
        node = self.nodes[index]
        node.weight += gathered
        node.settled = True
        self._scopes[-1][1] += gathered
        return index

    def reference(self, ident: str) -> int:
        """Charge one fragment reference to `ident` to the current scope.

        An identifier that has not been declared yet gets a placeholder
        node under the current scope. Raises `TooManyReferences` once the
        document total exceeds the bound and returns the total otherwise.
        """
        scope = self._scopes[-1]
        index = self._node_for(ident, scope[0])
        target = self.nodes[index]
        target.count += 1
        refs = self.nodes[scope[0]].refs
        refs[index] = refs.get(index, 0) + 1
        if not target.settled:
            self._pending = True
        cost = 1 + target.weight
        scope[1] += cost
        self.total += cost
        if self.total > self.max_references:
            raise TooManyReferences(f"#{ident}", detail=f"more than {self.max_references} (>{self.total})")
        return self.total

    def finish(self) -> int:
        """Settle references that were charged before their target was complete.

        Returns the document total and raises `TooManyReferences` when it
        exceeds the bound.
        """
        if self._pending:
            total = max(self.total, self.expand())
            if total > self.max_references:
                raise TooManyReferences(detail=f"more than {self.max_references} (>{total})")
            self.total = total
            self._pending = False
        return self.total

    def expand(self) -> int:
        """Weight of the whole document evaluated over the recorded graph.

        Weights are capped just above the bound, so the numbers stay small
        however deep the chain is.
        """
        nodes = self.nodes
        cap = self.max_references + 1
        weights = [0] * len(nodes)
        state = bytearray(len(nodes))
        stack = [ROOT]
        while stack:
            index = stack[-1]
            node = nodes[index]
            if state[index] == _UNSEEN:
                state[index] = _OPEN
                for child in node.children:
                    if state[child] == _UNSEEN:
                        stack.append(child)
                for target in node.refs:
                    if state[target] == _UNSEEN:
                        stack.append(target)
                continue
            stack.pop()
            if state[index] == _DONE:
                continue
            # Dependencies still _OPEN lead back into this expansion and weigh nothing.
            weight = 0
            for child in node.children:
                weight += weights[child]
            for target, count in node.refs.items():
                weight += count * (1 + weights[target])
            weights[index] = min(weight, cap)
            state[index] = _DONE
        return weights[ROOT]

    def get(self, ident: str) -> ReferenceNode | None:
        index = self._index.get(ident)
        return None if index is None else self.nodes[index]

    def __contains__(self, ident: object) -> bool:
        return ident in self._index

    def __len__(self) -> int:
        return len(self._index)
