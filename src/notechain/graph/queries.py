"""Read-side chain traversal.

The graph stores only backward pointers (an edge A -> B means "A's
predecessor is B"), so:

- predecessors are the targets of a node's outgoing edges
- successors are deduced from the sources of its incoming edges

Walks follow a single path. Backward walks take the first declared
predecessor; forward walks take the canonical successor chosen by the
BranchClassifier. Both stop before revisiting a node, so malformed data
with a cycle can't loop forever.

Example:
    >>> queries = ChainQueries(graph)
    >>> queries.full_chain("b.md")
    ['c.md', 'b.md', 'a.md']
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .branches import BranchClassifier
from .chain_graph import ChainGraph
from .models import EdgeField


class SegmentPosition(str, Enum):
    """Where a segment sits relative to the active document."""

    BEFORE = "before"
    ACTIVE = "active"
    AFTER = "after"


@dataclass(frozen=True)
class ChainSegment:
    """One document in a rendering-oriented chain.

    Attributes:
        node_id: Document id
        position: Before, at, or after the active document
        is_reply: True for the root of a reply branch
    """

    node_id: str
    position: SegmentPosition
    is_reply: bool = False


class ChainQueries:
    """Chain queries over a ChainGraph."""

    def __init__(self, graph: ChainGraph, classifier: BranchClassifier | None = None):
        self.graph = graph
        self.classifier = classifier or BranchClassifier(graph)

    def predecessors_of(self, node_id: str) -> list[str]:
        """Targets of a node's outgoing edges, in insertion order."""
        return [e.target_id for e in self.graph.out_edges(node_id)]

    def successors_of(self, node_id: str) -> list[str]:
        """Documents that declare this node as their predecessor."""
        return [
            e.source_id
            for e in self.graph.in_edges(node_id, field=EdgeField.PREDECESSOR.value)
        ]

    def is_in_chain(self, node_id: str) -> bool:
        """True if the node declares a predecessor."""
        return self.graph.out_degree(node_id) > 0

    def walk_backward(self, node_id: str) -> list[str]:
        """The chain from its start up to and including node_id.

        Returns:
            Node ids, chain start first; empty if the node is absent
        """
        if not self.graph.has_node(node_id):
            return []

        chain = [node_id]
        visited = {node_id}
        current = node_id

        while True:
            predecessors = self.predecessors_of(current)
            if not predecessors:
                break
            prev = predecessors[0]
            if prev in visited:
                break
            chain.append(prev)
            visited.add(prev)
            current = prev

        chain.reverse()
        return chain

    def walk_forward(self, node_id: str) -> list[str]:
        """The canonical chain from node_id to its end, inclusive.

        Returns:
            Node ids, node_id first; empty if the node is absent
        """
        if not self.graph.has_node(node_id):
            return []

        chain = [node_id]
        visited = {node_id}
        current = node_id

        while True:
            nxt = self.classifier.classify(self.successors_of(current)).main
            if nxt is None or nxt in visited:
                break
            chain.append(nxt)
            visited.add(nxt)
            current = nxt

        return chain

    def full_chain(self, node_id: str) -> list[str]:
        """The complete linear chain containing node_id.

        Each node appears at most once, even when the backward and
        forward walks meet in a cycle.
        """
        backward = self.walk_backward(node_id)
        if not backward:
            return []

        chain = list(backward)
        seen = set(chain)
        for nxt in self.walk_forward(node_id)[1:]:
            if nxt in seen:
                break
            chain.append(nxt)
            seen.add(nxt)
        return chain

    def rendering_chain(self, node_id: str) -> list[ChainSegment]:
        """The chain around node_id plus the roots of its reply branches.

        The canonical chain comes first. Reply branches follow: first the
        replies to node_id itself, then, if node_id is on the canonical
        path, the replies among its siblings. A reply never shows its own
        siblings.

        Returns:
            ChainSegments in display order; empty if the node is absent
        """
        chain = self.full_chain(node_id)
        if not chain:
            return []

        active_index = chain.index(node_id)
        segments = []
        for i, nid in enumerate(chain):
            if i < active_index:
                position = SegmentPosition.BEFORE
            elif i == active_index:
                position = SegmentPosition.ACTIVE
            else:
                position = SegmentPosition.AFTER
            segments.append(ChainSegment(nid, position))

        shown = set(chain)
        reply_roots = list(self.classifier.classify(self.successors_of(node_id)).replies)

        predecessors = self.predecessors_of(node_id)
        if predecessors and self.classifier.is_on_canonical_path(node_id):
            siblings = self.classifier.classify(self.successors_of(predecessors[0]))
            reply_roots.extend(siblings.replies)

        for nid in reply_roots:
            if nid in shown:
                continue
            shown.add(nid)
            segments.append(ChainSegment(nid, SegmentPosition.AFTER, is_reply=True))

        return segments
