"""Branch classification at chain branch points.

A branch point is a node with more than one successor (several
documents declare it as their predecessor). Exactly one successor is the
canonical continuation of the chain; the others are reply branches.

The policy is "oldest wins": candidates are ordered by creation time,
with an unknown creation time sorting as the earliest possible value.
Ties keep their incoming-edge order. Nothing is cached, so every call
reflects the current creation times.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .chain_graph import ChainGraph
from .models import EdgeField


@dataclass
class BranchClassification:
    """Outcome of classifying the successors at one branch point.

    Attributes:
        main: The canonical continuation (None if there were no candidates)
        replies: The remaining candidates, oldest first
    """

    main: str | None = None
    replies: list[str] = field(default_factory=list)

    @property
    def is_branch_point(self) -> bool:
        """True if there was more than one distinct candidate."""
        return bool(self.replies)


class BranchClassifier:
    """Picks the canonical continuation among sibling successors.

    Example:
        >>> classifier = BranchClassifier(graph)
        >>> classifier.classify(["a.md", "b.md", "c.md"])
        BranchClassification(main='b.md', replies=['a.md', 'c.md'])
    """

    def __init__(self, graph: ChainGraph):
        self.graph = graph

    def _sort_key(self, node_id: str) -> tuple[bool, float]:
        created = self.graph.created_time_of(node_id)
        if created is None:
            return (False, 0.0)
        return (True, created.timestamp())

    def classify(self, candidates: Iterable[str]) -> BranchClassification:
        """Split candidates into the canonical continuation and replies.

        Args:
            candidates: Successor ids at a branch point; repeated ids
                (parallel edges) count once

        Returns:
            BranchClassification (main is None for no candidates)
        """
        candidates = list(dict.fromkeys(candidates))
        if not candidates:
            return BranchClassification()
        if len(candidates) == 1:
            return BranchClassification(main=candidates[0])

        ordered = sorted(candidates, key=self._sort_key)
        return BranchClassification(main=ordered[0], replies=ordered[1:])

    def canonical_successor(self, node_id: str) -> str | None:
        """The canonical continuation after a node, if any."""
        return self.classify(self._successors(node_id)).main

    def is_on_canonical_path(self, node_id: str) -> bool:
        """Whether a node is the canonical continuation of its predecessor.

        A node without a predecessor starts its chain and counts as
        canonical. Only the first declared predecessor is considered.
        """
        predecessors = [e.target_id for e in self.graph.out_edges(node_id)]
        if not predecessors:
            return True
        return self.canonical_successor(predecessors[0]) == node_id

    def _successors(self, node_id: str) -> list[str]:
        return [
            e.source_id
            for e in self.graph.in_edges(node_id, field=EdgeField.PREDECESSOR.value)
        ]
