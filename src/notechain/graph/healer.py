"""Chain healing after a document is deleted from the middle of a chain.

When B is deleted from A -> B -> C (A's predecessor is B, B's is C), A
would be left pointing at a document that no longer exists. Healing
rewrites A's predecessor declaration to C, closing the gap:

    before:  A -> B -> C
    after:   A -> C

If B was a branch point (several successors), every successor is
rewired to C, so the branch point moves up one link. If B had no
predecessor, its successors lose their declaration and each starts a
chain of its own.

Healing is best-effort per successor: a rewrite that fails is logged
and recorded, and the remaining successors are still processed. The
graph itself is not touched here; the caller re-derives the rewired
successors' edges and then removes the deleted node.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..documents.base import DocumentStore
from ..exceptions import DocumentStoreError, HealRewriteError
from .queries import ChainQueries

logger = logging.getLogger(__name__)


@dataclass
class HealResult:
    """Outcome of healing around one deleted document.

    Attributes:
        deleted_id: The deleted document
        grandparent: The deleted document's own predecessor, if any
        rewired: Successors whose declaration was rewritten
        failed: Rewrite failures, one per successor that was skipped
    """

    deleted_id: str
    grandparent: str | None = None
    rewired: list[str] = field(default_factory=list)
    failed: list[HealRewriteError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed


class ChainHealer:
    """Rewires a deleted document's successors to its predecessor.

    Example:
        >>> healer = ChainHealer(queries, store)
        >>> result = await healer.heal_after_delete("b.md")
        >>> result.grandparent, result.rewired
        ('c.md', ['a.md'])
    """

    def __init__(self, queries: ChainQueries, store: DocumentStore):
        self.queries = queries
        self.store = store

    async def heal_after_delete(self, deleted_id: str) -> HealResult:
        """Rewrite the declarations of every successor of deleted_id.

        Must run before the node is removed from the graph.

        Args:
            deleted_id: The deleted document

        Returns:
            HealResult listing rewired and failed successors
        """
        predecessors = self.queries.predecessors_of(deleted_id)
        grandparent = predecessors[0] if predecessors else None
        result = HealResult(deleted_id=deleted_id, grandparent=grandparent)

        successors = list(dict.fromkeys(self.queries.successors_of(deleted_id)))
        if not successors:
            return result

        logger.info(
            f"Healing chain around {deleted_id}: {len(successors)} successor(s) "
            f"-> {grandparent or '(chain start)'}"
        )

        for successor in successors:
            if successor == deleted_id:
                continue
            # Two-node cycle: the successor would become its own predecessor
            target = None if grandparent in (successor, deleted_id) else grandparent

            try:
                await self.store.rewrite_predecessor(successor, target)
            except (DocumentStoreError, OSError) as e:
                error = HealRewriteError(successor, target, cause=e)
                logger.warning(f"Heal rewrite failed, leaving {successor} unhealed: {error}")
                result.failed.append(error)
                continue

            result.rewired.append(successor)

        return result
