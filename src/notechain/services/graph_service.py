"""Centralized service owning the live chain graph.

GraphService:
1. Owns the one live ChainGraph instance
2. Serializes every structural operation (build, update, rename, delete)
3. Coordinates chain healing after deletions
4. Notifies subscribers after every successful mutation

Structural operations hold an asyncio.Lock for their whole duration,
including document store I/O during healing, so overlapping change
notifications are queued and applied one at a time. Queries are
synchronous and read the current graph directly.

Rebuilds construct a new graph and publish it by swapping the
reference, so readers never observe a half-built graph.

Example:
    >>> service = GraphService(MarkdownVaultStore("~/notes"))
    >>> await service.initialize()
    >>> service.subscribe(lambda change: print(change.kind, change.node_id))
    >>> await service.handle_delete("threads/b.md")
    >>> service.full_chain("threads/a.md")
    ['threads/c.md', 'threads/a.md']
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable

from ..config import ChainConfig
from ..documents.base import DocumentSnapshot, DocumentStore
from ..graph import (
    BranchClassification,
    BranchClassifier,
    ChainGraph,
    ChainHealer,
    ChainNode,
    ChainQueries,
    ChainSegment,
    GraphBuilder,
    GraphUpdater,
    HealResult,
    RemovalOutcome,
    UpdateResult,
)

logger = logging.getLogger(__name__)


class GraphChangeKind(str, Enum):
    """Kinds of graph mutation reported to subscribers."""

    REBUILT = "rebuilt"
    UPDATED = "updated"
    RENAMED = "renamed"
    DELETED = "deleted"
    LINKED = "linked"


@dataclass
class GraphChange:
    """Notification emitted after a successful mutation.

    Attributes:
        kind: What kind of mutation happened
        node_id: The affected document, when known
        old_id: The previous id (renames only)
    """

    kind: GraphChangeKind
    node_id: str | None = None
    old_id: str | None = None
    created_at: datetime = field(default_factory=datetime.now)


# Plain or async callables
GraphListener = Callable[[GraphChange], "Awaitable[None] | None"]


def _fingerprint(declaration: Any) -> str:
    return json.dumps(declaration, sort_keys=True, default=str)


class GraphService:
    """Coordination façade over the chain graph engine.

    Attributes:
        store: The document collection
        config: Engine configuration
    """

    def __init__(self, store: DocumentStore, config: ChainConfig | None = None):
        self.store = store
        self.config = config or ChainConfig()
        self._builder = GraphBuilder(self.config)
        self._lock = asyncio.Lock()
        self._listeners: dict[str, GraphListener] = {}
        self._declarations: dict[str, str] = {}
        self._publish(ChainGraph())

    def _publish(self, graph: ChainGraph) -> None:
        """Make graph the live instance, with collaborators bound to it."""
        self._graph = graph
        self._updater = GraphUpdater(graph, link_suffix=self.config.link_suffix)
        self._classifier = BranchClassifier(graph)
        self._queries = ChainQueries(graph, self._classifier)
        self._healer = ChainHealer(self._queries, self.store)

    @property
    def graph(self) -> ChainGraph:
        """The current live graph."""
        return self._graph

    # =========================================================================
    # Build
    # =========================================================================

    async def initialize(self) -> None:
        """Build the graph from every document in the store.

        Call once at startup. Subscribers are not notified.
        """
        logger.info("GraphService: initializing")
        async with self._lock:
            await self._rebuild_locked()
        logger.info(
            f"GraphService: initialized with {self._graph.node_count} nodes, "
            f"{self._graph.edge_count} edges"
        )

    async def rebuild(self) -> None:
        """Rebuild the entire graph from scratch.

        Reads every document; use sparingly.
        """
        logger.info("GraphService: rebuilding graph")
        async with self._lock:
            await self._rebuild_locked()
        await self._emit(GraphChange(GraphChangeKind.REBUILT))

    async def _rebuild_locked(self) -> None:
        documents = await self.store.list_documents()
        graph = self._builder.build(documents, self.store.resolve_link)
        self._declarations = {
            doc.path: _fingerprint(doc.predecessor_declaration) for doc in documents
        }
        self._publish(graph)

    # =========================================================================
    # Incremental mutations
    # =========================================================================

    async def update_document(self, path: str) -> UpdateResult | None:
        """Re-derive one document's node and edges from its current snapshot.

        Returns:
            The UpdateResult, or None if the document could not be read
        """
        async with self._lock:
            snapshot = await self.store.get_document(path)
            if snapshot is None:
                logger.warning(f"GraphService: cannot update {path}, document not found")
                return None
            result = self._apply_snapshot(snapshot)

        await self._emit(GraphChange(GraphChangeKind.UPDATED, node_id=path))
        return result

    async def update_if_predecessor_changed(self, path: str) -> bool:
        """Update a document only if its predecessor declaration changed.

        Metadata notifications fire for any edit; this filters out the
        ones that can't affect the graph.

        Returns:
            True if the graph was updated
        """
        async with self._lock:
            snapshot = await self.store.get_document(path)
            if snapshot is None:
                logger.warning(f"GraphService: cannot update {path}, document not found")
                return False

            fingerprint = _fingerprint(snapshot.predecessor_declaration)
            known = self._declarations.get(path)
            if known == fingerprint and self._graph.has_node(path):
                return False

            logger.info(f"GraphService: predecessor of {path} changed: {known} -> {fingerprint}")
            self._apply_snapshot(snapshot)

        await self._emit(GraphChange(GraphChangeKind.UPDATED, node_id=path))
        return True

    def _apply_snapshot(self, snapshot: DocumentSnapshot) -> UpdateResult:
        self._declarations[snapshot.path] = _fingerprint(snapshot.predecessor_declaration)
        return self._updater.update_node(snapshot, self.store.resolve_link)

    async def rename(self, old_path: str, new_path: str) -> bool:
        """Handle a document rename, preserving all of its relations.

        Returns:
            True if the node was renamed
        """
        logger.info(f"GraphService: renaming node {old_path} -> {new_path}")
        async with self._lock:
            renamed = self._graph.rename_node(old_path, new_path)
            if renamed and old_path in self._declarations:
                self._declarations[new_path] = self._declarations.pop(old_path)

        if renamed:
            await self._emit(GraphChange(GraphChangeKind.RENAMED, node_id=new_path, old_id=old_path))
        return renamed

    async def handle_delete(self, path: str) -> HealResult:
        """Handle a document deletion: heal the chain, then remove the node.

        Successors of the deleted document are rewired to its predecessor
        in the document store, their edges are re-derived from the
        rewritten snapshots, and the node is removed. A successor whose
        rewrite failed keeps its edge, so the deleted node stays as a
        placeholder instead of being dropped.

        Returns:
            The HealResult
        """
        logger.info(f"GraphService: handling deletion of {path}")
        async with self._lock:
            result = await self._healer.heal_after_delete(path)

            for successor in result.rewired:
                snapshot = await self.store.get_document(successor)
                if snapshot is None:
                    logger.warning(
                        f"GraphService: rewired {successor} but could not read it back"
                    )
                    continue
                self._apply_snapshot(snapshot)

            outcome = self._graph.remove_node(path)
            self._declarations.pop(path, None)

        if outcome is RemovalOutcome.DEMOTED:
            logger.info(f"GraphService: {path} kept as placeholder (still referenced)")
        if outcome is not RemovalOutcome.ABSENT:
            await self._emit(GraphChange(GraphChangeKind.DELETED, node_id=path))
        return result

    async def add_document_with_edge(
        self,
        path: str,
        predecessor_path: str,
        created_time: datetime | None = None,
    ) -> UpdateResult:
        """Add a newly created document that follows predecessor_path.

        For documents created together with their declaration, before
        the store can return their snapshot.
        """
        logger.info(f"GraphService: add_document_with_edge {path} -> {predecessor_path}")
        async with self._lock:
            result = self._updater.add_node_with_edge(path, predecessor_path, created_time)

        await self._emit(GraphChange(GraphChangeKind.LINKED, node_id=path))
        return result

    # =========================================================================
    # Queries
    # =========================================================================

    def has_node(self, path: str) -> bool:
        return self._graph.has_node(path)

    def get_node(self, path: str) -> ChainNode | None:
        return self._graph.get_node(path)

    def predecessors_of(self, path: str) -> list[str]:
        return self._queries.predecessors_of(path)

    def successors_of(self, path: str) -> list[str]:
        return self._queries.successors_of(path)

    def full_chain(self, path: str) -> list[str]:
        return self._queries.full_chain(path)

    def rendering_chain(self, path: str) -> list[ChainSegment]:
        return self._queries.rendering_chain(path)

    def classify(self, candidates: list[str]) -> BranchClassification:
        return self._classifier.classify(candidates)

    def is_on_canonical_path(self, path: str) -> bool:
        return self._classifier.is_on_canonical_path(path)

    # =========================================================================
    # Notifications
    # =========================================================================

    def subscribe(self, listener: GraphListener) -> str:
        """Register a listener for graph changes.

        Args:
            listener: Plain or async callable taking a GraphChange

        Returns:
            Subscription ID
        """
        sub_id = str(uuid.uuid4())
        self._listeners[sub_id] = listener
        return sub_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """Remove a listener. Returns True if it existed."""
        return self._listeners.pop(subscription_id, None) is not None

    async def _emit(self, change: GraphChange) -> None:
        """Deliver a change to every listener; listener errors are logged."""
        logger.debug(f"GraphService: {change.kind.value} {change.node_id or ''}")
        for sub_id, listener in list(self._listeners.items()):
            try:
                outcome = listener(change)
                if inspect.isawaitable(outcome):
                    await outcome
            except Exception as e:
                logger.error(f"Error in graph listener {sub_id}: {e}")
