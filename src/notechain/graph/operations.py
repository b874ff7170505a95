"""Incremental graph updates from per-document change notifications.

GraphUpdater is the only path by which "a document's own declared
relationships changed" reaches the graph. For one document it:

1. Ensures the node exists (created resolved, or refreshed in place)
2. Drops every outgoing edge of the node
3. Re-derives one predecessor edge per declared reference

Out-edges are always recomputed from scratch, never diffed, so edges
from a removed or changed declaration can't linger. No node other than
the updated one and newly created placeholder targets is touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable

from ..documents.base import DocumentSnapshot
from ..documents.links import placeholder_id
from .chain_graph import ChainGraph
from .models import EdgeField

logger = logging.getLogger(__name__)

# (link text, linking document path) -> resolved document path or None
LinkResolve = Callable[[str, str | None], str | None]


@dataclass
class UpdateResult:
    """Result of a graph update operation."""

    success: bool = True
    operation: str = ""
    node_id: str = ""
    node_created: bool = False
    edges_dropped: int = 0
    edges_created: list[str] = field(default_factory=list)
    targets: list[str] = field(default_factory=list)
    placeholders_created: list[str] = field(default_factory=list)
    message: str = ""


class GraphUpdater:
    """Recomputes one node's outgoing edges from its attribute snapshot.

    Example:
        >>> updater = GraphUpdater(graph)
        >>> result = updater.update_node(snapshot, store.resolve_link)
        >>> result.targets
        ['b.md']
    """

    def __init__(self, graph: ChainGraph, link_suffix: str = ".md"):
        self.graph = graph
        self.link_suffix = link_suffix

    def update_node(self, document: DocumentSnapshot, resolve: LinkResolve) -> UpdateResult:
        """Re-derive a document's node and outgoing predecessor edges.

        Args:
            document: Current snapshot of the document
            resolve: Link resolver (link text, source path) -> path or None

        Returns:
            UpdateResult with operation details
        """
        result = UpdateResult(operation="update_node", node_id=document.path)
        path = document.path

        existing = self.graph.get_node(path)
        if existing is None:
            self.graph.add_node(
                path,
                resolved=True,
                aliases=document.aliases,
                created_time=document.created_time,
            )
            result.node_created = True
        else:
            # Creation time is fixed once known; a placeholder becoming a
            # real document is the one time it gets set
            self.graph.set_node_attributes(
                path,
                resolved=True,
                aliases=document.aliases,
                created_time=None if existing.resolved else document.created_time,
            )

        result.edges_dropped = self.graph.drop_out_edges(path)

        for link in document.predecessor_links:
            target = resolve(link, path)
            if target is None:
                target = placeholder_id(link, self.link_suffix)
                logger.debug(f"{path}: unresolved predecessor {link!r} -> placeholder {target}")

            if self.graph.safe_add_node(target, resolved=False):
                result.placeholders_created.append(target)

            edge = self.graph.add_edge(
                path,
                target,
                field=EdgeField.PREDECESSOR.value,
                explicit=True,
            )
            result.edges_created.append(edge.edge_id)
            result.targets.append(target)

        result.message = (
            f"{path}: dropped {result.edges_dropped} edge(s), "
            f"added {len(result.edges_created)} edge(s)"
        )
        logger.debug(result.message)
        return result

    def add_node_with_edge(
        self,
        node_id: str,
        predecessor_id: str,
        created_time: datetime | None = None,
    ) -> UpdateResult:
        """Link a freshly created document to a known predecessor.

        Used when a document is created together with its declaration and
        its attributes can't be read back yet. The node is added resolved
        if missing, the predecessor as a placeholder if missing, and one
        predecessor edge is added. Existing out-edges are kept; the next
        update_node() call recomputes them from the real snapshot.

        Args:
            node_id: The new document
            predecessor_id: The document it follows
            created_time: Creation instant of the new document

        Returns:
            UpdateResult with operation details
        """
        result = UpdateResult(operation="add_node_with_edge", node_id=node_id)

        if self.graph.safe_add_node(node_id, resolved=True, created_time=created_time):
            result.node_created = True
        elif not self.graph.get_node(node_id).resolved:
            # Linked to before the document existed; placeholders can't have out-edges
            self.graph.set_node_attributes(node_id, resolved=True, created_time=created_time)
        if self.graph.safe_add_node(predecessor_id, resolved=False):
            result.placeholders_created.append(predecessor_id)

        edge = self.graph.add_edge(node_id, predecessor_id, field=EdgeField.PREDECESSOR.value)
        result.edges_created.append(edge.edge_id)
        result.targets.append(predecessor_id)
        result.message = f"Linked {node_id} -> {predecessor_id}"
        return result
