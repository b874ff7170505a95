"""Full-scan construction of the chain graph.

GraphBuilder builds a ChainGraph from the complete document collection
in two passes:

1. Add every document as a resolved node (aliases, creation time)
2. Re-derive every document's predecessor edges with GraphUpdater,
   creating unresolved placeholders for references to missing documents

Building twice from the same collection yields structurally identical
graphs (same nodes, same attributes, same edge multiset).

This is O(nodes + edges) and reads every document; use it at startup
and for explicit rebuilds, not on every change.

Example:
    >>> builder = GraphBuilder()
    >>> graph = builder.build(await store.list_documents(), store.resolve_link)
    >>> graph.node_count
    42
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Iterable

from ..config import ChainConfig
from ..documents.base import DocumentSnapshot
from ..documents.links import LinkResolver
from .chain_graph import ChainGraph
from .operations import GraphUpdater, LinkResolve

logger = logging.getLogger(__name__)


@dataclass
class GraphBuildResult:
    """Result of building a graph from the document collection.

    Attributes:
        graph: The built chain graph
        stats: Statistics about what was built
        duplicates: Document paths that appeared more than once
    """

    graph: ChainGraph
    stats: dict[str, float] = field(default_factory=dict)
    duplicates: list[str] = field(default_factory=list)


class GraphBuilder:
    """Builds chain graphs from document snapshots.

    Usage:
        >>> builder = GraphBuilder(ChainConfig(link_suffix=".md"))
        >>> result = builder.build_with_result(documents)
        >>> result.stats["placeholders"]
        3
    """

    def __init__(self, config: ChainConfig | None = None):
        self.config = config or ChainConfig()

    def build(
        self,
        documents: Iterable[DocumentSnapshot],
        resolve: LinkResolve | None = None,
    ) -> ChainGraph:
        """Build a new graph from the full document collection.

        Args:
            documents: Snapshots of every document
            resolve: Link resolver; defaults to one indexing the same
                collection

        Returns:
            A new ChainGraph
        """
        return self.build_with_result(documents, resolve).graph

    def build_with_result(
        self,
        documents: Iterable[DocumentSnapshot],
        resolve: LinkResolve | None = None,
    ) -> GraphBuildResult:
        """Build a new graph and report what was built."""
        started = time.perf_counter()
        documents = list(documents)
        graph = ChainGraph()
        result = GraphBuildResult(graph=graph)

        if resolve is None:
            resolve = LinkResolver(
                [d.path for d in documents],
                {d.path: d.aliases for d in documents},
                suffix=self.config.link_suffix,
            )

        # Pass 1: every document is a real node
        for doc in documents:
            added = graph.safe_add_node(
                doc.path,
                resolved=True,
                aliases=doc.aliases,
                created_time=doc.created_time,
            )
            if not added:
                result.duplicates.append(doc.path)

        # Pass 2: predecessor edges, exactly as incremental updates derive them
        updater = GraphUpdater(graph, link_suffix=self.config.link_suffix)
        for doc in documents:
            updater.update_node(doc, resolve)

        result.stats = {
            "documents": len(documents),
            "nodes": graph.node_count,
            "edges": graph.edge_count,
            "placeholders": graph.placeholder_count,
            "duration_ms": (time.perf_counter() - started) * 1000,
        }

        if result.duplicates:
            logger.warning(f"Duplicate document paths during build: {result.duplicates}")
        logger.info(
            f"Chain graph built: {graph.node_count} nodes, {graph.edge_count} edges "
            f"({graph.placeholder_count} placeholders) from {len(documents)} documents"
        )
        return result
