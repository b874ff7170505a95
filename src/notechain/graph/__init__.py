"""Chain Graph Engine.

This package provides the predecessor graph between documents and the
operations that keep it consistent.

Key Components:

Graph Data Models:
    - ChainNode: A document, resolved or placeholder
    - ChainEdge: A directed predecessor edge (source follows target)
    - EdgeField: Relation kinds carried on edges
    - RemovalOutcome: What deletion handling did with a node

Graph Container:
    - ChainGraph: Node arena plus outgoing/incoming edge indexes

Construction:
    - GraphBuilder: Full-scan build from the document collection
    - GraphUpdater: Per-document edge recomputation

Queries:
    - ChainQueries: Predecessors, successors, chain walks
    - BranchClassifier: Canonical continuation vs reply branches

Repair:
    - ChainHealer: Rewires successors of a deleted document

Example:
    >>> from notechain.graph import ChainGraph, ChainQueries
    >>>
    >>> graph = ChainGraph()
    >>> for path in ("a.md", "b.md", "c.md"):
    ...     graph.add_node(path, resolved=True)
    >>> graph.add_edge("a.md", "b.md")
    >>> graph.add_edge("b.md", "c.md")
    >>>
    >>> ChainQueries(graph).full_chain("b.md")
    ['c.md', 'b.md', 'a.md']
"""

from .models import (
    # Enumerations
    EdgeField,
    RemovalOutcome,
    # Data classes
    ChainNode,
    ChainEdge,
)

from .chain_graph import ChainGraph

from .builder import (
    GraphBuilder,
    GraphBuildResult,
)

from .operations import (
    GraphUpdater,
    LinkResolve,
    UpdateResult,
)

from .branches import (
    BranchClassification,
    BranchClassifier,
)

from .queries import (
    ChainQueries,
    ChainSegment,
    SegmentPosition,
)

from .healer import (
    ChainHealer,
    HealResult,
)

__all__ = [
    # ==========================================================================
    # Enumerations
    # ==========================================================================
    "EdgeField",
    "RemovalOutcome",
    "SegmentPosition",
    # ==========================================================================
    # Data Classes
    # ==========================================================================
    "ChainNode",
    "ChainEdge",
    "ChainSegment",
    "BranchClassification",
    # ==========================================================================
    # Graph Container
    # ==========================================================================
    "ChainGraph",
    # ==========================================================================
    # Construction
    # ==========================================================================
    "GraphBuilder",
    "GraphBuildResult",
    "GraphUpdater",
    "LinkResolve",
    "UpdateResult",
    # ==========================================================================
    # Queries
    # ==========================================================================
    "ChainQueries",
    "BranchClassifier",
    # ==========================================================================
    # Repair
    # ==========================================================================
    "ChainHealer",
    "HealResult",
]
