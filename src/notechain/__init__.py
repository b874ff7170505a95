"""notechain - Predecessor chains between notes.

notechain maintains a graph of "this note follows that note" links
declared in note front matter, and answers chain questions over it:
- The linear chain a note belongs to
- Which successor continues a chain and which are reply branches
- What a note's chain looks like around it, reply roots included

It keeps the graph consistent as notes are edited, renamed and deleted,
and heals chains around deleted notes by rewriting their successors'
declarations.

Example:
    from notechain import GraphService, MarkdownVaultStore

    service = GraphService(MarkdownVaultStore("~/notes"))
    await service.initialize()

    service.full_chain("threads/b.md")
    await service.handle_delete("threads/b.md")
"""

__version__ = "0.1.0"

# Configuration
from notechain.config import ChainConfig, load_config

# Exceptions
from notechain.exceptions import (
    ChainError,
    ConfigurationError,
    GraphError,
    DuplicateNodeError,
    NodeNotFoundError,
    DocumentStoreError,
    DocumentNotFoundError,
    HealError,
    HealRewriteError,
)

# Graph
from notechain.graph import (
    ChainGraph,
    ChainNode,
    ChainEdge,
    EdgeField,
    RemovalOutcome,
    GraphBuilder,
    GraphUpdater,
    ChainQueries,
    ChainSegment,
    SegmentPosition,
    BranchClassifier,
    BranchClassification,
    ChainHealer,
    HealResult,
)

# Documents
from notechain.documents import (
    DocumentSnapshot,
    DocumentStore,
    InMemoryDocumentStore,
    MarkdownVaultStore,
)

# Service
from notechain.services import (
    GraphService,
    GraphChange,
    GraphChangeKind,
)

__all__ = [
    "__version__",
    # Configuration
    "ChainConfig",
    "load_config",
    # Exceptions
    "ChainError",
    "ConfigurationError",
    "GraphError",
    "DuplicateNodeError",
    "NodeNotFoundError",
    "DocumentStoreError",
    "DocumentNotFoundError",
    "HealError",
    "HealRewriteError",
    # Graph
    "ChainGraph",
    "ChainNode",
    "ChainEdge",
    "EdgeField",
    "RemovalOutcome",
    "GraphBuilder",
    "GraphUpdater",
    "ChainQueries",
    "ChainSegment",
    "SegmentPosition",
    "BranchClassifier",
    "BranchClassification",
    "ChainHealer",
    "HealResult",
    # Documents
    "DocumentSnapshot",
    "DocumentStore",
    "InMemoryDocumentStore",
    "MarkdownVaultStore",
    # Service
    "GraphService",
    "GraphChange",
    "GraphChangeKind",
]
