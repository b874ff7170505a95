"""Standard exception hierarchy for notechain.

All notechain exceptions inherit from ChainError, making it easy
to catch all library-specific errors.

Exception Hierarchy:
    ChainError (base)
    ├── ConfigurationError - Invalid configuration
    ├── GraphError - Base for graph store errors
    │   ├── DuplicateNodeError - Node id already present
    │   └── NodeNotFoundError - Edge endpoint or node missing
    ├── DocumentStoreError - Base for document store errors
    │   └── DocumentNotFoundError - Document no longer exists
    └── HealError - Base for chain healing errors
        └── HealRewriteError - A successor's declaration could not be rewritten

Engine entry points (builder, updater, healer, service) catch these,
log them and carry on. Only the low-level primitives raise.
"""


class ChainError(Exception):
    """Base exception for all notechain errors.

    Catch this to handle any library-specific exception:
        try:
            graph.add_node("a.md", resolved=True)
        except ChainError as e:
            logger.error(f"notechain error: {e}")
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{super().__str__()} (caused by: {self.cause})"
        return super().__str__()


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(ChainError):
    """Invalid configuration.

    Raised when ChainConfig has invalid settings or a config file
    cannot be parsed.
    """

    pass


# =============================================================================
# Graph Errors
# =============================================================================


class GraphError(ChainError):
    """Base exception for graph store errors."""

    pass


class DuplicateNodeError(GraphError):
    """A node with this id already exists.

    Use ChainGraph.safe_add_node() to tolerate duplicates.
    """

    def __init__(self, node_id: str, cause: Exception | None = None):
        super().__init__(f"Node {node_id!r} already exists", cause)
        self.node_id = node_id


class NodeNotFoundError(GraphError):
    """A node required by an operation is not in the graph."""

    def __init__(self, node_id: str, cause: Exception | None = None):
        super().__init__(f"Node {node_id!r} not found", cause)
        self.node_id = node_id


# =============================================================================
# Document Store Errors
# =============================================================================


class DocumentStoreError(ChainError):
    """Document store error.

    Raised when:
    - A document cannot be read
    - Front matter cannot be parsed or written
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message, cause)
        self.path = path


class DocumentNotFoundError(DocumentStoreError):
    """The document does not exist (any more)."""

    def __init__(self, path: str, cause: Exception | None = None):
        super().__init__(f"Document {path!r} not found", path=path, cause=cause)


# =============================================================================
# Healing Errors
# =============================================================================


class HealError(ChainError):
    """Base exception for chain healing errors."""

    pass


class HealRewriteError(HealError):
    """A successor's predecessor declaration could not be rewritten.

    Healing records these per successor and keeps going.
    """

    def __init__(
        self,
        successor_id: str,
        target_id: str | None,
        cause: Exception | None = None,
    ):
        super().__init__(
            f"Could not rewrite predecessor of {successor_id!r} to {target_id!r}",
            cause,
        )
        self.successor_id = successor_id
        self.target_id = target_id
