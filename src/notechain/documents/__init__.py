"""Document collection interface for the chain engine.

Key Components:
    - DocumentSnapshot: Attributes of one document at a point in time
    - DocumentStore: Abstract store the engine reads from and heals through
    - InMemoryDocumentStore: Dictionary-backed store
    - MarkdownVaultStore: Directory of markdown files with YAML front matter
    - LinkResolver: Link text -> document path resolution
"""

from .base import DocumentSnapshot, DocumentStore
from .in_memory import InMemoryDocumentStore
from .links import (
    LinkResolver,
    format_link,
    parse_predecessor_declaration,
    placeholder_id,
)
from .vault import MarkdownVaultStore

__all__ = [
    "DocumentSnapshot",
    "DocumentStore",
    "InMemoryDocumentStore",
    "MarkdownVaultStore",
    "LinkResolver",
    "format_link",
    "parse_predecessor_declaration",
    "placeholder_id",
]
