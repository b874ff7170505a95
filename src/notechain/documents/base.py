"""Abstract base classes for document stores.

These define what the chain engine needs from the document collection.
Host applications implement DocumentStore over their own storage; an
in-memory store and a markdown vault store are provided.

The engine only ever:
- reads per-document attribute snapshots
- resolves link texts to document paths
- asks the store to rewrite one document's predecessor declaration
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .links import parse_predecessor_declaration


@dataclass
class DocumentSnapshot:
    """The attributes of one document at a point in time.

    Attributes:
        path: Stable document identifier
        front_matter: Parsed front matter mapping
        created_time: Creation instant of the document, if known
        predecessor_field: Front matter key of the predecessor declaration
        aliases_field: Front matter key of the alias list
    """

    path: str
    front_matter: dict[str, Any] = field(default_factory=dict)
    created_time: datetime | None = None
    predecessor_field: str = "prev"
    aliases_field: str = "aliases"

    @property
    def predecessor_declaration(self) -> Any:
        """The raw declaration value (None if absent)."""
        return self.front_matter.get(self.predecessor_field)

    @property
    def predecessor_links(self) -> list[str]:
        """Link texts of the declared predecessors, in order."""
        return parse_predecessor_declaration(self.predecessor_declaration)

    @property
    def aliases(self) -> list[str] | None:
        """Alias list normalized from a string or list (None if absent)."""
        raw = self.front_matter.get(self.aliases_field)
        if raw is None:
            return None
        if isinstance(raw, str):
            raw = [raw]
        if not isinstance(raw, (list, tuple)):
            return None
        return [str(a) for a in raw if a is not None and str(a).strip()]

    def copy(self) -> DocumentSnapshot:
        """Return a deep copy, so callers can't mutate store state."""
        return DocumentSnapshot(
            path=self.path,
            front_matter=copy.deepcopy(self.front_matter),
            created_time=self.created_time,
            predecessor_field=self.predecessor_field,
            aliases_field=self.aliases_field,
        )


class DocumentStore(ABC):
    """Abstract base class for document collections.

    Implement this to expose your storage to the chain engine.
    """

    @abstractmethod
    async def list_documents(self) -> list[DocumentSnapshot]:
        """Read snapshots of every document in the collection."""
        ...

    @abstractmethod
    async def get_document(self, path: str) -> DocumentSnapshot | None:
        """Read one document's current snapshot.

        Args:
            path: Document identifier

        Returns:
            The snapshot, or None if the document doesn't exist
        """
        ...

    @abstractmethod
    def resolve_link(self, link: str, source_path: str | None = None) -> str | None:
        """Resolve a link text to a document path.

        Args:
            link: Link text without brackets
            source_path: Path of the document containing the link

        Returns:
            The resolved path, or None if no document matches
        """
        ...

    @abstractmethod
    async def rewrite_predecessor(self, path: str, predecessor: str | None) -> None:
        """Rewrite a document's predecessor declaration.

        Args:
            path: Document whose declaration is rewritten
            predecessor: Path of the new predecessor, or None to remove
                the declaration entirely

        Raises:
            DocumentNotFoundError: If the document doesn't exist
            DocumentStoreError: If the document can't be rewritten
        """
        ...

    async def exists(self, path: str) -> bool:
        """Check whether a document currently exists."""
        return await self.get_document(path) is not None
