"""In-memory document store.

Keeps documents as front matter dictionaries in a dict keyed by path.
Useful for embedding the engine in hosts that already hold documents in
memory, and for tests.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime
from typing import Any

from ..config import ChainConfig
from ..exceptions import DocumentNotFoundError
from .base import DocumentSnapshot, DocumentStore
from .links import LinkResolver, format_link

logger = logging.getLogger(__name__)


class InMemoryDocumentStore(DocumentStore):
    """A document store backed by a dictionary.

    Example:
        >>> store = InMemoryDocumentStore()
        >>> store.add_document("b.md")
        >>> store.add_document("a.md", {"prev": "[[b]]"})
        >>> store.resolve_link("b")
        'b.md'
    """

    def __init__(self, config: ChainConfig | None = None):
        self.config = config or ChainConfig()
        self._documents: dict[str, DocumentSnapshot] = {}
        self._resolver: LinkResolver | None = None
        self.rewrite_log: list[tuple[str, str | None]] = []

    # =========================================================================
    # Collection management
    # =========================================================================

    def add_document(
        self,
        path: str,
        front_matter: dict[str, Any] | None = None,
        created_time: datetime | None = None,
    ) -> None:
        """Add or replace a document."""
        self._documents[path] = DocumentSnapshot(
            path=path,
            front_matter=copy.deepcopy(front_matter or {}),
            created_time=created_time,
            predecessor_field=self.config.predecessor_field,
            aliases_field=self.config.aliases_field,
        )
        self._resolver = None

    def set_front_matter(self, path: str, front_matter: dict[str, Any]) -> None:
        """Replace a document's front matter, keeping its creation time.

        Raises:
            DocumentNotFoundError: If the document doesn't exist
        """
        doc = self._documents.get(path)
        if doc is None:
            raise DocumentNotFoundError(path)
        doc.front_matter = copy.deepcopy(front_matter)
        self._resolver = None

    def remove_document(self, path: str) -> bool:
        """Delete a document. Returns False if it didn't exist."""
        if self._documents.pop(path, None) is None:
            return False
        self._resolver = None
        return True

    def rename_document(self, old_path: str, new_path: str) -> None:
        """Move a document to a new path.

        Raises:
            DocumentNotFoundError: If old_path doesn't exist
        """
        doc = self._documents.pop(old_path, None)
        if doc is None:
            raise DocumentNotFoundError(old_path)
        doc.path = new_path
        self._documents[new_path] = doc
        self._resolver = None

    def __len__(self) -> int:
        return len(self._documents)

    def __contains__(self, path: object) -> bool:
        return path in self._documents

    # =========================================================================
    # DocumentStore interface
    # =========================================================================

    async def list_documents(self) -> list[DocumentSnapshot]:
        return [doc.copy() for doc in self._documents.values()]

    async def get_document(self, path: str) -> DocumentSnapshot | None:
        doc = self._documents.get(path)
        return doc.copy() if doc else None

    def resolve_link(self, link: str, source_path: str | None = None) -> str | None:
        if self._resolver is None:
            self._resolver = LinkResolver(
                self._documents,
                {path: doc.aliases for path, doc in self._documents.items()},
                suffix=self.config.link_suffix,
            )
        return self._resolver.resolve(link, source_path)

    async def rewrite_predecessor(self, path: str, predecessor: str | None) -> None:
        doc = self._documents.get(path)
        if doc is None:
            raise DocumentNotFoundError(path)

        field = self.config.predecessor_field
        if predecessor is None:
            doc.front_matter.pop(field, None)
        else:
            doc.front_matter[field] = format_link(predecessor, self.config.link_suffix)

        self.rewrite_log.append((path, predecessor))
        logger.debug(f"Rewrote {field} of {path} -> {predecessor}")
