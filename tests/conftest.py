"""Pytest configuration for notechain tests."""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

from notechain.documents import InMemoryDocumentStore

EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def anyio_backend():
    """Use asyncio for async tests."""
    return "asyncio"


# =============================================================================
# Document Fixtures
# =============================================================================


@pytest.fixture
def at() -> Callable[[int], datetime]:
    """Timestamps a given number of minutes after a fixed epoch."""

    def _at(minutes: int) -> datetime:
        return EPOCH + timedelta(minutes=minutes)

    return _at


@pytest.fixture
def make_store(at) -> Callable[..., InMemoryDocumentStore]:
    """Build an in-memory store from {path: prev declaration}.

    Usage:
        store = make_store({"c.md": None, "b.md": "[[c]]", "a.md": "[[b]]"})

    Documents get increasing creation times in dict order unless a
    times mapping {path: minutes or None} overrides them.
    """

    def _make(
        declarations: dict[str, Any],
        times: dict[str, int | None] | None = None,
        aliases: dict[str, list[str]] | None = None,
    ) -> InMemoryDocumentStore:
        store = InMemoryDocumentStore()
        times = times or {}
        aliases = aliases or {}
        for i, (path, prev) in enumerate(declarations.items()):
            front_matter: dict[str, Any] = {}
            if prev is not None:
                front_matter["prev"] = prev
            if path in aliases:
                front_matter["aliases"] = aliases[path]
            minutes = times.get(path, i)
            store.add_document(
                path,
                front_matter,
                created_time=at(minutes) if minutes is not None else None,
            )
        return store

    return _make


@pytest.fixture
def chain_store(make_store) -> InMemoryDocumentStore:
    """Store holding the chain a.md -> b.md -> c.md.

    c.md starts the chain; a.md's predecessor is b.md.
    """
    return make_store({"c.md": None, "b.md": "[[c]]", "a.md": "[[b]]"})
