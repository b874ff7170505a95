"""Tests for the in-memory document store."""

from datetime import datetime, timezone

import pytest

from notechain.config import ChainConfig
from notechain.documents import DocumentStore, InMemoryDocumentStore
from notechain.exceptions import DocumentNotFoundError


@pytest.fixture
def store() -> InMemoryDocumentStore:
    store = InMemoryDocumentStore()
    store.add_document("b.md", {"aliases": ["Bee"]}, datetime(2024, 1, 1, tzinfo=timezone.utc))
    store.add_document("a.md", {"prev": "[[b]]", "title": "A"})
    return store


class TestInMemoryDocumentStore:
    """Tests for InMemoryDocumentStore."""

    def test_is_document_store(self, store):
        assert isinstance(store, DocumentStore)
        assert len(store) == 2
        assert "a.md" in store

    @pytest.mark.asyncio
    async def test_get_document(self, store):
        doc = await store.get_document("a.md")

        assert doc.path == "a.md"
        assert doc.predecessor_declaration == "[[b]]"
        assert doc.predecessor_links == ["b"]
        assert await store.get_document("missing.md") is None

    @pytest.mark.asyncio
    async def test_snapshots_are_copies(self, store):
        doc = await store.get_document("a.md")
        doc.front_matter["prev"] = "[[elsewhere]]"

        fresh = await store.get_document("a.md")
        assert fresh.front_matter["prev"] == "[[b]]"

    @pytest.mark.asyncio
    async def test_list_documents(self, store):
        docs = await store.list_documents()

        assert [d.path for d in docs] == ["b.md", "a.md"]
        assert docs[0].aliases == ["Bee"]

    @pytest.mark.asyncio
    async def test_exists(self, store):
        assert await store.exists("a.md") is True
        assert await store.exists("gone.md") is False

    def test_resolve_link_tracks_mutations(self, store):
        assert store.resolve_link("bee") == "b.md"
        assert store.resolve_link("c") is None

        store.add_document("c.md")
        assert store.resolve_link("c") == "c.md"

        store.rename_document("c.md", "sub/c2.md")
        assert store.resolve_link("c") is None
        assert store.resolve_link("c2") == "sub/c2.md"

        store.remove_document("sub/c2.md")
        assert store.resolve_link("c2") is None

    @pytest.mark.asyncio
    async def test_rewrite_predecessor(self, store):
        await store.rewrite_predecessor("a.md", "sub/c.md")

        doc = await store.get_document("a.md")
        assert doc.front_matter["prev"] == "[[sub/c]]"
        assert doc.front_matter["title"] == "A"
        assert store.rewrite_log == [("a.md", "sub/c.md")]

    @pytest.mark.asyncio
    async def test_rewrite_removes_declaration(self, store):
        await store.rewrite_predecessor("a.md", None)

        doc = await store.get_document("a.md")
        assert "prev" not in doc.front_matter
        assert doc.predecessor_links == []

    @pytest.mark.asyncio
    async def test_rewrite_missing_document(self, store):
        with pytest.raises(DocumentNotFoundError) as exc_info:
            await store.rewrite_predecessor("gone.md", "a.md")

        assert exc_info.value.path == "gone.md"

    def test_set_front_matter_keeps_created_time(self, store):
        store.set_front_matter("b.md", {"prev": "[[a]]"})

        doc = store._documents["b.md"]
        assert doc.created_time == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert doc.aliases is None

    def test_missing_document_mutations(self, store):
        assert store.remove_document("gone.md") is False
        with pytest.raises(DocumentNotFoundError):
            store.set_front_matter("gone.md", {})
        with pytest.raises(DocumentNotFoundError):
            store.rename_document("gone.md", "other.md")

    @pytest.mark.asyncio
    async def test_custom_fields(self):
        store = InMemoryDocumentStore(ChainConfig(predecessor_field="follows", aliases_field="aka"))
        store.add_document("a.md", {"follows": "[[b]]", "aka": "Alpha", "prev": "[[c]]"})

        doc = await store.get_document("a.md")
        assert doc.predecessor_links == ["b"]
        assert doc.aliases == ["Alpha"]

        await store.rewrite_predecessor("a.md", "d.md")
        assert store._documents["a.md"].front_matter["follows"] == "[[d]]"
        assert store._documents["a.md"].front_matter["prev"] == "[[c]]"
