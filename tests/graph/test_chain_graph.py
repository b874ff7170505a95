"""Unit tests for the ChainGraph container.

Covers:
- Node and edge management
- Placeholder invariants
- Rename with relational continuity
- Deletion handling (demote vs drop)
- Serialization
"""

from datetime import datetime, timezone

import pytest

from notechain.exceptions import DuplicateNodeError, NodeNotFoundError
from notechain.graph import ChainGraph, EdgeField, RemovalOutcome


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def empty_graph() -> ChainGraph:
    """Create an empty graph."""
    return ChainGraph()


@pytest.fixture
def chain_graph() -> ChainGraph:
    """Create the chain A -> B -> C.

    Structure:
        A --[prev]--> B --[prev]--> C
    """
    graph = ChainGraph()
    for node_id in ("A", "B", "C"):
        graph.add_node(node_id, resolved=True)
    graph.add_edge("A", "B")
    graph.add_edge("B", "C")
    return graph


# =============================================================================
# Node Tests
# =============================================================================


class TestNodes:
    """Tests for node management."""

    def test_add_resolved_node(self, empty_graph):
        created = datetime(2024, 3, 1, tzinfo=timezone.utc)
        empty_graph.add_node("a.md", resolved=True, aliases=["Intro"], created_time=created)

        node = empty_graph.get_node("a.md")
        assert node.resolved is True
        assert node.aliases == ["Intro"]
        assert node.created_time == created
        assert empty_graph.node_count == 1

    def test_placeholder_drops_attributes(self, empty_graph):
        empty_graph.add_node(
            "ghost.md",
            resolved=False,
            aliases=["Ghost"],
            created_time=datetime.now(timezone.utc),
        )

        node = empty_graph.get_node("ghost.md")
        assert node.resolved is False
        assert node.aliases is None
        assert node.created_time is None
        assert empty_graph.placeholder_count == 1

    def test_duplicate_add_raises(self, empty_graph):
        empty_graph.add_node("a.md", resolved=True)

        with pytest.raises(DuplicateNodeError) as exc_info:
            empty_graph.add_node("a.md", resolved=False)

        assert exc_info.value.node_id == "a.md"
        assert empty_graph.get_node("a.md").resolved is True

    def test_safe_add_tolerates_duplicate(self, empty_graph):
        assert empty_graph.safe_add_node("a.md", resolved=True) is True
        assert empty_graph.safe_add_node("a.md", resolved=False) is False
        assert empty_graph.get_node("a.md").resolved is True
        assert empty_graph.node_count == 1

    def test_get_node_returns_copy(self, empty_graph):
        empty_graph.add_node("a.md", resolved=True, aliases=["A"])

        node = empty_graph.get_node("a.md")
        node.aliases.append("mutated")
        node.resolved = False

        stored = empty_graph.get_node("a.md")
        assert stored.aliases == ["A"]
        assert stored.resolved is True

    def test_get_missing_node(self, empty_graph):
        assert empty_graph.get_node("missing.md") is None
        assert "missing.md" not in empty_graph

    def test_set_attributes_keeps_created_time(self, empty_graph):
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        empty_graph.add_node("a.md", resolved=True, created_time=created)

        empty_graph.set_node_attributes("a.md", resolved=True, aliases=["New"])

        node = empty_graph.get_node("a.md")
        assert node.aliases == ["New"]
        assert node.created_time == created

    def test_set_attributes_missing_node(self, empty_graph):
        with pytest.raises(NodeNotFoundError):
            empty_graph.set_node_attributes("missing.md", resolved=True)


# =============================================================================
# Edge Tests
# =============================================================================


class TestEdges:
    """Tests for edge management."""

    def test_add_edge(self, chain_graph):
        edges = chain_graph.out_edges("A")

        assert len(edges) == 1
        assert edges[0].target_id == "B"
        assert edges[0].field == EdgeField.PREDECESSOR.value
        assert edges[0].explicit is True

    def test_add_edge_requires_endpoints(self, empty_graph):
        empty_graph.add_node("a.md", resolved=True)

        with pytest.raises(NodeNotFoundError):
            empty_graph.add_edge("a.md", "missing.md")
        with pytest.raises(NodeNotFoundError):
            empty_graph.add_edge("missing.md", "a.md")
        assert empty_graph.edge_count == 0

    def test_parallel_edges_are_kept(self, chain_graph):
        chain_graph.add_edge("A", "B")

        assert chain_graph.out_degree("A") == 2
        assert chain_graph.in_degree("B") == 2
        assert chain_graph.edge_multiset()[("A", "B", "prev", True)] == 2

    def test_in_edges_filtered_by_field(self, chain_graph):
        chain_graph.add_edge("C", "B", field="related")

        assert len(chain_graph.in_edges("B")) == 2
        assert [e.source_id for e in chain_graph.in_edges("B", field="prev")] == ["A"]

    def test_drop_out_edges(self, chain_graph):
        chain_graph.add_edge("A", "C")

        assert chain_graph.drop_out_edges("A") == 2
        assert chain_graph.out_degree("A") == 0
        assert chain_graph.in_degree("B") == 0
        assert chain_graph.in_degree("C") == 1

    def test_drop_node_removes_edges(self, chain_graph):
        assert chain_graph.drop_node("B") is True

        assert chain_graph.edge_count == 0
        assert chain_graph.out_degree("A") == 0
        assert chain_graph.in_degree("C") == 0
        assert chain_graph.drop_node("B") is False


# =============================================================================
# Rename Tests
# =============================================================================


class TestRename:
    """Tests for rename with relational continuity."""

    def test_rename_preserves_relations(self, chain_graph):
        assert chain_graph.rename_node("B", "B2") is True

        assert not chain_graph.has_node("B")
        assert [e.source_id for e in chain_graph.in_edges("B2")] == ["A"]
        assert [e.target_id for e in chain_graph.out_edges("B2")] == ["C"]
        assert chain_graph.edge_count == 2

    def test_rename_copies_attributes(self, empty_graph):
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        empty_graph.add_node("old.md", resolved=True, aliases=["Old"], created_time=created)

        empty_graph.rename_node("old.md", "new.md")

        node = empty_graph.get_node("new.md")
        assert node.resolved is True
        assert node.aliases == ["Old"]
        assert node.created_time == created

    def test_rename_keeps_edge_attributes(self, chain_graph):
        chain_graph.add_edge("A", "B", field="related", explicit=False)

        chain_graph.rename_node("B", "B2")

        assert chain_graph.edge_multiset()[("A", "B2", "related", False)] == 1
        assert chain_graph.edge_multiset()[("A", "B2", "prev", True)] == 1

    def test_rename_refused_when_target_exists(self, chain_graph):
        before = chain_graph.edge_multiset()

        assert chain_graph.rename_node("B", "C") is False

        assert chain_graph.has_node("B")
        assert chain_graph.has_node("C")
        assert chain_graph.edge_multiset() == before

    def test_rename_missing_node(self, chain_graph):
        assert chain_graph.rename_node("missing", "other") is False
        assert not chain_graph.has_node("other")

    def test_rename_self_loop_recreated_once(self, empty_graph):
        empty_graph.add_node("X", resolved=True)
        empty_graph.add_edge("X", "X")

        empty_graph.rename_node("X", "Y")

        assert empty_graph.edge_count == 1
        assert empty_graph.edge_multiset()[("Y", "Y", "prev", True)] == 1


# =============================================================================
# Removal Tests
# =============================================================================


class TestRemoveNode:
    """Tests for deletion handling."""

    def test_remove_absent(self, empty_graph):
        assert empty_graph.remove_node("missing") is RemovalOutcome.ABSENT

    def test_remove_leaf_drops(self, chain_graph):
        assert chain_graph.remove_node("A") is RemovalOutcome.DROPPED

        assert not chain_graph.has_node("A")
        assert chain_graph.in_degree("B") == 0

    def test_remove_referenced_node_demotes(self, empty_graph):
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for node_id in ("A", "C"):
            empty_graph.add_node(node_id, resolved=True)
        empty_graph.add_node("B", resolved=True, aliases=["Bee"], created_time=created)
        empty_graph.add_edge("A", "B")
        empty_graph.add_edge("B", "C")

        assert empty_graph.remove_node("B") is RemovalOutcome.DEMOTED

        node = empty_graph.get_node("B")
        assert node.resolved is False
        assert node.aliases is None
        assert node.created_time is None
        assert empty_graph.out_degree("B") == 0
        assert empty_graph.in_degree("B") == 1
        assert empty_graph.in_degree("C") == 0

    def test_remove_self_referencing_node_drops(self, empty_graph):
        empty_graph.add_node("s.md", resolved=True)
        empty_graph.add_edge("s.md", "s.md")

        assert empty_graph.remove_node("s.md") is RemovalOutcome.DROPPED

        assert not empty_graph.has_node("s.md")
        assert empty_graph.edge_count == 0

    def test_self_loop_with_referrer_demotes(self, empty_graph):
        for node_id in ("s.md", "a.md"):
            empty_graph.add_node(node_id, resolved=True)
        empty_graph.add_edge("s.md", "s.md")
        empty_graph.add_edge("a.md", "s.md")

        assert empty_graph.remove_node("s.md") is RemovalOutcome.DEMOTED

        assert empty_graph.get_node("s.md").resolved is False
        assert [e.source_id for e in empty_graph.in_edges("s.md")] == ["a.md"]
        assert empty_graph.out_degree("s.md") == 0

    def test_no_dangling_edges_after_removal(self, chain_graph):
        chain_graph.remove_node("B")
        chain_graph.remove_node("A")

        for edge in chain_graph.iter_edges():
            assert chain_graph.has_node(edge.source_id)
            assert chain_graph.has_node(edge.target_id)


# =============================================================================
# Serialization Tests
# =============================================================================


class TestSerialization:
    """Tests for dict serialization and copying."""

    def test_from_dict_restores_structure(self, chain_graph):
        chain_graph.add_node("ghost.md", resolved=False)
        chain_graph.add_edge("C", "ghost.md")

        restored = ChainGraph.from_dict(chain_graph.to_dict())

        assert restored.node_ids() == chain_graph.node_ids()
        assert restored.edge_multiset() == chain_graph.edge_multiset()
        assert restored.get_node("ghost.md").resolved is False

    def test_from_dict_skips_edges_with_missing_endpoints(self, chain_graph):
        data = chain_graph.to_dict()
        del data["nodes"]["C"]

        restored = ChainGraph.from_dict(data)

        assert restored.edge_count == 1
        assert restored.out_degree("B") == 0

    def test_copy_is_independent(self, chain_graph):
        clone = chain_graph.copy()
        clone.drop_node("B")

        assert chain_graph.has_node("B")
        assert chain_graph.edge_count == 2

    def test_clear(self, chain_graph):
        chain_graph.clear()

        assert len(chain_graph) == 0
        assert chain_graph.edge_count == 0
