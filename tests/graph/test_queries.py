"""Tests for chain traversal queries."""

from datetime import datetime, timedelta, timezone

import pytest

from notechain.graph import ChainGraph, ChainQueries, ChainSegment, SegmentPosition

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


# =============================================================================
# Fixtures
# =============================================================================


def _graph(edges: list[tuple[str, str]], times: dict[str, int] | None = None) -> ChainGraph:
    times = times or {}
    graph = ChainGraph()
    for source, target in edges:
        for node_id in (source, target):
            if not graph.has_node(node_id):
                minutes = times.get(node_id)
                graph.add_node(
                    node_id,
                    resolved=True,
                    created_time=T0 + timedelta(minutes=minutes) if minutes is not None else None,
                )
        graph.add_edge(source, target)
    return graph


@pytest.fixture
def linear() -> ChainQueries:
    """D -> C -> B -> A (A starts the chain)."""
    return ChainQueries(_graph([("B", "A"), ("C", "B"), ("D", "C")]))


@pytest.fixture
def branched() -> ChainQueries:
    """Root R with main branch M -> R and reply Y -> R; M continues to N.

    Structure:
        N --> M --> R
              Y --> R
        Z --> M          (reply to M)
    """
    graph = _graph(
        [("M", "R"), ("Y", "R"), ("N", "M"), ("Z", "M")],
        times={"R": 0, "M": 1, "Y": 2, "N": 3, "Z": 4},
    )
    return ChainQueries(graph)


# =============================================================================
# Direct Relations
# =============================================================================


class TestDirectRelations:
    """Tests for predecessors_of(), successors_of(), is_in_chain()."""

    def test_predecessors_in_edge_order(self):
        queries = ChainQueries(_graph([("A", "X"), ("A", "Y")]))

        assert queries.predecessors_of("A") == ["X", "Y"]

    def test_successors(self, branched):
        assert branched.successors_of("R") == ["M", "Y"]
        assert branched.successors_of("N") == []

    def test_successors_ignore_other_fields(self):
        graph = _graph([("A", "B")])
        graph.add_node("C", resolved=True)
        graph.add_edge("C", "B", field="related")

        assert ChainQueries(graph).successors_of("B") == ["A"]

    def test_absent_node(self, linear):
        assert linear.predecessors_of("missing") == []
        assert linear.successors_of("missing") == []
        assert linear.is_in_chain("missing") is False

    def test_is_in_chain(self, linear):
        assert linear.is_in_chain("B") is True
        assert linear.is_in_chain("A") is False


# =============================================================================
# Walks
# =============================================================================


class TestWalks:
    """Tests for walk_backward(), walk_forward(), full_chain()."""

    def test_walk_backward(self, linear):
        assert linear.walk_backward("C") == ["A", "B", "C"]
        assert linear.walk_backward("A") == ["A"]

    def test_walk_forward(self, linear):
        assert linear.walk_forward("B") == ["B", "C", "D"]
        assert linear.walk_forward("D") == ["D"]

    def test_full_chain(self, linear):
        expected = ["A", "B", "C", "D"]
        for node_id in expected:
            assert linear.full_chain(node_id) == expected

    def test_absent_node_walks(self, linear):
        assert linear.walk_backward("missing") == []
        assert linear.walk_forward("missing") == []
        assert linear.full_chain("missing") == []

    def test_forward_follows_canonical_branch(self, branched):
        assert branched.walk_forward("R") == ["R", "M", "N"]

    def test_reply_chain(self, branched):
        assert branched.full_chain("Y") == ["R", "Y"]

    def test_cycle_terminates(self):
        queries = ChainQueries(_graph([("X", "Y"), ("Y", "X")]))

        for walk in (queries.walk_backward, queries.walk_forward, queries.full_chain):
            for start in ("X", "Y"):
                result = walk(start)
                assert len(result) == len(set(result))
                assert set(result) <= {"X", "Y"}

    def test_self_loop_terminates(self):
        queries = ChainQueries(_graph([("X", "X")]))

        assert queries.walk_backward("X") == ["X"]
        assert queries.walk_forward("X") == ["X"]
        assert queries.full_chain("X") == ["X"]

    def test_longer_cycle_terminates(self):
        queries = ChainQueries(_graph([("A", "B"), ("B", "C"), ("C", "A")]))

        chain = queries.full_chain("A")

        assert sorted(chain) == ["A", "B", "C"]


# =============================================================================
# Rendering Chain
# =============================================================================


class TestRenderingChain:
    """Tests for rendering_chain()."""

    def test_positions(self, linear):
        segments = linear.rendering_chain("B")

        assert segments == [
            ChainSegment("A", SegmentPosition.BEFORE),
            ChainSegment("B", SegmentPosition.ACTIVE),
            ChainSegment("C", SegmentPosition.AFTER),
            ChainSegment("D", SegmentPosition.AFTER),
        ]

    def test_canonical_node_shows_own_and_sibling_replies(self, branched):
        segments = branched.rendering_chain("M")

        assert [s.node_id for s in segments] == ["R", "M", "N", "Z", "Y"]
        replies = [s.node_id for s in segments if s.is_reply]
        assert replies == ["Z", "Y"]

    def test_reply_does_not_show_siblings(self, branched):
        segments = branched.rendering_chain("Y")

        assert [s.node_id for s in segments] == ["R", "Y"]
        assert not any(s.is_reply for s in segments)

    def test_chain_start_shows_own_replies(self, branched):
        segments = branched.rendering_chain("R")

        assert [s.node_id for s in segments] == ["R", "M", "N", "Y"]
        assert segments[-1] == ChainSegment("Y", SegmentPosition.AFTER, is_reply=True)

    def test_absent_node(self, linear):
        assert linear.rendering_chain("missing") == []
