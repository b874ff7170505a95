"""Chain Graph container and low-level mutation primitives.

This module provides the ChainGraph class, the single store for the
predecessor relation between documents.

The graph provides:
- Node storage keyed by document id, with resolved/placeholder state
- A directed multigraph of predecessor edges
- Outgoing/incoming edge indexes for lookups in insertion order
- Rename with full relational continuity
- Deletion handling that demotes still-referenced nodes to placeholders
- Serialization to/from dictionaries

Invariants maintained here:
- Every edge's endpoints exist as nodes
- No operation leaves an edge whose endpoint was removed
- A placeholder (resolved=False) has no aliases and no creation time

Example:
    >>> graph = ChainGraph()
    >>> graph.add_node("c.md", resolved=True)
    >>> graph.add_node("b.md", resolved=True)
    >>> graph.add_edge("b.md", "c.md")
    >>> graph.rename_node("b.md", "b2.md")
    True
    >>> [e.target_id for e in graph.out_edges("b2.md")]
    ['c.md']
"""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from datetime import datetime
from typing import Any, Iterator

from ..exceptions import DuplicateNodeError, NodeNotFoundError
from .models import ChainEdge, ChainNode, EdgeField, RemovalOutcome

logger = logging.getLogger(__name__)


class ChainGraph:
    """The predecessor graph of a document collection.

    Nodes are owned exclusively by the graph. Read accessors hand out
    copies, so callers only ever observe identifiers and attribute
    snapshots, never live records.

    Thread Safety:
        This class is NOT thread-safe. GraphService serializes all
        mutations; use it rather than mutating a shared graph directly.

    Attributes:
        _nodes: Dictionary of node_id -> ChainNode
        _edges: Dictionary of edge_id -> ChainEdge
        _outgoing_index: Index of node_id -> list of outgoing edge IDs
        _incoming_index: Index of node_id -> list of incoming edge IDs
    """

    def __init__(self) -> None:
        """Initialize an empty chain graph."""
        self._nodes: dict[str, ChainNode] = {}
        self._edges: dict[str, ChainEdge] = {}

        # Indexes for efficient lookup
        self._outgoing_index: dict[str, list[str]] = defaultdict(list)
        self._incoming_index: dict[str, list[str]] = defaultdict(list)

    # =========================================================================
    # Node Operations
    # =========================================================================

    def add_node(
        self,
        node_id: str,
        *,
        resolved: bool,
        aliases: list[str] | None = None,
        created_time: datetime | None = None,
    ) -> None:
        """Add a node to the graph.

        Placeholders never carry aliases or a creation time; both are
        discarded when resolved is False.

        Args:
            node_id: Document identifier
            resolved: Whether the id corresponds to a real document
            aliases: Alternate names of the document
            created_time: Creation instant of the document

        Raises:
            DuplicateNodeError: If a node with this id already exists
        """
        if node_id in self._nodes:
            raise DuplicateNodeError(node_id)

        if resolved:
            node = ChainNode(
                node_id=node_id,
                resolved=True,
                aliases=list(aliases) if aliases is not None else None,
                created_time=created_time,
            )
        else:
            node = ChainNode.placeholder(node_id)

        self._nodes[node_id] = node

    def safe_add_node(
        self,
        node_id: str,
        *,
        resolved: bool,
        aliases: list[str] | None = None,
        created_time: datetime | None = None,
    ) -> bool:
        """Add a node, tolerating an existing one.

        Returns:
            True if the node was added, False if it already existed
        """
        try:
            self.add_node(
                node_id,
                resolved=resolved,
                aliases=aliases,
                created_time=created_time,
            )
        except DuplicateNodeError as e:
            logger.debug(f"safe_add_node: {e}")
            return False
        return True

    def has_node(self, node_id: str) -> bool:
        """Check if a node exists."""
        return node_id in self._nodes

    def get_node(self, node_id: str) -> ChainNode | None:
        """Get a copy of a node by ID.

        Args:
            node_id: The node's identifier

        Returns:
            A copy of the node, or None if not found
        """
        node = self._nodes.get(node_id)
        return node.copy() if node else None

    def created_time_of(self, node_id: str) -> datetime | None:
        """Get a node's creation time without copying the node."""
        node = self._nodes.get(node_id)
        return node.created_time if node else None

    def set_node_attributes(
        self,
        node_id: str,
        *,
        resolved: bool,
        aliases: list[str] | None = None,
        created_time: datetime | None = None,
    ) -> None:
        """Refresh a node's resolved flag and aliases in place.

        The creation time is only replaced when one is passed; it is
        cleared when the node becomes a placeholder.

        Raises:
            NodeNotFoundError: If the node doesn't exist
        """
        node = self._nodes.get(node_id)
        if node is None:
            raise NodeNotFoundError(node_id)

        node.resolved = resolved
        if resolved:
            node.aliases = list(aliases) if aliases is not None else None
            if created_time is not None:
                node.created_time = created_time
        else:
            node.aliases = None
            node.created_time = None

    def drop_node(self, node_id: str) -> bool:
        """Remove a node and all its edges from the graph.

        Args:
            node_id: The node's identifier

        Returns:
            True if node was removed, False if not found
        """
        if node_id not in self._nodes:
            return False

        edges_to_remove = list(self._outgoing_index.get(node_id, []))
        edges_to_remove.extend(self._incoming_index.get(node_id, []))

        for edge_id in edges_to_remove:
            self.drop_edge(edge_id)

        del self._nodes[node_id]

        # Clean up indexes
        self._outgoing_index.pop(node_id, None)
        self._incoming_index.pop(node_id, None)

        return True

    def rename_node(self, old_id: str, new_id: str) -> bool:
        """Change a node's identity while keeping all of its relations.

        Every in-edge and out-edge of old_id is re-created with the same
        attributes and new_id substituted for old_id. Self-loops are
        re-created once. Rename never overwrites an existing node.

        Args:
            old_id: Current identifier
            new_id: New identifier

        Returns:
            True if the node was renamed, False if nothing changed
        """
        if old_id not in self._nodes:
            return False
        if new_id in self._nodes:
            logger.warning(f"Cannot rename {old_id} to {new_id}: target exists")
            return False

        old = self._nodes[old_id]
        self.add_node(
            new_id,
            resolved=old.resolved,
            aliases=old.aliases,
            created_time=old.created_time,
        )

        # In-edges, including self-loops
        for edge in self.in_edges(old_id):
            source = new_id if edge.is_self_loop else edge.source_id
            self.add_edge(source, new_id, field=edge.field, explicit=edge.explicit)

        # Out-edges; self-loops were re-created above
        for edge in self.out_edges(old_id):
            if edge.is_self_loop:
                continue
            self.add_edge(new_id, edge.target_id, field=edge.field, explicit=edge.explicit)

        self.drop_node(old_id)
        logger.debug(f"Renamed node {old_id} -> {new_id}")
        return True

    def remove_node(self, node_id: str) -> RemovalOutcome:
        """Handle the deletion of a node's document.

        A node that something still points to is demoted to a
        placeholder: it loses its resolved flag, aliases, creation time
        and outgoing edges, but keeps its identity and in-edges. A node
        nothing points to is dropped outright.

        Args:
            node_id: The deleted document's identifier

        Returns:
            The RemovalOutcome describing what happened
        """
        if node_id not in self._nodes:
            return RemovalOutcome.ABSENT

        # A self-loop goes away with the node's own declaration
        referrers = [e for e in self.in_edges(node_id) if not e.is_self_loop]
        if referrers:
            self.set_node_attributes(node_id, resolved=False)
            self.drop_out_edges(node_id)
            logger.debug(f"Demoted {node_id} to placeholder ({self.in_degree(node_id)} in-edges)")
            return RemovalOutcome.DEMOTED

        self.drop_node(node_id)
        logger.debug(f"Dropped node {node_id}")
        return RemovalOutcome.DROPPED

    # =========================================================================
    # Edge Operations
    # =========================================================================

    def add_edge(
        self,
        source_id: str,
        target_id: str,
        *,
        field: str = EdgeField.PREDECESSOR.value,
        explicit: bool = True,
    ) -> ChainEdge:
        """Add a directed edge from source to target.

        A new parallel edge is appended even if an equivalent one exists.
        Callers recomputing a node's edges must drop stale ones first.

        Args:
            source_id: The node declaring the predecessor
            target_id: The predecessor node
            field: Relation kind
            explicit: Whether the edge comes from a declared attribute

        Returns:
            A copy of the newly created edge

        Raises:
            NodeNotFoundError: If source or target node doesn't exist
        """
        if source_id not in self._nodes:
            raise NodeNotFoundError(source_id)
        if target_id not in self._nodes:
            raise NodeNotFoundError(target_id)

        edge = ChainEdge(
            source_id=source_id,
            target_id=target_id,
            field=str(field.value if isinstance(field, EdgeField) else field),
            explicit=explicit,
        )
        self._edges[edge.edge_id] = edge
        self._outgoing_index[source_id].append(edge.edge_id)
        self._incoming_index[target_id].append(edge.edge_id)

        return edge.copy()

    def drop_edge(self, edge_id: str) -> bool:
        """Remove an edge from the graph.

        Args:
            edge_id: The edge's identifier

        Returns:
            True if edge was removed, False if not found
        """
        edge = self._edges.pop(edge_id, None)
        if edge is None:
            return False

        outgoing = self._outgoing_index.get(edge.source_id)
        if outgoing and edge_id in outgoing:
            outgoing.remove(edge_id)
        incoming = self._incoming_index.get(edge.target_id)
        if incoming and edge_id in incoming:
            incoming.remove(edge_id)

        return True

    def drop_out_edges(self, node_id: str) -> int:
        """Remove every outgoing edge of a node.

        Returns:
            Number of edges removed
        """
        edge_ids = list(self._outgoing_index.get(node_id, []))
        for edge_id in edge_ids:
            self.drop_edge(edge_id)
        return len(edge_ids)

    def get_edge(self, edge_id: str) -> ChainEdge | None:
        """Get a copy of an edge by ID."""
        edge = self._edges.get(edge_id)
        return edge.copy() if edge else None

    def out_edges(self, node_id: str, field: str | None = None) -> list[ChainEdge]:
        """Get edges going out from a node, in insertion order.

        Args:
            node_id: The source node ID
            field: Optional filter by relation kind

        Returns:
            Copies of the outgoing edges (empty if node is absent)
        """
        return self._collect(self._outgoing_index.get(node_id, []), field)

    def in_edges(self, node_id: str, field: str | None = None) -> list[ChainEdge]:
        """Get edges coming into a node, in insertion order.

        Args:
            node_id: The target node ID
            field: Optional filter by relation kind

        Returns:
            Copies of the incoming edges (empty if node is absent)
        """
        return self._collect(self._incoming_index.get(node_id, []), field)

    def _collect(self, edge_ids: list[str], field: str | None) -> list[ChainEdge]:
        edges = []
        for edge_id in edge_ids:
            edge = self._edges.get(edge_id)
            if edge is None:
                continue
            if field is not None and edge.field != field:
                continue
            edges.append(edge.copy())
        return edges

    def out_degree(self, node_id: str) -> int:
        """Number of outgoing edges of a node."""
        return len(self._outgoing_index.get(node_id, []))

    def in_degree(self, node_id: str) -> int:
        """Number of incoming edges of a node."""
        return len(self._incoming_index.get(node_id, []))

    # =========================================================================
    # Statistics
    # =========================================================================

    @property
    def node_count(self) -> int:
        """Get the number of nodes in the graph."""
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        """Get the number of edges in the graph."""
        return len(self._edges)

    @property
    def placeholder_count(self) -> int:
        """Get the number of unresolved placeholder nodes."""
        return sum(1 for n in self._nodes.values() if not n.resolved)

    def edge_multiset(self) -> Counter[tuple[str, str, str, bool]]:
        """Count edges by (source, target, field, explicit), ignoring ids."""
        return Counter(edge.signature() for edge in self._edges.values())

    # =========================================================================
    # Iteration
    # =========================================================================

    def node_ids(self) -> list[str]:
        """Get all node identifiers in insertion order."""
        return list(self._nodes)

    def iter_nodes(self, resolved: bool | None = None) -> Iterator[ChainNode]:
        """Iterate over copies of the nodes.

        Args:
            resolved: Optional filter on the resolved flag
        """
        for node in list(self._nodes.values()):
            if resolved is None or node.resolved == resolved:
                yield node.copy()

    def iter_edges(self, field: str | None = None) -> Iterator[ChainEdge]:
        """Iterate over copies of the edges."""
        for edge in list(self._edges.values()):
            if field is None or edge.field == field:
                yield edge.copy()

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Serialize the graph to a dictionary."""
        return {
            "nodes": {nid: node.to_dict() for nid, node in self._nodes.items()},
            "edges": {eid: edge.to_dict() for eid, edge in self._edges.items()},
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChainGraph:
        """Deserialize from a dictionary.

        Edges whose endpoints are missing from the node table are skipped.
        """
        graph = cls()

        for node_data in data.get("nodes", {}).values():
            node = ChainNode.from_dict(node_data)
            graph.safe_add_node(
                node.node_id,
                resolved=node.resolved,
                aliases=node.aliases,
                created_time=node.created_time,
            )

        for edge_data in data.get("edges", {}).values():
            edge = ChainEdge.from_dict(edge_data)
            if edge.source_id in graph._nodes and edge.target_id in graph._nodes:
                graph._edges[edge.edge_id] = edge
                graph._outgoing_index[edge.source_id].append(edge.edge_id)
                graph._incoming_index[edge.target_id].append(edge.edge_id)
            else:
                logger.warning(f"Skipping edge with missing endpoint: {edge!r}")

        return graph

    def clear(self) -> None:
        """Remove all nodes and edges from the graph."""
        self._nodes.clear()
        self._edges.clear()
        self._outgoing_index.clear()
        self._incoming_index.clear()

    def copy(self) -> ChainGraph:
        """Create a deep copy of the graph."""
        return ChainGraph.from_dict(self.to_dict())

    def __repr__(self) -> str:
        return f"ChainGraph(nodes={self.node_count}, edges={self.edge_count})"

    def __len__(self) -> int:
        """Return the number of nodes."""
        return self.node_count

    def __contains__(self, node_id: object) -> bool:
        """Check if a node ID exists in the graph."""
        return node_id in self._nodes
