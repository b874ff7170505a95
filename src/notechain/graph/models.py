"""Chain Graph Data Models.

This module defines the node and edge records stored in the chain graph.

Nodes are documents, keyed by their storage path. A node is either
resolved (a real, readable document) or an unresolved placeholder that
exists only because another document names it as its predecessor.

Edges are directed predecessor relations: an edge from A to B means
"A's predecessor is B". The graph is a multigraph, so a document that
declares the same predecessor twice holds two parallel edges.

Example:
    >>> from notechain.graph import ChainGraph
    >>>
    >>> graph = ChainGraph()
    >>> graph.add_node("b.md", resolved=True)
    >>> graph.add_node("a.md", resolved=True)
    >>> graph.add_edge("a.md", "b.md")  # a.md follows b.md
    >>> graph.get_node("b.md").resolved
    True
"""

from __future__ import annotations

import json
import uuid
import dataclasses
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


# =============================================================================
# Enumerations
# =============================================================================


class EdgeField(str, Enum):
    """Relation kinds carried on edges.

    Only the predecessor relation exists today. Edges store the kind as a
    plain string, so other kinds can coexist without touching this enum.
    """

    PREDECESSOR = "prev"


class RemovalOutcome(str, Enum):
    """What ChainGraph.remove_node() did with a node.

    ABSENT: The node was not in the graph
    DEMOTED: Other nodes still point at it; it became a placeholder
    DROPPED: Nothing pointed at it; it was removed with its edges
    """

    ABSENT = "absent"
    DEMOTED = "demoted"
    DROPPED = "dropped"


# =============================================================================
# Chain Node
# =============================================================================


@dataclass
class ChainNode:
    """A document in the chain graph.

    Attributes:
        node_id: Stable document identifier (its storage path)
        resolved: True if the id corresponds to a real, readable document
        aliases: Alternate names of the document (resolved nodes only)
        created_time: Creation instant of the document (resolved nodes only),
            used as the branch tie-break key
    """

    node_id: str
    resolved: bool = True
    aliases: list[str] | None = None
    created_time: datetime | None = None

    @classmethod
    def placeholder(cls, node_id: str) -> ChainNode:
        """Create an unresolved placeholder node."""
        return cls(node_id=node_id, resolved=False)

    def copy(self) -> ChainNode:
        """Return an independent copy of this node."""
        return ChainNode(
            node_id=self.node_id,
            resolved=self.resolved,
            aliases=list(self.aliases) if self.aliases is not None else None,
            created_time=self.created_time,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "node_id": self.node_id,
            "resolved": self.resolved,
            "aliases": self.aliases,
            "created_time": self.created_time.isoformat() if self.created_time else None,
        }

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChainNode:
        """Deserialize from dictionary."""
        created = data.get("created_time")
        return cls(
            node_id=data["node_id"],
            resolved=data.get("resolved", True),
            aliases=data.get("aliases"),
            created_time=datetime.fromisoformat(created) if created else None,
        )

    def __repr__(self) -> str:
        state = "resolved" if self.resolved else "placeholder"
        return f"ChainNode({self.node_id!r}, {state})"


# =============================================================================
# Chain Edge
# =============================================================================


@dataclass
class ChainEdge:
    """A directed predecessor edge.

    Attributes:
        edge_id: Unique identifier (UUID format)
        source_id: The document that declares the predecessor
        target_id: The declared predecessor
        field: Relation kind (see EdgeField)
        explicit: True if derived directly from a declared attribute
    """

    source_id: str
    target_id: str
    field: str = EdgeField.PREDECESSOR.value
    explicit: bool = True
    # dataclasses.field: the "field" attribute shadows the bare name here
    edge_id: str = dataclasses.field(default_factory=lambda: str(uuid.uuid4()))

    def __hash__(self) -> int:
        """Hash based on edge_id."""
        return hash(self.edge_id)

    def __eq__(self, other: object) -> bool:
        """Equality based on edge_id."""
        if isinstance(other, ChainEdge):
            return self.edge_id == other.edge_id
        return False

    @property
    def is_self_loop(self) -> bool:
        return self.source_id == self.target_id

    def signature(self) -> tuple[str, str, str, bool]:
        """Structural identity of the edge, ignoring its id."""
        return (self.source_id, self.target_id, self.field, self.explicit)

    def copy(self) -> ChainEdge:
        """Return an independent copy of this edge (same id)."""
        return ChainEdge(
            source_id=self.source_id,
            target_id=self.target_id,
            field=self.field,
            explicit=self.explicit,
            edge_id=self.edge_id,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "edge_id": self.edge_id,
            "source_id": self.source_id,
            "target_id": self.target_id,
            "field": self.field,
            "explicit": self.explicit,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChainEdge:
        """Deserialize from dictionary."""
        return cls(
            source_id=data["source_id"],
            target_id=data["target_id"],
            field=data.get("field", EdgeField.PREDECESSOR.value),
            explicit=data.get("explicit", True),
            edge_id=data.get("edge_id") or str(uuid.uuid4()),
        )

    def __repr__(self) -> str:
        return f"ChainEdge({self.source_id!r} -[{self.field}]-> {self.target_id!r})"
