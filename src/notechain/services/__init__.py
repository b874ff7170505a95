"""Service layer coordinating the live chain graph."""

from .graph_service import (
    GraphChange,
    GraphChangeKind,
    GraphListener,
    GraphService,
)

__all__ = [
    "GraphChange",
    "GraphChangeKind",
    "GraphListener",
    "GraphService",
]
