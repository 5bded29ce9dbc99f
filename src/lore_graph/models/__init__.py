"""Data models for the schema and exploration results."""

from lore_graph.models.graph import (
    GraphEdge,
    GraphNode,
    GraphResult,
    PathEdge,
    PathResult,
    TruncationRecord,
)
from lore_graph.models.schema import (
    AttributeFilter,
    FieldSpec,
    FilterSpec,
    KeywordsFilter,
    RelationFilter,
    RelationSpec,
    TypeDescriptor,
)

__all__ = [
    "AttributeFilter",
    "FieldSpec",
    "FilterSpec",
    "KeywordsFilter",
    "RelationFilter",
    "RelationSpec",
    "TypeDescriptor",
    "GraphEdge",
    "GraphNode",
    "GraphResult",
    "PathEdge",
    "PathResult",
    "TruncationRecord",
]
