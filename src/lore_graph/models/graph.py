"""Result models for graph exploration and path finding."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Direction = Literal["forward", "reverse"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class GraphNode(_CamelModel):
    """An entity placed in a graph response.

    Display attributes declared for the resource type are carried as extra
    fields next to the fixed ones.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    key: str
    resource: str
    distance: int
    id: int
    slug: str | None = None
    identifier: str
    name: str | None = None
    summary: str | None = None
    status: str | None = None


class GraphEdge(_CamelModel):
    """A relation between two emitted nodes, stored in declared orientation."""

    id: str
    from_: str = Field(alias="from")
    to: str
    relation_name: str
    label: str
    direction: Direction


class PathEdge(_CamelModel):
    """One hop of a path, oriented along the path."""

    from_: str = Field(alias="from")
    to: str
    relation_name: str
    label: str
    traversal: Direction


class TruncationRecord(_CamelModel):
    """A (node, relation) neighbour set that was cut at the per-relation cap."""

    from_node_key: str
    relation_name: str
    direction: Direction
    neighbor_type: str
    total_count: int
    hidden_count: int


class GraphResult(BaseModel):
    root: GraphNode
    nodes: list[GraphNode]
    edges: list[GraphEdge]
    requested_resource_types: list[str] = Field(default_factory=list)
    truncated_relations: list[TruncationRecord] = Field(default_factory=list)
    depth: int = 0
    limit_per_relation: int = 0
    include_backlinks: bool = True

    @property
    def resource_types(self) -> list[str]:
        return sorted({node.resource for node in self.nodes})

    def to_envelope(self) -> dict[str, Any]:
        return {
            "data": {
                "root": self.root.dump(),
                "nodes": [node.dump() for node in self.nodes],
                "edges": [edge.dump() for edge in self.edges],
            },
            "meta": {
                "nodeCount": len(self.nodes),
                "edgeCount": len(self.edges),
                "resourceTypes": self.resource_types,
                "requestedResourceTypes": self.requested_resource_types,
                "truncatedRelations": [record.dump() for record in self.truncated_relations],
                "depth": self.depth,
                "limitPerRelation": self.limit_per_relation,
                "backlinks": self.include_backlinks,
            },
        }


class PathResult(BaseModel):
    found: bool
    from_node: GraphNode
    to_node: GraphNode
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[PathEdge] = Field(default_factory=list)
    visited_node_count: int = 0
    requested_resource_types: list[str] = Field(default_factory=list)
    truncated_relations: list[TruncationRecord] = Field(default_factory=list)
    max_depth: int = 0

    @property
    def length(self) -> int:
        return len(self.edges)

    @property
    def resource_types(self) -> list[str]:
        return sorted({node.resource for node in self.nodes})

    def to_envelope(self) -> dict[str, Any]:
        return {
            "data": {
                "found": self.found,
                "from": self.from_node.dump(),
                "to": self.to_node.dump(),
                "path": {
                    "length": self.length,
                    "nodes": [node.dump() for node in self.nodes],
                    "edges": [edge.dump() for edge in self.edges],
                },
            },
            "meta": {
                "visitedNodeCount": self.visited_node_count,
                "requestedResourceTypes": self.requested_resource_types,
                "resourceTypes": self.resource_types,
                "truncatedRelations": [record.dump() for record in self.truncated_relations],
                "maxDepth": self.max_depth,
            },
        }
