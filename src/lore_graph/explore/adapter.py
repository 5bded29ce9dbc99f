"""Relation graph adapter.

Derives the relation edges touching one entity from the schema registry and
live rows: forward neighbours come from the entity's own relation fields,
backlinks from rows of other types whose relation field references it.
"""

import logging
from dataclasses import dataclass, field

from ..models.graph import Direction, GraphNode
from ..models.schema import RelationSpec
from ..schema.registry import SchemaRegistry
from ..store.base import Predicate, ReferencesAny, Row, RowStore

logger = logging.getLogger(__name__)


def node_key(resource: str, entity_id: int) -> str:
    return f"{resource}:{entity_id}"


@dataclass
class NeighborGroup:
    """The neighbours reached through one relation, in one direction.

    ``rows`` holds at most the requested limit; ``total`` counts every
    existing neighbour before the cut.
    """

    relation: RelationSpec
    direction: Direction
    owner_type: str
    neighbor_type: str
    total: int
    rows: list[Row] = field(default_factory=list)

    @property
    def hidden(self) -> int:
        return self.total - len(self.rows)


class RelationGraphAdapter:
    """Finds forward and backlink neighbours of entity rows."""

    def __init__(self, registry: SchemaRegistry, store: RowStore):
        self.registry = registry
        self.store = store

    def make_node(self, resource: str, row: Row, distance: int) -> GraphNode:
        """Build a graph node carrying the type's display attributes."""
        descriptor = self.registry.get_type(resource)
        extra = {name: row.get(name) for name in descriptor.display_fields}
        return GraphNode(
            key=node_key(resource, row["id"]),
            resource=resource,
            distance=distance,
            id=row["id"],
            slug=row.get("slug"),
            identifier=str(row.get("slug") or row["id"]),
            name=row.get("name"),
            summary=row.get("summary"),
            status=row.get("status"),
            **extra,
        )

    def neighbors_of(
        self,
        resource: str,
        row: Row,
        include_backlinks: bool = True,
        allowed_types: set[str] | None = None,
        limit: int | None = None,
    ) -> list[NeighborGroup]:
        """Neighbour groups of a row, forward relations first, then backlinks.

        Groups whose neighbour type is outside ``allowed_types`` are skipped
        before any store call. Within a group rows follow the relation's
        declared order (backlinks: id ascending) and are cut to ``limit``.
        """
        groups = []

        for relation in self.registry.relations_of(resource):
            if allowed_types is not None and relation.target not in allowed_types:
                continue
            ids = relation.ids_of(row)
            if not ids:
                continue
            existing = self.store.get_by_ids(relation.target, ids)
            if not existing:
                continue
            groups.append(
                NeighborGroup(
                    relation=relation,
                    direction="forward",
                    owner_type=resource,
                    neighbor_type=relation.target,
                    total=len(existing),
                    rows=existing[:limit] if limit is not None else existing,
                )
            )

        if include_backlinks:
            for backlink in self.registry.backlinks_to(resource):
                if allowed_types is not None and backlink.source not in allowed_types:
                    continue
                relation = backlink.relation
                predicate = Predicate((ReferencesAny(relation.local_field, (row["id"],), relation.many),))
                referencing = self.store.list(backlink.source, predicate)
                if not referencing:
                    continue
                groups.append(
                    NeighborGroup(
                        relation=relation,
                        direction="reverse",
                        owner_type=backlink.source,
                        neighbor_type=backlink.source,
                        total=len(referencing),
                        rows=referencing[:limit] if limit is not None else referencing,
                    )
                )

        logger.debug(
            "Neighbours of %s: %s",
            node_key(resource, row["id"]),
            [(g.relation.name, g.direction, g.total) for g in groups],
        )
        return groups
