"""Bounded-depth neighbourhood graphs around a root entity."""

import logging
import threading
from concurrent.futures import Executor
from typing import Any

from ..concurrency import check_cancelled, gather
from ..config import Settings, get_settings
from ..errors import EntityNotFound, ValidationError
from ..models.graph import GraphEdge, GraphNode, GraphResult, TruncationRecord
from ..query.params import parse_positive_int, split_csv
from ..query.resolver import QueryResolver
from ..schema.registry import SchemaRegistry
from ..store.base import Row, RowStore
from .adapter import NeighborGroup, RelationGraphAdapter, node_key

logger = logging.getLogger(__name__)


def clamp(value: Any, default: int, maximum: int) -> int:
    """Parse a positive int (default when absent or invalid) capped at ``maximum``."""
    return min(parse_positive_int(value, default), maximum)


def require_param(name: str, value: Any) -> str:
    text = "" if value is None else str(value).strip()
    if not text:
        raise ValidationError(f'Parameter "{name}" is required', [{"param": name}])
    return text


def require_type(registry: SchemaRegistry, name: str, param: str) -> str:
    if not registry.has_type(name):
        raise ValidationError(
            f'Unknown resource "{name}" in parameter "{param}"',
            [{"param": param, "resource": name, "suggestions": registry.suggest(name)}],
        )
    return name


def parse_whitelist(registry: SchemaRegistry, resources: Any) -> list[str]:
    """Validate a resource type whitelist (CSV string or list)."""
    whitelist = split_csv(resources)
    for name in whitelist:
        require_type(registry, name, "resources")
    return whitelist


def truncation_record(from_key: str, group: NeighborGroup) -> TruncationRecord:
    return TruncationRecord(
        from_node_key=from_key,
        relation_name=group.relation.name,
        direction=group.direction,
        neighbor_type=group.neighbor_type,
        total_count=group.total,
        hidden_count=group.hidden,
    )


class GraphBuilder:
    """Breadth-first expansion of the relation graph around one entity."""

    def __init__(
        self,
        registry: SchemaRegistry,
        store: RowStore,
        settings: Settings | None = None,
        executor: Executor | None = None,
    ):
        self.registry = registry
        self.store = store
        self.settings = settings or get_settings()
        self.executor = executor
        self.adapter = RelationGraphAdapter(registry, store)
        self.resolver = QueryResolver(registry, store, self.settings, executor)

    def build_graph(
        self,
        resource: str | None,
        identifier: Any,
        depth: Any = None,
        limit_per_relation: Any = None,
        include_backlinks: bool | None = None,
        resources: Any = None,
        cancel: threading.Event | None = None,
    ) -> GraphResult:
        """Build the graph reachable from a root within ``depth`` hops.

        A node keeps the distance it was first discovered at. Per (node,
        relation) at most ``limit_per_relation`` neighbours are expanded; the
        rest are summarised in one truncation record.

        Args:
            resource: Root resource type
            identifier: Root id, slug or name
            depth: Hops to expand (clamped to settings.max_graph_depth)
            limit_per_relation: Fan-out cap per relation
            include_backlinks: Follow relations declared on other types
            resources: Whitelist of neighbour types (root type always kept)
            cancel: Event checked before each frontier is expanded

        Raises:
            ValidationError: missing identifier or unknown type names
            EntityNotFound: the root does not resolve
        """
        resource = require_type(self.registry, require_param("resource", resource), "resource")
        identifier = require_param("identifier", identifier)
        whitelist = parse_whitelist(self.registry, resources)
        depth = clamp(depth, self.settings.default_graph_depth, self.settings.max_graph_depth)
        limit = clamp(
            limit_per_relation,
            self.settings.default_graph_limit_per_relation,
            self.settings.max_limit_per_relation,
        )
        if include_backlinks is None:
            include_backlinks = self.settings.default_backlinks
        allowed = set(whitelist) | {resource} if whitelist else None

        root_row = self.resolver.find_one(resource, identifier)
        if root_row is None:
            raise EntityNotFound(resource, identifier)

        root = self.adapter.make_node(resource, root_row, 0)
        nodes: dict[str, GraphNode] = {root.key: root}
        edges: dict[tuple[str, str, str], GraphEdge] = {}
        truncated: list[TruncationRecord] = []
        frontier: list[tuple[str, Row]] = [(resource, root_row)]

        for distance in range(1, depth + 1):
            if not frontier:
                break
            check_cancelled(cancel)
            logger.debug("Graph frontier %d: %d nodes", distance - 1, len(frontier))

            expansions = gather(
                self.executor,
                *[
                    lambda r=r, row=row: self.adapter.neighbors_of(r, row, include_backlinks, allowed, limit)
                    for r, row in frontier
                ],
            )

            next_frontier = []
            for (node_type, row), groups in zip(frontier, expansions):
                from_key = node_key(node_type, row["id"])
                for group in groups:
                    if group.hidden > 0:
                        truncated.append(truncation_record(from_key, group))
                        logger.debug(
                            "Truncated %s.%s (%s): %d hidden",
                            from_key, group.relation.name, group.direction, group.hidden,
                        )
                    for neighbor in group.rows:
                        to_key = node_key(group.neighbor_type, neighbor["id"])
                        if to_key not in nodes:
                            nodes[to_key] = self.adapter.make_node(group.neighbor_type, neighbor, distance)
                            next_frontier.append((group.neighbor_type, neighbor))
                        self._add_edge(edges, from_key, to_key, group)
            frontier = next_frontier

        return GraphResult(
            root=root,
            nodes=list(nodes.values()),
            edges=list(edges.values()),
            requested_resource_types=whitelist,
            truncated_relations=truncated,
            depth=depth,
            limit_per_relation=limit,
            include_backlinks=include_backlinks,
        )

    @staticmethod
    def _add_edge(
        edges: dict[tuple[str, str, str], GraphEdge],
        node_key_: str,
        neighbor_key: str,
        group: NeighborGroup,
    ) -> None:
        # Stored in declared orientation: the owner of the relation field is "from"
        if group.direction == "forward":
            source, target = node_key_, neighbor_key
        else:
            source, target = neighbor_key, node_key_
        edge_key = (source, target, group.relation.name)
        if edge_key in edges:
            return
        edges[edge_key] = GraphEdge(
            id=f"{source}->{group.relation.name}->{target}",
            from_=source,
            to=target,
            relation_name=group.relation.name,
            label=group.relation.label or group.relation.name,
            direction=group.direction,
        )
