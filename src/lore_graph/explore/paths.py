"""Shortest paths between two entities through the relation graph."""

import logging
import threading
from concurrent.futures import Executor
from typing import Any

from ..concurrency import check_cancelled, gather
from ..config import Settings, get_settings
from ..errors import EntityNotFound
from ..models.graph import PathEdge, PathResult, TruncationRecord
from ..query.resolver import QueryResolver
from ..schema.registry import SchemaRegistry
from ..store.base import Row, RowStore
from .adapter import RelationGraphAdapter, node_key
from .builder import clamp, parse_whitelist, require_param, require_type, truncation_record

logger = logging.getLogger(__name__)


class PathFinder:
    """Breadth-first shortest path search by hop count."""

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

    def _endpoint(self, resource: str, identifier: str) -> Row:
        row = self.resolver.find_one(resource, identifier)
        if row is None:
            raise EntityNotFound(resource, identifier)
        return row

    def find_path(
        self,
        from_resource: str | None,
        from_identifier: Any,
        to_resource: str | None,
        to_identifier: Any,
        max_depth: Any = None,
        limit_per_relation: Any = None,
        include_backlinks: bool | None = None,
        resources: Any = None,
        cancel: threading.Event | None = None,
    ) -> PathResult:
        """Find a shortest path from one entity to another.

        The search stops as soon as the target is dequeued. Running out of
        frontier within ``max_depth`` is a normal result with ``found=False``.

        Raises:
            ValidationError: missing endpoints or unknown type names
            EntityNotFound: an endpoint does not resolve
        """
        from_resource = require_type(
            self.registry, require_param("fromResource", from_resource), "fromResource"
        )
        from_identifier = require_param("fromIdentifier", from_identifier)
        to_resource = require_type(self.registry, require_param("toResource", to_resource), "toResource")
        to_identifier = require_param("toIdentifier", to_identifier)
        whitelist = parse_whitelist(self.registry, resources)
        max_depth = clamp(max_depth, self.settings.default_path_depth, self.settings.max_path_depth)
        limit = clamp(
            limit_per_relation,
            self.settings.default_path_limit_per_relation,
            self.settings.max_limit_per_relation,
        )
        if include_backlinks is None:
            include_backlinks = self.settings.default_backlinks
        allowed = set(whitelist) | {from_resource, to_resource} if whitelist else None

        source_row = self._endpoint(from_resource, from_identifier)
        target_row = self._endpoint(to_resource, to_identifier)
        source_key = node_key(from_resource, source_row["id"])
        target_key = node_key(to_resource, target_row["id"])

        entries: dict[str, tuple[str, Row]] = {source_key: (from_resource, source_row)}
        distances: dict[str, int] = {source_key: 0}
        parents: dict[str, tuple[str, PathEdge]] = {}
        truncated: list[TruncationRecord] = []
        visited = 0
        found = False
        frontier = [source_key]

        while frontier and not found:
            check_cancelled(cancel)

            to_expand = []
            for key in frontier:
                visited += 1
                if key == target_key:
                    found = True
                    break
                if distances[key] < max_depth:
                    to_expand.append(key)
            if found or not to_expand:
                break

            expansions = gather(
                self.executor,
                *[
                    lambda k=k: self.adapter.neighbors_of(*entries[k], include_backlinks, allowed, limit)
                    for k in to_expand
                ],
            )

            next_frontier = []
            for key, groups in zip(to_expand, expansions):
                for group in groups:
                    if group.hidden > 0:
                        truncated.append(truncation_record(key, group))
                    for neighbor in group.rows:
                        neighbor_key = node_key(group.neighbor_type, neighbor["id"])
                        if neighbor_key in distances:
                            continue
                        distances[neighbor_key] = distances[key] + 1
                        entries[neighbor_key] = (group.neighbor_type, neighbor)
                        parents[neighbor_key] = (
                            key,
                            PathEdge(
                                from_=key,
                                to=neighbor_key,
                                relation_name=group.relation.name,
                                label=group.relation.label or group.relation.name,
                                traversal=group.direction,
                            ),
                        )
                        next_frontier.append(neighbor_key)
            frontier = next_frontier

        logger.debug(
            "Path %s -> %s: found=%s after %d dequeued nodes", source_key, target_key, found, visited
        )

        nodes = []
        edges: list[PathEdge] = []
        if found:
            keys = [target_key]
            while keys[-1] != source_key:
                parent_key, edge = parents[keys[-1]]
                edges.append(edge)
                keys.append(parent_key)
            keys.reverse()
            edges.reverse()
            nodes = [self.adapter.make_node(*entries[key], index) for index, key in enumerate(keys)]

        return PathResult(
            found=found,
            from_node=self.adapter.make_node(from_resource, source_row, 0),
            to_node=self.adapter.make_node(to_resource, target_row, len(edges)),
            nodes=nodes,
            edges=edges,
            visited_node_count=visited,
            requested_resource_types=whitelist,
            truncated_relations=truncated,
            max_depth=max_depth,
        )
