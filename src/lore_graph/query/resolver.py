"""List and detail query resolution.

The resolver validates every parameter before the first store call, then
runs the plan through the row store port and assembles the response
envelope: projected rows, one level of included neighbours, pagination
links and the meta block.
"""

import logging
import math
from concurrent.futures import Executor
from typing import Any
from urllib.parse import urlencode

from ..concurrency import gather
from ..config import Settings, get_settings
from ..errors import EntityNotFound
from ..models.schema import (
    AttributeFilter,
    KeywordsFilter,
    RelationFilter,
    TypeDescriptor,
)
from ..schema.registry import SchemaRegistry
from ..store.base import (
    MATCH_ALL,
    AttributeIn,
    Clause,
    IdentifierIn,
    KeywordsAny,
    Predicate,
    ReferencesAny,
    Row,
    RowStore,
    SortKey,
    normalize,
)
from .params import (
    Projection,
    QueryPlan,
    RawParams,
    build_plan,
    parse_include,
    parse_projection,
)

logger = logging.getLogger(__name__)


def build_links(
    path: str,
    params: RawParams,
    page: int,
    limit: int,
    total_pages: int,
) -> dict[str, str | None]:
    """Build self/next/prev links, keeping every other raw parameter."""
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        if key in ("page", "limit"):
            continue
        values = value if isinstance(value, (list, tuple)) else [value]
        pairs.extend((key, str(v)) for v in values if v not in (None, ""))

    def link(target_page: int) -> str:
        query = urlencode([*pairs, ("page", str(target_page)), ("limit", str(limit))], safe="[],-")
        return f"{path}?{query}"

    return {
        "self": link(page),
        "next": link(page + 1) if page < total_pages else None,
        "prev": link(page - 1) if 1 < page <= total_pages + 1 else None,
    }


class QueryResolver:
    """Resolves list and detail requests against a row store."""

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

    # -------------------------------------------------------------------------
    # Identifier resolution
    # -------------------------------------------------------------------------

    def find_one(self, resource: str, identifier: Any) -> Row | None:
        """Find a row by id, slug or case-insensitive name."""
        value = normalize(identifier)
        if not value:
            return None
        rows = self.store.list(resource, Predicate((IdentifierIn((value,)),)))
        for row in rows:
            if str(row.get("id")) == value:
                return row
        return rows[0] if rows else None

    def get_one(self, resource: str, identifier: Any) -> Row:
        """Like find_one, but raises EntityNotFound when nothing matches."""
        row = self.find_one(resource, identifier)
        if row is None:
            raise EntityNotFound(resource, str(identifier))
        return row

    def find_many(self, resource: str, identifiers: list[str]) -> list[Row]:
        """Resolve several identifiers, keeping request order and skipping misses."""
        rows = gather(self.executor, *[lambda i=i: self.find_one(resource, i) for i in identifiers])
        seen: set[int] = set()
        result = []
        for row in rows:
            if row is not None and row["id"] not in seen:
                seen.add(row["id"])
                result.append(row)
        return result

    def resolve_ids(self, resource: str, values: list[str]) -> list[int]:
        """Ids of the rows of ``resource`` addressed by any of ``values``."""
        predicate = Predicate((IdentifierIn(tuple(normalize(v) for v in values)),))
        return [row["id"] for row in self.store.list(resource, predicate)]

    # -------------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------------

    def build_predicate(self, descriptor: TypeDescriptor, filters: dict[str, list[str]]) -> Predicate:
        """Turn validated filter values into a store predicate.

        Relation filters are resolved to target ids first, so they accept the
        same id/slug/name identifiers as detail lookups and graph roots.
        """
        clauses: list[Clause] = []
        for key, values in filters.items():
            spec = descriptor.filters[key]
            normalized = tuple(normalize(v) for v in values)
            if isinstance(spec, AttributeFilter):
                clauses.append(AttributeIn(spec.field, normalized))
            elif isinstance(spec, KeywordsFilter):
                clauses.append(KeywordsAny(spec.field, normalized))
            elif isinstance(spec, RelationFilter):
                relation = descriptor.relation(spec.relation)
                ids = self.resolve_ids(relation.target, values)
                logger.debug("Filter %s[%s] resolved %s to ids %s", descriptor.name, key, values, ids)
                clauses.append(ReferencesAny(relation.local_field, tuple(ids), relation.many))
        return Predicate(tuple(clauses))

    # -------------------------------------------------------------------------
    # Includes
    # -------------------------------------------------------------------------

    def build_included(
        self,
        resource: str,
        rows: list[Row],
        include: list[str],
        projection: Projection | None = None,
    ) -> dict[str, list[Row]]:
        """Expand one level of relations, keyed by neighbour type and de-duplicated."""
        projection = projection or Projection()
        descriptor = self.registry.get_type(resource)
        relations = [descriptor.relation(name) for name in include]

        def fetch(relation):
            ids = list(dict.fromkeys(i for row in rows for i in relation.ids_of(row)))
            return self.store.get_by_ids(relation.target, ids) if ids else []

        fetched = gather(self.executor, *[lambda r=r: fetch(r) for r in relations])

        included: dict[str, list[Row]] = {}
        seen: set[tuple[str, int]] = set()
        for relation, related_rows in zip(relations, fetched):
            for related in related_rows:
                seen_key = (relation.target, related["id"])
                if seen_key in seen:
                    continue
                seen.add(seen_key)
                included.setdefault(relation.target, []).append(
                    projection.apply(relation.target, related)
                )
        return included

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def execute(self, plan: QueryPlan) -> tuple[int, list[Row]]:
        """Run a plan, returning (total, page rows)."""
        descriptor = self.registry.get_type(plan.resource)
        predicate = self.build_predicate(descriptor, plan.filters) if plan.filters else MATCH_ALL

        if plan.search:
            ties = [SortKey.parse(token) for token in descriptor.default_sort]
            hits = self.store.search_ranked(plan.resource, plan.search, None, predicate, ties)
            page = hits[plan.offset:plan.offset + plan.limit]
            logger.debug("Search %r on %s matched %d rows", plan.search, plan.resource, len(hits))
            return len(hits), [hit.row for hit in page]

        total, rows = gather(
            self.executor,
            lambda: self.store.count(plan.resource, predicate),
            lambda: self.store.list(plan.resource, predicate, plan.sort, plan.limit, plan.offset),
        )
        return total, rows

    def resolve_list(
        self,
        resource: str,
        params: RawParams,
        base_path: str | None = None,
    ) -> dict[str, Any]:
        """Resolve a list request into a list envelope.

        Args:
            resource: Resource type name
            params: Raw request parameters
            base_path: Path prefix for links (settings.api_base_path if not given)

        Returns:
            ``{data, included, links, meta}``
        """
        plan = build_plan(self.registry, resource, params, self.settings)
        logger.debug("List plan: %s", plan)

        total, rows = self.execute(plan)
        total_pages = max(1, math.ceil(total / plan.limit))
        path = f"{base_path if base_path is not None else self.settings.api_base_path}/{resource}"

        return {
            "data": [plan.projection.apply(resource, row) for row in rows],
            "included": self.build_included(resource, rows, plan.include, plan.projection),
            "links": build_links(path, params, plan.page, plan.limit, total_pages),
            "meta": {
                "page": plan.page,
                "limit": plan.limit,
                "total": total,
                "totalPages": total_pages,
                "resource": resource,
                "search": plan.search,
                "sort": plan.sort_tokens,
                "appliedFilters": plan.filters,
                "include": plan.include,
            },
        }

    def resolve_detail(self, resource: str, identifier: Any, params: RawParams | None = None) -> dict[str, Any]:
        """Resolve a detail request into ``{data, included, meta}``."""
        params = params or {}
        descriptor = self.registry.get_type(resource)
        include = parse_include(descriptor, params.get("include"))
        projection = parse_projection(self.registry, params)

        row = self.get_one(resource, identifier)
        return {
            "data": projection.apply(resource, row),
            "included": self.build_included(resource, [row], include, projection),
            "meta": {"resource": resource, "include": include},
        }
