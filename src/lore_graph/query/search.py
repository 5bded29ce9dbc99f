"""Global search across resource types."""

import logging
from concurrent.futures import Executor
from typing import Any

from ..concurrency import gather
from ..config import Settings, get_settings
from ..errors import ValidationError
from ..schema.registry import SchemaRegistry
from ..store.base import MATCH_ALL, RowStore, SortKey
from .params import RawParams, get_param, parse_positive_int, split_csv
from .resolver import build_links

logger = logging.getLogger(__name__)


class GlobalSearch:
    """Ranked search over several resource types at once."""

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

    def search_all(self, params: RawParams, base_path: str | None = None) -> dict[str, Any]:
        """Search every requested resource and merge the hits.

        Hits are ordered by rank, then by resource declaration order, then by
        each resource's default sort.

        Raises:
            ValidationError: no search term given
            UnknownResource: a requested resource is not registered
        """
        term = get_param(params, "search", "q")
        if not term:
            raise ValidationError('Parameter "search" is required', [{"param": "search"}])

        resources = split_csv(params.get("resources")) or self.registry.resource_names
        descriptors = [self.registry.get_type(name) for name in resources]
        limit = min(
            parse_positive_int(params.get("limit"), self.settings.search_limit),
            self.settings.max_page_size,
        )

        def search(descriptor):
            order = [SortKey.parse(token) for token in descriptor.default_sort]
            return self.store.search_ranked(descriptor.name, term, None, MATCH_ALL, order)

        per_resource = gather(self.executor, *[lambda d=d: search(d) for d in descriptors])

        merged = []
        for position, (descriptor, hits) in enumerate(zip(descriptors, per_resource)):
            for index, hit in enumerate(hits):
                merged.append((hit.rank, position, index, descriptor.name, hit.row))
        merged.sort(key=lambda item: item[:3])
        logger.debug("Global search %r matched %d rows", term, len(merged))

        data = [
            {
                "id": row["id"],
                "slug": row.get("slug"),
                "name": row.get("name"),
                "resource": resource,
                "summary": row.get("summary"),
                "rank": rank,
            }
            for rank, _, _, resource, row in merged[:limit]
        ]
        path = f"{base_path if base_path is not None else self.settings.api_base_path}/search"

        return {
            "data": data,
            "included": {},
            "links": build_links(path, params, 1, limit, 1),
            "meta": {
                "page": 1,
                "limit": limit,
                "total": len(merged),
                "totalPages": 1,
                "resource": "search",
                "resources": resources,
                "search": term,
            },
        }
