"""Self-describing catalog of the registered resource types."""

from concurrent.futures import Executor
from datetime import datetime, timezone
from typing import Any

from . import __version__
from .analytics.compare import COMPARISONS
from .analytics.stats import AGGREGATORS
from .concurrency import gather
from .config import Settings, get_settings
from .models.schema import TypeDescriptor
from .schema.registry import SchemaRegistry
from .store.base import RowStore

API_TITLE = "Lore Graph API"
API_DESCRIPTION = (
    "Read API over a Warhammer 40,000 lore dataset with uniform query rules, "
    "relation-graph exploration and shortest paths."
)


class Catalog:
    """Describes each resource type: fields, filters, includes and samples."""

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

    def _path(self, name: str) -> str:
        return f"{self.settings.api_base_path}/{name}"

    def _filters(self, descriptor: TypeDescriptor) -> list[dict[str, Any]]:
        return [{"id": key, "label": spec.label, "type": spec.kind} for key, spec in descriptor.filters.items()]

    def _includes(self, descriptor: TypeDescriptor) -> list[dict[str, Any]]:
        return [
            {"id": relation.name, "label": relation.label, "resource": relation.target}
            for relation in descriptor.relations
        ]

    def _summary(self, descriptor: TypeDescriptor, count: int) -> dict[str, Any]:
        return {
            "id": descriptor.name,
            "label": descriptor.label,
            "description": descriptor.description,
            "path": self._path(descriptor.name),
            "count": count,
            "filters": self._filters(descriptor),
            "include": self._includes(descriptor),
            "sampleQueries": [self.settings.api_base_path + query for query in descriptor.sample_queries],
        }

    def _counts(self) -> list[int]:
        return gather(
            self.executor,
            *[lambda name=name: self.store.count(name) for name in self.registry.resource_names],
        )

    def resources(self) -> dict[str, Any]:
        descriptors = [self.registry.get_type(name) for name in self.registry.resource_names]
        return {
            "data": [self._summary(d, count) for d, count in zip(descriptors, self._counts())],
            "meta": {"total": len(descriptors)},
        }

    def resource(self, name: str) -> dict[str, Any]:
        """Full documentation of one resource type."""
        descriptor = self.registry.get_type(name)
        doc = self._summary(descriptor, self.store.count(name))
        doc.update(
            {
                "defaultSort": ",".join(descriptor.default_sort),
                "sortFields": list(descriptor.sort_fields),
                "searchFields": list(descriptor.search_fields),
                "fields": [spec.model_dump() for spec in descriptor.fields],
                "backlinks": [
                    {"resource": backlink.source, "relation": backlink.relation.name}
                    for backlink in self.registry.backlinks_to(name)
                ],
                "compare": name in COMPARISONS,
                "stats": [group_key for resource, group_key in AGGREGATORS if resource == name],
            }
        )
        return {"data": doc, "meta": {"resource": name}}

    def overview(self) -> dict[str, Any]:
        return {
            "data": {
                "api": {
                    "title": API_TITLE,
                    "version": __version__,
                    "description": API_DESCRIPTION,
                    "basePath": self.settings.api_base_path,
                },
                "resources": self.resources()["data"],
                "explore": [self._path("explore/graph"), self._path("explore/path")],
                "compare": [self._path(f"compare/{name}") for name in COMPARISONS],
                "stats": [self._path(f"stats/{resource}/{key}") for resource, key in AGGREGATORS],
            },
            "meta": {"generatedAt": datetime.now(timezone.utc).isoformat()},
        }
