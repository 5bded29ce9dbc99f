"""Side-by-side comparison of entities of one type."""

import logging
from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import Any, Callable

from ..config import Settings, get_settings
from ..errors import CompareNotSupported, CompareRequiresTwoItems, ValidationError
from ..query.params import RawParams, parse_include, parse_projection, split_csv
from ..query.resolver import QueryResolver
from ..schema.registry import SchemaRegistry
from ..store.base import Row, RowStore

logger = logging.getLogger(__name__)


def field_metric(name: str) -> Callable[[Row], float]:
    return lambda row: row.get(name) or 0


def count_metric(name: str) -> Callable[[Row], float]:
    return lambda row: len(row.get(name) or [])


def segmentum_names(rows: list[Row], store: RowStore) -> dict[str, Any]:
    """Names of the segmentums the compared star systems belong to."""
    ids = list(dict.fromkeys(row["segmentumId"] for row in rows if row.get("segmentumId") is not None))
    return {"segmentums": [segmentum["name"] for segmentum in store.get_by_ids("segmentums", ids)]}


@dataclass(frozen=True)
class ComparisonSpec:
    """How one resource type is compared.

    ``metric`` ranks the items; the spread is max minus min and the extreme
    items are reported under ``max_key`` and ``min_key``. ``shared`` maps a
    result key to a list field whose values are intersected across items.
    """

    metric_name: str
    metric: Callable[[Row], float]
    spread_key: str
    max_key: str
    min_key: str
    shared: dict[str, str] = field(default_factory=dict)
    extra: Callable[[list[Row], RowStore], dict[str, Any]] | None = None

    def summary(self, row: Row) -> dict[str, Any]:
        return {
            "id": row["id"],
            "slug": row.get("slug"),
            "name": row.get("name"),
            self.metric_name: self.metric(row),
        }

    def build(self, rows: list[Row], store: RowStore) -> dict[str, Any]:
        values = [self.metric(row) for row in rows]
        # max/min keep the first item in request order on ties
        strongest = rows[values.index(max(values))]
        weakest = rows[values.index(min(values))]

        comparison: dict[str, Any] = {
            self.spread_key: max(values) - min(values),
            self.max_key: self.summary(strongest),
            self.min_key: self.summary(weakest),
        }
        for key, list_field in self.shared.items():
            common = set(rows[0].get(list_field) or [])
            for row in rows[1:]:
                common &= set(row.get(list_field) or [])
            comparison[key] = sorted(common)
        if self.extra is not None:
            comparison.update(self.extra(rows, store))
        return comparison


COMPARISONS: dict[str, ComparisonSpec] = {
    "factions": ComparisonSpec(
        metric_name="powerLevel",
        metric=field_metric("powerLevel"),
        spread_key="powerSpread",
        max_key="strongest",
        min_key="weakest",
        shared={"sharedRaceIds": "raceIds"},
    ),
    "organizations": ComparisonSpec(
        metric_name="influenceLevel",
        metric=field_metric("influenceLevel"),
        spread_key="influenceSpread",
        max_key="mostInfluential",
        min_key="leastInfluential",
        shared={"sharedFactionIds": "factionIds"},
    ),
    "star-systems": ComparisonSpec(
        metric_name="planetCount",
        metric=count_metric("planetIds"),
        spread_key="planetSpread",
        max_key="largest",
        min_key="smallest",
        extra=segmentum_names,
    ),
    "battlefields": ComparisonSpec(
        metric_name="intensityLevel",
        metric=field_metric("intensityLevel"),
        spread_key="intensitySpread",
        max_key="mostIntense",
        min_key="leastIntense",
        shared={"sharedFactionIds": "factionIds", "sharedCharacterIds": "characterIds"},
    ),
    "characters": ComparisonSpec(
        metric_name="powerLevel",
        metric=field_metric("powerLevel"),
        spread_key="powerSpread",
        max_key="strongest",
        min_key="weakest",
        shared={"sharedEventIds": "eventIds"},
    ),
    "units": ComparisonSpec(
        metric_name="powerLevel",
        metric=field_metric("powerLevel"),
        spread_key="powerSpread",
        max_key="strongest",
        min_key="weakest",
        shared={"sharedFactionIds": "factionIds", "sharedWeaponIds": "weaponIds"},
    ),
}


class CompareEngine:
    """Loads two or more entities and computes their comparison summary."""

    def __init__(
        self,
        registry: SchemaRegistry,
        store: RowStore,
        settings: Settings | None = None,
        executor: Executor | None = None,
        comparisons: dict[str, ComparisonSpec] | None = None,
    ):
        self.registry = registry
        self.store = store
        self.settings = settings or get_settings()
        self.comparisons = COMPARISONS if comparisons is None else comparisons
        self.resolver = QueryResolver(registry, store, self.settings, executor)

    def compare(self, resource: str, params: RawParams) -> dict[str, Any]:
        """Compare the entities named by ``ids`` (CSV of id, slug or name).

        Raises:
            UnknownResource: resource is not registered
            CompareNotSupported: the type has no comparison spec
            CompareRequiresTwoItems: fewer than two ids given or resolved
            ValidationError: too many ids, or bad include/fields
        """
        descriptor = self.registry.get_type(resource)
        spec = self.comparisons.get(resource)
        if spec is None:
            raise CompareNotSupported(resource)

        identifiers = split_csv(params.get("ids"))
        include = parse_include(descriptor, params.get("include"))
        projection = parse_projection(self.registry, params)

        if len(identifiers) > self.settings.max_compare_items:
            raise ValidationError(
                f"Compare accepts at most {self.settings.max_compare_items} ids",
                [{"param": "ids", "max": self.settings.max_compare_items, "given": len(identifiers)}],
            )
        if len(identifiers) < 2:
            raise CompareRequiresTwoItems(resource, len(identifiers))

        rows = self.resolver.find_many(resource, identifiers)
        if len(rows) < 2:
            raise CompareRequiresTwoItems(resource, len(rows))
        logger.debug("Comparing %s: %s", resource, [row["slug"] for row in rows])

        return {
            "data": {
                "items": [projection.apply(resource, row) for row in rows],
                "comparison": spec.build(rows, self.store),
            },
            "included": self.resolver.build_included(resource, rows, include, projection),
            "meta": {
                "resource": resource,
                "count": len(rows),
                "include": include,
                "identifiers": identifiers,
            },
        }
