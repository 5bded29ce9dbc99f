"""Grouped aggregates of one resource type by a declared relation."""

import logging
import math
from concurrent.futures import Executor
from dataclasses import dataclass, field
from typing import Any, Callable

from ..concurrency import gather
from ..errors import StatsNotFound
from ..schema.registry import SchemaRegistry
from ..store.base import Row, RowStore

logger = logging.getLogger(__name__)

Metric = Callable[[list[Row]], dict[str, Any]]


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def average(field_name: str, key: str) -> Metric:
    def compute(rows: list[Row]) -> dict[str, Any]:
        values = [row[field_name] for row in rows if row.get(field_name) is not None]
        return {key: round_half_up(sum(values) / len(values)) if values else 0}

    return compute


def maximum(field_name: str, key: str) -> Metric:
    def compute(rows: list[Row]) -> dict[str, Any]:
        values = [row[field_name] for row in rows if row.get(field_name) is not None]
        return {key: max(values) if values else 0}

    return compute


def active_count(rows: list[Row]) -> dict[str, Any]:
    return {"activeCount": sum(1 for row in rows if row.get("status") == "active")}


def total_length(field_name: str, key: str) -> Metric:
    def compute(rows: list[Row]) -> dict[str, Any]:
        return {key: sum(len(row.get(field_name) or []) for row in rows)}

    return compute


def latest_label(order_field: str, label_field: str, key: str) -> Metric:
    """Label of the row with the highest ``order_field`` (first one on ties)."""

    def compute(rows: list[Row]) -> dict[str, Any]:
        dated = [row for row in rows if row.get(order_field) is not None]
        if not dated:
            return {key: None}
        latest = max(dated, key=lambda row: row[order_field])
        return {key: latest.get(label_field)}

    return compute


@dataclass(frozen=True)
class Aggregator:
    """Groups rows of a resource through one of its relations."""

    relation: str
    metrics: list[Metric] = field(default_factory=list)


AGGREGATORS: dict[tuple[str, str], Aggregator] = {
    ("factions", "by-race"): Aggregator(
        "races",
        [average("powerLevel", "averagePowerLevel"), maximum("powerLevel", "maxPowerLevel")],
    ),
    ("events", "by-era"): Aggregator(
        "era",
        [active_count, latest_label("yearOrder", "yearLabel", "latestYearLabel")],
    ),
    ("characters", "by-faction"): Aggregator(
        "faction",
        [average("powerLevel", "averagePowerLevel"), maximum("powerLevel", "maxPowerLevel")],
    ),
    ("units", "by-faction"): Aggregator(
        "factions",
        [average("powerLevel", "averagePowerLevel"), maximum("powerLevel", "maxPowerLevel")],
    ),
    ("campaigns", "by-organization"): Aggregator(
        "organizations",
        [active_count, latest_label("yearOrder", "yearLabel", "latestYearLabel")],
    ),
    ("battlefields", "by-faction"): Aggregator(
        "factions",
        [average("intensityLevel", "averageIntensityLevel"), maximum("intensityLevel", "maxIntensityLevel")],
    ),
    ("star-systems", "by-segmentum"): Aggregator(
        "segmentum",
        [total_length("planetIds", "planetCount"), active_count],
    ),
}


class StatsEngine:
    """Computes grouped statistics for registered (resource, group key) pairs."""

    def __init__(
        self,
        registry: SchemaRegistry,
        store: RowStore,
        executor: Executor | None = None,
        aggregators: dict[tuple[str, str], Aggregator] | None = None,
    ):
        self.registry = registry
        self.store = store
        self.executor = executor
        self.aggregators = AGGREGATORS if aggregators is None else aggregators

    def available(self) -> list[str]:
        """Registered aggregators as ``resource/group-key`` paths."""
        return [f"{resource}/{group_key}" for resource, group_key in self.aggregators]

    def stats_by_group(self, resource: str, group_key: str) -> dict[str, Any]:
        """Group every row of ``resource`` by a relation, zero-count groups included.

        Groups are ordered by count descending, then name ascending.

        Raises:
            UnknownResource: resource is not registered
            StatsNotFound: no aggregator for the pair
        """
        self.registry.get_type(resource)
        aggregator = self.aggregators.get((resource, group_key))
        if aggregator is None:
            raise StatsNotFound(resource, group_key)

        relation = self.registry.get_relation(resource, aggregator.relation)
        rows, groups = gather(
            self.executor,
            lambda: self.store.list(resource),
            lambda: self.store.list(relation.target),
        )

        members: dict[int, list[Row]] = {group["id"]: [] for group in groups}
        for row in rows:
            for group_id in relation.ids_of(row):
                if group_id in members:
                    members[group_id].append(row)

        data = []
        for group in groups:
            grouped = members[group["id"]]
            entry = {
                "id": group["id"],
                "slug": group.get("slug"),
                "name": group.get("name"),
                "count": len(grouped),
            }
            for metric in aggregator.metrics:
                entry.update(metric(grouped))
            data.append(entry)

        data.sort(key=lambda entry: (-entry["count"], str(entry["name"] or "").casefold()))
        logger.debug("Stats %s/%s: %d groups over %d rows", resource, group_key, len(data), len(rows))

        return {
            "data": data,
            "meta": {
                "resource": resource,
                "groupBy": group_key[3:] if group_key.startswith("by-") else group_key,
                "groupResource": relation.target,
                "total": len(rows),
                "groups": len(data),
            },
        }
