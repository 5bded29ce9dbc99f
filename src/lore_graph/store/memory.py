"""In-memory row store backed by seed JSON files."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from ..config import get_settings
from ..schema.registry import SchemaRegistry
from .base import MATCH_ALL, Predicate, RankedRow, Row, SortKey, sort_rows
from .ranking import rank_row

logger = logging.getLogger(__name__)


class InMemoryRowStore:
    """Row store holding every resource in memory, indexed by id."""

    def __init__(
        self,
        registry: SchemaRegistry,
        rows: dict[str, list[Row]] | None = None,
        seed_dir: Path | None = None,
    ):
        """Initialize the store from explicit rows or a seed directory.

        Args:
            registry: Schema registry the rows belong to
            rows: Optional mapping of resource name to rows
            seed_dir: Directory containing <resource>.json seed files
                (used when ``rows`` is not given)
        """
        self.registry = registry
        self._rows: dict[str, list[Row]] = {name: [] for name in registry.resource_names}
        self._by_id: dict[str, dict[int, Row]] = {name: {} for name in registry.resource_names}

        if rows is None:
            rows = self._load_seeds(seed_dir or get_settings().seeds_dir)

        for resource, items in rows.items():
            self.registry.get_type(resource)
            for item in items:
                self._add(resource, item)

    def _load_seeds(self, seed_dir: Path) -> dict[str, list[Row]]:
        """Load seed data from JSON files."""
        data: dict[str, list[Row]] = {}
        if not seed_dir.exists():
            logger.warning("Seed directory %s does not exist, store is empty", seed_dir)
            return data

        for resource in self.registry.resource_names:
            seed_file = seed_dir / f"{resource}.json"
            if not seed_file.exists():
                logger.debug("No seed file for %s", resource)
                continue
            with open(seed_file, encoding="utf-8") as f:
                data[resource] = json.load(f)
            logger.debug("Loaded %d %s from %s", len(data[resource]), resource, seed_file)
        return data

    def _add(self, resource: str, row: Row) -> None:
        entity_id = row["id"]
        if entity_id in self._by_id[resource]:
            raise ValueError(f"Duplicate id {entity_id} in {resource}")
        self._rows[resource].append(row)
        self._by_id[resource][entity_id] = row

    def _scan(self, resource: str, predicate: Predicate) -> list[Row]:
        self.registry.get_type(resource)
        return [row for row in self._rows[resource] if predicate.matches(row)]

    def count(self, resource: str, predicate: Predicate = MATCH_ALL) -> int:
        return len(self._scan(resource, predicate))

    def list(
        self,
        resource: str,
        predicate: Predicate = MATCH_ALL,
        order: list[SortKey] | tuple[SortKey, ...] = (),
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Row]:
        rows = sort_rows(self._scan(resource, predicate), order)
        end = None if limit is None else offset + limit
        return [dict(row) for row in rows[offset:end]]

    def get_by_id(self, resource: str, entity_id: int) -> Row | None:
        self.registry.get_type(resource)
        row = self._by_id[resource].get(entity_id)
        return dict(row) if row is not None else None

    def get_by_ids(self, resource: str, ids: list[int]) -> list[Row]:
        self.registry.get_type(resource)
        index = self._by_id[resource]
        return [dict(index[entity_id]) for entity_id in ids if entity_id in index]

    def search_ranked(
        self,
        resource: str,
        term: str,
        limit: int | None = None,
        predicate: Predicate = MATCH_ALL,
        order: list[SortKey] | tuple[SortKey, ...] = (),
    ) -> list[RankedRow]:
        search_fields = self.registry.get_type(resource).search_fields
        hits = []
        for row in sort_rows(self._scan(resource, predicate), order):
            rank = rank_row(row, term, search_fields)
            if rank is not None:
                hits.append(RankedRow(rank=rank, row=dict(row)))
        hits.sort(key=lambda hit: hit.rank)
        return hits if limit is None else hits[:limit]
