"""Row store reading lore entities from Neo4j.

Entities are ``(:Entity {resource, id, ...})`` nodes written by
:class:`lore_graph.graph.writer.GraphWriter`. Predicates are compiled to a
Cypher ``WHERE`` clause; ordering, paging and search ranking run in Python
with the same helpers as the in-memory store so both backends agree.
"""

from __future__ import annotations

import logging
from typing import Any

from neo4j import Driver
from neo4j.exceptions import DriverError, Neo4jError

from ..errors import StoreError
from ..schema.registry import SchemaRegistry
from .base import (
    MATCH_ALL,
    AttributeIn,
    IdentifierIn,
    KeywordsAny,
    Predicate,
    RankedRow,
    ReferencesAny,
    Row,
    SortKey,
    sort_rows,
)
from .ranking import rank_row

logger = logging.getLogger(__name__)


def _prop(field: str) -> str:
    return "e.`" + field.replace("`", "``") + "`"


def compile_predicate(predicate: Predicate) -> tuple[str, dict[str, Any]]:
    """Compile a predicate to a Cypher WHERE expression and its parameters.

    Returns:
        Tuple of (expression, params). An empty predicate compiles to ``true``.
    """
    conditions = []
    params: dict[str, Any] = {}

    for index, clause in enumerate(predicate.clauses):
        name = f"p{index}"
        if isinstance(clause, AttributeIn):
            conditions.append(f"toLower(trim(toString({_prop(clause.field)}))) IN ${name}")
            params[name] = list(clause.values)
        elif isinstance(clause, KeywordsAny):
            conditions.append(
                f"any(k IN coalesce({_prop(clause.field)}, []) WHERE toLower(trim(k)) IN ${name})"
            )
            params[name] = list(clause.values)
        elif isinstance(clause, IdentifierIn):
            conditions.append(
                f"(toString(e.id) IN ${name} OR toLower(trim(e.slug)) IN ${name}"
                f" OR toLower(trim(e.name)) IN ${name})"
            )
            params[name] = list(clause.values)
        elif isinstance(clause, ReferencesAny):
            if clause.many:
                conditions.append(f"any(x IN coalesce({_prop(clause.field)}, []) WHERE x IN ${name})")
            else:
                conditions.append(f"{_prop(clause.field)} IN ${name}")
            params[name] = list(clause.ids)
        else:
            raise TypeError(f"Unsupported clause: {clause!r}")

    where_clause = " AND ".join(conditions) if conditions else "true"
    return where_clause, params


class Neo4jRowStore:
    """Row store over Entity nodes in Neo4j."""

    def __init__(self, driver: Driver, registry: SchemaRegistry, database: str | None = None):
        self.driver = driver
        self.registry = registry
        self.database = database

    def _run(self, query: str, **params: Any) -> list[Any]:
        try:
            with self.driver.session(database=self.database) as session:
                return list(session.run(query, **params))
        except (Neo4jError, DriverError) as e:
            logger.warning("Neo4j query failed: %s", e)
            raise StoreError() from e

    def _to_row(self, resource: str, properties: dict[str, Any]) -> Row:
        # Neo4j drops null properties; restore every declared field
        row = {spec.name: None for spec in self.registry.get_type(resource).fields}
        row.update(properties)
        row.pop("resource", None)
        return row

    def _fetch(self, resource: str, predicate: Predicate) -> list[Row]:
        self.registry.get_type(resource)
        where_clause, params = compile_predicate(predicate)
        query = f"""
        MATCH (e:Entity {{resource: $resource}})
        WHERE {where_clause}
        RETURN properties(e) AS row
        """
        records = self._run(query, resource=resource, **params)
        return [self._to_row(resource, dict(record["row"])) for record in records]

    def count(self, resource: str, predicate: Predicate = MATCH_ALL) -> int:
        self.registry.get_type(resource)
        where_clause, params = compile_predicate(predicate)
        query = f"""
        MATCH (e:Entity {{resource: $resource}})
        WHERE {where_clause}
        RETURN count(e) AS total
        """
        records = self._run(query, resource=resource, **params)
        return int(records[0]["total"]) if records else 0

    def list(
        self,
        resource: str,
        predicate: Predicate = MATCH_ALL,
        order: list[SortKey] | tuple[SortKey, ...] = (),
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Row]:
        rows = sort_rows(self._fetch(resource, predicate), order)
        end = None if limit is None else offset + limit
        return rows[offset:end]

    def get_by_id(self, resource: str, entity_id: int) -> Row | None:
        rows = self.get_by_ids(resource, [entity_id])
        return rows[0] if rows else None

    def get_by_ids(self, resource: str, ids: list[int]) -> list[Row]:
        self.registry.get_type(resource)
        if not ids:
            return []
        query = """
        MATCH (e:Entity {resource: $resource})
        WHERE e.id IN $ids
        RETURN properties(e) AS row
        """
        records = self._run(query, resource=resource, ids=list(ids))
        by_id = {}
        for record in records:
            row = self._to_row(resource, dict(record["row"]))
            by_id[row["id"]] = row
        return [by_id[entity_id] for entity_id in ids if entity_id in by_id]

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
        for row in sort_rows(self._fetch(resource, predicate), order):
            rank = rank_row(row, term, search_fields)
            if rank is not None:
                hits.append(RankedRow(rank=rank, row=row))
        hits.sort(key=lambda hit: hit.rank)
        return hits if limit is None else hits[:limit]
