"""Row store port.

The engine reaches storage only through :class:`RowStore`. Predicates are
a conjunction of simple clauses that every backend can evaluate: exact
attribute values, keyword intersection, identifier resolution and
"references one of these ids". Ordering is applied with :func:`sort_rows`
so every backend orders rows the same way.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Union

Row = dict[str, Any]


def normalize(value: Any) -> str:
    """Trim and lowercase a value for case-insensitive comparison."""
    if value is None:
        return ""
    return str(value).strip().lower()


def identifier_matches(row: Row, values: tuple[str, ...] | list[str]) -> bool:
    """True when the row's id, slug or name equals one of the normalized values."""
    candidates = (str(row.get("id")), normalize(row.get("slug")), normalize(row.get("name")))
    return any(candidate in values for candidate in candidates)


@dataclass(frozen=True)
class AttributeIn:
    """Scalar field equals one of ``values`` (case-insensitive)."""

    field: str
    values: tuple[str, ...]

    def matches(self, row: Row) -> bool:
        value = row.get(self.field)
        if value is None:
            return False
        return normalize(value) in self.values


@dataclass(frozen=True)
class KeywordsAny:
    """List field shares at least one entry with ``values``."""

    field: str
    values: tuple[str, ...]

    def matches(self, row: Row) -> bool:
        return any(normalize(item) in self.values for item in row.get(self.field) or [])


@dataclass(frozen=True)
class IdentifierIn:
    """Row is addressed by one of ``values`` (id, slug or name)."""

    values: tuple[str, ...]

    def matches(self, row: Row) -> bool:
        return identifier_matches(row, self.values)


@dataclass(frozen=True)
class ReferencesAny:
    """Relation field holds (or contains, when ``many``) one of ``ids``."""

    field: str
    ids: tuple[int, ...]
    many: bool = False

    def matches(self, row: Row) -> bool:
        value = row.get(self.field)
        if self.many:
            return any(item in self.ids for item in value or [])
        return value is not None and value in self.ids


Clause = Union[AttributeIn, KeywordsAny, IdentifierIn, ReferencesAny]


@dataclass(frozen=True)
class Predicate:
    """Conjunction of clauses. An empty predicate matches every row."""

    clauses: tuple[Clause, ...] = ()

    def matches(self, row: Row) -> bool:
        return all(clause.matches(row) for clause in self.clauses)

    def and_(self, *clauses: Clause) -> "Predicate":
        return Predicate(self.clauses + tuple(clauses))


MATCH_ALL = Predicate()


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool = False

    @classmethod
    def parse(cls, token: str) -> "SortKey":
        """Parse a sort token such as ``-powerLevel``."""
        if token.startswith("-"):
            return cls(token[1:], True)
        return cls(token)

    def __str__(self) -> str:
        return f"-{self.field}" if self.descending else self.field


def _sort_value(value: Any) -> tuple[bool, Any]:
    # Missing values go last ascending, first descending
    if value is None:
        return (True, 0)
    if isinstance(value, bool):
        return (False, int(value))
    if isinstance(value, (int, float)):
        return (False, value)
    if isinstance(value, (list, tuple)):
        return (False, len(value))
    return (False, str(value).casefold())


def sort_rows(rows: list[Row], order: list[SortKey] | tuple[SortKey, ...]) -> list[Row]:
    """Sort rows by the given keys, with id ascending as the final tie-breaker."""
    result = sorted(rows, key=lambda row: _sort_value(row.get("id")))
    for key in reversed(list(order)):
        result.sort(key=lambda row: _sort_value(row.get(key.field)), reverse=key.descending)
    return result


@dataclass
class RankedRow:
    """A search hit: lower rank means a better match."""

    rank: int
    row: Row = field(default_factory=dict)


class RowStore(Protocol):
    """Narrow read port onto the storage layer."""

    def count(self, resource: str, predicate: Predicate = MATCH_ALL) -> int: ...

    def list(
        self,
        resource: str,
        predicate: Predicate = MATCH_ALL,
        order: list[SortKey] | tuple[SortKey, ...] = (),
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Row]: ...

    def get_by_id(self, resource: str, entity_id: int) -> Row | None: ...

    def get_by_ids(self, resource: str, ids: list[int]) -> list[Row]: ...

    def search_ranked(
        self,
        resource: str,
        term: str,
        limit: int | None = None,
        predicate: Predicate = MATCH_ALL,
        order: list[SortKey] | tuple[SortKey, ...] = (),
    ) -> list[RankedRow]: ...
