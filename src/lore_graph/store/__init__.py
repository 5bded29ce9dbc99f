"""Row store port and its backends."""

from ..config import Settings, get_settings
from ..schema.registry import SchemaRegistry, get_registry
from .base import (
    MATCH_ALL,
    AttributeIn,
    IdentifierIn,
    KeywordsAny,
    Predicate,
    RankedRow,
    ReferencesAny,
    Row,
    RowStore,
    SortKey,
    sort_rows,
)
from .memory import InMemoryRowStore
from .neo4j_store import Neo4jRowStore


def build_store(settings: Settings | None = None, registry: SchemaRegistry | None = None) -> RowStore:
    """Create the row store selected by ``settings.store_backend``."""
    settings = settings or get_settings()
    registry = registry or get_registry()

    if settings.store_backend == "neo4j":
        from ..graph.connection import get_driver

        return Neo4jRowStore(get_driver(settings), registry, settings.neo4j_database)

    return InMemoryRowStore(registry, seed_dir=settings.seeds_dir)


__all__ = [
    "MATCH_ALL",
    "AttributeIn",
    "IdentifierIn",
    "KeywordsAny",
    "Predicate",
    "RankedRow",
    "ReferencesAny",
    "Row",
    "RowStore",
    "SortKey",
    "sort_rows",
    "InMemoryRowStore",
    "Neo4jRowStore",
    "build_store",
]
