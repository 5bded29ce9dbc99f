"""Write lore entities and their relations to Neo4j."""

import logging
import re
from pathlib import Path

from neo4j import Driver

from ..config import get_settings
from ..schema.registry import SchemaRegistry, get_registry
from ..store.base import Row
from ..store.memory import InMemoryRowStore
from .connection import get_driver, init_schema

logger = logging.getLogger(__name__)


def relationship_type(relation_name: str) -> str:
    """Neo4j relationship type for a relation name (parentFaction -> PARENT_FACTION)."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", relation_name).upper()


class GraphWriter:
    """Writes lore rows to the Neo4j graph database."""

    def __init__(
        self,
        driver: Driver | None = None,
        registry: SchemaRegistry | None = None,
        database: str | None = None,
    ):
        """Initialize the graph writer.

        Args:
            driver: Optional Neo4j driver (created if not provided)
            registry: Schema registry (bundled definitions if not provided)
            database: Neo4j database name (server default if not provided)
        """
        self._driver = driver
        self.registry = registry or get_registry()
        self.database = database
        self._initialized = False

    @property
    def driver(self) -> Driver:
        """Get the Neo4j driver, creating if needed."""
        if self._driver is None:
            self._driver = get_driver()
        return self._driver

    def initialize(self) -> None:
        """Initialize the graph schema."""
        if not self._initialized:
            init_schema(self.driver, self.database)
            self._initialized = True

    def clear(self) -> None:
        """Remove every lore entity and its relationships."""
        with self.driver.session(database=self.database) as session:
            session.run("MATCH (e:Entity) DETACH DELETE e")

    def write_entities_batch(self, resource: str, rows: list[Row]) -> int:
        """Write the rows of one resource as Entity nodes.

        Args:
            resource: Resource type the rows belong to
            rows: Entity rows

        Returns:
            Number of entities written
        """
        self.registry.get_type(resource)
        if not rows:
            return 0

        query = """
        UNWIND $batch AS item
        MERGE (e:Entity {resource: $resource, id: item.id})
        SET e += item
        """

        with self.driver.session(database=self.database) as session:
            session.run(query, batch=rows, resource=resource)

        return len(rows)

    def write_relations_batch(self, resource: str, rows: list[Row]) -> int:
        """Write the declared relations of one resource as relationships.

        Relationships mirror the owning side only. The row store never reads
        them; they exist for browsing the graph in Neo4j itself.

        Returns:
            Number of relationships written
        """
        count = 0

        for relation in self.registry.relations_of(resource):
            batch_data = [
                {"source_id": row["id"], "target_id": target_id}
                for row in rows
                for target_id in relation.ids_of(row)
            ]
            if not batch_data:
                continue

            query = f"""
            UNWIND $batch AS item
            MATCH (s:Entity {{resource: $source, id: item.source_id}})
            MATCH (t:Entity {{resource: $target, id: item.target_id}})
            MERGE (s)-[r:{relationship_type(relation.name)}]->(t)
            SET r.relation = $relation
            """

            with self.driver.session(database=self.database) as session:
                session.run(
                    query,
                    batch=batch_data,
                    source=resource,
                    target=relation.target,
                    relation=relation.name,
                )
            count += len(batch_data)

        return count

    def load_rows(self, rows_by_resource: dict[str, list[Row]]) -> dict[str, int]:
        """Write entities first, then relations, so every endpoint exists.

        Returns:
            Stats dict with entity and relationship counts
        """
        self.initialize()
        stats = {"entities_written": 0, "relationships_written": 0}

        for resource in self.registry.resource_names:
            written = self.write_entities_batch(resource, rows_by_resource.get(resource, []))
            logger.debug("Wrote %d %s", written, resource)
            stats["entities_written"] += written

        for resource in self.registry.resource_names:
            stats["relationships_written"] += self.write_relations_batch(
                resource, rows_by_resource.get(resource, [])
            )

        return stats

    def load_seeds(self, seed_dir: Path | None = None, clear: bool = False) -> dict[str, int]:
        """Load seed JSON files into Neo4j.

        Args:
            seed_dir: Directory of <resource>.json files (bundled seeds if not provided)
            clear: Delete existing entities first

        Returns:
            Stats dict with entity and relationship counts
        """
        seed_dir = seed_dir or get_settings().seeds_dir
        source = InMemoryRowStore(self.registry, seed_dir=seed_dir)

        if clear:
            self.clear()

        rows = {name: source.list(name) for name in self.registry.resource_names}
        return self.load_rows(rows)

    def close(self) -> None:
        """Close the driver connection."""
        if self._driver:
            self._driver.close()
            self._driver = None
