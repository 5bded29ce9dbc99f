"""Neo4j connection management."""

import logging

from neo4j import Driver, GraphDatabase
from neo4j.exceptions import AuthError, ServiceUnavailable

from lore_graph.config import Settings, get_settings

logger = logging.getLogger(__name__)


def get_driver(settings: Settings | None = None) -> Driver:
    """Get a Neo4j driver instance."""
    settings = settings or get_settings()
    return GraphDatabase.driver(
        settings.neo4j_uri,
        auth=(settings.neo4j_user, settings.neo4j_password),
    )


def check_neo4j_connection(settings: Settings | None = None) -> bool:
    """Check if Neo4j is reachable and credentials are valid."""
    driver = get_driver(settings)
    try:
        with driver.session() as session:
            session.run("RETURN 1")
        return True
    except (ServiceUnavailable, AuthError) as e:
        logger.warning("Neo4j not reachable: %s", e)
        return False
    finally:
        driver.close()


def init_schema(driver: Driver, database: str | None = None) -> None:
    """Initialize graph schema (indexes used by entity lookups)."""
    indexes = [
        "CREATE INDEX entity_resource_id IF NOT EXISTS FOR (e:Entity) ON (e.resource, e.id)",
        "CREATE INDEX entity_resource_slug IF NOT EXISTS FOR (e:Entity) ON (e.resource, e.slug)",
    ]

    with driver.session(database=database) as session:
        for index in indexes:
            session.run(index)
