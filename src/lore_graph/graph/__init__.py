"""Graph database interface."""

from lore_graph.graph.connection import check_neo4j_connection, get_driver, init_schema
from lore_graph.graph.writer import GraphWriter

__all__ = ["get_driver", "check_neo4j_connection", "init_schema", "GraphWriter"]
