"""Relation graph exploration: neighbourhood graphs and shortest paths."""

from .adapter import NeighborGroup, RelationGraphAdapter, node_key
from .builder import GraphBuilder
from .paths import PathFinder

__all__ = ["NeighborGroup", "RelationGraphAdapter", "node_key", "GraphBuilder", "PathFinder"]
