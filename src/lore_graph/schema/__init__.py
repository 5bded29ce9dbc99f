"""Resource schema: declarations and the registry built from them."""

from .definitions import RESOURCE_DEFINITIONS
from .registry import Backlink, SchemaRegistry, get_registry

__all__ = ["RESOURCE_DEFINITIONS", "Backlink", "SchemaRegistry", "get_registry"]
