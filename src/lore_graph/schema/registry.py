"""Schema registry - lookup of resource types, filters and relations.

The registry is built once and never mutated. Besides plain lookups it
holds the reverse relation index used for backlink traversal, so callers
never need to scan every declaration per request.
"""

from dataclasses import dataclass
from functools import lru_cache

from rapidfuzz import fuzz, process

from ..errors import UnknownResource
from ..models.schema import FilterSpec, RelationFilter, RelationSpec, TypeDescriptor
from .definitions import RESOURCE_DEFINITIONS


@dataclass(frozen=True)
class Backlink:
    """A relation declared on ``source`` that points at some other type."""

    source: str
    relation: RelationSpec


class SchemaRegistry:
    """Immutable registry of resource type descriptors."""

    def __init__(self, descriptors: list[TypeDescriptor]):
        self._types: dict[str, TypeDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.name in self._types:
                raise ValueError(f"Duplicate resource type: {descriptor.name}")
            self._types[descriptor.name] = descriptor

        self._backlinks: dict[str, list[Backlink]] = {name: [] for name in self._types}
        for descriptor in descriptors:
            for relation in descriptor.relations:
                if relation.target not in self._types:
                    raise ValueError(
                        f"Relation {descriptor.name}.{relation.name} targets unknown type {relation.target}"
                    )
                self._backlinks[relation.target].append(Backlink(descriptor.name, relation))

            for key, spec in descriptor.filters.items():
                if isinstance(spec, RelationFilter) and descriptor.relation(spec.relation) is None:
                    raise ValueError(
                        f"Filter {descriptor.name}[{key}] uses undeclared relation {spec.relation}"
                    )

    @property
    def resource_names(self) -> list[str]:
        """Registered type names in declaration order."""
        return list(self._types)

    def has_type(self, name: str) -> bool:
        return name in self._types

    def get_type(self, name: str) -> TypeDescriptor:
        """Get a type descriptor, raising UnknownResource with close matches."""
        descriptor = self._types.get(name)
        if descriptor is None:
            raise UnknownResource(name, self.suggest(name))
        return descriptor

    def relations_of(self, name: str) -> list[RelationSpec]:
        return list(self.get_type(name).relations)

    def get_relation(self, name: str, relation: str) -> RelationSpec | None:
        return self.get_type(name).relation(relation)

    def get_filter(self, name: str, key: str) -> FilterSpec | None:
        return self.get_type(name).filters.get(key)

    def backlinks_to(self, name: str) -> list[Backlink]:
        """Relations on other types (or this one) whose target is ``name``."""
        self.get_type(name)
        return list(self._backlinks[name])

    def suggest(self, name: str, limit: int = 3) -> list[str]:
        """Suggest registered type names close to ``name``."""
        if not name:
            return []
        matches = process.extract(
            name.lower(),
            list(self._types),
            scorer=fuzz.ratio,
            limit=limit,
        )
        return [match[0] for match in matches if match[1] >= 60]


@lru_cache
def get_registry() -> SchemaRegistry:
    """Get the registry for the bundled resource definitions."""
    return SchemaRegistry(RESOURCE_DEFINITIONS)
