"""Parsing of raw request parameters into validated query plans.

Raw parameters are a flat mapping as any transport produces it, for example
``{"filter[era]": "indomitus-era", "sort": "-powerLevel,name"}``. Values may
be strings or lists of strings (repeated query keys).
"""

import re
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..config import Settings
from ..errors import InvalidFilter, InvalidInclude, InvalidSort, ValidationError
from ..models.schema import TypeDescriptor
from ..schema.registry import SchemaRegistry
from ..store.base import SortKey, normalize

RawParams = Mapping[str, Any]

_BRACKET = re.compile(r"^(?P<prefix>\w+)\[(?P<key>.+)\]$")
_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


def get_param(params: RawParams, *names: str) -> str:
    """First non-empty value among ``names`` (later aliases are fallbacks), trimmed."""
    for name in names:
        value = params.get(name)
        if isinstance(value, (list, tuple)):
            value = next((v for v in value if v not in (None, "")), None)
        if value is not None and str(value).strip():
            return str(value).strip()
    return ""


def split_csv(value: Any) -> list[str]:
    """Split a CSV value (or list of CSV values) into trimmed, de-duplicated items."""
    if value is None:
        return []
    parts = value if isinstance(value, (list, tuple)) else [value]
    items = []
    for part in parts:
        items.extend(item.strip() for item in str(part).split(","))
    return list(dict.fromkeys(item for item in items if item))


def bracket_params(params: RawParams, prefix: str) -> dict[str, Any]:
    """Collect ``prefix[key]`` parameters as ``{key: value}``."""
    result = {}
    for name, value in params.items():
        match = _BRACKET.match(name)
        if match and match.group("prefix") == prefix:
            result[match.group("key")] = value
    return result


def parse_positive_int(value: Any, default: int) -> int:
    """Parse a positive integer, falling back to ``default`` on anything else."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def parse_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    text = normalize(value[0] if isinstance(value, (list, tuple)) and value else value)
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    return default


@dataclass
class Projection:
    """Requested ``fields[type]`` projections."""

    fields: dict[str, list[str]] = field(default_factory=dict)

    def apply(self, resource: str, row: dict[str, Any]) -> dict[str, Any]:
        """Project a row, keeping only requested fields that exist on it."""
        requested = self.fields.get(resource)
        if not requested:
            return dict(row)
        return {name: row[name] for name in requested if name in row}


@dataclass
class QueryPlan:
    """A validated list or detail request, ready for execution."""

    resource: str
    page: int = 1
    limit: int = 12
    search: str = ""
    sort: list[SortKey] = field(default_factory=list)
    filters: dict[str, list[str]] = field(default_factory=dict)
    include: list[str] = field(default_factory=list)
    projection: Projection = field(default_factory=Projection)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def sort_tokens(self) -> list[str]:
        return [str(key) for key in self.sort]


def parse_sort(descriptor: TypeDescriptor, value: Any) -> list[SortKey]:
    """Parse a sort CSV, defaulting to the type's declared default sort."""
    tokens = split_csv(value) or list(descriptor.default_sort)
    keys = []
    for token in tokens:
        key = SortKey.parse(token)
        if key.field not in descriptor.sort_fields:
            raise InvalidSort(descriptor.name, key.field)
        keys.append(key)
    return keys


def parse_filters(descriptor: TypeDescriptor, params: RawParams) -> dict[str, list[str]]:
    """Validate ``filter[key]`` parameters. Keys with no values are dropped."""
    filters = {}
    for key, value in bracket_params(params, "filter").items():
        if key not in descriptor.filters:
            raise InvalidFilter(descriptor.name, key)
        values = split_csv(value)
        if values:
            filters[key] = values
    return filters


def parse_include(descriptor: TypeDescriptor, value: Any) -> list[str]:
    include = split_csv(value)
    for name in include:
        if descriptor.relation(name) is None:
            raise InvalidInclude(descriptor.name, name)
    return include


def parse_projection(registry: SchemaRegistry, params: RawParams) -> Projection:
    """Validate ``fields[type]`` parameters. Unknown field names are ignored."""
    projection = Projection()
    for resource, value in bracket_params(params, "fields").items():
        if not registry.has_type(resource):
            raise ValidationError(
                f'Unknown resource "{resource}" in fields[{resource}]',
                [{"fields": resource}],
            )
        projection.fields[resource] = split_csv(value)
    return projection


def build_plan(
    registry: SchemaRegistry,
    resource: str,
    params: RawParams,
    settings: Settings,
) -> QueryPlan:
    """Validate raw list parameters into a QueryPlan.

    Raises:
        UnknownResource: resource is not registered
        InvalidSort, InvalidFilter, InvalidInclude, ValidationError: bad input
    """
    descriptor = registry.get_type(resource)
    limit = min(parse_positive_int(params.get("limit"), settings.default_page_size), settings.max_page_size)

    return QueryPlan(
        resource=resource,
        page=parse_positive_int(params.get("page"), 1),
        limit=limit,
        search=get_param(params, "search", "q"),
        sort=parse_sort(descriptor, params.get("sort")),
        filters=parse_filters(descriptor, params),
        include=parse_include(descriptor, params.get("include")),
        projection=parse_projection(registry, params),
    )
