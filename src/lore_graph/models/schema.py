"""Schema models describing resource types, their filters and relations."""

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class FieldSpec(BaseModel):
    """A documented attribute of a resource."""

    model_config = ConfigDict(frozen=True)

    name: str
    type: Literal["number", "string", "string[]", "number[]", "number|null"] = "string"
    description: str = ""


class RelationSpec(BaseModel):
    """A declared reference from one resource type to another.

    Relations live only on the owning side. The inverse direction is
    computed on demand from the registry's backlink index.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    target: str
    local_field: str
    many: bool = False
    label: str = ""
    # "id": neighbours ordered by id ascending, "stored": the order held in the row
    order: Literal["id", "stored"] = "id"

    def ids_of(self, row: dict) -> list[int]:
        """Return the ids this relation references on a row, in declared order."""
        value = row.get(self.local_field)
        if self.many:
            ids = [v for v in (value or []) if v is not None]
        else:
            ids = [value] if value is not None else []
        if self.order == "id":
            return sorted(dict.fromkeys(ids))
        return list(dict.fromkeys(ids))


class AttributeFilter(BaseModel):
    """Matches when a scalar field equals one of the given values (case-insensitive)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["attribute"] = "attribute"
    field: str
    label: str = ""


class KeywordsFilter(BaseModel):
    """Matches when a list field intersects the given values."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["keywords"] = "keywords"
    field: str = "keywords"
    label: str = "Keywords"


class RelationFilter(BaseModel):
    """Matches when a related entity resolves to one of the given identifiers."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["relation"] = "relation"
    relation: str
    label: str = ""


FilterSpec = Annotated[
    Union[AttributeFilter, KeywordsFilter, RelationFilter],
    Field(discriminator="kind"),
]


class TypeDescriptor(BaseModel):
    """Static declaration of one resource type."""

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    description: str = ""
    default_sort: list[str] = Field(default_factory=lambda: ["name"])
    sort_fields: list[str] = Field(default_factory=lambda: ["name"])
    search_fields: list[str] = Field(default_factory=lambda: ["name", "summary", "description", "keywords"])
    fields: list[FieldSpec] = Field(default_factory=list)
    filters: dict[str, FilterSpec] = Field(default_factory=dict)
    relations: list[RelationSpec] = Field(default_factory=list)
    display_fields: list[str] = Field(default_factory=list)
    sample_queries: list[str] = Field(default_factory=list)

    def relation(self, name: str) -> RelationSpec | None:
        """Get a relation by name."""
        for relation in self.relations:
            if relation.name == name:
                return relation
        return None

    @property
    def relation_names(self) -> list[str]:
        return [r.name for r in self.relations]
