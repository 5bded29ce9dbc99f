"""Tests for the schema registry."""

import pytest

from lore_graph.errors import UnknownResource
from lore_graph.models.schema import RelationFilter, RelationSpec, TypeDescriptor
from lore_graph.schema.registry import SchemaRegistry


class TestLookups:
    """Test type, relation and filter lookups."""

    def test_declaration_order(self, registry):
        names = registry.resource_names
        assert len(names) == 14
        assert names[0] == "eras"
        assert names[-1] == "weapons"

    def test_get_type(self, registry):
        descriptor = registry.get_type("factions")
        assert descriptor.label == "Factions"
        assert "powerLevel" in descriptor.sort_fields

    def test_unknown_type_suggests(self, registry):
        with pytest.raises(UnknownResource) as exc_info:
            registry.get_type("factoins")
        error = exc_info.value
        assert error.status == 404
        assert error.code == "RESOURCE_NOT_FOUND"
        assert "factions" in error.details[0]["suggestions"]

    def test_suggest_nothing_close(self, registry):
        assert registry.suggest("zzzzzzzz") == []
        assert registry.suggest("") == []

    def test_get_relation(self, registry):
        relation = registry.get_relation("battlefields", "starSystem")
        assert relation.target == "star-systems"
        assert relation.local_field == "starSystemId"
        assert not relation.many
        assert registry.get_relation("battlefields", "moons") is None

    def test_get_filter(self, registry):
        spec = registry.get_filter("characters", "faction")
        assert isinstance(spec, RelationFilter)
        assert spec.relation == "faction"
        assert registry.get_filter("characters", "colour") is None


class TestBacklinks:
    """Test the reverse relation index."""

    def test_backlinks_to_factions(self, registry):
        pairs = [(b.source, b.relation.name) for b in registry.backlinks_to("factions")]
        assert ("factions", "parentFaction") in pairs
        assert ("characters", "faction") in pairs
        assert ("units", "factions") in pairs
        # declaration order of the owning types
        assert pairs[0] == ("factions", "parentFaction")

    def test_no_backlinks(self, registry):
        assert registry.backlinks_to("segmentums")[0].source == "star-systems"
        assert registry.backlinks_to("relics") == []

    def test_backlinks_unknown_type(self, registry):
        with pytest.raises(UnknownResource):
            registry.backlinks_to("moons")


class TestValidation:
    """Test registry construction checks."""

    def test_duplicate_type(self):
        descriptor = TypeDescriptor(name="eras", label="Eras")
        with pytest.raises(ValueError, match="Duplicate"):
            SchemaRegistry([descriptor, descriptor])

    def test_relation_to_unknown_type(self):
        descriptor = TypeDescriptor(
            name="eras",
            label="Eras",
            relations=[RelationSpec(name="moon", target="moons", local_field="moonId")],
        )
        with pytest.raises(ValueError, match="unknown type"):
            SchemaRegistry([descriptor])

    def test_filter_on_undeclared_relation(self):
        descriptor = TypeDescriptor(
            name="eras",
            label="Eras",
            filters={"moon": RelationFilter(relation="moon")},
        )
        with pytest.raises(ValueError, match="undeclared relation"):
            SchemaRegistry([descriptor])


class TestRelationIds:
    """Test reading referenced ids off a row."""

    def test_many_sorted_by_id(self):
        relation = RelationSpec(name="planets", target="planets", local_field="planetIds", many=True)
        assert relation.ids_of({"planetIds": [4, 1, 3, 1]}) == [1, 3, 4]

    def test_stored_order(self):
        relation = RelationSpec(
            name="races", target="races", local_field="raceIds", many=True, order="stored"
        )
        assert relation.ids_of({"raceIds": [3, 1, 3]}) == [3, 1]

    def test_single_and_null(self):
        relation = RelationSpec(name="era", target="eras", local_field="eraId")
        assert relation.ids_of({"eraId": 4}) == [4]
        assert relation.ids_of({"eraId": None}) == []
        assert relation.ids_of({}) == []
