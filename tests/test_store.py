"""Tests for the row store port and the in-memory backend."""

import json
from typing import get_type_hints

import pytest

from lore_graph.store.base import (
    AttributeIn,
    IdentifierIn,
    KeywordsAny,
    Predicate,
    RankedRow,
    ReferencesAny,
    RowStore,
    SortKey,
    sort_rows,
)
from lore_graph.store.memory import InMemoryRowStore
from lore_graph.store.neo4j_store import Neo4jRowStore


class TestClauses:
    """Test predicate clause matching."""

    def test_attribute_in_case_insensitive(self):
        clause = AttributeIn("alignment", ("imperium",))
        assert clause.matches({"alignment": " Imperium "})
        assert not clause.matches({"alignment": "chaos"})
        assert not clause.matches({"alignment": None})

    def test_keywords_any(self):
        clause = KeywordsAny("keywords", ("chaos", "ork"))
        assert clause.matches({"keywords": ["Chaos", "legion"]})
        assert not clause.matches({"keywords": ["imperium"]})
        assert not clause.matches({"keywords": None})

    def test_identifier_in(self):
        row = {"id": 2, "slug": "ultramarines", "name": "Ultramarines"}
        assert IdentifierIn(("2",)).matches(row)
        assert IdentifierIn(("ultramarines",)).matches(row)
        assert not IdentifierIn(("blood-angels",)).matches(row)

    def test_references_any(self):
        assert ReferencesAny("factionIds", (2,), many=True).matches({"factionIds": [1, 2]})
        assert not ReferencesAny("factionIds", (3,), many=True).matches({"factionIds": [1, 2]})
        assert ReferencesAny("factionId", (1,)).matches({"factionId": 1})
        assert not ReferencesAny("factionId", (1,)).matches({"factionId": None})

    def test_empty_references_match_nothing(self):
        assert not ReferencesAny("factionIds", (), many=True).matches({"factionIds": [1]})

    def test_predicate_conjunction(self):
        predicate = Predicate((AttributeIn("status", ("active",)),)).and_(
            KeywordsAny("keywords", ("chaos",))
        )
        assert predicate.matches({"status": "active", "keywords": ["chaos"]})
        assert not predicate.matches({"status": "dead", "keywords": ["chaos"]})
        assert Predicate().matches({})


class TestSortRows:
    """Test the shared ordering helper."""

    rows = [
        {"id": 3, "name": "beta", "powerLevel": 90},
        {"id": 1, "name": "Alpha", "powerLevel": 90},
        {"id": 2, "name": "gamma", "powerLevel": None},
        {"id": 4, "name": "Beta", "powerLevel": 95},
    ]

    def test_name_case_insensitive_then_id(self):
        ordered = sort_rows(self.rows, [SortKey("name")])
        assert [row["id"] for row in ordered] == [1, 3, 4, 2]

    def test_descending_with_nulls_first(self):
        ordered = sort_rows(self.rows, [SortKey.parse("-powerLevel"), SortKey("name")])
        assert [row["id"] for row in ordered] == [2, 4, 1, 3]

    def test_ascending_nulls_last(self):
        ordered = sort_rows(self.rows, [SortKey("powerLevel")])
        assert [row["id"] for row in ordered] == [1, 3, 4, 2]

    def test_no_order_is_id(self):
        assert [row["id"] for row in sort_rows(self.rows, [])] == [1, 2, 3, 4]

    def test_sort_key_str(self):
        assert str(SortKey.parse("-yearOrder")) == "-yearOrder"
        assert str(SortKey.parse("name")) == "name"


class TestInMemoryRowStore:
    """Test the seed-backed store."""

    def test_counts(self, store):
        assert store.count("factions") == 10
        assert store.count("characters") == 15
        assert store.count("factions", Predicate((AttributeIn("alignment", ("imperium",)),))) == 5

    def test_list_paging(self, store):
        rows = store.list("characters", order=[SortKey("name")], limit=3, offset=2)
        assert [row["slug"] for row in rows] == [
            "commander-shadowsun",
            "commissar-yarrick",
            "dante",
        ]

    def test_list_returns_copies(self, store):
        row = store.list("eras", limit=1)[0]
        row["name"] = "changed"
        assert store.get_by_id("eras", row["id"])["name"] == "Great Crusade"

    def test_get_by_ids_keeps_order_and_skips_missing(self, store):
        rows = store.get_by_ids("planets", [4, 99, 1])
        assert [row["slug"] for row in rows] == ["macragge", "terra"]

    def test_get_by_id_missing(self, store):
        assert store.get_by_id("planets", 99) is None

    def test_search_ranked(self, store):
        hits = store.search_ranked("factions", "imperium")
        assert hits[0].row["slug"] == "imperium-of-man"
        assert hits[0].rank == 2
        assert all(a.rank <= b.rank for a, b in zip(hits, hits[1:]))

    def test_search_ranked_limit(self, store):
        assert len(store.search_ranked("factions", "imperium", limit=1)) == 1

    def test_explicit_rows(self, registry):
        memory = InMemoryRowStore(registry, rows={"eras": [{"id": 1, "slug": "m41", "name": "M41"}]})
        assert memory.count("eras") == 1
        assert memory.count("factions") == 0

    def test_duplicate_ids_rejected(self, registry):
        with pytest.raises(ValueError, match="Duplicate id"):
            InMemoryRowStore(registry, rows={"eras": [{"id": 1}, {"id": 1}]})

    def test_seed_dir(self, registry, tmp_path):
        (tmp_path / "weapons.json").write_text(
            json.dumps([{"id": 1, "slug": "boltgun", "name": "Boltgun"}]), encoding="utf-8"
        )
        memory = InMemoryRowStore(registry, seed_dir=tmp_path)
        assert memory.count("weapons") == 1
        assert memory.count("units") == 0

    def test_missing_seed_dir(self, registry, tmp_path):
        memory = InMemoryRowStore(registry, seed_dir=tmp_path / "missing")
        assert memory.count("factions") == 0


class TestStoreAnnotations:
    """Methods declared after ``list`` still resolve the builtin in hints."""

    @pytest.mark.parametrize("store_class", [RowStore, InMemoryRowStore, Neo4jRowStore])
    def test_get_by_ids_hints(self, store_class):
        hints = get_type_hints(store_class.get_by_ids)
        assert hints["ids"] == list[int]
        assert hints["return"].__origin__ is list

    @pytest.mark.parametrize("store_class", [RowStore, InMemoryRowStore, Neo4jRowStore])
    def test_search_ranked_hints(self, store_class):
        hints = get_type_hints(store_class.search_ranked)
        assert hints["return"] == list[RankedRow]
