"""Tests for neighbourhood graph construction."""

import threading

import pytest

from lore_graph.errors import EntityNotFound, TraversalCancelled, ValidationError
from lore_graph.explore.adapter import RelationGraphAdapter
from lore_graph.explore.builder import GraphBuilder


@pytest.fixture
def builder(registry, store, settings):
    return GraphBuilder(registry, store, settings)


class TestAdapter:
    """Test neighbour discovery for a single entity."""

    def test_forward_then_backlinks(self, registry, store):
        adapter = RelationGraphAdapter(registry, store)
        row = store.get_by_id("factions", 2)
        groups = adapter.neighbors_of("factions", row)
        forward = [(g.relation.name, g.direction) for g in groups if g.direction == "forward"]
        assert forward == [
            ("races", "forward"),
            ("leaders", "forward"),
            ("homeworld", "forward"),
            ("era", "forward"),
            ("parentFaction", "forward"),
        ]
        assert groups[-1].neighbor_type == "units"
        assert groups[-1].direction == "reverse"
        assert groups[-1].total == 3

    def test_limit_and_hidden(self, registry, store):
        adapter = RelationGraphAdapter(registry, store)
        row = store.get_by_id("factions", 2)
        groups = adapter.neighbors_of("factions", row, limit=2)
        units = next(g for g in groups if g.neighbor_type == "units")
        assert [r["id"] for r in units.rows] == [1, 2]
        assert units.hidden == 1

    def test_allowed_types(self, registry, store):
        adapter = RelationGraphAdapter(registry, store)
        row = store.get_by_id("factions", 2)
        groups = adapter.neighbors_of("factions", row, allowed_types={"units"})
        assert [g.neighbor_type for g in groups] == ["units"]

    def test_make_node(self, registry, store):
        adapter = RelationGraphAdapter(registry, store)
        node = adapter.make_node("factions", store.get_by_id("factions", 2), 1)
        dumped = node.dump()
        assert dumped["key"] == "factions:2"
        assert dumped["identifier"] == "ultramarines"
        assert dumped["powerLevel"] == 93
        assert dumped["alignment"] == "imperium"


class TestBuildGraph:
    """Test breadth-first expansion."""

    def test_depth_one(self, builder):
        result = builder.build_graph("factions", "ultramarines", depth=1)
        assert result.root.key == "factions:2"
        assert result.root.distance == 0
        assert len(result.nodes) == 17
        assert len(result.edges) == 17
        assert all(node.distance == 1 for node in result.nodes[1:])
        assert result.truncated_relations == []

    def test_node_keeps_first_distance(self, builder):
        result = builder.build_graph("factions", "ultramarines", depth=2)
        by_key = {node.key: node for node in result.nodes}
        assert by_key["characters:2"].distance == 1
        assert len(by_key) == len(result.nodes)

    def test_edges_deduplicated_in_declared_orientation(self, builder):
        result = builder.build_graph("factions", "imperium-of-man", depth=2)
        keys = [(edge.from_, edge.to, edge.relation_name) for edge in result.edges]
        assert len(keys) == len(set(keys))
        leaders = [edge for edge in result.edges if edge.relation_name == "leaders" and edge.to == "characters:1"]
        assert len(leaders) == 1
        assert leaders[0].from_ == "factions:1"
        assert leaders[0].direction == "forward"

    def test_backlink_edge_orientation(self, builder):
        result = builder.build_graph("factions", "ultramarines", depth=1)
        unit_edges = [edge for edge in result.edges if edge.to == "factions:2" and edge.from_.startswith("units:")]
        assert len(unit_edges) == 3
        assert all(edge.direction == "reverse" for edge in unit_edges)
        assert all(edge.relation_name == "factions" for edge in unit_edges)

    def test_truncation(self, builder):
        result = builder.build_graph("factions", "ultramarines", depth=1, limit_per_relation=2)
        records = {(r.relation_name, r.neighbor_type): r for r in result.truncated_relations}
        assert records[("factions", "units")].total_count == 3
        assert records[("factions", "units")].hidden_count == 1
        assert records[("factions", "units")].direction == "reverse"
        assert records[("factions", "events")].hidden_count == 1

    def test_whitelist_keeps_root_type(self, builder):
        result = builder.build_graph("factions", "ultramarines", depth=1, resources="units")
        assert result.resource_types == ["factions", "units"]
        assert result.requested_resource_types == ["units"]
        assert len(result.nodes) == 5

    def test_without_backlinks(self, builder):
        result = builder.build_graph("factions", "ultramarines", depth=1, include_backlinks=False)
        assert len(result.nodes) == 6
        assert all(edge.direction == "forward" for edge in result.edges)

    def test_clamping(self, builder):
        result = builder.build_graph("eras", "great-crusade", depth="10", limit_per_relation="50")
        assert result.depth == 3
        assert result.limit_per_relation == 12
        fallback = builder.build_graph("eras", "great-crusade", depth="abc", limit_per_relation="-1")
        assert fallback.depth == 2
        assert fallback.limit_per_relation == 4

    def test_envelope(self, builder):
        envelope = builder.build_graph("relics", "emperors-sword", depth=1).to_envelope()
        assert envelope["data"]["root"]["identifier"] == "emperors-sword"
        meta = envelope["meta"]
        assert meta["nodeCount"] == 5
        assert meta["edgeCount"] == 4
        assert meta["resourceTypes"] == ["characters", "eras", "factions", "planets", "relics"]
        assert meta["backlinks"] is True
        edge = envelope["data"]["edges"][0]
        assert set(edge) == {"id", "from", "to", "relationName", "label", "direction"}

    def test_unknown_type(self, builder):
        with pytest.raises(ValidationError) as exc_info:
            builder.build_graph("factoins", "ultramarines")
        assert "factions" in exc_info.value.details[0]["suggestions"]

    def test_unknown_whitelist_type(self, builder):
        with pytest.raises(ValidationError):
            builder.build_graph("factions", "ultramarines", resources="units,moons")

    def test_missing_identifier(self, builder):
        with pytest.raises(ValidationError):
            builder.build_graph("factions", " ")

    def test_root_not_found(self, builder):
        with pytest.raises(EntityNotFound):
            builder.build_graph("factions", "squats")

    def test_cancelled(self, builder):
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(TraversalCancelled):
            builder.build_graph("factions", "ultramarines", cancel=cancel)

    def test_imperium_neighbourhood(self, builder):
        result = builder.build_graph("factions", "imperium-of-man", depth=2, limit_per_relation=4)
        assert result.root.name == "Imperium of Man"
        assert len(result.nodes) >= 10
        assert len(result.edges) >= 10
        assert {"characters", "campaigns"} <= set(result.resource_types)

        keys = [node.key for node in result.nodes]
        assert len(keys) == len(set(keys))
        assert all(edge.from_ in keys and edge.to in keys for edge in result.edges)
        assert all(node.distance <= 2 for node in result.nodes)

    def test_whitelist_never_leaks(self, builder):
        result = builder.build_graph("factions", "imperium-of-man", depth=3, resources="characters,campaigns")
        assert {node.resource for node in result.nodes} <= {"factions", "characters", "campaigns"}
