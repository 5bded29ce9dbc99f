"""Tests for the transport-facing facade."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from lore_graph.api import LoreApi


@pytest.fixture
def api(registry, store, settings):
    with LoreApi(settings=settings, registry=registry, store=store) as lore_api:
        yield lore_api


class TestOperations:
    """Test status codes and envelopes."""

    def test_list(self, api):
        status, envelope = api.list("star-systems", {"sort": "name"})
        assert status == 200
        assert envelope["data"][0]["name"] == "Armageddon System"

    def test_detail_not_found(self, api):
        status, envelope = api.detail("factions", "squats")
        assert status == 404
        assert envelope["error"]["code"] == "ENTITY_NOT_FOUND"
        assert envelope["error"]["details"] == [{"resource": "factions", "identifier": "squats"}]

    def test_unknown_resource(self, api):
        status, envelope = api.list("factoins")
        assert status == 404
        assert envelope["error"]["code"] == "RESOURCE_NOT_FOUND"

    def test_invalid_sort(self, api):
        status, envelope = api.list("factions", {"sort": "colour"})
        assert status == 400
        assert envelope["error"]["code"] == "INVALID_SORT"

    def test_graph(self, api):
        status, envelope = api.graph(
            {"resource": "factions", "identifier": "ultramarines", "depth": "1", "backlinks": "false"}
        )
        assert status == 200
        assert envelope["meta"]["nodeCount"] == 6
        assert envelope["meta"]["backlinks"] is False

    def test_graph_missing_identifier(self, api):
        status, envelope = api.graph({"resource": "factions"})
        assert status == 400
        assert envelope["error"]["code"] == "VALIDATION_ERROR"

    def test_graph_cancelled(self, api):
        cancel = threading.Event()
        cancel.set()
        status, envelope = api.graph({"resource": "factions", "identifier": "orks"}, cancel)
        assert status == 499
        assert envelope["error"]["code"] == "REQUEST_CANCELLED"

    def test_path(self, api):
        status, envelope = api.path(
            {
                "fromResource": "relics",
                "fromIdentifier": "emperors-sword",
                "toResource": "campaigns",
                "toIdentifier": "plague-wars",
                "resources": "factions",
            }
        )
        assert status == 200
        assert envelope["data"]["path"]["length"] == 2

    def test_compare_not_supported(self, api):
        status, envelope = api.compare("weapons", {"ids": "boltgun,lasgun"})
        assert status == 400
        assert envelope["error"]["code"] == "COMPARE_NOT_SUPPORTED"

    def test_stats_not_found(self, api):
        status, envelope = api.stats("units", "by-weapon")
        assert status == 404
        assert envelope["error"]["code"] == "STATS_NOT_FOUND"

    def test_internal_error_hides_details(self, registry, settings):
        class BrokenStore:
            def count(self, *args, **kwargs):
                raise RuntimeError("disk on fire")

            def list(self, *args, **kwargs):
                raise RuntimeError("disk on fire")

        with LoreApi(settings=settings, registry=registry, store=BrokenStore()) as broken:
            status, envelope = broken.list("factions")
        assert status == 500
        assert envelope["error"]["code"] == "INTERNAL_SERVER_ERROR"
        assert "disk" not in envelope["error"]["message"]


class TestRouting:
    """Test path dispatch."""

    def test_list_route(self, api):
        status, envelope = api.get("/api/v1/factions", {"limit": "2"})
        assert status == 200
        assert len(envelope["data"]) == 2

    def test_detail_route(self, api):
        status, envelope = api.get("/api/v1/factions/ultramarines")
        assert status == 200
        assert envelope["data"]["id"] == 2

    def test_relative_paths(self, api):
        assert api.get("overview")[0] == 200
        assert api.get("resources")[1]["meta"]["total"] == 14
        assert api.get("resources/units")[1]["data"]["id"] == "units"

    def test_search_route(self, api):
        status, envelope = api.get("/api/v1/search", {"q": "cadia"})
        assert status == 200
        assert envelope["data"][0]["slug"] == "cadia"

    def test_explore_routes(self, api):
        graph_status, _ = api.get("/api/v1/explore/graph", {"resource": "eras", "identifier": "m30"})
        assert graph_status == 404
        path_status, envelope = api.get(
            "/api/v1/explore/path",
            {"fromResource": "campaigns", "fromIdentifier": "1", "toResource": "battlefields", "toIdentifier": "1"},
        )
        assert path_status == 200
        assert envelope["data"]["found"] is True

    def test_compare_and_stats_routes(self, api):
        assert api.get("/api/v1/compare/factions", {"ids": "orks,necrons"})[0] == 200
        status, envelope = api.get("/api/v1/stats/units/by-faction")
        assert status == 200
        assert envelope["data"][0]["slug"] == "ultramarines"

    def test_unknown_route(self, api):
        status, envelope = api.get("/api/v1/a/b/c/d")
        assert status == 404
        assert envelope["error"]["code"] == "ROUTE_NOT_FOUND"


class TestConcurrentExecution:
    def test_results_match_sequential(self, registry, store, settings):
        with ThreadPoolExecutor(max_workers=4) as executor:
            threaded = LoreApi(settings=settings, registry=registry, store=store, executor=executor)
            sequential = LoreApi(settings=settings, registry=registry, store=store)
            params = {"resource": "factions", "identifier": "imperium-of-man", "depth": "2"}
            assert threaded.graph(params) == sequential.graph(params)
            assert threaded.list("characters", {"include": "faction,events"}) == sequential.list(
                "characters", {"include": "faction,events"}
            )

    def test_owned_executor(self, registry, store):
        from lore_graph.config import Settings

        settings = Settings(_env_file=None, max_workers=2)
        with LoreApi(settings=settings, registry=registry, store=store) as api:
            assert api.executor is not None
            assert api.stats("units", "by-faction")[0] == 200
        assert api._owned_executor is None
