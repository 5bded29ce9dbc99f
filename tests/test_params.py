"""Tests for request parameter parsing."""

import pytest

from lore_graph.errors import InvalidFilter, InvalidInclude, InvalidSort, UnknownResource, ValidationError
from lore_graph.query.params import (
    Projection,
    bracket_params,
    build_plan,
    get_param,
    parse_bool,
    parse_positive_int,
    split_csv,
)


class TestHelpers:
    """Test low-level parameter helpers."""

    def test_split_csv(self):
        assert split_csv(" a, b ,,a ") == ["a", "b"]
        assert split_csv(["a,b", "c"]) == ["a", "b", "c"]
        assert split_csv(None) == []

    def test_get_param_aliases(self):
        assert get_param({"q": " bolt "}, "search", "q") == "bolt"
        assert get_param({"search": "", "q": "x"}, "search", "q") == "x"
        assert get_param({"search": ["", "y"]}, "search") == "y"
        assert get_param({}, "search") == ""

    def test_bracket_params(self):
        params = {"filter[era]": "m41", "filter[status]": "active", "fields[units]": "name", "page": "2"}
        assert bracket_params(params, "filter") == {"era": "m41", "status": "active"}
        assert bracket_params(params, "fields") == {"units": "name"}

    def test_parse_positive_int(self):
        assert parse_positive_int("3", 1) == 3
        assert parse_positive_int("0", 1) == 1
        assert parse_positive_int("-2", 1) == 1
        assert parse_positive_int("abc", 7) == 7
        assert parse_positive_int(None, 7) == 7
        assert parse_positive_int(["4"], 1) == 4

    def test_parse_bool(self):
        assert parse_bool("false", True) is False
        assert parse_bool("YES", False) is True
        assert parse_bool("maybe", True) is True
        assert parse_bool(None, False) is False
        assert parse_bool(False, True) is False

    def test_projection(self):
        projection = Projection({"factions": ["name", "missing"]})
        assert projection.apply("factions", {"id": 1, "name": "Orks"}) == {"name": "Orks"}
        assert projection.apply("units", {"id": 1}) == {"id": 1}


class TestBuildPlan:
    """Test validation of list requests."""

    def test_defaults(self, registry, settings):
        plan = build_plan(registry, "characters", {}, settings)
        assert plan.page == 1
        assert plan.limit == 12
        assert plan.sort_tokens == ["-powerLevel", "name"]
        assert plan.offset == 0

    def test_paging(self, registry, settings):
        plan = build_plan(registry, "characters", {"page": "3", "limit": "5"}, settings)
        assert plan.offset == 10

    def test_limit_capped(self, registry, settings):
        plan = build_plan(registry, "characters", {"limit": "500"}, settings)
        assert plan.limit == 50

    def test_invalid_page_falls_back(self, registry, settings):
        plan = build_plan(registry, "characters", {"page": "-1", "limit": "x"}, settings)
        assert plan.page == 1
        assert plan.limit == 12

    def test_search_alias(self, registry, settings):
        assert build_plan(registry, "characters", {"q": "dante"}, settings).search == "dante"

    def test_unknown_resource(self, registry, settings):
        with pytest.raises(UnknownResource):
            build_plan(registry, "moons", {}, settings)

    def test_invalid_sort(self, registry, settings):
        with pytest.raises(InvalidSort) as exc_info:
            build_plan(registry, "weapons", {"sort": "-powerLevel"}, settings)
        assert exc_info.value.code == "INVALID_SORT"
        assert exc_info.value.status == 400

    def test_filters(self, registry, settings):
        plan = build_plan(
            registry, "factions", {"filter[alignment]": "imperium,chaos", "filter[status]": ""}, settings
        )
        assert plan.filters == {"alignment": ["imperium", "chaos"]}

    def test_invalid_filter(self, registry, settings):
        with pytest.raises(InvalidFilter):
            build_plan(registry, "factions", {"filter[colour]": "red"}, settings)

    def test_invalid_include(self, registry, settings):
        with pytest.raises(InvalidInclude):
            build_plan(registry, "factions", {"include": "leaders,moons"}, settings)

    def test_fields_unknown_type(self, registry, settings):
        with pytest.raises(ValidationError) as exc_info:
            build_plan(registry, "factions", {"fields[moons]": "name"}, settings)
        assert exc_info.value.code == "VALIDATION_ERROR"
