from __future__ import annotations

import asyncio

import pytest

from plugkit.autocomplete import find_matching_method, map_autocomplete_params, read_autocomplete_arguments
from plugkit.config.load import parse_plugin_config
from plugkit.config.schema import PluginConfig
from plugkit.errors import AutocompleteParamsError, MissingParameterError


@pytest.fixture
def xyz_config() -> PluginConfig:
    """A(x, y) and B(x, y, z) with auth param x."""
    return parse_plugin_config(
        {
            "auth": {"params": [{"name": "x", "type": "string"}]},
            "methods": [
                {"name": "A", "params": [{"name": "x", "type": "string"}, {"name": "y", "type": "string"}]},
                {
                    "name": "B",
                    "params": [
                        {"name": "x", "type": "string"},
                        {"name": "y", "type": "string"},
                        {"name": "z", "type": "string"},
                    ],
                },
            ],
        }
    )


class TestFindMatchingMethod:
    def test_auth_names_are_subtracted(self, xyz_config: PluginConfig):
        assert find_matching_method(["x", "y"], xyz_config).name == "A"
        assert find_matching_method(["x", "y", "z"], xyz_config).name == "B"

    def test_auth_name_need_not_be_present(self, xyz_config: PluginConfig):
        assert find_matching_method(["z", "y"], xyz_config).name == "B"
        assert find_matching_method({"y"}, xyz_config).name == "A"

    def test_no_match_returns_none(self, xyz_config: PluginConfig):
        assert find_matching_method(["y", "q"], xyz_config) is None
        assert find_matching_method([], xyz_config) is None

    def test_shared_name_consumed_once(self):
        config = parse_plugin_config(
            {
                "auth": {"params": [{"name": "region", "type": "string"}, {"name": "key", "type": "vault"}]},
                "methods": [
                    {"name": "list", "params": [{"name": "region", "type": "string"}]},
                    {"name": "get", "params": [{"name": "region", "type": "string"}, {"name": "id", "type": "string"}]},
                ],
            }
        )
        # One "region" belongs to auth, the other to the method.
        assert find_matching_method(["region", "key", "region"], config).name == "list"
        assert find_matching_method(["region", "region", "id"], config).name == "get"

    def test_order_does_not_matter(self, fixture_config: PluginConfig):
        names = ["dryRun", "accessKey", "retries", "token", "host", "account"]
        assert find_matching_method(names, fixture_config).name == "deploy"


class TestMapAutocompleteParams:
    def test_maps_and_skips_none(self):
        params = [
            {"name": "a", "value": "1", "type": "string"},
            {"name": "b", "value": None, "valueType": "string"},
            {"name": "c", "value": False, "type": "boolean"},
        ]
        assert map_autocomplete_params(params) == {"a": "1", "c": False}

    @pytest.mark.parametrize(
        "params, message",
        [
            ({"name": "a"}, "not an array"),
            (["a"], "need to be an object"),
            ([{"value": 1, "type": "string"}], "`name` field is required"),
            ([{"name": "a", "value": 1}], "either `type` or `valueType`"),
        ],
    )
    def test_rejects_malformed_lists(self, params, message):
        with pytest.raises(AutocompleteParamsError, match=message):
            map_autocomplete_params(params)


class TestReadAutocompleteArguments:
    def test_match_relaxes_required(self, fixture_config: PluginConfig):
        params = [
            {"name": "project", "value": {"id": "p-1", "value": "Project 1"}, "type": "autocomplete"},
            {"name": "labels", "value": None, "type": "tags"},
            {"name": "accessKey", "value": None, "type": "vault"},
        ]
        settings = [{"name": "region", "value": "eu-west-1", "type": "string"}]

        resolved = asyncio.run(read_autocomplete_arguments(params, settings, fixture_config))

        assert resolved.params == {"project": "p-1"}
        assert resolved.settings["region"] == "eu-west-1"

    def test_required_params_may_be_missing(self, fixture_config: PluginConfig):
        params = [
            {"name": "host", "value": None, "type": "string"},
            {"name": "token", "value": None, "type": "vault"},
            {"name": "retries", "value": "5", "type": "number"},
            {"name": "dryRun", "value": None, "type": "boolean"},
        ]
        resolved = asyncio.run(read_autocomplete_arguments(params, [], fixture_config))

        assert resolved.params == {"retries": 5}
        deploy = fixture_config.get_method("deploy")
        assert [p.name for p in deploy.params if p.required] == ["host", "token"]

    def test_miss_merges_raw_values(self, fixture_config: PluginConfig):
        params = [
            {"name": "unknown", "value": " raw ", "type": "string"},
            {"name": "region", "value": "override", "type": "string"},
        ]
        settings = [{"name": "region", "value": "eu-west-1", "type": "string"}]

        resolved = asyncio.run(read_autocomplete_arguments(params, settings, fixture_config))

        assert resolved.params == {"unknown": " raw ", "region": "override"}
        assert resolved.settings == {"region": "eu-west-1"}


class TestRelaxFromAutocompleteParam:
    @pytest.fixture
    def pick_config(self) -> PluginConfig:
        return parse_plugin_config(
            {
                "methods": [
                    {
                        "name": "pick",
                        "params": [
                            {"name": "region", "type": "string", "required": True},
                            {"name": "project", "type": "autocomplete", "functionName": "listProjects", "required": True},
                            {"name": "zone", "type": "autocomplete", "functionName": "listZones", "required": True},
                        ],
                    }
                ]
            }
        )

    def _params(self, **values):
        return [
            {"name": name, "value": values.get(name), "type": "autocomplete" if name != "region" else "string"}
            for name in ("region", "project", "zone")
        ]

    def test_params_before_the_field_stay_required(self, pick_config: PluginConfig):
        with pytest.raises(MissingParameterError, match='"project"'):
            asyncio.run(
                read_autocomplete_arguments(self._params(region="eu"), [], pick_config, function_name="listZones")
            )

    def test_field_and_later_params_are_relaxed(self, pick_config: PluginConfig):
        resolved = asyncio.run(
            read_autocomplete_arguments(self._params(region="eu"), [], pick_config, function_name="listProjects")
        )
        assert resolved.params == {"region": "eu"}
        assert resolved.method.name == "pick"

    def test_unbound_function_relaxes_everything(self, pick_config: PluginConfig):
        resolved = asyncio.run(read_autocomplete_arguments(self._params(), [], pick_config, function_name="other"))
        assert resolved.params == {}
