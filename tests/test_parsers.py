from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from plugkit import parsers
from plugkit.errors import ConfigurationError


def test_resolve_parser_aliases() -> None:
    assert parsers.resolve_parser("int") is parsers.number
    assert parsers.resolve_parser("float") is parsers.number
    assert parsers.resolve_parser("vault") is parsers.string
    assert parsers.resolve_parser("options") is parsers.string
    assert parsers.resolve_parser("sshKey") is parsers.string


def test_resolve_parser_unknown_type_is_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match='parser of type "nope"'):
        parsers.resolve_parser("nope")


class TestNumber:
    def test_numbers_pass_through(self):
        assert parsers.number(5) == 5
        assert parsers.number(2.5) == 2.5

    def test_numeric_strings(self):
        assert parsers.number("42") == 42
        assert isinstance(parsers.number("42"), int)
        assert parsers.number(" -3.5 ") == -3.5
        assert parsers.number("1e3") == 1000.0
        assert parsers.number("12px") == 12

    @pytest.mark.parametrize("value", ["abc", "", True, None, float("nan"), float("inf"), [1]])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(ValueError, match="not a valid number"):
            parsers.number(value)


class TestBoolean:
    @pytest.mark.parametrize("value", ["true", "TRUE", " True ", True])
    def test_true(self, value):
        assert parsers.boolean(value) is True

    @pytest.mark.parametrize("value", ["false", "False", "", "  ", None, False])
    def test_false(self, value):
        assert parsers.boolean(value) is False

    def test_rejects_other_strings(self):
        with pytest.raises(ValueError, match="not of type boolean"):
            parsers.boolean("yes")


def test_string_trims_and_text_does_not() -> None:
    assert parsers.string("  padded  ") == "padded"
    assert parsers.text("  padded  ") == "  padded  "
    assert parsers.string(None) == ""
    with pytest.raises(ValueError):
        parsers.string(12)
    with pytest.raises(ValueError):
        parsers.text({"a": 1})


def test_object_parses_json_strings() -> None:
    assert parsers.object_('{"a": [1, 2]}') == {"a": [1, 2]}
    assert parsers.object_({"b": 1}) == {"b": 1}
    assert parsers.object_([1]) == [1]
    with pytest.raises(ValueError, match="Couldn't parse provided value as object"):
        parsers.object_("{not json")
    with pytest.raises(ValueError, match="not a valid object"):
        parsers.object_(7)


def test_autocomplete_accepts_id_objects() -> None:
    assert parsers.autocomplete({"id": "proj-1", "value": "Project One"}) == "proj-1"
    assert parsers.autocomplete("proj-2") == "proj-2"
    assert parsers.autocomplete(None) == ""
    with pytest.raises(ValueError, match="not a valid autocomplete result"):
        parsers.autocomplete({"value": "no id"})


def test_array_splits_lines() -> None:
    assert parsers.array("a\n  b \n\nc") == ["a", "b", "c"]
    assert parsers.array(["x"]) == ["x"]
    assert parsers.array(("x", "y")) == ["x", "y"]
    assert parsers.array(None) == []
    with pytest.raises(ValueError, match="Unsupported array format"):
        parsers.array(3)


def test_key_value_pairs() -> None:
    assert parsers.key_value_pairs("A=1\nB=x=y\n\nC=") == {"A": "1", "B": "x=y", "C": ""}
    assert parsers.key_value_pairs({"K": "V"}) == {"K": "V"}
    with pytest.raises(ValueError):
        parsers.key_value_pairs(5)


class TestTags:
    def test_tag_string(self):
        assert parsers.tag("Env = prod ") == {"Key": "Env", "Value": "prod"}
        assert parsers.tag("Owner") == {"Key": "Owner"}
        assert parsers.tag("Expr=a=b") == {"Key": "Expr", "Value": "a=b"}

    def test_tag_rejects_empty_key(self):
        with pytest.raises(ValueError, match="Incorrectly formatted tag string"):
            parsers.tag("=value")

    def test_tags_from_text(self):
        assert parsers.tags("Env=prod\nTeam=core") == [
            {"Key": "Env", "Value": "prod"},
            {"Key": "Team", "Value": "core"},
        ]

    def test_tags_from_list_of_strings_flattens_lines(self):
        assert parsers.tags(["A=1\nB=2", "C=3"]) == [
            {"Key": "A", "Value": "1"},
            {"Key": "B", "Value": "2"},
            {"Key": "C", "Value": "3"},
        ]

    def test_tags_from_objects(self):
        tag = {"Key": "A", "Value": "1"}
        assert parsers.tags([tag]) == [tag]
        assert parsers.tags(tag) == [tag]
        assert parsers.tags({"Env": " prod ", "Tier": 2}) == [
            {"Key": "Env", "Value": "prod"},
            {"Key": "Tier", "Value": "2"},
        ]

    def test_tags_rejects_mixed_lists(self):
        with pytest.raises(ValueError, match="Incorrect AWS Tags format"):
            parsers.tags(["A=1", {"Key": "B", "Value": "2"}])

    def test_tags_none_is_empty(self):
        assert parsers.tags(None) == []


class TestFilePath:
    def test_existing_file_with_content(self, tmp_path: Path):
        target = tmp_path / "notes.txt"
        target.write_text("hello", encoding="utf-8")

        result = asyncio.run(parsers.file_path(str(target), {"readFileContent": True}))

        assert result["exists"] is True
        assert result["type"] == "file"
        assert result["absolute_path"] == str(target.resolve())
        assert result["file_content"] == "hello"
        assert result["passed"] == str(target)

    def test_missing_path(self, tmp_path: Path):
        missing = str(tmp_path / "missing")

        result = asyncio.run(parsers.file_path(missing, {}))
        assert result == {"passed": missing, "absolute_path": str(Path(missing).resolve()), "exists": False}

        with pytest.raises(ValueError, match="does not exist on agent"):
            asyncio.run(parsers.file_path(missing, {"throwIfDoesntExist": True}))

    def test_directory_rejected_by_accepted_types(self, tmp_path: Path):
        with pytest.raises(ValueError, match=r"Path type \(directory\) is not accepted"):
            asyncio.run(parsers.file_path(str(tmp_path), {"acceptedTypes": ["file"]}))

    def test_read_content_of_directory_fails(self, tmp_path: Path):
        with pytest.raises(ValueError, match="must be a file"):
            asyncio.run(parsers.file_path(str(tmp_path), {"readFileContent": True}))

    def test_rejects_non_string(self):
        with pytest.raises(ValueError, match="Couldn't parse provided value as file path"):
            asyncio.run(parsers.file_path(12, {}))
