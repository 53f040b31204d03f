"""
Type coercion for raw parameter values.

Every parser maps a raw (untyped) value plus the declaration's parser
options to a canonical typed value, or raises ValueError with a message
suitable for showing to the user. Parsers are looked up by the declared
type name in PARSERS; an unknown name is a configuration error.

Most parsers are plain functions. file_path touches the filesystem and is a
coroutine; callers await whatever a parser returns when it is awaitable.
"""

from __future__ import annotations

import asyncio
import json
import math
import re
from pathlib import Path
from typing import Any, Callable, Mapping

from .errors import ConfigurationError

ParserFn = Callable[[Any, Mapping[str, Any]], Any]

_NUMBER_PREFIX_RE = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def _is_finite_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, float)) and math.isfinite(value)


def object_(value: Any, options: Mapping[str, Any] | None = None) -> Any:
    if isinstance(value, (dict, list)):
        return value
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"Couldn't parse provided value as object: {value}") from e
    raise ValueError(f"{value} is not a valid object")


def number(value: Any, options: Mapping[str, Any] | None = None) -> int | float:
    """Accept numbers and numeric strings (leading numeric prefix, like parseFloat)."""
    if _is_finite_number(value):
        return value
    if isinstance(value, str):
        match = _NUMBER_PREFIX_RE.match(value)
        if match:
            text = match.group(0).strip()
            if any(c in text for c in ".eE"):
                parsed = float(text)
                if math.isfinite(parsed):
                    return parsed
            else:
                return int(text)
    raise ValueError(f"Value {value} is not a valid number")


def boolean(value: Any, options: Mapping[str, Any] | None = None) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("", "false"):
            return False
        if lowered == "true":
            return True
    raise ValueError(f"Value {value} is not of type boolean")


def string(value: Any, options: Mapping[str, Any] | None = None) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise ValueError(f"Value {value} is not a valid string")


def text(value: Any, options: Mapping[str, Any] | None = None) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    raise ValueError(f"Value {value} is not a valid text")


def autocomplete(value: Any, options: Mapping[str, Any] | None = None) -> Any:
    """Autocomplete results arrive either as the bare id or as an {id, value} item."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping) and "id" in value:
        return value["id"]
    raise ValueError(f'Value "{value}" is not a valid autocomplete result nor string.')


def array(value: Any, options: Mapping[str, Any] | None = None) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, str):
        return [line.strip() for line in value.split("\n") if line.strip()]
    raise ValueError("Unsupported array format")


def key_value_pairs(value: Any, options: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Parse "KEY=VALUE" lines; only the first "=" separates key from value."""
    if isinstance(value, Mapping):
        return dict(value)
    if not isinstance(value, str):
        raise ValueError(f"Couldn't parse provided value as key-value pairs: {value}")

    pairs: dict[str, Any] = {}
    for line in value.split("\n"):
        if not line.strip():
            continue
        key, _, rest = line.partition("=")
        pairs[key] = rest
    return pairs


async def file_path(value: Any, options: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """
    Resolve a path on the agent and describe it.

    Options (from parserOptions):
        throwIfDoesntExist: raise when the path is missing
        readFileContent: read the file as UTF-8 into "file_content" (implies
            the path must exist and be a file)
        acceptedTypes: allow-list of "file" / "directory"
    """
    options = options or {}
    if value is not None and not isinstance(value, str):
        raise ValueError(f"Couldn't parse provided value as file path: {value}")

    absolute_path = Path(value or "./").resolve()
    result: dict[str, Any] = {
        "passed": value,
        "absolute_path": str(absolute_path),
        "exists": await asyncio.to_thread(absolute_path.exists),
    }

    if not result["exists"]:
        if options.get("throwIfDoesntExist") or options.get("readFileContent"):
            raise ValueError(f'Path "{value}" does not exist on agent!')
        return result

    is_dir = await asyncio.to_thread(absolute_path.is_dir)
    result["type"] = "directory" if is_dir else "file"

    accepted_types = options.get("acceptedTypes")
    if isinstance(accepted_types, (list, tuple)) and result["type"] not in accepted_types:
        raise ValueError(
            f"Path type ({result['type']}) is not accepted. "
            f"Accepted path types: {', '.join(accepted_types)}"
        )

    if options.get("readFileContent"):
        if result["type"] != "file":
            raise ValueError(f"Path type must be a file. Provided path is of type {result['type']}")
        result["file_content"] = await asyncio.to_thread(absolute_path.read_text, encoding="utf-8")

    return result


def _is_tag_object(value: Any) -> bool:
    return isinstance(value, Mapping) and set(value.keys()) == {"Key", "Value"}


def tag(value: Any, options: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Parse one AWS-style tag from {"Key", "Value"} or "Key=Value"."""
    if value is None:
        raise ValueError("Cannot parse null tag")
    if _is_tag_object(value):
        return dict(value)
    if isinstance(value, str):
        key, _, tag_value = value.partition("=")
        if not key.strip():
            raise ValueError(f"Incorrectly formatted tag string: {value}")
        parsed = {"Key": key.strip()}
        if tag_value.strip():
            parsed["Value"] = tag_value.strip()
        return parsed
    raise ValueError("Unsupported tags format!")


def tags(value: Any, options: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
    """Parse a list of AWS-style tags from lists, newline-delimited text or mappings."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        if all(isinstance(item, Mapping) for item in value):
            return [tag(item) for item in value]
        if all(isinstance(item, str) for item in value):
            return [tag(line) for item in value for line in array(item)]
        raise ValueError("Incorrect AWS Tags format")
    if isinstance(value, str):
        return [tag(line) for line in array(value)]
    if isinstance(value, Mapping):
        if _is_tag_object(value):
            return [dict(value)]
        return [{"Key": str(k).strip(), "Value": str(v).strip()} for k, v in value.items()]
    raise ValueError("Unsupported tags format!")


PARSERS: dict[str, ParserFn] = {
    "object": object_,
    "number": number,
    "int": number,
    "float": number,
    "boolean": boolean,
    "string": string,
    "options": string,
    "vault": string,
    "sshKey": string,
    "text": text,
    "autocomplete": autocomplete,
    "array": array,
    "keyValuePairs": key_value_pairs,
    "filePath": file_path,
    "tag": tag,
    "tags": tags,
}


def resolve_parser(type_name: str) -> ParserFn:
    parser = PARSERS.get(type_name)
    if parser is None:
        raise ConfigurationError(f'Can\'t resolve parser of type "{type_name}"')
    return parser
