"""
Autocomplete argument resolution.

Autocomplete callbacks only receive the in-progress parameter list, not the
method name. The method is recovered structurally: the supplied parameter
names (net of authentication parameters) must equal one method's declared
names. A miss is not an error; the callback then receives the raw values.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Iterable, Mapping

from .arguments import ResolvedArguments, prune_empty, resolve_arguments
from .config.load import load_configuration
from .config.schema import MethodDef, PluginConfig
from .errors import AutocompleteParamsError

logger = logging.getLogger(__name__)


def map_autocomplete_params(params: Any) -> dict[str, Any]:
    """Turn [{"name", "value", "type"|"valueType"}, ...] into {name: value}."""
    if not isinstance(params, (list, tuple)):
        raise AutocompleteParamsError(
            "Failed to map autocomplete parameters to object - params provided are not an array"
        )
    if not all(isinstance(item, Mapping) for item in params):
        raise AutocompleteParamsError(
            "Failed to map autocomplete parameters to object - every item of params array need to be an object"
        )

    mapped: dict[str, Any] = {}
    for item in params:
        name = item.get("name")
        if name is None:
            raise AutocompleteParamsError(
                "Failed to map one of autocomplete parameters to object - `name` field is required"
            )
        if (item.get("type") or item.get("valueType")) is None:
            raise AutocompleteParamsError(
                "Failed to map one of autocomplete parameters to object - "
                "either `type` or `valueType` field is required"
            )
        if item.get("value") is None:
            continue
        mapped[name] = item["value"]
    return mapped


def _subtract_auth_names(names: Iterable[str], auth_names: Iterable[str]) -> list[str]:
    # Each auth name is consumed at most once: a method param that shares a
    # name with an auth param keeps its own occurrence.
    remaining = Counter(names) - Counter(set(auth_names))
    return sorted(remaining.elements())


def find_matching_method(
    param_names: Iterable[str],
    config: PluginConfig | None = None,
) -> MethodDef | None:
    """
    Find the method whose declared parameter names match the supplied ones.

    Auth parameter names are subtracted from the supplied names first. A
    method matches when its own names equal the remainder; failing that,
    when its names net of auth names do. Returns None when nothing matches.
    """
    config = config or load_configuration()
    auth_names = config.auth.param_names if config.auth else []
    clean_names = _subtract_auth_names(param_names, auth_names)

    for method in config.methods:
        if sorted(method.param_names) == clean_names:
            return method

    for method in config.methods:
        if _subtract_auth_names(method.param_names, auth_names) == clean_names:
            return method

    return None


async def read_autocomplete_arguments(
    params: Any,
    settings: Any,
    config: PluginConfig | None = None,
    function_name: str | None = None,
) -> ResolvedArguments:
    """
    Resolve the in-progress parameters of an autocomplete call.

    On a match, the method's parameters are resolved with `required` relaxed
    from the autocomplete param bound to `function_name` onward (the user is
    still filling the form). On a miss, settings and params are merged as-is
    without coercion.
    """
    config = config or load_configuration()
    param_values = map_autocomplete_params(params)
    settings_values = map_autocomplete_params(settings if settings is not None else [])

    names = [item["name"] for item in params]
    method = find_matching_method(names, config)
    if method is None:
        logger.debug("No method matches autocomplete params %s; passing values through", sorted(set(names)))
        merged = prune_empty({**settings_values, **param_values})
        return ResolvedArguments(params=merged, settings=prune_empty(settings_values))

    return await resolve_arguments(
        param_values,
        settings_values,
        method.relaxed(function_name),
        auth=config.auth.relaxed() if config.auth else None,
        settings_params=tuple(p.relaxed() for p in config.settings),
    )
