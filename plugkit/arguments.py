"""
Argument resolution: raw invocation values -> coerced, validated parameters.

For every declared parameter the value is taken from the action params,
else from the same-named setting, else from the declared default. Present
values are coerced by the declared type and then validated. All parameters
are resolved concurrently (some coercions touch the filesystem); the
resolved maps are only handed on once every coercion has finished.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from .config.load import load_configuration, load_method
from .config.schema import AuthDef, MethodDef, ParamDef, PluginConfig
from .errors import ConfigurationError, MissingParameterError, ParameterParseError, ParameterValidationError
from .parsers import resolve_parser
from .validators import resolve_validator

_EMPTY_CONTAINERS = (list, tuple, dict, set, frozenset)


@dataclass
class ResolvedArguments:
    """Output of one resolution pass; created per invocation."""

    params: dict[str, Any] = field(default_factory=dict)
    settings: dict[str, Any] = field(default_factory=dict)
    auth: dict[str, Any] = field(default_factory=dict)
    method: MethodDef | None = None


def is_empty_value(value: Any) -> bool:
    """None, "" and empty containers are empty; False and 0 are values."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, _EMPTY_CONTAINERS):
        return len(value) == 0
    return False


def prune_empty(values: Any) -> Any:
    """Drop empty entries from a mapping. Non-mappings are returned as a shallow copy."""
    if not isinstance(values, Mapping):
        return values.copy() if hasattr(values, "copy") else values
    return {k: v for k, v in values.items() if not is_empty_value(v)}


async def parse_parameter(param: ParamDef, value: Any, settings_value: Any = None) -> Any:
    """
    Resolve one declared parameter.

    Returns None for an absent optional parameter. Raises
    MissingParameterError, ParameterParseError or ParameterValidationError.
    """
    raw = value
    if raw is None:
        raw = settings_value
    if raw is None:
        raw = param.default

    if raw is None:
        if param.required:
            raise MissingParameterError(param.name)
        return None

    parser = resolve_parser(param.parser_key)
    try:
        parsed = parser(raw, param.parser_options)
        if inspect.isawaitable(parsed):
            parsed = await parsed
    except ValueError as e:
        # Parser messages echo the raw value; keep vaulted values out of them.
        detail = "value is not a valid string" if param.is_vaulted else str(e)
        raise ParameterParseError(
            f'Failed to parse parameter "{param.name}" as {param.parser_key}: {detail}',
            param_name=param.name,
        ) from (None if param.is_vaulted else e)

    if param.validation_type:
        problems = resolve_validator(param.validation_type)(parsed)
        if problems:
            raise ParameterValidationError(param.name, param.validation_type, problems)

    return parsed


async def _resolve_groups(
    groups: list[tuple[Iterable[ParamDef], Mapping[str, Any], Mapping[str, Any]]],
) -> list[dict[str, Any]]:
    """
    Resolve several parameter groups in one concurrent batch.

    Every started coercion is allowed to finish; the first failure in
    declaration order is raised and all partial results are discarded.
    """
    jobs: list[tuple[int, ParamDef]] = []
    coros = []
    for index, (param_defs, values, fallbacks) in enumerate(groups):
        for param in param_defs:
            jobs.append((index, param))
            coros.append(parse_parameter(param, values.get(param.name), fallbacks.get(param.name)))

    results = await asyncio.gather(*coros, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result

    resolved: list[dict[str, Any]] = [{} for _ in groups]
    for (index, param), result in zip(jobs, results):
        resolved[index][param.name] = result
    return resolved


async def resolve_arguments(
    raw_params: Mapping[str, Any] | None,
    raw_settings: Mapping[str, Any] | None,
    method: MethodDef,
    auth: AuthDef | None = None,
    settings_params: Iterable[ParamDef] = (),
) -> ResolvedArguments:
    """
    Resolve a method's parameters, the auth parameters and the plugin settings.

    Undeclared action params pass through untouched. Returned maps never
    contain empty values.
    """
    param_values = prune_empty(raw_params or {})
    settings_values = prune_empty(raw_settings or {})
    settings_params = tuple(settings_params)

    method_values, auth_values, declared_settings = await _resolve_groups(
        [
            (method.params, param_values, settings_values),
            (auth.params if auth else (), param_values, settings_values),
            (settings_params, settings_values, {}),
        ]
    )

    return ResolvedArguments(
        params=prune_empty({**param_values, **method_values, **auth_values}),
        settings=prune_empty({**settings_values, **declared_settings}),
        auth=prune_empty(auth_values),
        method=method,
    )


def action_method_name(action: Mapping[str, Any]) -> str:
    method = action.get("method")
    name = method.get("name") if isinstance(method, Mapping) else None
    if not isinstance(name, str) or not name:
        raise ConfigurationError("Action does not name a method")
    return name


async def read_action_arguments(
    action: Mapping[str, Any],
    settings: Mapping[str, Any] | None,
    config: PluginConfig | None = None,
) -> ResolvedArguments:
    """Resolve an action's arguments against its method in the catalog."""
    config = config or load_configuration()
    method = load_method(action_method_name(action), config)
    return await resolve_arguments(
        action.get("params"),
        settings,
        method,
        auth=config.auth,
        settings_params=config.settings,
    )
