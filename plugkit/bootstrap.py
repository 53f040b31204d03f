"""
Invocation wrapper for plugin methods and autocomplete functions.

Every plugin method passes through a single chokepoint:

    resolve arguments -> extract secrets -> invoke -> redact result | redact error

Resolution failures (unknown method, missing or invalid parameter) propagate
before the handler runs and are never redacted. Handler errors are redacted
(when the method redacts secrets) and re-raised with their own class.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Mapping

from .arguments import is_empty_value, read_action_arguments
from .autocomplete import read_autocomplete_arguments
from .config.load import load_configuration
from .config.schema import MethodDef, PluginConfig
from .logger import ConsoleLogger
from .redaction import RedactedLogger, filter_complex_secrets, filter_vaulted_parameters, redact_filtered_secrets

OPERATION_FINISHED_SUCCESSFULLY_MESSAGE = "Operation finished successfully!"

PluginMethod = Callable[[dict[str, Any], "HandlerContext"], Any]
AutocompleteFunction = Callable[[str, dict[str, Any], "AutocompleteContext"], Any]
ConfigLoader = Callable[[], PluginConfig]


@dataclass
class HandlerContext:
    """
    Context passed to plugin method handlers.

    `logger` is bound to this invocation's secrets; handlers should log
    through it rather than printing.
    """

    action: Mapping[str, Any]
    settings: dict[str, Any]
    logger: ConsoleLogger
    method: MethodDef


@dataclass
class AutocompleteContext:
    settings: Any
    params: Any
    resolved_settings: dict[str, Any] = field(default_factory=dict)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _collect_secrets(params: dict[str, Any], method: MethodDef, config: PluginConfig) -> list[str]:
    param_defs = [*method.params, *(config.auth.params if config.auth else ())]
    vaulted = filter_vaulted_parameters(params, param_defs)
    return filter_complex_secrets(vaulted.values())


def generate_plugin_method(
    handler: PluginMethod,
    config_loader: ConfigLoader = load_configuration,
) -> Callable[[Mapping[str, Any], Mapping[str, Any] | None], Awaitable[Any]]:
    """Wrap a handler `(params, context) -> result` into `(action, settings) -> result`."""

    async def plugin_method(action: Mapping[str, Any], settings: Mapping[str, Any] | None = None) -> Any:
        # Resolution errors propagate unredacted: no secrets are known yet.
        config = config_loader()
        resolved = await read_action_arguments(action, settings, config)
        method = resolved.method

        secrets = _collect_secrets(resolved.params, method, config) if method.redact_secrets else []
        logger = RedactedLogger(secrets) if method.redact_secrets else ConsoleLogger()
        context = HandlerContext(action=action, settings=resolved.settings, logger=logger, method=method)

        try:
            result = await _maybe_await(handler(resolved.params, context))
        except Exception as e:
            if not secrets:
                raise
            # The chained context would still carry the unredacted error.
            raise redact_filtered_secrets(e, secrets) from None

        if not method.allow_empty_result and is_empty_value(result):
            return OPERATION_FINISHED_SUCCESSFULLY_MESSAGE

        return redact_filtered_secrets(result, secrets) if method.redact_secrets else result

    plugin_method.__name__ = getattr(handler, "__name__", "plugin_method")
    plugin_method.__doc__ = handler.__doc__
    return plugin_method


def generate_autocomplete_function(
    autocomplete_function: AutocompleteFunction,
    config_loader: ConfigLoader = load_configuration,
    function_name: str | None = None,
) -> Callable[[str, Any, Any], Awaitable[Any]]:
    """
    Wrap `(query, params, context) -> items` into `(query, settings, params) -> items`.

    `function_name` is the name the catalog binds autocomplete params to
    (`functionName`); it defaults to the wrapped function's `__name__`.
    """
    function_name = function_name or getattr(autocomplete_function, "__name__", None)

    async def autocomplete(query: str, settings: Any, params: Any) -> Any:
        resolved = await read_autocomplete_arguments(params, settings, config_loader(), function_name)
        context = AutocompleteContext(settings=settings, params=params, resolved_settings=resolved.settings)
        return await _maybe_await(autocomplete_function(query, resolved.params, context))

    autocomplete.__name__ = getattr(autocomplete_function, "__name__", "autocomplete")
    autocomplete.__doc__ = autocomplete_function.__doc__
    return autocomplete


def bootstrap(
    plugin_methods: Mapping[str, PluginMethod],
    autocomplete_functions: Mapping[str, AutocompleteFunction] | None = None,
    *,
    config_loader: ConfigLoader = load_configuration,
) -> dict[str, Callable[..., Awaitable[Any]]]:
    """Wrap every plugin method and autocomplete function, keyed by name."""
    wrapped: dict[str, Callable[..., Awaitable[Any]]] = {
        name: generate_plugin_method(fn, config_loader) for name, fn in plugin_methods.items()
    }
    for name, fn in (autocomplete_functions or {}).items():
        wrapped[name] = generate_autocomplete_function(fn, config_loader, function_name=name)
    return wrapped
