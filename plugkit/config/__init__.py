"""Declarative method catalog (schemas as data, loaded once per process)."""

from .load import (
    clear_configuration_cache,
    find_config_path,
    load_auth,
    load_configuration,
    load_method,
    load_plugin_config,
    parse_plugin_config,
    set_configuration,
)
from .schema import VAULT_TYPE, AuthDef, MethodDef, ParamDef, PluginConfig

__all__ = [
    "AuthDef",
    "MethodDef",
    "ParamDef",
    "PluginConfig",
    "VAULT_TYPE",
    "clear_configuration_cache",
    "find_config_path",
    "load_auth",
    "load_configuration",
    "load_method",
    "load_plugin_config",
    "parse_plugin_config",
    "set_configuration",
]
