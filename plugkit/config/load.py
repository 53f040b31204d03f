"""
Method catalog loading.

The catalog is a declarative document (config.json, .toml or .yaml) read
once per process. After the first successful load it is cached and treated
as immutable; hosts that build a catalog in memory install it with
set_configuration().
"""

from __future__ import annotations

import json
import logging
import os
import tomllib
from pathlib import Path
from typing import Any

from ..errors import ConfigurationError
from ..parsers import PARSERS
from ..validators import VALIDATORS
from .schema import AuthDef, MethodDef, ParamDef, PluginConfig

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "PLUGKIT_CONFIG"
CONFIG_FILENAMES = ("config.json", "config.toml", "config.yaml", "config.yml")

# Process-wide catalog, loaded at first use.
_CONFIG: PluginConfig | None = None


def _coerce_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _coerce_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _coerce_flag(raw: dict[str, Any], key: str, default: bool, *, where: str, source: Path | None) -> bool:
    value = raw.get(key, default)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ConfigurationError(f'{where}: "{key}" must be true or false, got {value!r}', source=source)
    return value


def _parse_param(raw: Any, *, where: str, source: Path | None) -> ParamDef:
    if not isinstance(raw, dict):
        raise ConfigurationError(f"{where}: parameter declaration must be an object", source=source)

    name = str(raw.get("name", "")).strip()
    if not name:
        raise ConfigurationError(f"{where}: parameter is missing a name", source=source)

    type_name = raw.get("type") or raw.get("valueType")
    if not isinstance(type_name, str) or not type_name.strip():
        raise ConfigurationError(
            f'{where}: parameter "{name}" needs either "type" or "valueType"', source=source
        )

    parser_type = raw.get("parserType")
    parser_type_str = str(parser_type).strip() if isinstance(parser_type, str) else None

    validation_type = raw.get("validationType")
    validation_type_str = str(validation_type).strip() if isinstance(validation_type, str) else None

    function_name = raw.get("functionName")
    function_name_str = str(function_name) if isinstance(function_name, str) else None

    param = ParamDef(
        name=name,
        type=type_name.strip(),
        parser_type=parser_type_str or None,
        parser_options=_coerce_dict(raw.get("parserOptions")),
        validation_type=validation_type_str or None,
        required=_coerce_flag(raw, "required", False, where=f'{where} parameter "{name}"', source=source),
        default=raw.get("default"),
        function_name=function_name_str,
    )

    if param.parser_key not in PARSERS:
        raise ConfigurationError(
            f'{where}: parameter "{name}" has unknown type "{param.parser_key}"', source=source
        )
    if param.validation_type and param.validation_type not in VALIDATORS:
        raise ConfigurationError(
            f'{where}: parameter "{name}" has unknown validationType "{param.validation_type}"',
            source=source,
        )
    return param


def _parse_params(raw: Any, *, where: str, source: Path | None) -> tuple[ParamDef, ...]:
    params = tuple(_parse_param(p, where=where, source=source) for p in _coerce_list(raw))

    seen: set[str] = set()
    for p in params:
        if p.name in seen:
            raise ConfigurationError(f'{where}: duplicate parameter "{p.name}"', source=source)
        seen.add(p.name)
    return params


def parse_plugin_config(data: dict[str, Any], *, source: Path | None = None) -> PluginConfig:
    """Build a PluginConfig from an already-decoded document."""
    if not isinstance(data, dict):
        raise ConfigurationError("configuration document must be an object", source=source)

    methods: list[MethodDef] = []
    for index, raw in enumerate(_coerce_list(data.get("methods"))):
        if not isinstance(raw, dict):
            raise ConfigurationError(f"methods[{index}] must be an object", source=source)

        name = str(raw.get("name", "")).strip()
        if not name:
            raise ConfigurationError(f"methods[{index}] is missing a name", source=source)
        if any(m.name == name for m in methods):
            raise ConfigurationError(f'duplicate method "{name}"', source=source)

        view_name = raw.get("viewName")
        methods.append(
            MethodDef(
                name=name,
                params=_parse_params(raw.get("params"), where=f"method {name}", source=source),
                allow_empty_result=_coerce_flag(
                    raw, "allowEmptyResult", False, where=f"method {name}", source=source
                ),
                redact_secrets=_coerce_flag(raw, "redactSecrets", True, where=f"method {name}", source=source),
                view_name=str(view_name) if isinstance(view_name, str) else None,
            )
        )

    auth: AuthDef | None = None
    raw_auth = data.get("auth")
    if isinstance(raw_auth, dict):
        auth = AuthDef(params=_parse_params(raw_auth.get("params"), where="auth", source=source))

    version = data.get("version")
    return PluginConfig(
        name=str(data.get("name", "")).strip(),
        version=str(version) if version is not None else None,
        methods=tuple(methods),
        auth=auth,
        settings=_parse_params(data.get("settings"), where="settings", source=source),
        source=source,
    )


def load_plugin_config(path: Path) -> PluginConfig:
    """
    Load a catalog from JSON, TOML or YAML (chosen by file extension).

    Raises ConfigurationError when the file is missing, cannot be decoded,
    or declares something inconsistent.
    """
    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}", source=path)

    import yaml

    suffix = path.suffix.lower()
    try:
        raw_text = path.read_text(encoding="utf-8")
        if suffix == ".toml":
            data = tomllib.loads(raw_text)
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(raw_text) or {}
        else:
            data = json.loads(raw_text)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to read configuration {path}: {e}", source=path) from e

    config = parse_plugin_config(data, source=path)
    logger.debug("Loaded %d methods from %s", len(config.methods), path)
    return config


def find_config_path(start: Path | None = None) -> Path | None:
    """Locate the catalog: $PLUGKIT_CONFIG, else walk up from `start` (cwd)."""
    env_path = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if env_path:
        return Path(env_path)

    cur = (start or Path.cwd()).resolve()
    for p in (cur, *cur.parents):
        for filename in CONFIG_FILENAMES:
            candidate = p / filename
            if candidate.is_file():
                return candidate
    return None


def load_configuration() -> PluginConfig:
    """Return the process-wide catalog, loading it on first use."""
    global _CONFIG
    if _CONFIG is None:
        path = find_config_path()
        if path is None:
            raise ConfigurationError(
                f"No configuration found. Set {CONFIG_ENV_VAR} or add config.json to the plugin directory."
            )
        _CONFIG = load_plugin_config(path)
    return _CONFIG


def set_configuration(config: PluginConfig) -> None:
    """Install an already-built catalog as the process-wide one."""
    global _CONFIG
    _CONFIG = config


def clear_configuration_cache() -> None:
    """Forget the cached catalog (for testing)."""
    global _CONFIG
    _CONFIG = None


def load_method(name: str, config: PluginConfig | None = None) -> MethodDef:
    config = config or load_configuration()
    method = config.get_method(name)
    if method is None:
        where = config.source.name if config.source else "configuration"
        raise ConfigurationError(f'Could not find a method "{name}" in {where}', source=config.source)
    return method


def load_auth(config: PluginConfig | None = None) -> AuthDef | None:
    config = config or load_configuration()
    return config.auth
