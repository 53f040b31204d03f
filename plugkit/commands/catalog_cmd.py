"""Catalog inspection CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..autocomplete import find_matching_method
from ..config.load import load_plugin_config
from ..config.schema import MethodDef, PluginConfig
from ..errors import ConfigurationError


def _load(config_path: Path, err: Console) -> PluginConfig | None:
    try:
        return load_plugin_config(config_path)
    except ConfigurationError as e:
        err.print(f"Configuration error: {e}", style="bold red")
        return None


def _method_summary(method: MethodDef) -> dict:
    return {
        "name": method.name,
        "params": method.param_names,
        "required": [p.name for p in method.params if p.required],
        "vaulted": [p.name for p in method.params if p.is_vaulted],
        "allow_empty_result": method.allow_empty_result,
        "redact_secrets": method.redact_secrets,
    }


def run_methods(config_path: Path, *, output_json: bool = False) -> int:
    """List the catalog's methods."""
    err = Console(stderr=True)
    config = _load(config_path, err)
    if config is None:
        return 1

    summaries = [_method_summary(m) for m in config.methods]
    if output_json:
        print(json.dumps(summaries, indent=2))
        return 0

    console = Console()
    table = Table(title=f"Methods: {config.name or config_path.name}")
    table.add_column("method", style="cyan", no_wrap=True)
    table.add_column("params")
    table.add_column("vaulted", style="magenta")
    table.add_column("flags", style="dim")

    for s in summaries:
        flags = []
        if s["allow_empty_result"]:
            flags.append("allow-empty")
        if not s["redact_secrets"]:
            flags.append("no-redaction")
        params = [f"{p}*" if p in s["required"] else p for p in s["params"]]
        table.add_row(s["name"], ", ".join(params), ", ".join(s["vaulted"]), " ".join(flags))

    console.print(table)
    if config.auth:
        console.print(f"auth params: {', '.join(config.auth.param_names)}", style="dim")
    console.print(f"\nMethods: {len(summaries)} total")
    return 0


def run_check(config_path: Path) -> int:
    """Load and validate the catalog."""
    err = Console(stderr=True)
    config = _load(config_path, err)
    if config is None:
        return 1

    Console().print(f"{config_path}: {len(config.methods)} methods OK", style="green")
    return 0


def run_match(config_path: Path, param_names: list[str], *, output_json: bool = False) -> int:
    """Show which method a set of (autocomplete) parameter names resolves to."""
    err = Console(stderr=True)
    config = _load(config_path, err)
    if config is None:
        return 1

    method = find_matching_method(param_names, config)
    if output_json:
        print(json.dumps({"params": param_names, "method": method.name if method else None}))
        return 0 if method else 1

    if method is None:
        err.print(f"no match for: {', '.join(sorted(param_names))}", style="yellow")
        return 1

    Console().print(method.name, style="bold cyan")
    return 0
