from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

VAULT_TYPE = "vault"


@dataclass(frozen=True)
class ParamDef:
    name: str
    type: str
    parser_type: str | None = None
    parser_options: dict[str, Any] = field(default_factory=dict)
    validation_type: str | None = None
    required: bool = False
    default: Any = None
    function_name: str | None = None  # autocomplete function bound to this param

    @property
    def parser_key(self) -> str:
        return self.parser_type or self.type

    @property
    def is_vaulted(self) -> bool:
        return self.type == VAULT_TYPE

    def relaxed(self) -> ParamDef:
        return replace(self, required=False) if self.required else self


@dataclass(frozen=True)
class MethodDef:
    name: str
    params: tuple[ParamDef, ...] = ()
    allow_empty_result: bool = False
    redact_secrets: bool = True
    view_name: str | None = None

    @property
    def param_names(self) -> list[str]:
        return [p.name for p in self.params]

    def autocomplete_index(self, function_name: str | None) -> int | None:
        """Position of the autocomplete param bound to `function_name`, if any."""
        for index, param in enumerate(self.params):
            if param.type == "autocomplete" and function_name and param.function_name == function_name:
                return index
        return None

    def relaxed(self, function_name: str | None = None) -> MethodDef:
        """
        Copy with parameters made optional; the catalog entry is untouched.

        With `function_name`, only the autocomplete param bound to it and the
        params declared after it are relaxed: earlier params are filled in
        before the user reaches the autocomplete field. Without it (or when
        no param is bound to it) every param is relaxed.
        """
        start = self.autocomplete_index(function_name) or 0
        return replace(
            self,
            params=tuple(p.relaxed() if i >= start else p for i, p in enumerate(self.params)),
        )


@dataclass(frozen=True)
class AuthDef:
    params: tuple[ParamDef, ...] = ()

    @property
    def param_names(self) -> list[str]:
        return [p.name for p in self.params]

    def relaxed(self) -> AuthDef:
        return replace(self, params=tuple(p.relaxed() for p in self.params))


@dataclass(frozen=True)
class PluginConfig:
    name: str
    version: str | None = None
    methods: tuple[MethodDef, ...] = ()
    auth: AuthDef | None = None
    settings: tuple[ParamDef, ...] = ()
    source: Path | None = None

    def get_method(self, name: str) -> MethodDef | None:
        for method in self.methods:
            if method.name == name:
                return method
        return None
