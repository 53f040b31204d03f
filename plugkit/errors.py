"""
Error taxonomy for plugin invocations.

Three families, each surfaced differently by the bootstrap wrapper:
- ConfigurationError: the catalog cannot be loaded or does not know a name.
  Fatal, raised before any handler code runs.
- ParameterError: a raw value could not be resolved (missing, unparseable,
  invalid). Fatal to the invocation, never redacted (secrets are not known yet).
- Handler errors are not wrapped at all: they keep their own class and are
  only redacted before being re-raised.
"""

from __future__ import annotations

from pathlib import Path


class PluginError(Exception):
    """Base class for errors raised by plugkit itself."""


class ConfigurationError(PluginError):
    """The method catalog is missing, unparseable, or inconsistent."""

    def __init__(self, message: str, *, source: Path | None = None):
        super().__init__(message)
        self.source = source


class ParameterError(PluginError, ValueError):
    """A parameter could not be resolved from the raw invocation."""

    def __init__(self, message: str, *, param_name: str):
        super().__init__(message)
        self.param_name = param_name


class MissingParameterError(ParameterError):
    def __init__(self, param_name: str):
        super().__init__(f'Missing required "{param_name}" value', param_name=param_name)


class ParameterParseError(ParameterError):
    """Coercion of a raw value to its declared type failed."""


class ParameterValidationError(ParameterError):
    """A validation predicate reported problems with a coerced value."""

    def __init__(self, param_name: str, validation_type: str, problems: list[str]):
        joined = "; ".join(problems)
        super().__init__(
            f'Parameter "{param_name}" failed {validation_type} validation: {joined}',
            param_name=param_name,
        )
        self.validation_type = validation_type
        self.problems = list(problems)


class AutocompleteParamsError(PluginError, ValueError):
    """The in-progress autocomplete parameter list is malformed."""
