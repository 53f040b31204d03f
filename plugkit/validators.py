"""
Validation predicates applied after coercion.

A validator returns the list of problems it found (empty = valid); the
argument engine turns a non-empty list into ParameterValidationError.
"""

from __future__ import annotations

import re
from typing import Any, Callable

from .errors import ConfigurationError

ValidatorFn = Callable[[Any], list[str]]

_PRIVATE_KEY_RE = re.compile(
    r"-----BEGIN ([A-Z0-9 ]*)PRIVATE KEY-----(?P<body>.*?)-----END \1PRIVATE KEY-----",
    re.DOTALL,
)


def validate_ssh(value: Any) -> list[str]:
    """Check that the value holds a PEM or OpenSSH private key block."""
    if not isinstance(value, str):
        return [f"expected a private key string, got {type(value).__name__}"]

    match = _PRIVATE_KEY_RE.search(value)
    if match is None:
        return ["no private key block found (expected -----BEGIN ... PRIVATE KEY-----)"]
    if not match.group("body").strip():
        return ["private key block is empty"]
    return []


VALIDATORS: dict[str, ValidatorFn] = {
    "ssh": validate_ssh,
}


def resolve_validator(validation_type: str) -> ValidatorFn:
    validator = VALIDATORS.get(validation_type)
    if validator is None:
        raise ConfigurationError(f"Unrecognized validation type: {validation_type}")
    return validator
