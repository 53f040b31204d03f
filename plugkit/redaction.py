"""
Secret extraction and redaction.

Vaulted parameter values are secrets for the lifetime of one invocation.
Anything leaving the invocation (the handler's result, a raised error, log
calls) is scrubbed: every occurrence of a secret is replaced with
REDACTED_PLACEHOLDER, wherever it sits in the value's structure.

Short, low-entropy secrets ("1", "yes", "true") are exempt. Replacing them
would mangle legitimate output that happens to contain the same text.
"""

from __future__ import annotations

import json
import math
import re
from typing import Any, Callable, Iterable, Mapping

from rich.console import Console

from .config.schema import ParamDef
from .logger import ConsoleLogger

REDACTED_PLACEHOLDER = "[REDACTED]"

# Minimum entropy (bits) a secret of length N must exceed to be redacted.
# Anything longer than the table is always redacted.
ENTROPY_THRESHOLDS: tuple[int, ...] = (0, 6, 12, 17, 23, 29, 35, 41, 47)
SHORT_SECRET_LENGTH = len(ENTROPY_THRESHOLDS) - 1

_CHARSETS: tuple[tuple[re.Pattern[str], int], ...] = (
    (re.compile(r"[a-z]"), 26),
    (re.compile(r"[A-Z]"), 26),
    (re.compile(r"[0-9]"), 10),
    (re.compile(r"[^a-zA-Z0-9]"), 33),
)

RedactionHandler = Callable[[Any, list[str]], Any]


def password_entropy(text: str) -> int:
    """Charset-pool entropy estimate: len * log2(size of character classes used)."""
    if not text:
        return 0
    pool = sum(size for pattern, size in _CHARSETS if pattern.search(text))
    return math.floor(len(text) * math.log2(pool) + 0.5)


def is_complex_secret(secret: str) -> bool:
    if len(secret) > SHORT_SECRET_LENGTH:
        return True
    return password_entropy(secret) > ENTROPY_THRESHOLDS[len(secret)]


def filter_complex_secrets(secrets: Iterable[Any]) -> list[str]:
    """Apply the complexity gate. Longest first, so overlapping secrets redact fully."""
    gated = {str(s) for s in secrets if s is not None and is_complex_secret(str(s))}
    return sorted(gated, key=lambda s: (-len(s), s))


def filter_vaulted_parameters(params: Mapping[str, Any], param_defs: Iterable[ParamDef]) -> dict[str, Any]:
    """Select the resolved params declared with the vault type."""
    vaulted_names = {p.name for p in param_defs if p.is_vaulted}
    return {name: value for name, value in params.items() if name in vaulted_names}


# -----------------------------------------------------------------------------
# Redaction handlers
# -----------------------------------------------------------------------------


def _redact_text(text: str, secrets: list[str]) -> str:
    for secret in secrets:
        text = text.replace(secret, REDACTED_PLACEHOLDER)
    return text


def _redact_with_json(value: Any, secrets: list[str]) -> Any:
    serialized = json.dumps(value, default=str)
    escaped = [json.dumps(secret)[1:-1] for secret in secrets]
    if not any(body in serialized for body in escaped):
        return value
    for body in escaped:
        serialized = serialized.replace(body, REDACTED_PLACEHOLDER)
    try:
        return json.loads(serialized)
    except json.JSONDecodeError:
        # A secret matched inside a bare number, or only across an escape sequence.
        text = str(value)
        if any(secret in text for secret in secrets):
            return _redact_text(text, secrets)
        return value


def _redact_error(error: BaseException, secrets: list[str]) -> BaseException:
    error_type = type(error)
    args = tuple(redact_filtered_secrets(arg, secrets) for arg in error.args)
    fields = redact_filtered_secrets(dict(getattr(error, "__dict__", {})), secrets)

    try:
        redacted = error_type.__new__(error_type)
        redacted.args = args
    except TypeError:
        redacted = Exception(*args)
    redacted.__dict__.update(fields)
    return redacted.with_traceback(error.__traceback__)


def _redact_sequence(value: list | tuple | set | frozenset, secrets: list[str]) -> Any:
    items = [redact_filtered_secrets(item, secrets) for item in value]
    if isinstance(value, list):
        return items
    if hasattr(value, "_fields"):
        return type(value)(*items)
    return type(value)(items)


def _distinct_key(key: Any, taken: dict[Any, Any]) -> Any:
    """Suffix a key that collides with one already emitted, so no entry is lost."""
    candidate, n = key, 2
    while candidate in taken:
        candidate = f"{key} ({n})" if isinstance(key, str) else (key, n)
        n += 1
    return candidate


def _redact_mapping(value: Mapping[Any, Any], secrets: list[str]) -> dict[Any, Any]:
    redacted: dict[Any, Any] = {}
    for key, item in value.items():
        redacted_key = _distinct_key(redact_filtered_secrets(key, secrets), redacted)
        redacted[redacted_key] = redact_filtered_secrets(item, secrets)
    return redacted


_REDACTION_HANDLERS: tuple[tuple[Callable[[Any], bool], RedactionHandler], ...] = (
    (lambda v: isinstance(v, str), _redact_text),
    (lambda v: isinstance(v, BaseException), _redact_error),
    (lambda v: isinstance(v, (list, tuple, set, frozenset)), _redact_sequence),
    (lambda v: isinstance(v, Mapping), _redact_mapping),
    (lambda v: v is None, lambda v, secrets: None),
)


def redact_filtered_secrets(value: Any, secrets: list[str]) -> Any:
    """Redact already-gated secrets from any value. Never mutates the input."""
    if not secrets:
        return value
    for predicate, handler in _REDACTION_HANDLERS:
        if predicate(value):
            return handler(value, secrets)
    return _redact_with_json(value, secrets)


def redact_secrets(value: Any, secrets: Iterable[Any]) -> Any:
    """Gate the secrets by complexity, then redact them from `value`."""
    return redact_filtered_secrets(value, filter_complex_secrets(secrets))


class RedactedLogger(ConsoleLogger):
    """ConsoleLogger bound to one invocation's secrets; every argument is redacted."""

    def __init__(self, secrets: Iterable[Any], console: Console | None = None):
        super().__init__(console)
        self._secrets = filter_complex_secrets(secrets)

    def _prepare(self, args: tuple[Any, ...]) -> list[Any]:
        return [redact_filtered_secrets(arg, self._secrets) for arg in args]
