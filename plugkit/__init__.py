"""plugkit - declarative parameter resolution and secret redaction for plugin actions."""

__version__ = "0.1.0"

from .bootstrap import (
    OPERATION_FINISHED_SUCCESSFULLY_MESSAGE,
    AutocompleteContext,
    HandlerContext,
    bootstrap,
    generate_autocomplete_function,
    generate_plugin_method,
)
from .errors import (
    AutocompleteParamsError,
    ConfigurationError,
    MissingParameterError,
    ParameterError,
    ParameterParseError,
    ParameterValidationError,
    PluginError,
)
from .redaction import REDACTED_PLACEHOLDER, redact_secrets

__all__ = [
    "__version__",
    # Bootstrap
    "AutocompleteContext",
    "HandlerContext",
    "OPERATION_FINISHED_SUCCESSFULLY_MESSAGE",
    "bootstrap",
    "generate_autocomplete_function",
    "generate_plugin_method",
    # Errors
    "AutocompleteParamsError",
    "ConfigurationError",
    "MissingParameterError",
    "ParameterError",
    "ParameterParseError",
    "ParameterValidationError",
    "PluginError",
    # Redaction
    "REDACTED_PLACEHOLDER",
    "redact_secrets",
]
