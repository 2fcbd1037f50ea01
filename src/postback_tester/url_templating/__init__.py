"""URL templating exports."""

from .default_values import DEFAULT_PARAMETER_VALUES, FALLBACK_VALUE, resolve_default_value
from .placeholder_detection import detect_placeholders
from .url_builder import (
    ParameterSet,
    UnresolvedPlaceholderError,
    UnresolvedPolicy,
    build_parameter_set,
    build_postback_url,
)

__all__ = [
    "DEFAULT_PARAMETER_VALUES",
    "FALLBACK_VALUE",
    "ParameterSet",
    "UnresolvedPlaceholderError",
    "UnresolvedPolicy",
    "build_parameter_set",
    "build_postback_url",
    "detect_placeholders",
    "resolve_default_value",
]
