"""Postback URL building service."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from urllib.parse import quote

from .default_values import resolve_default_value
from .placeholder_detection import detect_placeholders

LOGGER = logging.getLogger(__name__)

ParameterSet = dict[str, str]

# Characters left untouched by JavaScript's encodeURIComponent besides [A-Za-z0-9_.~-].
_COMPONENT_SAFE_CHARS = "!*'()"


class UnresolvedPolicy(str, Enum):
    """How placeholders without a usable value are handled."""

    DEFAULT = "default"
    REJECT = "reject"
    KEEP = "keep"


class UnresolvedPlaceholderError(ValueError):
    """Raised when placeholders cannot be resolved under the reject policy."""

    def __init__(self, names: tuple[str, ...]) -> None:
        self.names = names
        super().__init__(f"Unresolved URL placeholders: {', '.join(names)}")


def build_parameter_set(
    url_template: str, overrides: Mapping[str, str] | None = None
) -> ParameterSet:
    """Seed every detected placeholder with its default, then apply overrides.

    An empty override is kept as an empty value; the URL builder's unresolved
    policy decides what happens to it.
    """
    names = detect_placeholders(url_template)
    parameters: ParameterSet = {name: resolve_default_value(name) for name in names}
    for name, value in (overrides or {}).items():
        if name not in parameters:
            LOGGER.debug("Ignoring override for unused placeholder '%s'", name)
            continue
        parameters[name] = value
    return parameters


def build_postback_url(
    url_template: str,
    parameters: Mapping[str, str],
    security_token: str | None = None,
    *,
    unresolved: UnresolvedPolicy = UnresolvedPolicy.DEFAULT,
) -> str:
    """Substitute placeholder values into the template and append the security token.

    Args:
      url_template: Template containing zero or more `{name}` placeholders.
      parameters: Values keyed by placeholder name.
      security_token: Optional token appended as the `token` query parameter.
      unresolved: Policy for placeholders missing from `parameters` or left empty.

    Returns:
      The resolved URL. The result is not checked for well-formedness.

    Raises:
      UnresolvedPlaceholderError: If placeholders are unresolved and the policy is reject.
    """
    names = detect_placeholders(url_template)
    missing = tuple(name for name in names if not parameters.get(name))
    if missing and unresolved is UnresolvedPolicy.REJECT:
        raise UnresolvedPlaceholderError(missing)

    url = url_template
    for name in names:
        value = parameters.get(name)
        if not value:
            if unresolved is UnresolvedPolicy.KEEP:
                LOGGER.warning("Placeholder '{%s}' left unresolved", name)
                continue
            value = resolve_default_value(name)
        url = url.replace(f"{{{name}}}", encode_component(value))

    if security_token:
        separator = "&" if "?" in url else "?"
        url = f"{url}{separator}token={encode_component(security_token)}"
    return url


def encode_component(value: str) -> str:
    """Percent-encode a value the way browsers encode a URI component."""
    return quote(value, safe=_COMPONENT_SAFE_CHARS)
