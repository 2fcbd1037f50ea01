"""Default test values for well-known postback parameters."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

FALLBACK_VALUE = "test_value"

DEFAULT_PARAMETER_VALUES: Mapping[str, str] = MappingProxyType(
    {
        "subid": "TEST001",
        "customer_id": "123456",
        "valor": "100.00",
        "evento": "deposit",
        "event": "deposit",
        "amount": "100.00",
        "value": "100.00",
        "user_id": "123456",
        "player_id": "123456",
        "transaction_id": "TXN123456",
        "currency": "BRL",
    }
)


def resolve_default_value(name: str) -> str:
    """Return the default value for a placeholder name, ignoring case."""
    return DEFAULT_PARAMETER_VALUES.get(name.lower(), FALLBACK_VALUE)
