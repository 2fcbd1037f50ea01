"""Configuration loader service."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import replace
from pathlib import Path
from typing import Any

import yaml

from postback_tester.catalog.catalog_models import PostbackTemplate
from postback_tester.catalog.postback_catalog import (
    CatalogError,
    parse_betting_house,
    parse_postback_template,
)
from postback_tester.test_execution import DEFAULT_LOG_CAPACITY, DEFAULT_USER_AGENT
from postback_tester.url_templating import UnresolvedPolicy

from .runtime_settings import (
    BackendSettings,
    CatalogConfig,
    Configuration,
    InlineCatalogSettings,
    TesterSettings,
)


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str) -> Configuration:
    """Load and validate the configuration file."""
    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    return Configuration(
        path=path,
        catalog=_parse_catalog_section(parsed.get("catalog")),
        tester=_parse_tester_section(parsed.get("tester")),
        parameters=_parse_parameters_section(parsed.get("parameters")),
    )


def _parse_catalog_section(value: Any) -> CatalogConfig:
    section = _require_mapping(value, "catalog")
    source_candidates = [key for key in ("inline", "backend") if section.get(key)]
    if len(source_candidates) != 1:
        raise ConfigurationError("Exactly one catalog source (inline or backend) must be provided.")

    if source_candidates[0] == "inline":
        return CatalogConfig(inline=_parse_inline_catalog(section["inline"]), backend=None)
    return CatalogConfig(inline=None, backend=_parse_backend_section(section["backend"]))


def _parse_inline_catalog(value: Any) -> InlineCatalogSettings:
    section = _require_mapping(value, "catalog.inline")
    raw_houses = _require_sequence(section.get("houses", []), "catalog.inline.houses")
    raw_postbacks = _require_sequence(section.get("postbacks"), "catalog.inline.postbacks")
    try:
        houses = tuple(
            parse_betting_house(_require_mapping(item, "catalog.inline.houses[]"))
            for item in raw_houses
        )
        postbacks = tuple(
            parse_postback_template(_require_mapping(item, "catalog.inline.postbacks[]"))
            for item in raw_postbacks
        )
    except CatalogError as exc:
        raise ConfigurationError(str(exc)) from exc

    if not postbacks:
        raise ConfigurationError("catalog.inline.postbacks must contain at least one postback.")
    _ensure_unique_ids([house.id for house in houses], "house")
    _ensure_unique_ids([postback.id for postback in postbacks], "postback")

    house_names = {house.id: house.name for house in houses}
    postbacks = tuple(
        _with_house_name(postback, house_names.get(postback.house_id)) for postback in postbacks
    )
    return InlineCatalogSettings(houses=houses, postbacks=postbacks)


def _with_house_name(postback: PostbackTemplate, house_name: str | None) -> PostbackTemplate:
    if postback.house_name or not house_name:
        return postback
    return replace(postback, house_name=house_name)


def _parse_backend_section(value: Any) -> BackendSettings:
    section = _require_mapping(value, "catalog.backend")
    base_url = _require_non_empty_string(section.get("base_url"), "catalog.backend.base_url")
    if not base_url.startswith(("http://", "https://")):
        raise ConfigurationError("catalog.backend.base_url must be an http(s) URL.")
    headers = _parse_string_mapping(section.get("headers"), "catalog.backend.headers")
    return BackendSettings(
        base_url=base_url,
        headers=headers,
        timeout_seconds=_require_positive_int(
            section.get("timeout_seconds", 30), "catalog.backend.timeout_seconds"
        ),
        stale_seconds=_require_positive_int(
            section.get("stale_seconds", 300), "catalog.backend.stale_seconds"
        ),
        refresh_interval_seconds=_require_positive_int(
            section.get("refresh_interval_seconds", 30),
            "catalog.backend.refresh_interval_seconds",
        ),
    )


def _parse_tester_section(value: Any) -> TesterSettings:
    if value is None:
        value = {}
    section = _require_mapping(value, "tester")
    user_agent = section.get("user_agent", DEFAULT_USER_AGENT)
    policy_raw = _require_non_empty_string(
        section.get("unresolved_placeholders", UnresolvedPolicy.DEFAULT.value),
        "tester.unresolved_placeholders",
    ).lower()
    try:
        policy = UnresolvedPolicy(policy_raw)
    except ValueError as exc:
        allowed = ", ".join(item.value for item in UnresolvedPolicy)
        raise ConfigurationError(
            f"tester.unresolved_placeholders must be one of: {allowed}."
        ) from exc
    return TesterSettings(
        timeout_seconds=_require_positive_int(
            section.get("timeout_seconds", 30), "tester.timeout_seconds"
        ),
        user_agent=_require_non_empty_string(user_agent, "tester.user_agent"),
        log_capacity=_require_positive_int(
            section.get("log_capacity", DEFAULT_LOG_CAPACITY), "tester.log_capacity"
        ),
        unresolved_placeholders=policy,
    )


def _parse_parameters_section(value: Any) -> Mapping[str, str]:
    return _parse_string_mapping(value, "parameters")


def _parse_string_mapping(value: Any, section_name: str) -> dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"{section_name} must be a mapping.")
    normalized: dict[str, str] = {}
    for key, item in value.items():
        if not isinstance(key, str) or not key.strip():
            raise ConfigurationError(f"{section_name} keys must be non-empty strings.")
        if not isinstance(item, str):
            raise ConfigurationError(
                f"{section_name}.{key} must be a string (quote numeric values)."
            )
        normalized[key.strip()] = item
    return normalized


def _ensure_unique_ids(ids: Sequence[int], label: str) -> None:
    seen: set[int] = set()
    for item in ids:
        if item in seen:
            raise ConfigurationError(f"Duplicate {label} id {item} in catalog.inline.")
        seen.add(item)


def _require_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' is required.")
    return value


def _require_sequence(value: Any, section_name: str) -> Sequence[Any]:
    if not isinstance(value, Sequence) or isinstance(value, str):
        raise ConfigurationError(f"{section_name} must be a list.")
    return value


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _require_positive_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if value <= 0:
        raise ConfigurationError(f"{field_name} must be greater than zero.")
    return value
