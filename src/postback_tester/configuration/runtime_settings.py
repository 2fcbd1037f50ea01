"""Configuration domain entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from postback_tester.catalog.catalog_models import BettingHouse, PostbackTemplate
from postback_tester.url_templating import UnresolvedPolicy


@dataclass(frozen=True)
class BackendSettings:
    """Admin API connectivity configuration."""

    base_url: str
    headers: Mapping[str, str]
    timeout_seconds: int
    stale_seconds: int
    refresh_interval_seconds: int


@dataclass(frozen=True)
class InlineCatalogSettings:
    """Houses and postback templates declared in the configuration file."""

    houses: tuple[BettingHouse, ...]
    postbacks: tuple[PostbackTemplate, ...]


@dataclass(frozen=True)
class CatalogConfig:
    """Normalized catalog source; exactly one of inline or backend is set."""

    inline: InlineCatalogSettings | None
    backend: BackendSettings | None


@dataclass(frozen=True)
class TesterSettings:
    """Postback test request settings."""

    timeout_seconds: int
    user_agent: str
    log_capacity: int
    unresolved_placeholders: UnresolvedPolicy


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate."""

    path: Path
    catalog: CatalogConfig
    tester: TesterSettings
    parameters: Mapping[str, str]
