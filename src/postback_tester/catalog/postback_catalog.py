"""Postback template catalog sources and selection helpers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from typing import Any, Protocol

from .backend_client import BackendApiClient
from .catalog_models import (
    BettingHouse,
    DeliveryLogFilter,
    DeliveryLogSummary,
    DeliveryStatus,
    PostbackDeliveryLog,
    PostbackTemplate,
)
from .query_cache import QueryCache

HOUSES_QUERY_KEY = "betting-houses"
POSTBACKS_QUERY_KEY = "registered-postbacks"
POSTBACK_LOGS_QUERY_KEY = "postback-logs"


class CatalogError(Exception):
    """Raised when catalog data is invalid or a template cannot be found."""


class PostbackCatalog(Protocol):
    """Source of betting houses and their postback templates."""

    def houses(self) -> tuple[BettingHouse, ...]: ...

    def postbacks(self) -> tuple[PostbackTemplate, ...]: ...


class InlineCatalog:
    """Catalog defined directly in the test configuration."""

    def __init__(
        self, houses: Sequence[BettingHouse], postbacks: Sequence[PostbackTemplate]
    ) -> None:
        self._houses = tuple(houses)
        self._postbacks = tuple(postbacks)

    def houses(self) -> tuple[BettingHouse, ...]:
        return self._houses

    def postbacks(self) -> tuple[PostbackTemplate, ...]:
        return self._postbacks


class BackendCatalog:
    """Catalog read from the admin API through a query cache."""

    def __init__(self, client: BackendApiClient, cache: QueryCache | None = None) -> None:
        self._client = client
        self._cache = cache or QueryCache()
        self._cache.register(HOUSES_QUERY_KEY, self._fetch_houses)
        self._cache.register(POSTBACKS_QUERY_KEY, self._fetch_postbacks)

    @property
    def cache(self) -> QueryCache:
        return self._cache

    def houses(self) -> tuple[BettingHouse, ...]:
        return self._cache.get(HOUSES_QUERY_KEY)

    def postbacks(self) -> tuple[PostbackTemplate, ...]:
        return self._cache.get(POSTBACKS_QUERY_KEY)

    def _fetch_houses(self) -> tuple[BettingHouse, ...]:
        return tuple(parse_betting_house(item) for item in self._client.list_betting_houses())

    def _fetch_postbacks(self) -> tuple[PostbackTemplate, ...]:
        return tuple(
            parse_postback_template(item) for item in self._client.list_registered_postbacks()
        )


def get_postback(catalog: PostbackCatalog, postback_id: int) -> PostbackTemplate:
    for template in catalog.postbacks():
        if template.id == postback_id:
            return template
    raise CatalogError(f"Postback template {postback_id} not found.")


def house_for(catalog: PostbackCatalog, template: PostbackTemplate) -> BettingHouse | None:
    for house in catalog.houses():
        if house.id == template.house_id:
            return house
    return None


def filter_postbacks(
    postbacks: Iterable[PostbackTemplate],
    *,
    house_id: int | None = None,
    event_type: str | None = None,
) -> tuple[PostbackTemplate, ...]:
    """Keep active templates matching the optional house and event filters."""
    return tuple(
        template
        for template in postbacks
        if template.is_active
        and (house_id is None or template.house_id == house_id)
        and (event_type is None or template.event_type == event_type)
    )


def event_types(postbacks: Iterable[PostbackTemplate]) -> tuple[str, ...]:
    """Return the distinct event types in first-seen order."""
    seen: dict[str, None] = {}
    for template in postbacks:
        if template.event_type:
            seen.setdefault(template.event_type, None)
    return tuple(seen)


def filter_delivery_logs(
    logs: Iterable[PostbackDeliveryLog], criteria: DeliveryLogFilter
) -> tuple[PostbackDeliveryLog, ...]:
    """Keep delivery logs matching every criterion that is set.

    Subid matching is a case-insensitive substring match. Date bounds are
    inclusive and compare the calendar day of `executed_at`; logs whose
    timestamp cannot be parsed never match a date bound.
    """
    return tuple(log for log in logs if _matches(log, criteria))


def summarize_delivery_logs(logs: Sequence[PostbackDeliveryLog]) -> DeliveryLogSummary:
    success = sum(1 for log in logs if log.succeeded)
    return DeliveryLogSummary(
        total=len(logs),
        success=success,
        failure=len(logs) - success,
        tests=sum(1 for log in logs if log.is_test),
    )


def _matches(  # pylint: disable=too-many-return-statements
    log: PostbackDeliveryLog, criteria: DeliveryLogFilter
) -> bool:
    if criteria.house_id is not None and log.house_id != criteria.house_id:
        return False
    if criteria.event_type is not None and log.event_type != criteria.event_type:
        return False
    if criteria.status is DeliveryStatus.SUCCESS and not log.succeeded:
        return False
    if criteria.status is DeliveryStatus.FAILURE and log.succeeded:
        return False
    if criteria.status is DeliveryStatus.TEST and not log.is_test:
        return False
    if criteria.subid and criteria.subid.lower() not in log.subid.lower():
        return False
    if criteria.since is None and criteria.until is None:
        return True
    executed_on = _executed_on(log)
    if executed_on is None:
        return False
    if criteria.since is not None and executed_on < criteria.since:
        return False
    return criteria.until is None or executed_on <= criteria.until


def _executed_on(log: PostbackDeliveryLog) -> date | None:
    try:
        return datetime.fromisoformat(log.executed_at).date()
    except ValueError:
        return None


def parse_betting_house(raw: Mapping[str, Any]) -> BettingHouse:
    """Build a BettingHouse from an API or configuration mapping."""
    house_id = _require_int(raw.get("id"), "house id")
    name = _require_text(raw.get("name"), f"house {house_id} name")
    token = _first_present(raw, "security_token", "securityToken")
    status = _first_present(raw, "status", "is_active", "isActive")
    return BettingHouse(
        id=house_id,
        name=name,
        security_token=(str(token).strip() or None) if token is not None else None,
        active=True if status is None else bool(status),
    )


def parse_postback_template(raw: Mapping[str, Any]) -> PostbackTemplate:
    """Build a PostbackTemplate from an API or configuration mapping."""
    template_id = _require_int(raw.get("id"), "postback id")
    label = f"postback {template_id}"
    house_id = _require_int(_first_present(raw, "house_id", "houseId"), f"{label} house_id")
    url_template = _require_text(_first_present(raw, "url", "url_template", "urlTemplate"), label)
    event_type = _require_text(_first_present(raw, "event_type", "eventType"), f"{label} event")
    is_active = _first_present(raw, "is_active", "isActive")
    return PostbackTemplate(
        id=template_id,
        house_id=house_id,
        house_name=str(_first_present(raw, "house_name", "houseName") or ""),
        name=str(raw.get("name") or ""),
        event_type=event_type,
        url_template=url_template,
        is_active=True if is_active is None else bool(is_active),
        description=str(raw.get("description") or ""),
    )


def _first_present(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if raw.get(key) is not None:
            return raw[key]
    return None


def _require_int(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise CatalogError(f"{label} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise CatalogError(f"{label} must be an integer.")


def _require_text(value: Any, label: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise CatalogError(f"{label} must be a non-empty string.")
    return value.strip()


def parse_delivery_log(raw: Mapping[str, Any]) -> PostbackDeliveryLog:
    """Build a PostbackDeliveryLog from the admin API's postback log payload."""
    log_id = _require_int(raw.get("id"), "postback log id")
    house_id = _first_present(raw, "betting_house_id", "house_id")
    status_code = _first_present(raw, "status_code", "statusCode")
    return PostbackDeliveryLog(
        id=log_id,
        house_id=_require_int(house_id, f"postback log {log_id} house") if house_id else None,
        house_name=str(raw.get("house_name") or ""),
        event_type=str(raw.get("event_type") or ""),
        subid=str(raw.get("subid") or ""),
        url=str(_first_present(raw, "url_disparada", "url") or ""),
        status_code=_require_int(status_code or 0, f"postback log {log_id} status"),
        response=str(_first_present(raw, "resposta", "response") or ""),
        executed_at=str(_first_present(raw, "executado_em", "executed_at") or ""),
        is_test=bool(raw.get("is_test", False)),
    )
