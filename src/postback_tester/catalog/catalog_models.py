"""Catalog domain entities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum


@dataclass(frozen=True)
class BettingHouse:
    """Betting house owning one or more postback templates."""

    id: int
    name: str
    security_token: str | None
    active: bool = True


@dataclass(frozen=True)
class PostbackTemplate:  # pylint: disable=too-many-instance-attributes
    """Registered postback URL template for one house event."""

    id: int
    house_id: int
    house_name: str
    name: str
    event_type: str
    url_template: str
    is_active: bool = True
    description: str = ""


@dataclass(frozen=True)
class PostbackDeliveryLog:  # pylint: disable=too-many-instance-attributes
    """Postback call recorded by the backend."""

    id: int
    house_id: int | None
    house_name: str
    event_type: str
    subid: str
    url: str
    status_code: int
    response: str
    executed_at: str
    is_test: bool

    @property
    def succeeded(self) -> bool:
        return 200 <= self.status_code < 300


class DeliveryStatus(str, Enum):
    """Delivery log status filter."""

    SUCCESS = "success"
    FAILURE = "failure"
    TEST = "test"


@dataclass(frozen=True)
class DeliveryLogFilter:
    """Criteria for narrowing backend delivery logs; unset fields match everything."""

    house_id: int | None = None
    event_type: str | None = None
    status: DeliveryStatus | None = None
    subid: str | None = None
    since: date | None = None
    until: date | None = None


@dataclass(frozen=True)
class DeliveryLogSummary:
    """Counters shown above a delivery log listing."""

    total: int
    success: int
    failure: int
    tests: int
