"""Postback test request execution service."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any, Protocol

import requests

from postback_tester.catalog.catalog_models import PostbackTemplate
from postback_tester.notifications import Notification, Notifier, Variant
from postback_tester.url_templating import UnresolvedPolicy, build_postback_url

from .test_log import BoundedTestLog
from .test_outcomes import TestResult

LOGGER = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "AfiliadosBet-Postback-Tester/1.0"
DEFAULT_TIMEOUT_SECONDS = 30
TEST_METHOD = "GET"


class HTTPSession(Protocol):  # pylint: disable=too-few-public-methods
    """Subset of `requests.Session` used by the executor."""

    def get(self, url: str, **kwargs: Any) -> requests.Response: ...


class PostbackTestExecutor:
    """Send postback test requests and record their outcome in the bounded log."""

    def __init__(
        self,
        test_log: BoundedTestLog,
        notifier: Notifier,
        *,
        session: HTTPSession | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        unresolved: UnresolvedPolicy = UnresolvedPolicy.DEFAULT,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._test_log = test_log
        self._notifier = notifier
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds
        self._unresolved = unresolved
        self._clock = clock
        self._headers = {
            "Content-Type": "application/json",
            "User-Agent": user_agent,
        }

    @property
    def test_log(self) -> BoundedTestLog:
        return self._test_log

    def execute(
        self,
        template: PostbackTemplate,
        parameters: Mapping[str, str],
        security_token: str | None = None,
    ) -> TestResult:
        """Resolve the template, send it, log the result and notify the user."""
        url = build_postback_url(
            template.url_template,
            parameters,
            security_token,
            unresolved=self._unresolved,
        )
        result = self.send(url)
        self._test_log.record(result, house=template.house_name, event=template.event_type)
        self._notifier.notify(_summarize(result))
        return result

    def send(self, url: str) -> TestResult:
        """Issue the GET request; transport failures become a status 0 result."""
        LOGGER.info("Sending postback test %s %s", TEST_METHOD, url)
        started = self._clock()
        try:
            response = self._session.get(
                url,
                headers=dict(self._headers),
                timeout=self._timeout_seconds,
            )
            body = _read_body(response)
        except requests.RequestException as exc:
            elapsed_ms = self._elapsed_ms(started)
            LOGGER.warning("Postback test to %s failed: %s", url, exc)
            return TestResult.network_error(url, TEST_METHOD, exc, elapsed_ms)

        elapsed_ms = self._elapsed_ms(started)
        LOGGER.info("Postback test answered %s in %sms", response.status_code, elapsed_ms)
        return TestResult(
            status=response.status_code,
            status_text=response.reason or "",
            body=body,
            final_url=url,
            method=TEST_METHOD,
            response_time_ms=elapsed_ms,
            timestamp=datetime.now(UTC),
        )

    def _elapsed_ms(self, started: float) -> int:
        return int(round((self._clock() - started) * 1000))


def _read_body(response: requests.Response) -> object:
    content_type = response.headers.get("Content-Type", "")
    if "application/json" not in content_type:
        return response.text
    try:
        return response.json()
    except ValueError:
        LOGGER.warning("Response declared JSON but could not be parsed; keeping raw text")
        return response.text


def _summarize(result: TestResult) -> Notification:
    return Notification(
        title="Test executed",
        description=f"Status: {result.status} - {result.status_text}",
        variant=Variant.DEFAULT if result.succeeded else Variant.DESTRUCTIVE,
    )
