"""REST client for the affiliate platform admin API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import requests

LOGGER = logging.getLogger(__name__)

BETTING_HOUSES_PATH = "/api/admin/betting-houses"
REGISTERED_POSTBACKS_PATH = "/api/admin/registered-postbacks"
POSTBACK_LOGS_PATH = "/api/admin/postback-logs"
RETRY_POSTBACK_PATH = "/api/admin/retry-postback/{log_id}"
SIMULATE_POSTBACK_PATH = "/api/admin/simulate-postback"


class BackendApiError(Exception):
    """Raised when the admin API call fails or answers with a non-2xx status."""

    def __init__(self, message: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message)


class HTTPSession(Protocol):  # pylint: disable=too-few-public-methods
    """Subset of `requests.Session` used by the client."""

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response: ...


class BackendApiClient:
    """Thin wrapper around the admin REST endpoints."""

    def __init__(
        self,
        base_url: str,
        *,
        headers: Mapping[str, str] | None = None,
        timeout_seconds: float = 30,
        session: HTTPSession | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = dict(headers or {})
        self._timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    def request(
        self,
        path: str,
        *,
        method: str = "GET",
        body: object | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """Call an endpoint and return its JSON or text payload.

        Raises:
          BackendApiError: On transport failures and non-2xx responses.
        """
        url = f"{self._base_url}/{path.lstrip('/')}"
        request_headers = dict(self._headers)
        if body is not None:
            request_headers["Content-Type"] = "application/json"
        request_headers.update(headers or {})

        LOGGER.debug("%s %s", method, url)
        try:
            response = self._session.request(
                method,
                url,
                headers=request_headers,
                data=json.dumps(body) if body is not None else None,
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            raise BackendApiError(f"{method} {url} failed: {exc}") from exc

        if not response.ok:
            raise BackendApiError(_error_message(response), status=response.status_code)

        content_type = response.headers.get("Content-Type", "")
        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError as exc:
                raise BackendApiError(f"Invalid JSON returned by {url}") from exc
        return response.text

    def list_betting_houses(self) -> list[Mapping[str, Any]]:
        return _require_list(self.request(BETTING_HOUSES_PATH), BETTING_HOUSES_PATH)

    def list_registered_postbacks(self) -> list[Mapping[str, Any]]:
        return _require_list(self.request(REGISTERED_POSTBACKS_PATH), REGISTERED_POSTBACKS_PATH)

    def list_postback_logs(self) -> list[Mapping[str, Any]]:
        return _require_list(self.request(POSTBACK_LOGS_PATH), POSTBACK_LOGS_PATH)

    def retry_postback(self, log_id: int) -> Any:
        return self.request(RETRY_POSTBACK_PATH.format(log_id=log_id), method="POST")

    def simulate_postback(
        self, house_id: int, event_type: str, parameters: Mapping[str, Any]
    ) -> Any:
        """Ask the backend to process a postback as if the house had sent it."""
        body = {"houseId": house_id, "eventType": event_type, "parameters": dict(parameters)}
        return self.request(SIMULATE_POSTBACK_PATH, method="POST", body=body)


def _error_message(response: requests.Response) -> str:
    text = response.text or response.reason or f"HTTP {response.status_code}"
    try:
        payload = json.loads(text)
    except ValueError:
        return text
    if isinstance(payload, Mapping):
        return str(payload.get("error") or payload.get("message") or text)
    return text


def _require_list(payload: Any, path: str) -> list[Mapping[str, Any]]:
    if not isinstance(payload, list):
        raise BackendApiError(f"Expected a JSON list from {path}.")
    return [item for item in payload if isinstance(item, Mapping)]
