"""Tests for backend postback log use cases."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Any

import pytest
import requests
from postback_tester.catalog import DeliveryLogFilter, DeliveryStatus
from postback_tester.notifications import RecordingNotifier, Variant
from postback_tester.run_execution import (
    RunExecutionError,
    follow_postback_logs,
    list_postback_logs,
    parse_simulation_parameters,
    retry_postback,
    simulate_postback,
)

_LOGS = [
    {
        "id": index,
        "betting_house_id": 1,
        "event_type": "deposit",
        "url_disparada": f"https://track.example.com/pb?subid=AFF{index}",
        "resposta": "ok",
        "status_code": 200,
        "executado_em": "2026-03-14T15:09:26Z",
        "subid": f"AFF{index}",
        "is_test": False,
        "house_name": "Casa Alpha",
    }
    for index in (3, 2, 1)
]


def _write_config(tmp_path: Path, catalog: dict[str, Any] | None = None) -> Path:
    config = {
        "catalog": catalog
        or {
            "backend": {
                "base_url": "https://admin.example.com",
                "headers": {"Cookie": "sid=1"},
            }
        }
    }
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config), encoding="utf-8")
    return path


def _response(status: int, payload: Any) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.headers["Content-Type"] = "application/json"
    response._content = json.dumps(payload).encode("utf-8")  # pylint: disable=protected-access
    response.encoding = "utf-8"
    return response


class _FakeSession:
    def __init__(self, response: requests.Response) -> None:
        self._response = response
        self.calls: list[tuple[str, str]] = []
        self.bodies: list[Any] = []

    def request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        self.calls.append((method, url))
        if kwargs.get("data") is not None:
            self.bodies.append(json.loads(kwargs["data"]))
        return self._response


def test_list_postback_logs_parses_and_limits(tmp_path: Path) -> None:
    session = _FakeSession(_response(200, _LOGS))

    report = list_postback_logs(str(_write_config(tmp_path)), limit=2, session=session)

    assert [log.id for log in report.logs] == [3, 2]
    assert report.logs[0].subid == "AFF3"
    assert report.summary.total == 3
    assert session.calls == [("GET", "https://admin.example.com/api/admin/postback-logs")]


def test_retry_postback_reports_backend_error(tmp_path: Path) -> None:
    session = _FakeSession(_response(404, {"message": "Log not found"}))

    with pytest.raises(RunExecutionError, match="Retry of postback log 5 failed: Log not found"):
        retry_postback(str(_write_config(tmp_path)), 5, session=session)

    assert session.calls == [("POST", "https://admin.example.com/api/admin/retry-postback/5")]


def test_backend_commands_require_backend_catalog(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path,
        {
            "inline": {
                "postbacks": [
                    {"id": 1, "house_id": 1, "event_type": "click", "url": "https://x.example.com"}
                ]
            }
        },
    )

    with pytest.raises(RunExecutionError, match="requires a catalog.backend"):
        list_postback_logs(str(config_path))


def test_follow_postback_logs_delivers_each_refresh(tmp_path: Path) -> None:
    session = _FakeSession(_response(200, _LOGS))
    delivered: list[tuple[int, ...]] = []

    scheduler = follow_postback_logs(
        str(_write_config(tmp_path)),
        lambda report: delivered.append(tuple(log.id for log in report.logs)),
        limit=1,
        interval_seconds=15,
        session=session,
    )
    scheduler.refresh_now()
    scheduler.refresh_now()

    assert delivered == [(3,), (3,)]
    assert len(session.calls) == 2


def test_list_postback_logs_filters_before_limiting_and_summarizes_matches(
    tmp_path: Path,
) -> None:
    payload = [
        {**_LOGS[0], "status_code": 500, "is_test": True},
        {**_LOGS[1], "executado_em": "2026-03-10T08:00:00Z"},
        {**_LOGS[2], "event_type": "click"},
    ]
    session = _FakeSession(_response(200, payload))

    report = list_postback_logs(
        str(_write_config(tmp_path)),
        limit=1,
        criteria=DeliveryLogFilter(event_type="deposit", since=date(2026, 3, 1)),
        session=session,
    )

    assert [log.id for log in report.logs] == [3]
    assert report.summary.total == 2
    assert report.summary.success == 1
    assert report.summary.failure == 1
    assert report.summary.tests == 1


def test_follow_postback_logs_applies_filters_on_every_refresh(tmp_path: Path) -> None:
    session = _FakeSession(_response(200, _LOGS))
    reports = []

    scheduler = follow_postback_logs(
        str(_write_config(tmp_path)),
        reports.append,
        criteria=DeliveryLogFilter(subid="aff2", status=DeliveryStatus.SUCCESS),
        session=session,
    )
    scheduler.refresh_now()

    assert [log.id for log in reports[0].logs] == [2]
    assert reports[0].summary.total == 1


def test_follow_postback_logs_requires_backend_catalog(tmp_path: Path) -> None:
    config_path = _write_config(
        tmp_path,
        {
            "inline": {
                "postbacks": [
                    {"id": 1, "house_id": 1, "event_type": "click", "url": "https://x.example.com"}
                ]
            }
        },
    )

    with pytest.raises(RunExecutionError, match="requires a catalog.backend"):
        follow_postback_logs(str(config_path), lambda _report: None)


def test_simulate_postback_posts_house_event_and_parameters(tmp_path: Path) -> None:
    session = _FakeSession(_response(200, {"processed": True}))
    notifier = RecordingNotifier()

    response = simulate_postback(
        str(_write_config(tmp_path)),
        3,
        "deposit",
        {"subid": "AFF1", "amount": 50},
        session=session,
        notifier=notifier,
    )

    assert response == {"processed": True}
    assert session.calls == [("POST", "https://admin.example.com/api/admin/simulate-postback")]
    assert session.bodies == [
        {"houseId": 3, "eventType": "deposit", "parameters": {"subid": "AFF1", "amount": 50}}
    ]
    assert notifier.notifications[-1].title == "Postback simulated"


def test_simulate_postback_reports_backend_error(tmp_path: Path) -> None:
    session = _FakeSession(_response(400, {"error": "Unknown event type"}))
    notifier = RecordingNotifier()

    with pytest.raises(RunExecutionError, match="Postback simulation failed: Unknown event type"):
        simulate_postback(
            str(_write_config(tmp_path)), 3, "bogus", {}, session=session, notifier=notifier
        )

    assert notifier.notifications[-1].title == "Simulation failed"
    assert notifier.notifications[-1].variant is Variant.DESTRUCTIVE


def test_parse_simulation_parameters_accepts_json_object() -> None:
    assert parse_simulation_parameters('{"subid": "AFF1", "amount": 50}') == {
        "subid": "AFF1",
        "amount": 50,
    }


@pytest.mark.parametrize("text", ["{subid: AFF1}", "[1, 2]", ""])
def test_parse_simulation_parameters_rejects_invalid_json(text: str) -> None:
    with pytest.raises(RunExecutionError, match="Invalid JSON parameters"):
        parse_simulation_parameters(text)
