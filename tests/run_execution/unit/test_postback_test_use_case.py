"""Tests for the postback test run use-case service."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import requests
from postback_tester.notifications import RecordingNotifier
from postback_tester.results_writing import ExportFormat
from postback_tester.run_execution import (
    RunExecutionError,
    TestRequest,
    execute_postback_tests,
    preview_postback_url,
)


def _write_config(tmp_path: Path, **tester: Any) -> Path:
    config = {
        "catalog": {
            "inline": {
                "houses": [
                    {"id": 1, "name": "Casa Alpha", "security_token": "tok123"},
                    {"id": 2, "name": "Casa Beta"},
                ],
                "postbacks": [
                    {
                        "id": 10,
                        "house_id": 1,
                        "event_type": "deposit",
                        "url": "https://track.example.com/pb?subid={subid}&amount={amount}",
                    },
                    {
                        "id": 11,
                        "house_id": 1,
                        "event_type": "click",
                        "url": "https://track.example.com/click?subid={subid}",
                    },
                    {
                        "id": 20,
                        "house_id": 2,
                        "event_type": "deposit",
                        "url": "https://beta.example.com/pb?c={customer_id}",
                    },
                    {
                        "id": 21,
                        "house_id": 2,
                        "event_type": "register",
                        "url": "https://beta.example.com/reg",
                        "is_active": False,
                    },
                ],
            }
        },
        "tester": tester,
        "parameters": {"subid": "AFF1"},
    }
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config), encoding="utf-8")
    return path


def _response(status: int, reason: str = "OK") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response.headers["Content-Type"] = "text/plain"
    response._content = b"ok"  # pylint: disable=protected-access
    response.encoding = "utf-8"
    return response


class _FakeSession:
    def __init__(self, status_by_host: dict[str, int] | None = None) -> None:
        self._status_by_host = status_by_host or {}
        self.urls: list[str] = []

    def get(self, url: str, **_kwargs: Any) -> requests.Response:
        self.urls.append(url)
        for host, status in self._status_by_host.items():
            if host in url:
                return _response(status, "Server Error")
        return _response(200)


def test_executes_selected_templates_in_catalog_order(tmp_path: Path) -> None:
    session = _FakeSession({"beta.example.com": 500})
    notifier = RecordingNotifier()

    outcome = execute_postback_tests(
        TestRequest(config_path=str(_write_config(tmp_path)), event_type="deposit"),
        session=session,
        notifier=notifier,
    )

    assert [test.template.id for test in outcome.tests] == [10, 20]
    assert session.urls == [
        "https://track.example.com/pb?subid=AFF1&amount=100.00&token=tok123",
        "https://beta.example.com/pb?c=123456",
    ]
    assert outcome.succeeded == 1
    assert outcome.export_path is None
    assert len(notifier.notifications) == 2


def test_overrides_take_precedence_over_configured_parameters(tmp_path: Path) -> None:
    session = _FakeSession()

    execute_postback_tests(
        TestRequest(
            config_path=str(_write_config(tmp_path)),
            postback_id=11,
            overrides={"subid": "my sub"},
        ),
        session=session,
        notifier=RecordingNotifier(),
    )

    assert session.urls == ["https://track.example.com/click?subid=my%20sub&token=tok123"]


def test_dry_run_resolves_urls_without_sending(tmp_path: Path) -> None:
    session = _FakeSession()

    outcome = execute_postback_tests(
        TestRequest(config_path=str(_write_config(tmp_path)), house_id=1, dry_run=True),
        session=session,
        notifier=RecordingNotifier(),
    )

    assert outcome.dry_run is True
    assert [test.result for test in outcome.tests] == [None, None]
    assert session.urls == []


def test_exports_the_run_log_when_output_dir_is_given(tmp_path: Path) -> None:
    outcome = execute_postback_tests(
        TestRequest(
            config_path=str(_write_config(tmp_path)),
            house_id=1,
            output_dir=str(tmp_path / "exports"),
            export_format=ExportFormat.CSV,
        ),
        session=_FakeSession(),
        notifier=RecordingNotifier(),
    )

    assert outcome.export_path is not None
    lines = outcome.export_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 3
    assert '"click"' in lines[1]
    assert '"deposit"' in lines[2]


@pytest.mark.parametrize("policy", ["reject", "keep"])
def test_strict_policies_still_resolve_seeded_defaults(tmp_path: Path, policy: str) -> None:
    config_path = str(_write_config(tmp_path, unresolved_placeholders=policy))

    url = preview_postback_url(config_path, 20)

    assert url == "https://beta.example.com/pb?c=123456"


def test_keep_policy_sends_cleared_placeholder_verbatim(tmp_path: Path) -> None:
    config_path = str(_write_config(tmp_path, unresolved_placeholders="keep"))

    url = preview_postback_url(config_path, 10, {"amount": ""})

    assert url == "https://track.example.com/pb?subid=AFF1&amount={amount}&token=tok123"


def test_reject_policy_fails_on_cleared_placeholder_before_any_request(tmp_path: Path) -> None:
    session = _FakeSession()

    with pytest.raises(RunExecutionError, match="Unresolved URL placeholders: subid"):
        execute_postback_tests(
            TestRequest(
                config_path=str(_write_config(tmp_path, unresolved_placeholders="reject")),
                event_type="deposit",
                overrides={"subid": ""},
            ),
            session=session,
            notifier=RecordingNotifier(),
        )

    assert session.urls == []


def test_errors_when_selection_matches_nothing(tmp_path: Path) -> None:
    with pytest.raises(RunExecutionError, match="No active postback templates"):
        execute_postback_tests(
            TestRequest(config_path=str(_write_config(tmp_path)), event_type="register"),
            session=_FakeSession(),
            notifier=RecordingNotifier(),
        )


def test_errors_for_unknown_postback_id(tmp_path: Path) -> None:
    with pytest.raises(RunExecutionError, match="Postback template 99 not found"):
        preview_postback_url(str(_write_config(tmp_path)), 99)


def test_errors_for_missing_configuration(tmp_path: Path) -> None:
    with pytest.raises(RunExecutionError, match="not found"):
        preview_postback_url(str(tmp_path / "missing.yaml"), 10)


def test_preview_returns_resolved_url(tmp_path: Path) -> None:
    url = preview_postback_url(str(_write_config(tmp_path)), 10, {"amount": "5.50"})

    assert url == "https://track.example.com/pb?subid=AFF1&amount=5.50&token=tok123"
