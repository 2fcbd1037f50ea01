"""Backend postback delivery log and simulation use cases."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from postback_tester.catalog import (
    POSTBACK_LOGS_QUERY_KEY,
    BackendApiError,
    CatalogError,
    DeliveryLogFilter,
    QueryCache,
    RefreshScheduler,
    filter_delivery_logs,
    parse_delivery_log,
    summarize_delivery_logs,
)
from postback_tester.notifications import ConsoleNotifier, Notification, Notifier, Variant

from .postback_test_use_case import (
    RunExecutionError,
    backend_client,
    load_run_configuration,
    require_backend,
)
from .run_contracts import DeliveryLogReport

LOGGER = logging.getLogger(__name__)

ReportCallback = Callable[[DeliveryLogReport], None]


def list_postback_logs(
    config_path: str,
    *,
    limit: int | None = None,
    criteria: DeliveryLogFilter | None = None,
    session: Any = None,
) -> DeliveryLogReport:
    """Fetch the postback calls recorded by the backend, filtered and limited.

    The summary counts every log matching `criteria`; `limit` only trims the listing.
    """
    client = backend_client(load_run_configuration(config_path), session=session)
    try:
        payload = client.list_postback_logs()
    except BackendApiError as exc:
        raise RunExecutionError(str(exc)) from exc
    return _build_report(payload, criteria, limit)


def retry_postback(config_path: str, log_id: int, *, session: Any = None) -> Any:
    """Ask the backend to fire a logged postback again."""
    client = backend_client(load_run_configuration(config_path), session=session)
    try:
        return client.retry_postback(log_id)
    except BackendApiError as exc:
        raise RunExecutionError(f"Retry of postback log {log_id} failed: {exc}") from exc


def follow_postback_logs(
    config_path: str,
    on_report: ReportCallback,
    *,
    limit: int | None = None,
    criteria: DeliveryLogFilter | None = None,
    interval_seconds: int | None = None,
    session: Any = None,
) -> RefreshScheduler:
    """Build a scheduler that refetches the delivery logs every interval.

    The caller starts and stops the returned scheduler.
    """
    configuration = load_run_configuration(config_path)
    client = backend_client(configuration, session=session)
    backend = require_backend(configuration)
    cache = QueryCache(stale_seconds=backend.stale_seconds)
    cache.register(POSTBACK_LOGS_QUERY_KEY, client.list_postback_logs)

    def _deliver(_key: str, payload: Sequence[Any]) -> None:
        on_report(_build_report(payload, criteria, limit))

    return RefreshScheduler(
        cache,
        (POSTBACK_LOGS_QUERY_KEY,),
        interval_seconds=interval_seconds or backend.refresh_interval_seconds,
        on_refresh=_deliver,
    )


def parse_simulation_parameters(text: str) -> dict[str, Any]:
    """Parse the JSON object of parameters sent with a simulated postback."""
    try:
        parsed = json.loads(text)
    except ValueError as exc:
        raise RunExecutionError(f"Invalid JSON parameters: {exc}") from exc
    if not isinstance(parsed, Mapping):
        raise RunExecutionError("Invalid JSON parameters: expected a JSON object.")
    return dict(parsed)


def simulate_postback(  # pylint: disable=too-many-arguments
    config_path: str,
    house_id: int,
    event_type: str,
    parameters: Mapping[str, Any],
    *,
    session: Any = None,
    notifier: Notifier | None = None,
) -> Any:
    """Have the backend process a postback for a house event and return its answer."""
    resolved_notifier = notifier or ConsoleNotifier()
    client = backend_client(load_run_configuration(config_path), session=session)
    LOGGER.info("Simulating %s postback for house %s", event_type, house_id)
    try:
        response = client.simulate_postback(house_id, event_type, parameters)
    except BackendApiError as exc:
        resolved_notifier.notify(
            Notification(
                title="Simulation failed",
                description=str(exc),
                variant=Variant.DESTRUCTIVE,
            )
        )
        raise RunExecutionError(f"Postback simulation failed: {exc}") from exc
    resolved_notifier.notify(
        Notification(title="Postback simulated", description=f"{event_type} for house {house_id}")
    )
    return response


def _build_report(
    payload: Sequence[Any], criteria: DeliveryLogFilter | None, limit: int | None
) -> DeliveryLogReport:
    try:
        logs = tuple(parse_delivery_log(item) for item in payload)
    except CatalogError as exc:
        raise RunExecutionError(str(exc)) from exc
    matching = filter_delivery_logs(logs, criteria or DeliveryLogFilter())
    return DeliveryLogReport(
        logs=matching[:limit] if limit else matching,
        summary=summarize_delivery_logs(matching),
    )
