"""Postback test run use-case service."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from postback_tester.catalog import (
    BackendApiClient,
    BackendApiError,
    BackendCatalog,
    CatalogError,
    InlineCatalog,
    PostbackCatalog,
    PostbackTemplate,
    QueryCache,
    filter_postbacks,
    get_postback,
    house_for,
)
from postback_tester.configuration import (
    BackendSettings,
    Configuration,
    ConfigurationError,
    load_configuration,
)
from postback_tester.notifications import ConsoleNotifier, Notifier
from postback_tester.results_writing import ExportError, export_test_log
from postback_tester.test_execution import BoundedTestLog, PostbackTestExecutor
from postback_tester.url_templating import (
    UnresolvedPlaceholderError,
    build_parameter_set,
    build_postback_url,
)

from .run_contracts import ExecutedTest, TestRequest, TestRunOutcome

LOGGER = logging.getLogger(__name__)


class RunExecutionError(Exception):
    """Raised when a run use case cannot be completed."""


def execute_postback_tests(
    request: TestRequest,
    *,
    session: Any = None,
    notifier: Notifier | None = None,
    catalog: PostbackCatalog | None = None,
) -> TestRunOutcome:
    """Resolve the selected templates, send them one by one and export the log."""
    resolved_notifier = notifier or ConsoleNotifier()
    configuration = load_run_configuration(request.config_path)
    resolved_catalog = catalog or open_catalog(configuration, session=session)
    planned = _plan_tests(configuration, resolved_catalog, request)

    if request.dry_run:
        return TestRunOutcome(
            tests=tuple(
                ExecutedTest(template=template, url=url, result=None)
                for template, url, _, _ in planned
            ),
            export_path=None,
            dry_run=True,
        )

    executor = PostbackTestExecutor(
        BoundedTestLog(configuration.tester.log_capacity),
        resolved_notifier,
        session=session,
        timeout_seconds=configuration.tester.timeout_seconds,
        user_agent=configuration.tester.user_agent,
        unresolved=configuration.tester.unresolved_placeholders,
    )
    executed = []
    for template, url, parameters, token in planned:
        result = executor.execute(template, parameters, token)
        executed.append(ExecutedTest(template=template, url=url, result=result))

    export_path = None
    if request.output_dir:
        try:
            export_path = export_test_log(
                executor.test_log,
                request.output_dir,
                notifier=resolved_notifier,
                fmt=request.export_format,
            )
        except ExportError as exc:
            raise RunExecutionError(str(exc)) from exc

    return TestRunOutcome(tests=tuple(executed), export_path=export_path, dry_run=False)


def preview_postback_url(
    config_path: str,
    postback_id: int,
    overrides: Mapping[str, str] | None = None,
    *,
    session: Any = None,
    catalog: PostbackCatalog | None = None,
) -> str:
    """Return the resolved URL of one template without sending it."""
    request = TestRequest(
        config_path=config_path,
        postback_id=postback_id,
        overrides=dict(overrides or {}),
        dry_run=True,
    )
    outcome = execute_postback_tests(request, session=session, catalog=catalog)
    return outcome.tests[0].url


def open_catalog(configuration: Configuration, *, session: Any = None) -> PostbackCatalog:
    """Build the catalog source selected by the configuration."""
    inline = configuration.catalog.inline
    if inline is not None:
        return InlineCatalog(inline.houses, inline.postbacks)
    return BackendCatalog(
        backend_client(configuration, session=session),
        QueryCache(stale_seconds=require_backend(configuration).stale_seconds),
    )


def backend_client(configuration: Configuration, *, session: Any = None) -> BackendApiClient:
    backend = require_backend(configuration)
    return BackendApiClient(
        backend.base_url,
        headers=backend.headers,
        timeout_seconds=backend.timeout_seconds,
        session=session,
    )


def require_backend(configuration: Configuration) -> BackendSettings:
    if configuration.catalog.backend is None:
        raise RunExecutionError("This command requires a catalog.backend configuration.")
    return configuration.catalog.backend


def load_run_configuration(config_path: str) -> Configuration:
    try:
        return load_configuration(config_path)
    except (ConfigurationError, OSError) as exc:
        raise RunExecutionError(str(exc)) from exc


def _plan_tests(
    configuration: Configuration,
    catalog: PostbackCatalog,
    request: TestRequest,
) -> list[tuple[PostbackTemplate, str, dict[str, str], str | None]]:
    policy = configuration.tester.unresolved_placeholders
    try:
        templates = _select_templates(catalog, request)
        planned = []
        for template in templates:
            house = house_for(catalog, template)
            token = house.security_token if house else None
            parameters = build_parameter_set(
                template.url_template,
                {**configuration.parameters, **request.overrides},
            )
            url = build_postback_url(template.url_template, parameters, token, unresolved=policy)
            planned.append((template, url, parameters, token))
    except (BackendApiError, CatalogError, UnresolvedPlaceholderError) as exc:
        raise RunExecutionError(str(exc)) from exc
    LOGGER.info("Planned %s postback test(s)", len(planned))
    return planned


def _select_templates(
    catalog: PostbackCatalog, request: TestRequest
) -> tuple[PostbackTemplate, ...]:
    if request.postback_id is not None:
        return (get_postback(catalog, request.postback_id),)
    templates = filter_postbacks(
        catalog.postbacks(),
        house_id=request.house_id,
        event_type=request.event_type,
    )
    if not templates:
        raise CatalogError("No active postback templates match the selection.")
    return templates

