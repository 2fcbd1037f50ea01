"""Run execution domain exports."""

from .backend_log_use_case import (
    follow_postback_logs,
    list_postback_logs,
    parse_simulation_parameters,
    retry_postback,
    simulate_postback,
)
from .postback_test_use_case import (
    RunExecutionError,
    execute_postback_tests,
    load_run_configuration,
    open_catalog,
    preview_postback_url,
)
from .run_contracts import DeliveryLogReport, ExecutedTest, TestRequest, TestRunOutcome

__all__ = [
    "DeliveryLogReport",
    "ExecutedTest",
    "RunExecutionError",
    "TestRequest",
    "TestRunOutcome",
    "execute_postback_tests",
    "follow_postback_logs",
    "list_postback_logs",
    "load_run_configuration",
    "open_catalog",
    "parse_simulation_parameters",
    "preview_postback_url",
    "retry_postback",
    "simulate_postback",
]
