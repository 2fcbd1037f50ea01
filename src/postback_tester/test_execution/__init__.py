"""Test execution exports."""

from .http_executor import DEFAULT_USER_AGENT, PostbackTestExecutor
from .test_log import DEFAULT_LOG_CAPACITY, BoundedTestLog
from .test_outcomes import TestLogEntry, TestResult

__all__ = [
    "DEFAULT_LOG_CAPACITY",
    "DEFAULT_USER_AGENT",
    "BoundedTestLog",
    "PostbackTestExecutor",
    "TestLogEntry",
    "TestResult",
]
