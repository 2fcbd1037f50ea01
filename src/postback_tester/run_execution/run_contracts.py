"""Run execution entities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from postback_tester.catalog.catalog_models import (
    DeliveryLogSummary,
    PostbackDeliveryLog,
    PostbackTemplate,
)
from postback_tester.results_writing import ExportFormat
from postback_tester.test_execution import TestResult


@dataclass(frozen=True)
class TestRequest:  # pylint: disable=too-many-instance-attributes
    """Input contract for executing one batch of postback tests."""

    __test__ = False

    config_path: str
    postback_id: int | None = None
    house_id: int | None = None
    event_type: str | None = None
    overrides: Mapping[str, str] = field(default_factory=dict)
    output_dir: str | None = None
    export_format: ExportFormat = ExportFormat.CSV
    dry_run: bool = False


@dataclass(frozen=True)
class ExecutedTest:
    """Resolved URL of one template and its result (None for dry runs)."""

    template: PostbackTemplate
    url: str
    result: TestResult | None


@dataclass(frozen=True)
class TestRunOutcome:
    """Output contract for one completed batch."""

    __test__ = False

    tests: tuple[ExecutedTest, ...]
    export_path: Path | None
    dry_run: bool

    @property
    def succeeded(self) -> int:
        return sum(1 for test in self.tests if test.result is not None and test.result.succeeded)


@dataclass(frozen=True)
class DeliveryLogReport:
    """Filtered backend delivery logs with counters over every match."""

    logs: tuple[PostbackDeliveryLog, ...]
    summary: DeliveryLogSummary
