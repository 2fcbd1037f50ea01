"""Test log export service."""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from datetime import UTC, date, datetime
from pathlib import Path

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from postback_tester.notifications import Notification, Notifier, Variant
from postback_tester.test_execution import BoundedTestLog, TestLogEntry

from .export_models import EXPORT_COLUMNS, LOG_SHEET_NAME, RUN_INFO_SHEET_NAME, ExportFormat


class ExportError(Exception):
    """Raised when the test log cannot be written."""


def render_test_log_csv(entries: Sequence[TestLogEntry]) -> str:
    """Render log entries as CSV: text fields quoted, numeric fields bare."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    buffer.write(",".join(EXPORT_COLUMNS) + "\n")
    for entry in entries:
        writer.writerow(_row_values(entry))
    return buffer.getvalue()


def default_export_filename(today: date | None = None, fmt: ExportFormat = ExportFormat.CSV) -> str:
    """Return `postback_test_logs_<YYYY-MM-DD>.<ext>`."""
    day = today or datetime.now(UTC).date()
    return f"postback_test_logs_{day.isoformat()}.{fmt.value}"


def export_test_log(
    test_log: BoundedTestLog,
    output_dir: Path | str,
    *,
    notifier: Notifier,
    fmt: ExportFormat = ExportFormat.CSV,
    today: date | None = None,
) -> Path | None:
    """Write the current log to `output_dir`; returns None when the log is empty.

    Raises:
      ExportError: If the destination cannot be written.
    """
    entries = test_log.entries()
    if not entries:
        notifier.notify(
            Notification(
                title="Nothing to export",
                description="Run some tests first",
                variant=Variant.DESTRUCTIVE,
            )
        )
        return None

    destination = Path(output_dir) / default_export_filename(today, fmt)
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        if fmt is ExportFormat.XLSX:
            write_test_log_workbook(entries, destination)
        else:
            destination.write_text(render_test_log_csv(entries), encoding="utf-8")
    except OSError as exc:
        raise ExportError(f"Failed to export test log to {destination}: {exc}") from exc

    notifier.notify(
        Notification(
            title="Logs exported",
            description=f"{len(entries)} entries written to {destination.name}",
        )
    )
    return destination.resolve()


def write_test_log_workbook(entries: Sequence[TestLogEntry], output_path: Path | str) -> None:
    """Write log entries to an Excel workbook with a RunInfo summary sheet."""
    workbook = Workbook()
    sheet = workbook.active
    if sheet is None:
        raise RuntimeError("Workbook active sheet is not available.")
    assert isinstance(sheet, Worksheet)
    sheet.title = LOG_SHEET_NAME

    for column_index, name in enumerate(EXPORT_COLUMNS, start=1):
        sheet.cell(row=1, column=column_index, value=name).style = "Headline 1"
        sheet.column_dimensions[get_column_letter(column_index)].width = max(
            12, min(len(name) + 6, 40)
        )
    sheet.column_dimensions[get_column_letter(EXPORT_COLUMNS.index("URL") + 1)].width = 80

    for row_index, entry in enumerate(entries, start=2):
        for column_index, value in enumerate(_row_values(entry), start=1):
            sheet.cell(row=row_index, column=column_index, value=value)

    _write_run_info_sheet(workbook, entries)
    workbook.save(Path(output_path))


def _write_run_info_sheet(workbook: Workbook, entries: Sequence[TestLogEntry]) -> None:
    sheet = workbook.create_sheet(RUN_INFO_SHEET_NAME)
    succeeded = sum(1 for entry in entries if entry.success)
    response_times = [entry.response_time_ms for entry in entries]
    rows = (
        ("exported_at", datetime.now(UTC).isoformat()),
        ("total", len(entries)),
        ("succeeded", succeeded),
        ("failed", len(entries) - succeeded),
        ("avg_response_time_ms", round(sum(response_times) / len(response_times))),
    )
    for row, (key, value) in enumerate(rows, start=1):
        sheet.cell(row=row, column=1, value=key)
        sheet.cell(row=row, column=2, value=value)


def _row_values(entry: TestLogEntry) -> tuple[object, ...]:
    return (
        entry.house,
        entry.event,
        entry.url,
        entry.status,
        entry.response_time_ms,
        _format_timestamp(entry.timestamp),
        "Sim" if entry.success else "Não",
    )


def _format_timestamp(value: datetime) -> str:
    return value.astimezone().strftime("%d/%m/%Y, %H:%M:%S")
