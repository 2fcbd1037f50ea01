"""Test log export entities."""

from __future__ import annotations

from enum import Enum

LOG_SHEET_NAME = "TestLogs"
RUN_INFO_SHEET_NAME = "RunInfo"

EXPORT_COLUMNS: tuple[str, ...] = (
    "Casa",
    "Evento",
    "URL",
    "Status",
    "Tempo (ms)",
    "Data/Hora",
    "Sucesso",
)


class ExportFormat(str, Enum):
    """Supported test log export formats."""

    CSV = "csv"
    XLSX = "xlsx"
