"""Results writing domain exports."""

from .export_models import EXPORT_COLUMNS, ExportFormat
from .log_exporter import (
    ExportError,
    default_export_filename,
    export_test_log,
    render_test_log_csv,
    write_test_log_workbook,
)

__all__ = [
    "EXPORT_COLUMNS",
    "ExportError",
    "ExportFormat",
    "default_export_filename",
    "export_test_log",
    "render_test_log_csv",
    "write_test_log_workbook",
]
