"""Experiment sweeps over table organizations, hash functions and probe strategies."""

from .report import (
    build_summary,
    format_console_line,
    table_csv_path,
    write_csv,
    write_json_summary,
)
from .runner import CSV_HEADER, ExperimentRow, ExperimentRunner, secondary_for

__all__ = [
    "CSV_HEADER",
    "ExperimentRow",
    "ExperimentRunner",
    "build_summary",
    "format_console_line",
    "secondary_for",
    "table_csv_path",
    "write_csv",
    "write_json_summary",
]
