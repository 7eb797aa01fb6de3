"""Occupancy statistics and probe tracing for hashstudy tables."""

from .occupancy import (
    OccupancyReport,
    RunSummary,
    analyze_table,
    run_lengths,
    summarize_runs,
    verify_table,
)
from .probe import format_trace_lines, trace_probe_contains, trace_probe_insert

__all__ = [
    "OccupancyReport",
    "RunSummary",
    "analyze_table",
    "format_trace_lines",
    "run_lengths",
    "summarize_runs",
    "trace_probe_contains",
    "trace_probe_insert",
    "verify_table",
]
