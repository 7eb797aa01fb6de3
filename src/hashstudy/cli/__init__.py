"""Command-line interface for hashstudy."""

from .app import console_main, main
from .logs import JsonFormatter, configure_logging

__all__ = ["JsonFormatter", "configure_logging", "console_main", "main"]
