"""Logging setup shared by every hashstudy command."""

from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOGGER_NAME = "hashstudy"
TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s | %(message)s"
TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"
ROTATE_BYTES = 5 * 1024 * 1024
ROTATE_KEEP = 5


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, TIME_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack"] = self.formatStack(record.stack_info)
        return json.dumps(entry, ensure_ascii=False)


def _handlers(log_file: str | None, max_bytes: int, backup_count: int) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
            )
        )
    return handlers


def configure_logging(
    use_json: bool = False,
    log_file: str | None = None,
    *,
    verbose: bool = False,
    max_bytes: int = ROTATE_BYTES,
    backup_count: int = ROTATE_KEEP,
) -> logging.Logger:
    """(Re)install stderr and optional rotating-file handlers on the hashstudy logger.

    Calling it again replaces the previous handlers, so a command can switch
    to JSON output after argument parsing.
    """

    logger = logging.getLogger(LOGGER_NAME)
    for stale in list(logger.handlers):
        logger.removeHandler(stale)
        stale.close()

    formatter = JsonFormatter() if use_json else logging.Formatter(TEXT_FORMAT, TIME_FORMAT)
    for handler in _handlers(log_file, max_bytes, backup_count):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False
    return logger


__all__ = [
    "JsonFormatter",
    "LOGGER_NAME",
    "ROTATE_BYTES",
    "ROTATE_KEEP",
    "configure_logging",
]
