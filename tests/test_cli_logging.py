from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from hashstudy.cli import app
from hashstudy.contracts.error import PolicyError


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    app.configure_logging()


def test_json_formatter_with_exc_and_stack() -> None:
    formatter = app.JsonFormatter()
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.getLogger("test").makeRecord(
            "test", logging.ERROR, __file__, 0, "failure", (), sys.exc_info(), func="func"
        )
    record.stack_info = "trace info"
    payload = json.loads(formatter.format(record))
    assert payload["level"] == "ERROR"
    assert payload["msg"] == "failure"
    assert "exc_info" in payload
    assert payload["stack"]


def test_configure_logging_json_and_file(tmp_path: Path) -> None:
    log_file = tmp_path / "app.log"
    app.configure_logging(use_json=True, log_file=str(log_file), verbose=True)
    logger = logging.getLogger("hashstudy")
    logger.debug("debug message")
    assert logger.level == logging.DEBUG
    assert any(isinstance(handler, RotatingFileHandler) for handler in logger.handlers)
    for handler in logger.handlers:
        handler.flush()
    record = json.loads(log_file.read_text(encoding="utf-8").splitlines()[-1])
    assert record["msg"] == "debug message"
    assert record["logger"] == "hashstudy"


def test_configure_logging_replaces_handlers() -> None:
    app.configure_logging()
    app.configure_logging()
    logger = logging.getLogger("hashstudy")
    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO


def test_emit_success_json(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(app, "OUTPUT_JSON", True)
    app.emit_success("demo", text="done", data={"value": 5})
    payload = json.loads(capsys.readouterr().out.strip())
    assert payload == {"ok": True, "command": "demo", "value": 5, "result": "done"}


def test_emit_success_text(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(app, "OUTPUT_JSON", False)
    app.emit_success("demo", text="done", data={"value": 5})
    assert capsys.readouterr().out == "done\n"


def test_build_table_rejects_unknown_structure() -> None:
    with pytest.raises(PolicyError):
        app.build_table("cuckoo", 8)
