"""
app.py

Command-line front end for the hash collision study:
- run: sweep chaining and open addressing (linear, quadratic, double hashing)
  over seeded datasets and table sizes; CSV per table size, summary CSV,
  schema-validated JSON summary and a console line per run
- generate-keys: write a seeded dataset of 9-digit keys
- inspect: load a keys file into one table and print occupancy statistics
- probe-trace: show the probe path of an insert or lookup step by step
- validate-summary: check a JSON results summary against the bundled schema
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any

from hashstudy.analysis.occupancy import OccupancyReport, analyze_table, verify_table
from hashstudy.cli.commands import CLIContext, register_subcommands
from hashstudy.cli.logs import ROTATE_BYTES, ROTATE_KEEP, JsonFormatter, configure_logging
from hashstudy.config import AppConfig, load_app_config
from hashstudy.contracts.error import InvariantError, PolicyError, guard_cli
from hashstudy.core.hashing import HashFunction
from hashstudy.core.keys import Key
from hashstudy.core.tables import ChainingTable, OpenAddressingTable, ProbeStrategy
from hashstudy.experiments.report import (
    format_console_line,
    table_csv_path,
    write_csv,
    write_json_summary,
)
from hashstudy.experiments.runner import ExperimentRow, ExperimentRunner, secondary_for

logger = configure_logging()

APP_CONFIG: AppConfig = AppConfig()
OUTPUT_JSON: bool = False

Table = ChainingTable | OpenAddressingTable


def set_app_config(cfg: AppConfig) -> None:
    global APP_CONFIG
    APP_CONFIG = cfg


def emit_success(
    command: str, *, text: str | None = None, data: dict[str, Any] | None = None
) -> None:
    """Print ``text`` or, under ``--json``, one ``{"ok": true, ...}`` object."""

    if not OUTPUT_JSON:
        if text is not None:
            print(text)
        return
    payload: dict[str, Any] = {"ok": True, "command": command, **(data or {})}
    if text is not None:
        payload.setdefault("result", text)
    print(json.dumps(payload, ensure_ascii=False))


def build_table(structure: str, capacity: int) -> Table:
    if structure == "chaining":
        return ChainingTable(capacity)
    if structure == "open":
        return OpenAddressingTable(capacity)
    raise PolicyError(f"Unknown structure {structure!r}")


def load_table(
    table: Table, keys: list[Key], primary: HashFunction, strategy: ProbeStrategy
) -> int:
    """Insert ``keys`` and return how many inserts failed (open addressing only)."""

    if isinstance(table, ChainingTable):
        for key in keys:
            table.insert(key, primary)
        return 0
    secondary = secondary_for(primary) if strategy is ProbeStrategy.DOUBLE else None
    outcomes = [table.insert(key, primary, secondary, strategy) for key in keys]
    return sum(1 for outcome in outcomes if not outcome.inserted)


def inspect_table(table: Table, *, verify: bool = False) -> OccupancyReport:
    if verify:
        ok, messages = verify_table(table)
        if not ok:
            raise InvariantError("; ".join(messages))
    return analyze_table(table)


def run_sweep(cfg: AppConfig, *, quiet: bool = False) -> dict[str, Any]:
    output_dir = Path(cfg.output.output_dir).expanduser()
    output_dir.mkdir(parents=True, exist_ok=True)
    echo = not quiet and not OUTPUT_JSON

    def on_row(row: ExperimentRow) -> None:
        if echo:
            print(format_console_line(row))

    def on_table_done(dataset_size: int, table_size: int, rows: list[ExperimentRow]) -> None:
        if cfg.output.per_table_csv:
            path = write_csv(table_csv_path(output_dir, dataset_size, table_size), rows)
            logger.debug("Wrote intermediate CSV %s (%d rows)", path, len(rows))

    rows = ExperimentRunner(cfg, on_row=on_row, on_table_done=on_table_done).run()
    summary_csv = write_csv(output_dir / "results_summary.csv", rows)
    logger.info("Wrote %s", summary_csv)
    result: dict[str, Any] = {"runs": len(rows), "summary_csv": str(summary_csv)}
    if cfg.output.json_summary:
        summary_json = write_json_summary(output_dir / "results_summary.json", cfg, rows)
        logger.info("Wrote %s", summary_json)
        result["summary_json"] = str(summary_json)
    return result


def _add_global_options(parser: argparse.ArgumentParser) -> None:
    logs = parser.add_argument_group("logging")
    logs.add_argument("--log-json", action="store_true", help="Write log records as JSON lines")
    logs.add_argument("--log-file", help="Also log to this file, rotating by size")
    logs.add_argument(
        "--log-max-bytes",
        type=int,
        default=ROTATE_BYTES,
        help="Rotate the log file after this many bytes (default: %(default)s)",
    )
    logs.add_argument(
        "--log-backup-count",
        type=int,
        default=ROTATE_KEEP,
        help="Rotated log files to keep (default: %(default)s)",
    )
    logs.add_argument("--verbose", action="store_true", help="Log at DEBUG level")
    parser.add_argument(
        "--json", action="store_true", help="Print one JSON object per command on stdout"
    )
    parser.add_argument(
        "--config",
        help="TOML config file ($HASHSTUDY_CONFIG if unset); HASHSTUDY_* env vars still apply",
    )


def main(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(
        prog="hashstudy",
        description=(
            "Hash collision study: chaining vs open addressing over seeded 9-digit keys, "
            "with collision counts, chain/cluster lengths and gap statistics."
        ),
    )
    _add_global_options(parser)
    ctx = CLIContext(
        emit_success=emit_success,
        app_config=lambda: APP_CONFIG,
        run_sweep=run_sweep,
        build_table=build_table,
        load_table=load_table,
        inspect_table=inspect_table,
        logger=logger,
        json_enabled=lambda: OUTPUT_JSON,
        guard=guard_cli,
    )
    handlers = register_subcommands(parser.add_subparsers(dest="cmd", required=True), ctx)
    args = parser.parse_args(argv)

    global OUTPUT_JSON
    OUTPUT_JSON = args.json
    configure_logging(
        args.log_json,
        args.log_file,
        verbose=args.verbose,
        max_bytes=args.log_max_bytes,
        backup_count=args.log_backup_count,
    )

    handler = handlers.get(args.cmd)
    if handler is None:
        raise PolicyError(f"Unknown command {args.cmd}")

    cfg_path = args.config or os.getenv("HASHSTUDY_CONFIG")
    guard_cli(lambda: set_app_config(load_app_config(cfg_path)))()
    if cfg_path:
        logger.info("Loaded config from %s", cfg_path)
    return handler(args)


def console_main() -> None:
    """Entry point for the ``hashstudy`` console script."""

    try:
        code = main(sys.argv[1:])
    except Exception as exc:  # noqa: BLE001
        logger.exception("Fatal error: %s", exc)
        raise SystemExit(2) from exc
    raise SystemExit(code)


__all__ = [
    "JsonFormatter",
    "build_table",
    "configure_logging",
    "console_main",
    "emit_success",
    "inspect_table",
    "load_table",
    "main",
    "run_sweep",
]


if __name__ == "__main__":
    console_main()
