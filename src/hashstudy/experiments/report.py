"""CSV, JSON and console renderings of experiment rows."""

from __future__ import annotations

import csv
import json
import time
from pathlib import Path
from typing import Any, Iterable, Sequence

from hashstudy.config import AppConfig
from hashstudy.contracts.error import InvariantError
from hashstudy.contracts.schema import RESULTS_SCHEMA, validate_summary
from hashstudy.experiments.runner import CSV_HEADER, ExperimentRow


def _csv_cells(row: ExperimentRow) -> list[str]:
    cells: list[str] = []
    for name in CSV_HEADER:
        value = getattr(row, name)
        if name == "avg_gap":
            cells.append(f"{value:.2f}")
        else:
            cells.append(str(value))
    return cells


def write_csv(path: Path, rows: Iterable[ExperimentRow]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.writer(fh)
        writer.writerow(CSV_HEADER)
        for row in rows:
            writer.writerow(_csv_cells(row))
    return path


def table_csv_path(output_dir: Path, dataset_size: int, table_size: int) -> Path:
    return output_dir / f"results_ds{dataset_size}_t{table_size}.csv"


def build_summary(cfg: AppConfig, rows: Sequence[ExperimentRow]) -> dict[str, Any]:
    return {
        "schema": RESULTS_SCHEMA,
        "generated": time.strftime("%Y-%m-%dT%H:%M:%S"),
        "config": cfg.to_dict(),
        "rows": [row.to_dict() for row in rows],
    }


def write_json_summary(path: Path, cfg: AppConfig, rows: Sequence[ExperimentRow]) -> Path:
    payload = build_summary(cfg, rows)
    problems = validate_summary(payload)
    if problems:
        raise InvariantError("Results summary failed schema validation: " + "; ".join(problems))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def format_console_line(row: ExperimentRow) -> str:
    if row.structure == "chaining":
        return (
            f"chaining | hf={row.hash_a} | insertMs={row.insert_ms:.1f} | coll={row.collisions} | "
            f"searchMs={row.search_ms:.1f} | found={row.found} | "
            f"largestChain={row.largest_chain_or_cluster}"
        )
    return (
        f"open | hf={row.hash_a} | probe={row.probe} | insertMs={row.insert_ms:.1f} | "
        f"coll={row.collisions} | searchMs={row.search_ms:.1f} | found={row.found} | "
        f"largestCluster={row.largest_chain_or_cluster} | fails={row.insert_failures}"
    )


__all__ = [
    "build_summary",
    "format_console_line",
    "table_csv_path",
    "write_csv",
    "write_json_summary",
]
