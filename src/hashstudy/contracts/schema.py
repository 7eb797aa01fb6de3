"""JSON Schema validation for experiment result summaries."""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

RESULTS_SCHEMA = "hashstudy.results.v1"


def _default_schema_text() -> str:
    schema_resource = resources.files("hashstudy.contracts") / "results_schema.json"
    with schema_resource.open(encoding="utf-8") as stream:
        return stream.read()


def load_results_schema(custom_schema: Path | None = None) -> dict[str, Any]:
    if custom_schema is None:
        return json.loads(_default_schema_text())
    return json.loads(custom_schema.read_text(encoding="utf-8"))


def _numbers(*values: Any) -> bool:
    return all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in values)


def validate_summary(payload: Any, schema: dict[str, Any] | None = None) -> list[str]:
    """Return human-readable schema violations for ``payload`` (empty when valid)."""

    validator = Draft202012Validator(schema or load_results_schema())
    errors = sorted(validator.iter_errors(payload), key=lambda err: list(err.path))
    messages = [f"{err.message} @ {list(err.path)}" for err in errors]
    if messages or not isinstance(payload, dict):
        return messages

    # Gap extremes are ordered whenever a row carries any gap at all.
    # A looser custom schema may admit rows without these fields; skip such checks.
    rows = payload.get("rows", [])
    for idx, row in enumerate(rows if isinstance(rows, list) else []):
        if not isinstance(row, dict):
            continue
        smallest, largest = row.get("smallest_gap"), row.get("largest_gap")
        avg = row.get("avg_gap")
        if _numbers(smallest, largest, avg) and largest and not smallest <= avg <= largest:
            messages.append(
                f"row {idx}: gap statistics out of order "
                f"(smallest={smallest}, avg={avg}, largest={largest})"
            )
        occupied, table_size = row.get("occupied_slots"), row.get("table_size")
        if _numbers(occupied, table_size) and occupied > table_size:
            messages.append(f"row {idx}: occupied_slots exceeds table_size")
    return messages


__all__ = ["RESULTS_SCHEMA", "load_results_schema", "validate_summary"]
