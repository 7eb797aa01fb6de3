from __future__ import annotations

import copy
import csv
import json
from pathlib import Path

import pytest

from hashstudy.config import AppConfig, SweepPolicy
from hashstudy.contracts.error import InvariantError
from hashstudy.contracts.schema import RESULTS_SCHEMA, load_results_schema, validate_summary
from hashstudy.experiments import report as report_mod
from hashstudy.experiments.report import (
    build_summary,
    format_console_line,
    table_csv_path,
    write_csv,
    write_json_summary,
)
from hashstudy.experiments.runner import CSV_HEADER, ExperimentRow


def _row(**overrides) -> ExperimentRow:
    values = dict(
        dataset_size=100,
        seed=42,
        table_size=10,
        structure="chaining",
        hash_a="mod",
        hash_b="-",
        probe="-",
        insert_ms=1.25,
        collisions=90,
        search_ms=0.5,
        found=100,
        insert_failures=0,
        occupied_slots=7,
        largest_chain_or_cluster=18,
        smallest_gap=1,
        largest_gap=2,
        avg_gap=1.5,
    )
    values.update(overrides)
    return ExperimentRow(**values)


def _cfg() -> AppConfig:
    return AppConfig(sweep=SweepPolicy(table_sizes=[10], dataset_sizes=[100], seeds=[42]))


def test_csv_header_and_cells(tmp_path: Path) -> None:
    path = write_csv(tmp_path / "out" / "rows.csv", [_row(avg_gap=4.0), _row(avg_gap=2.333)])
    with path.open(encoding="utf-8", newline="") as fh:
        records = list(csv.reader(fh))

    assert tuple(records[0]) == CSV_HEADER
    assert records[0][:3] == ["dataset_size", "seed", "table_size"]
    assert records[1][-1] == "4.00"
    assert records[2][-1] == "2.33"
    assert records[1][CSV_HEADER.index("hash_b")] == "-"


def test_table_csv_path_naming(tmp_path: Path) -> None:
    assert table_csv_path(tmp_path, 100000, 1000).name == "results_ds100000_t1000.csv"


def test_summary_validates(tmp_path: Path) -> None:
    open_row = _row(
        structure="open", hash_b="mult", probe="double", smallest_gap=0, largest_gap=0, avg_gap=0.0
    )
    rows = [_row(), open_row]
    payload = build_summary(_cfg(), rows)
    assert payload["schema"] == RESULTS_SCHEMA
    assert validate_summary(payload) == []

    path = write_json_summary(tmp_path / "summary.json", _cfg(), rows)
    stored = json.loads(path.read_text(encoding="utf-8"))
    assert stored["rows"][1]["probe"] == "double"
    assert stored["config"]["seeds"] == [42]


@pytest.mark.parametrize(
    "mutate",
    [
        lambda p: p["rows"][0].update(probe="cuckoo"),
        lambda p: p["rows"][0].update(collisions=-1),
        lambda p: p["rows"][0].pop("found"),
        lambda p: p["rows"][0].update(extra=1),
        lambda p: p.update(schema="other.v2"),
    ],
)
def test_schema_rejects_tampered_payloads(mutate) -> None:
    payload = build_summary(_cfg(), [_row()])
    tampered = copy.deepcopy(payload)
    mutate(tampered)
    assert validate_summary(tampered)


def test_semantic_checks_beyond_schema() -> None:
    payload = build_summary(_cfg(), [_row(smallest_gap=3, largest_gap=2)])
    assert any("gap statistics out of order" in msg for msg in validate_summary(payload))

    crowded = build_summary(_cfg(), [_row(occupied_slots=11)])
    assert validate_summary(crowded) == ["row 0: occupied_slots exceeds table_size"]


def test_write_json_summary_refuses_invalid_rows(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(report_mod, "validate_summary", lambda payload: ["bad row"])
    with pytest.raises(InvariantError, match="bad row"):
        write_json_summary(tmp_path / "summary.json", _cfg(), [_row()])
    assert not (tmp_path / "summary.json").exists()


def test_custom_schema_file(tmp_path: Path) -> None:
    schema_path = tmp_path / "schema.json"
    schema_path.write_text(json.dumps({"type": "object", "required": ["rows"]}), encoding="utf-8")
    schema = load_results_schema(schema_path)
    assert validate_summary({"rows": []}, schema) == []
    assert validate_summary({}, schema)


def test_console_lines() -> None:
    chaining = format_console_line(_row())
    assert chaining.startswith("chaining | hf=mod | insertMs=")
    assert chaining.endswith("largestChain=18")

    open_line = format_console_line(
        _row(structure="open", probe="linear", largest_chain_or_cluster=4, insert_failures=3)
    )
    assert "probe=linear" in open_line
    assert open_line.endswith("largestCluster=4 | fails=3")


def test_loose_schema_rows_skip_semantic_checks(tmp_path: Path) -> None:
    schema_path = tmp_path / "loose.json"
    schema_path.write_text(json.dumps({"type": "object"}), encoding="utf-8")
    schema = load_results_schema(schema_path)

    payload = {"rows": [{"table_size": 4}, {"smallest_gap": 3, "largest_gap": 2, "avg_gap": 1}]}
    assert validate_summary(payload, schema) == [
        "row 1: gap statistics out of order (smallest=3, avg=1, largest=2)"
    ]
    assert validate_summary({"rows": "none"}, schema) == []
