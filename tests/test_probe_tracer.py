from __future__ import annotations

import pytest

from hashstudy.analysis.probe import (
    format_trace_lines,
    trace_probe_contains,
    trace_probe_insert,
)
from hashstudy.core.hashing import HashFunction
from hashstudy.core.keys import Key
from hashstudy.core.tables import ChainingTable, OpenAddressingTable, ProbeStrategy

MOD = HashFunction.MODULO


def _open_table(capacity: int, *values: int) -> OpenAddressingTable:
    table = OpenAddressingTable(capacity)
    for value in values:
        table.insert(Key(value), MOD)
    return table


def test_trace_open_contains_reports_match_path() -> None:
    table = _open_table(7, 0, 7, 14)
    trace = trace_probe_contains(table, Key(14), MOD)

    assert trace["structure"] == "open"
    assert trace["found"] is True
    assert trace["terminal"] == "match"
    assert trace["home_slot"] == 0
    assert [step["slot"] for step in trace["path"]] == [0, 1, 2]
    assert [step["matches"] for step in trace["path"]] == [False, False, True]


def test_trace_open_contains_stops_on_empty_slot() -> None:
    table = _open_table(7, 0)
    trace = trace_probe_contains(table, Key(7), MOD)
    assert trace["found"] is False
    assert trace["terminal"] == "empty"
    assert trace["path"][-1] == {"attempt": 1, "slot": 1, "state": "empty"}


def test_trace_open_contains_exhausts_full_table() -> None:
    table = _open_table(3, 0, 1, 2)
    trace = trace_probe_contains(table, Key(3), MOD)
    assert trace["terminal"] == "exhausted"
    assert len(trace["path"]) == 3


def test_trace_open_insert_matches_real_insert_without_mutating() -> None:
    table = _open_table(5, 2, 7)
    trace = trace_probe_insert(table, Key(12), MOD)

    assert trace["terminal"] == "insert"
    assert trace["target_slot"] == 4
    assert trace["collisions"] == 2
    assert trace["probes"] == 3
    assert [step["action"] for step in trace["path"]] == ["collide", "collide", "insert"]
    assert table.slot(4) is None

    outcome = table.insert(Key(12), MOD)
    assert (outcome.index, outcome.probes) == (trace["target_slot"], trace["probes"])


def test_trace_open_insert_into_full_table() -> None:
    table = _open_table(3, 0, 1, 2)
    trace = trace_probe_insert(table, Key(9), MOD)
    assert trace["terminal"] == "full"
    assert trace["target_slot"] is None
    assert trace["collisions"] == 0
    assert trace["probes"] == 3


def test_trace_double_hashing_records_secondary() -> None:
    table = _open_table(7, 3)
    trace = trace_probe_insert(table, Key(10), MOD, HashFunction.MODULO, ProbeStrategy.DOUBLE)
    assert trace["hash_b"] == "mod"
    assert trace["probe"] == "double"
    # h1 = 3, h2 = 3: second candidate is slot 6.
    assert [step["slot"] for step in trace["path"]] == [3, 6]


def test_trace_chaining_contains_and_insert() -> None:
    table = ChainingTable(10)
    for value in (5, 15, 25):
        table.insert(Key(value), MOD)

    hit = trace_probe_contains(table, Key(15), MOD)
    assert hit["structure"] == "chaining"
    assert hit["bucket"] == 5
    assert hit["bucket_size"] == 3
    assert hit["terminal"] == "match"
    assert [entry["position"] for entry in hit["path"]] == [0, 1]

    miss = trace_probe_contains(table, Key(35), MOD)
    assert miss["found"] is False
    assert miss["terminal"] == "end-of-chain"
    assert len(miss["path"]) == 3

    insert = trace_probe_insert(table, Key(45), MOD)
    assert insert["terminal"] == "append"
    assert insert["collision"] is True
    assert insert["position"] == 3
    assert "found" not in insert

    empty_bucket = trace_probe_insert(table, Key(1), MOD)
    assert empty_bucket["collision"] is False
    assert empty_bucket["path"] == []


def test_trace_rejects_unknown_table() -> None:
    with pytest.raises(TypeError):
        trace_probe_contains(object(), Key(1), MOD)  # type: ignore[arg-type]


def test_format_trace_lines_renders_steps() -> None:
    table = _open_table(5, 2)
    trace = trace_probe_insert(table, Key(7), MOD)
    lines = format_trace_lines(trace, seeds=["000000002"], export_path="trace.json")

    assert lines[0] == "Probe trace [open] INSERT key=000000007"
    assert lines[1] == "Terminal: insert"
    assert "probe=linear" in lines[2]
    assert "Seed keys: 000000002" in lines
    assert "Steps:" in lines
    assert "  Probe 0: slot=2, state=occupied, action=collide, occupant=000000002" in lines
    assert "  Probe 1: slot=3, state=empty, action=insert" in lines
    assert lines[-1] == "Trace JSON written to: trace.json"


def test_format_trace_lines_handles_empty_chain() -> None:
    trace = trace_probe_contains(ChainingTable(4), Key(1), MOD)
    lines = format_trace_lines(trace)
    assert lines[1] == "Found: False | Terminal: end-of-chain"
    assert "Bucket: 1 (size 0)" in lines
    assert lines[-1] == "  (no path recorded)"
