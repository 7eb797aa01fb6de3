"""Probe-path tracing utilities for the chaining and open-addressing tables."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from hashstudy.core.hashing import HashFunction
from hashstudy.core.keys import Key
from hashstudy.core.tables import ChainingTable, OpenAddressingTable, ProbeStrategy

ProbeTrace = Dict[str, Any]


def _open_trace_header(
    table: OpenAddressingTable,
    operation: str,
    key: Key,
    primary: HashFunction,
    secondary: Optional[HashFunction],
    strategy: ProbeStrategy,
) -> ProbeTrace:
    return {
        "structure": "open",
        "operation": operation,
        "key": str(key),
        "capacity": table.capacity,
        "hash_a": primary.label,
        "hash_b": secondary.label if secondary is not None else None,
        "probe": strategy.label,
        "home_slot": primary(key, table.capacity),
    }


def trace_open_contains(
    table: OpenAddressingTable,
    key: Key,
    primary: HashFunction,
    secondary: Optional[HashFunction] = None,
    strategy: ProbeStrategy = ProbeStrategy.LINEAR,
) -> ProbeTrace:
    path: List[Dict[str, Any]] = []
    found = False
    terminal = "exhausted"
    for attempt, idx in enumerate(table.probe_sequence(key, primary, secondary, strategy)):
        occupant = table.slot(idx)
        step: Dict[str, Any] = {"attempt": attempt, "slot": idx}
        if occupant is None:
            step["state"] = "empty"
            path.append(step)
            terminal = "empty"
            break
        matches = occupant == key
        step.update({"state": "occupied", "occupant": str(occupant), "matches": matches})
        path.append(step)
        if matches:
            found = True
            terminal = "match"
            break
    trace = _open_trace_header(table, "contains", key, primary, secondary, strategy)
    trace.update({"found": found, "terminal": terminal, "path": path})
    return trace


def trace_open_insert(
    table: OpenAddressingTable,
    key: Key,
    primary: HashFunction,
    secondary: Optional[HashFunction] = None,
    strategy: ProbeStrategy = ProbeStrategy.LINEAR,
) -> ProbeTrace:
    """Describe where ``insert`` would place ``key`` without mutating ``table``."""

    path: List[Dict[str, Any]] = []
    terminal = "full"
    target: Optional[int] = None
    for attempt, idx in enumerate(table.probe_sequence(key, primary, secondary, strategy)):
        occupant = table.slot(idx)
        if occupant is None:
            path.append({"attempt": attempt, "slot": idx, "state": "empty", "action": "insert"})
            terminal = "insert"
            target = idx
            break
        path.append(
            {
                "attempt": attempt,
                "slot": idx,
                "state": "occupied",
                "occupant": str(occupant),
                "action": "collide",
            }
        )
    trace = _open_trace_header(table, "insert", key, primary, secondary, strategy)
    collisions = len(path) - 1 if terminal == "insert" else 0
    trace.update(
        {
            "terminal": terminal,
            "target_slot": target,
            "collisions": collisions,
            "probes": len(path),
            "path": path,
        }
    )
    return trace


def trace_chaining_contains(table: ChainingTable, key: Key, hash_fn: HashFunction) -> ProbeTrace:
    idx = hash_fn(key, table.capacity)
    bucket = table.bucket(idx)
    path: List[Dict[str, Any]] = []
    found = False
    for pos, entry in enumerate(bucket):
        matches = entry == key
        path.append({"position": pos, "occupant": str(entry), "matches": matches})
        if matches:
            found = True
            break
    return {
        "structure": "chaining",
        "operation": "contains",
        "key": str(key),
        "capacity": table.capacity,
        "hash_a": hash_fn.label,
        "bucket": idx,
        "bucket_size": len(bucket),
        "found": found,
        "terminal": "match" if found else "end-of-chain",
        "path": path,
    }


def trace_chaining_insert(table: ChainingTable, key: Key, hash_fn: HashFunction) -> ProbeTrace:
    trace = trace_chaining_contains(table, key, hash_fn)
    trace.pop("found")
    trace.update(
        {
            "operation": "insert",
            "terminal": "append",
            "collision": trace["bucket_size"] > 0,
            "position": trace["bucket_size"],
        }
    )
    return trace


def trace_probe_contains(
    table: Union[ChainingTable, OpenAddressingTable],
    key: Key,
    primary: HashFunction,
    secondary: Optional[HashFunction] = None,
    strategy: ProbeStrategy = ProbeStrategy.LINEAR,
) -> ProbeTrace:
    if isinstance(table, OpenAddressingTable):
        return trace_open_contains(table, key, primary, secondary, strategy)
    if isinstance(table, ChainingTable):
        return trace_chaining_contains(table, key, primary)
    raise TypeError(f"Unsupported table type: {type(table)!r}")


def trace_probe_insert(
    table: Union[ChainingTable, OpenAddressingTable],
    key: Key,
    primary: HashFunction,
    secondary: Optional[HashFunction] = None,
    strategy: ProbeStrategy = ProbeStrategy.LINEAR,
) -> ProbeTrace:
    if isinstance(table, OpenAddressingTable):
        return trace_open_insert(table, key, primary, secondary, strategy)
    if isinstance(table, ChainingTable):
        return trace_chaining_insert(table, key, primary)
    raise TypeError(f"Unsupported table type: {type(table)!r}")


def format_trace_lines(
    trace: Dict[str, Any],
    *,
    seeds: Optional[Sequence[str]] = None,
    export_path: Optional[Union[str, Path]] = None,
) -> List[str]:
    """Return a human-friendly rendering of a probe trace."""

    lines: List[str] = []
    structure = trace.get("structure", "?")
    operation = trace.get("operation", "?")
    lines.append(f"Probe trace [{structure}] {str(operation).upper()} key={trace.get('key', '?')}")
    status = f"Terminal: {trace.get('terminal')}"
    if "found" in trace:
        status = f"Found: {trace.get('found')} | " + status
    lines.append(status)
    hashes = f"Capacity: {trace.get('capacity')} | hash={trace.get('hash_a')}"
    if trace.get("probe"):
        hashes += f" | probe={trace['probe']}"
    if trace.get("hash_b"):
        hashes += f" | secondary={trace['hash_b']}"
    lines.append(hashes)
    if "bucket" in trace:
        lines.append(f"Bucket: {trace['bucket']} (size {trace.get('bucket_size', 0)})")
    if seeds:
        lines.append("Seed keys: " + ", ".join(seeds))
    lines.append("Steps:")
    path = trace.get("path")
    if not isinstance(path, list) or not path:
        lines.append("  (no path recorded)")
    else:
        for item in path:
            if "attempt" in item:
                prefix = f"  Probe {item['attempt']}: "
            else:
                prefix = f"  Entry {item.get('position', '?')}: "
            attrs: List[str] = []
            for name in ("slot", "state", "action", "occupant", "matches"):
                if name in item and item[name] is not None:
                    value = item[name]
                    if isinstance(value, bool):
                        value = str(value).lower()
                    attrs.append(f"{name}={value}")
            lines.append(prefix + ", ".join(attrs))
    if export_path:
        lines.append(f"Trace JSON written to: {export_path}")
    return lines


__all__ = [
    "format_trace_lines",
    "trace_chaining_contains",
    "trace_chaining_insert",
    "trace_open_contains",
    "trace_open_insert",
    "trace_probe_contains",
    "trace_probe_insert",
]
