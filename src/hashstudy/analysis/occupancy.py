"""Run-length occupancy statistics over table slots and buckets.

A table exposes its layout as one boolean flag per slot (bucket non-empty for
chaining, slot filled for open addressing). Runs of ``True`` are chains or
clusters, runs of ``False`` are gaps; together they always partition the
table's capacity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple, Union

from hashstudy.core.tables import ChainingTable, OpenAddressingTable

Table = Union[ChainingTable, OpenAddressingTable]


def run_lengths(flags: Iterable[bool], *, target: bool = True) -> List[int]:
    """Lengths of maximal runs of consecutive flags equal to ``target``."""

    runs: List[int] = []
    current = 0
    for flag in flags:
        if bool(flag) is target:
            current += 1
        elif current > 0:
            runs.append(current)
            current = 0
    if current > 0:
        runs.append(current)
    return runs


@dataclass(frozen=True)
class RunSummary:
    count: int = 0
    total: int = 0
    minimum: int = 0
    maximum: int = 0
    average: float = 0.0

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "total": self.total,
            "min": self.minimum,
            "max": self.maximum,
            "avg": self.average,
        }


def summarize_runs(runs: Sequence[int]) -> RunSummary:
    """Fold a run sequence into min/max/average; an empty sequence yields zeros."""

    if not runs:
        return RunSummary()
    total = sum(runs)
    return RunSummary(
        count=len(runs),
        total=total,
        minimum=min(runs),
        maximum=max(runs),
        average=total / len(runs),
    )


@dataclass(frozen=True)
class OccupancyReport:
    structure: str
    capacity: int
    keys: int
    occupied: int
    collisions: int
    occupied_runs: List[int] = field(default_factory=list)
    gaps: List[int] = field(default_factory=list)
    largest_chain_or_cluster: int = 0

    @property
    def load_factor(self) -> float:
        return self.occupied / self.capacity

    @property
    def gap_summary(self) -> RunSummary:
        return summarize_runs(self.gaps)

    @property
    def run_summary(self) -> RunSummary:
        return summarize_runs(self.occupied_runs)

    def to_dict(self) -> dict:
        return {
            "structure": self.structure,
            "capacity": self.capacity,
            "keys": self.keys,
            "occupied": self.occupied,
            "collisions": self.collisions,
            "load_factor": self.load_factor,
            "largest_chain_or_cluster": self.largest_chain_or_cluster,
            "runs": self.run_summary.to_dict(),
            "gaps": self.gap_summary.to_dict(),
        }


def analyze_table(table: Table) -> OccupancyReport:
    if not isinstance(table, (ChainingTable, OpenAddressingTable)):
        raise TypeError(f"Unsupported table type: {type(table)!r}")
    flags = table.occupancy()
    runs = run_lengths(flags, target=True)
    gaps = run_lengths(flags, target=False)
    if isinstance(table, ChainingTable):
        structure = "chaining"
        largest = max(table.chain_lengths(), default=0)
    else:
        structure = "open"
        largest = max(runs, default=0)
    return OccupancyReport(
        structure=structure,
        capacity=table.capacity,
        keys=len(table),
        occupied=table.occupied_slots(),
        collisions=table.collisions,
        occupied_runs=runs,
        gaps=gaps,
        largest_chain_or_cluster=largest,
    )


def verify_table(table: Table) -> Tuple[bool, List[str]]:
    """Check the partition, conservation and occupancy invariants of ``table``."""

    messages: List[str] = []
    report = analyze_table(table)
    spanned = sum(report.occupied_runs) + sum(report.gaps)
    if spanned != report.capacity:
        messages.append(f"runs span {spanned} slots but capacity is {report.capacity}")
    if sum(report.occupied_runs) != report.occupied:
        messages.append(
            f"occupied runs cover {sum(report.occupied_runs)} slots, "
            f"occupied_slots() reports {report.occupied}"
        )
    if report.occupied > report.capacity:
        messages.append(f"occupied slots {report.occupied} exceed capacity {report.capacity}")
    if isinstance(table, ChainingTable):
        chained = sum(table.chain_lengths())
        if chained != len(table):
            messages.append(f"chains hold {chained} keys but {len(table)} were inserted")
    elif len(table) != report.occupied:
        messages.append(f"{len(table)} keys stored in {report.occupied} occupied slots")
    return not messages, messages


__all__ = [
    "OccupancyReport",
    "RunSummary",
    "analyze_table",
    "run_lengths",
    "summarize_runs",
    "verify_table",
]
