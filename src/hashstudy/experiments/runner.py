"""Experiment sweep comparing chaining and open addressing across hash functions."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import asdict, dataclass
from typing import Any, Optional

from hashstudy.analysis.occupancy import analyze_table, verify_table
from hashstudy.config import AppConfig
from hashstudy.contracts.error import InvariantError
from hashstudy.core.hashing import HashFunction
from hashstudy.core.keys import Key
from hashstudy.core.tables import ChainingTable, OpenAddressingTable, ProbeStrategy
from hashstudy.workloads.datasets import generate_keys

logger = logging.getLogger("hashstudy")

Clock = Callable[[], float]
DatasetFactory = Callable[[int, int], Sequence[Key]]


@dataclass(frozen=True)
class ExperimentRow:
    dataset_size: int
    seed: int
    table_size: int
    structure: str
    hash_a: str
    hash_b: str
    probe: str
    insert_ms: float
    collisions: int
    search_ms: float
    found: int
    insert_failures: int
    occupied_slots: int
    largest_chain_or_cluster: int
    smallest_gap: int
    largest_gap: int
    avg_gap: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


CSV_HEADER: tuple[str, ...] = tuple(ExperimentRow.__dataclass_fields__)


def secondary_for(primary: HashFunction) -> HashFunction:
    """Secondary hash paired with ``primary`` for double hashing."""

    if primary is HashFunction.MODULO:
        return HashFunction.MULTIPLICATIVE
    return HashFunction.MODULO


def _elapsed_ms(start: float, end: float) -> float:
    return round((end - start) * 1000.0, 3)


class ExperimentRunner:
    def __init__(
        self,
        cfg: AppConfig,
        *,
        dataset_factory: DatasetFactory = generate_keys,
        clock: Optional[Clock] = None,
        on_row: Optional[Callable[[ExperimentRow], None]] = None,
        on_table_done: Optional[Callable[[int, int, list[ExperimentRow]], None]] = None,
    ) -> None:
        self.cfg = cfg
        self.dataset_factory = dataset_factory
        self.clock = clock or time.perf_counter
        self.on_row = on_row
        self.on_table_done = on_table_done

    def run(self) -> list[ExperimentRow]:
        sweep = self.cfg.sweep
        hash_functions = sweep.resolved_hash_functions()
        strategies = sweep.resolved_probe_strategies()
        rows: list[ExperimentRow] = []
        for dataset_size in sweep.dataset_sizes:
            for seed in sweep.seeds:
                logger.info("Generating dataset (n=%d, seed=%d)", dataset_size, seed)
                keys = self.dataset_factory(dataset_size, seed)
                for table_size in sweep.table_sizes:
                    logger.info("Table size=%d", table_size)
                    batch: list[ExperimentRow] = []
                    for hash_fn in hash_functions:
                        batch.append(self._emit(self.run_chaining(keys, seed, table_size, hash_fn)))
                    for primary in hash_functions:
                        for strategy in strategies:
                            batch.append(
                                self._emit(self.run_open(keys, seed, table_size, primary, strategy))
                            )
                    rows.extend(batch)
                    if self.on_table_done:
                        self.on_table_done(dataset_size, table_size, list(rows))
        logger.info("Sweep complete: %d runs", len(rows))
        return rows

    def _emit(self, row: ExperimentRow) -> ExperimentRow:
        if self.on_row:
            self.on_row(row)
        return row

    def _check(self, table: ChainingTable | OpenAddressingTable, label: str) -> None:
        if not self.cfg.sweep.verify:
            return
        ok, messages = verify_table(table)
        if not ok:
            raise InvariantError(f"{label}: " + "; ".join(messages))

    def run_chaining(
        self, keys: Sequence[Key], seed: int, table_size: int, hash_fn: HashFunction
    ) -> ExperimentRow:
        table = ChainingTable(table_size)
        t0 = self.clock()
        for key in keys:
            table.insert(key, hash_fn)
        t1 = self.clock()
        found = sum(1 for key in keys if table.contains(key, hash_fn))
        t2 = self.clock()
        self._check(table, f"chaining/{hash_fn.label}/m={table_size}")
        return self._row(
            keys, seed, table, "chaining", hash_fn.label, "-", "-", t0, t1, t2, found, 0
        )

    def run_open(
        self,
        keys: Sequence[Key],
        seed: int,
        table_size: int,
        primary: HashFunction,
        strategy: ProbeStrategy,
    ) -> ExperimentRow:
        secondary = secondary_for(primary) if strategy is ProbeStrategy.DOUBLE else None
        table = OpenAddressingTable(table_size)
        failures = 0
        t0 = self.clock()
        for key in keys:
            if not table.insert(key, primary, secondary, strategy).inserted:
                failures += 1
        t1 = self.clock()
        found = sum(1 for key in keys if table.contains(key, primary, secondary, strategy))
        t2 = self.clock()
        if failures:
            logger.debug(
                "open/%s/%s m=%d: %d inserts failed (table full)",
                primary.label,
                strategy.label,
                table_size,
                failures,
            )
        self._check(table, f"open/{primary.label}/{strategy.label}/m={table_size}")
        return self._row(
            keys,
            seed,
            table,
            "open",
            primary.label,
            secondary.label if secondary is not None else "-",
            strategy.label,
            t0,
            t1,
            t2,
            found,
            failures,
        )

    @staticmethod
    def _row(
        keys: Sequence[Key],
        seed: int,
        table: ChainingTable | OpenAddressingTable,
        structure: str,
        hash_a: str,
        hash_b: str,
        probe: str,
        t0: float,
        t1: float,
        t2: float,
        found: int,
        failures: int,
    ) -> ExperimentRow:
        report = analyze_table(table)
        gaps = report.gap_summary
        return ExperimentRow(
            dataset_size=len(keys),
            seed=seed,
            table_size=table.capacity,
            structure=structure,
            hash_a=hash_a,
            hash_b=hash_b,
            probe=probe,
            insert_ms=_elapsed_ms(t0, t1),
            collisions=table.collisions,
            search_ms=_elapsed_ms(t1, t2),
            found=found,
            insert_failures=failures,
            occupied_slots=report.occupied,
            largest_chain_or_cluster=report.largest_chain_or_cluster,
            smallest_gap=gaps.minimum,
            largest_gap=gaps.maximum,
            avg_gap=round(gaps.average, 2),
        )


__all__ = ["CSV_HEADER", "ExperimentRow", "ExperimentRunner", "secondary_for"]
