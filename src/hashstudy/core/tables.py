from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional

from hashstudy.contracts.error import BadInputError
from hashstudy.core.hashing import HashFunction
from hashstudy.core.keys import Key

logger = logging.getLogger("hashstudy")

_QUADRATIC_COEFFICIENT: int = 3


class ProbeStrategy(Enum):
    """Open-addressing probe sequences."""

    LINEAR = "linear"
    QUADRATIC = "quadratic"
    DOUBLE = "double"

    @property
    def label(self) -> str:
        return self.value

    def index(self, h1: int, h2: int, attempt: int, capacity: int) -> int:
        if self is ProbeStrategy.LINEAR:
            return (h1 + attempt) % capacity
        if self is ProbeStrategy.QUADRATIC:
            return (h1 + attempt + _QUADRATIC_COEFFICIENT * attempt * attempt) % capacity
        # A zero step would pin the sequence to the home slot.
        step = h2 if h2 != 0 else 1
        return (h1 + attempt * step) % capacity

    @classmethod
    def from_label(cls, label: str) -> "ProbeStrategy":
        normalized = label.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        choices = ", ".join(member.value for member in cls)
        raise BadInputError(f"unknown probe strategy {label!r} (expected one of: {choices})")


@dataclass(frozen=True)
class InsertOutcome:
    inserted: bool
    index: Optional[int]
    probes: int


def _check_capacity(capacity: int) -> None:
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
        raise ValueError(f"capacity must be a positive integer, got {capacity!r}")


class ChainingTable:
    """Fixed-size table resolving collisions with per-bucket chains."""

    __slots__ = ("_capacity", "_buckets", "_size", "_collisions")

    def __init__(self, capacity: int) -> None:
        _check_capacity(capacity)
        self._capacity = capacity
        self._buckets: List[List[Key]] = [[] for _ in range(capacity)]
        self._size = 0
        self._collisions = 0

    def __len__(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def collisions(self) -> int:
        """Insertions that landed in an already non-empty bucket."""
        return self._collisions

    def insert(self, key: Key, hash_fn: HashFunction) -> InsertOutcome:
        idx = hash_fn(key, self._capacity)
        bucket = self._buckets[idx]
        if bucket:
            self._collisions += 1
        bucket.append(key)
        self._size += 1
        return InsertOutcome(inserted=True, index=idx, probes=1)

    def contains(self, key: Key, hash_fn: HashFunction) -> bool:
        idx = hash_fn(key, self._capacity)
        return any(entry == key for entry in self._buckets[idx])

    def bucket(self, idx: int) -> List[Key]:
        return list(self._buckets[idx])

    def occupancy(self) -> List[bool]:
        return [bool(bucket) for bucket in self._buckets]

    def occupied_slots(self) -> int:
        return sum(1 for bucket in self._buckets if bucket)

    def chain_lengths(self) -> List[int]:
        return [len(bucket) for bucket in self._buckets]

    def occupied_runs(self) -> List[int]:
        from hashstudy.analysis.occupancy import run_lengths

        return run_lengths(self.occupancy(), target=True)

    def gaps(self) -> List[int]:
        from hashstudy.analysis.occupancy import run_lengths

        return run_lengths(self.occupancy(), target=False)

    def load_factor(self) -> float:
        return self.occupied_slots() / self._capacity


class OpenAddressingTable:
    """Fixed-size open-addressing table without tombstones or resizing."""

    __slots__ = ("_capacity", "_slots", "_size", "_collisions")

    def __init__(self, capacity: int) -> None:
        _check_capacity(capacity)
        self._capacity = capacity
        self._slots: List[Optional[Key]] = [None] * capacity
        self._size = 0
        self._collisions = 0

    def __len__(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def collisions(self) -> int:
        """Occupied slots probed before each successful insertion, summed."""
        return self._collisions

    def slot(self, idx: int) -> Optional[Key]:
        return self._slots[idx]

    def probe_sequence(
        self,
        key: Key,
        primary: HashFunction,
        secondary: Optional[HashFunction] = None,
        strategy: ProbeStrategy = ProbeStrategy.LINEAR,
    ) -> Iterator[int]:
        """Yield the ``capacity`` candidate slots examined for ``key``, in order."""

        cap = self._capacity
        h1 = primary(key, cap)
        h2 = 0
        if strategy is ProbeStrategy.DOUBLE and secondary is not None:
            h2 = secondary(key, cap)
        for attempt in range(cap):
            yield strategy.index(h1, h2, attempt, cap)

    def insert(
        self,
        key: Key,
        primary: HashFunction,
        secondary: Optional[HashFunction] = None,
        strategy: ProbeStrategy = ProbeStrategy.LINEAR,
    ) -> InsertOutcome:
        for attempt, idx in enumerate(self.probe_sequence(key, primary, secondary, strategy)):
            if self._slots[idx] is None:
                self._slots[idx] = key
                self._size += 1
                self._collisions += attempt
                return InsertOutcome(inserted=True, index=idx, probes=attempt + 1)
        logger.debug("Open-addressing insert of %s failed after %d probes", key, self._capacity)
        return InsertOutcome(inserted=False, index=None, probes=self._capacity)

    def contains(
        self,
        key: Key,
        primary: HashFunction,
        secondary: Optional[HashFunction] = None,
        strategy: ProbeStrategy = ProbeStrategy.LINEAR,
    ) -> bool:
        for idx in self.probe_sequence(key, primary, secondary, strategy):
            current = self._slots[idx]
            if current is None:
                return False
            if current == key:
                return True
        return False

    def occupancy(self) -> List[bool]:
        return [slot is not None for slot in self._slots]

    def occupied_slots(self) -> int:
        return self._size

    def cluster_lengths(self) -> List[int]:
        from hashstudy.analysis.occupancy import run_lengths

        return run_lengths(self.occupancy(), target=True)

    def gaps(self) -> List[int]:
        from hashstudy.analysis.occupancy import run_lengths

        return run_lengths(self.occupancy(), target=False)

    def load_factor(self) -> float:
        return self._size / self._capacity


__all__ = [
    "ChainingTable",
    "InsertOutcome",
    "OpenAddressingTable",
    "ProbeStrategy",
]
