"""Hash functions mapping keys onto table slots."""

from __future__ import annotations

import math
from enum import Enum

from hashstudy.contracts.error import BadInputError
from hashstudy.core.keys import Key

# Knuth's multiplicative constant, the fractional part of the golden ratio.
_KNUTH_A: float = (math.sqrt(5) - 1) / 2

_MASK_32: int = 0xFFFFFFFF


def _to_int32(value: int) -> int:
    value &= _MASK_32
    return value - (1 << 32) if value & 0x80000000 else value


def string_hash32(text: str) -> int:
    """Signed 32-bit polynomial hash (``h = 31*h + c``) of ``text``."""

    h = 0
    for ch in text:
        h = (31 * h + ord(ch)) & _MASK_32
    return _to_int32(h)


def modulo_index(key: Key, capacity: int) -> int:
    return key.value % capacity


def multiplicative_index(key: Key, capacity: int) -> int:
    frac = math.fmod(key.value * _KNUTH_A, 1.0)
    idx = math.floor(capacity * frac)
    # frac * capacity can round up to capacity for frac just below 1.0
    return min(idx, capacity - 1)


def default_index(key: Key, capacity: int) -> int:
    return string_hash32(str(key)) % capacity


class HashFunction(Enum):
    """Closed set of hash variants; the enum value is the stable reporting label."""

    MODULO = "mod"
    MULTIPLICATIVE = "mult"
    DEFAULT = "default"

    @property
    def label(self) -> str:
        return self.value

    def __call__(self, key: Key, capacity: int) -> int:
        if capacity <= 0:
            raise ValueError("capacity must be > 0")
        if self is HashFunction.MODULO:
            return modulo_index(key, capacity)
        if self is HashFunction.MULTIPLICATIVE:
            return multiplicative_index(key, capacity)
        return default_index(key, capacity)

    @classmethod
    def from_label(cls, label: str) -> "HashFunction":
        normalized = label.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        choices = ", ".join(member.value for member in cls)
        raise BadInputError(f"unknown hash function {label!r} (expected one of: {choices})")


__all__ = [
    "HashFunction",
    "default_index",
    "modulo_index",
    "multiplicative_index",
    "string_hash32",
]
