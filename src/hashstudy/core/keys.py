"""Fixed-width numeric record keys."""

from __future__ import annotations

from dataclasses import dataclass

from hashstudy.contracts.error import BadInputError

KEY_WIDTH: int = 9
KEY_LIMIT: int = 10**KEY_WIDTH


@dataclass(frozen=True, slots=True)
class Key:
    """Non-negative integer below ``10**9`` rendered as a zero-padded 9-digit code."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise BadInputError(f"key value must be an int, got {type(self.value).__name__}")
        if not 0 <= self.value < KEY_LIMIT:
            raise BadInputError(f"key value {self.value} outside [0, {KEY_LIMIT})")

    def __str__(self) -> str:
        return f"{self.value:0{KEY_WIDTH}d}"

    @classmethod
    def parse(cls, text: str) -> "Key":
        code = text.strip()
        if len(code) != KEY_WIDTH or not (code.isascii() and code.isdigit()):
            raise BadInputError(
                f"malformed key {text!r}: expected exactly {KEY_WIDTH} decimal digits",
                hint="Keys are zero-padded, e.g. 000000042",
            )
        return cls(int(code))


__all__ = ["KEY_LIMIT", "KEY_WIDTH", "Key"]
