"""Error envelopes and output contracts for hashstudy."""

from .error import (
    BadInputError,
    EnvelopeError,
    ErrorEnvelope,
    Exit,
    InvariantError,
    IOErrorEnvelope,
    PolicyError,
    die,
    guard_cli,
)

__all__ = [
    "BadInputError",
    "EnvelopeError",
    "ErrorEnvelope",
    "Exit",
    "InvariantError",
    "IOErrorEnvelope",
    "PolicyError",
    "die",
    "guard_cli",
]
