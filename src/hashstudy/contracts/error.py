"""Exit codes and the JSON error envelope written by hashstudy commands.

Every failure a command can anticipate is raised as an ``EnvelopeError``
subclass. ``guard_cli`` converts it into a single JSON line on stderr and the
subclass's exit code, so scripts driving a sweep can branch on ``$?`` and on
the ``error`` field without scraping log output.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum
from functools import wraps
from typing import Any, ClassVar, NoReturn, TypeVar

logger = logging.getLogger(__name__)
T = TypeVar("T")


class Exit(IntEnum):
    OK = 0
    BAD_INPUT = 2
    INVARIANT = 3
    POLICY = 4
    IO = 5


@dataclass(slots=True)
class ErrorEnvelope:
    error: str
    detail: str
    hint: str | None = None

    def to_json(self) -> str:
        payload = {"error": self.error, "detail": self.detail}
        if self.hint:
            payload["hint"] = self.hint
        return json.dumps(payload, ensure_ascii=False)


class EnvelopeError(Exception):
    """Anticipated failure carrying its envelope kind, exit code and optional hint."""

    kind: ClassVar[str] = "Policy"
    exit_code: ClassVar[Exit] = Exit.POLICY

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint

    def envelope(self) -> ErrorEnvelope:
        return ErrorEnvelope(error=self.kind, detail=str(self), hint=self.hint)


class BadInputError(EnvelopeError):
    """Malformed keys, flags or config values."""

    kind = "BadInput"
    exit_code = Exit.BAD_INPUT


class InvariantError(EnvelopeError):
    """A table or results summary failed its consistency checks."""

    kind = "Invariant"
    exit_code = Exit.INVARIANT


class PolicyError(EnvelopeError):
    """Unsupported structure or operation."""


class IOErrorEnvelope(EnvelopeError):  # noqa: N818 - pairs with Exit.IO
    kind = "IO"
    exit_code = Exit.IO


def die(code: Exit, envelope: ErrorEnvelope) -> NoReturn:
    """Write ``envelope`` as one JSON line on stderr and exit with ``code``."""

    sys.stderr.write(envelope.to_json() + "\n")
    try:
        sys.stderr.flush()
    finally:
        sys.exit(int(code))


def guard_cli(fn: Callable[..., T]) -> Callable[..., T]:
    """Wrap a command handler so failures exit through ``die``."""

    @wraps(fn)
    def _wrapped(*args: Any, **kwargs: Any) -> T:
        try:
            return fn(*args, **kwargs)
        except EnvelopeError as exc:
            die(exc.exit_code, exc.envelope())
        except FileNotFoundError as exc:
            die(Exit.IO, ErrorEnvelope("FileNotFound", str(exc)))
        except OSError as exc:
            die(Exit.IO, ErrorEnvelope("IO", f"{type(exc).__name__}: {exc}"))
        except Exception as exc:  # pragma: no cover - last-resort envelope
            logger.exception("Unhandled CLI exception")
            die(Exit.POLICY, ErrorEnvelope("Unhandled", f"{type(exc).__name__}: {exc}"))

    return _wrapped


__all__ = [
    "Exit",
    "ErrorEnvelope",
    "EnvelopeError",
    "BadInputError",
    "InvariantError",
    "PolicyError",
    "IOErrorEnvelope",
    "guard_cli",
    "die",
]
