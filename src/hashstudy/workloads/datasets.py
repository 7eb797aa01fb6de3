"""Seeded key datasets and their on-disk text format (one 9-digit key per line)."""

from __future__ import annotations

import random
from pathlib import Path
from typing import Iterable, List, Union

from hashstudy.contracts.error import BadInputError
from hashstudy.core.keys import KEY_LIMIT, Key

_KEYS_HINT = "Each non-blank line must hold exactly nine digits, e.g. 000123456"


def generate_keys(count: int, seed: int) -> List[Key]:
    """Draw ``count`` keys uniformly from ``[0, 10**9)``; duplicates are possible."""

    if count <= 0:
        raise ValueError("count must be > 0")
    rng = random.Random(seed)  # noqa: S311  # nosec B311 - deterministic dataset sampler
    return [Key(rng.randrange(KEY_LIMIT)) for _ in range(count)]


def write_keys(path: Union[str, Path], keys: Iterable[Key]) -> int:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    written = 0
    with out_path.open("w", encoding="utf-8") as fh:
        for key in keys:
            fh.write(f"{key}\n")
            written += 1
    return written


def read_keys(path: Union[str, Path]) -> List[Key]:
    keys: List[Key] = []
    raw_bytes = Path(path).read_bytes()
    for line_no, chunk in enumerate(raw_bytes.splitlines(), start=1):
        try:
            raw = chunk.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BadInputError(
                f"{path}: line {line_no}: not valid UTF-8 text", hint=_KEYS_HINT
            ) from exc
        if not raw.strip():
            continue
        try:
            keys.append(Key.parse(raw))
        except BadInputError as exc:
            raise BadInputError(f"{path}: line {line_no}: {exc}", hint=_KEYS_HINT) from exc
    if not keys:
        raise BadInputError(f"{path}: no keys found", hint=_KEYS_HINT)
    return keys


__all__ = ["generate_keys", "read_keys", "write_keys"]
