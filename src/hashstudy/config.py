"""Typed configuration loader for hashstudy experiment sweeps."""

from __future__ import annotations

import os
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .contracts.error import BadInputError
from .core.hashing import HashFunction
from .core.tables import ProbeStrategy

_TRUE_WORDS = {"1", "true", "yes", "on"}
_FALSE_WORDS = {"0", "false", "no", "off"}


def _parse_bool(raw: Any, name: str) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        normalized = raw.strip().lower()
        if normalized in _TRUE_WORDS:
            return True
        if normalized in _FALSE_WORDS:
            return False
    raise BadInputError(f"{name} must be boolean")


def _parse_int_list(raw: str) -> list[int]:
    return [int(part) for part in raw.split(",") if part.strip()]


def _parse_label_list(raw: str) -> list[str]:
    return [part.strip().lower() for part in raw.split(",") if part.strip()]


@dataclass
class SweepPolicy:
    table_sizes: list[int] = field(default_factory=lambda: [1000, 10_000, 100_000])
    dataset_sizes: list[int] = field(default_factory=lambda: [100_000, 1_000_000])
    seeds: list[int] = field(default_factory=lambda: [42, 4242, 424242])
    hash_functions: list[str] = field(
        default_factory=lambda: [member.label for member in HashFunction]
    )
    probe_strategies: list[str] = field(
        default_factory=lambda: [member.label for member in ProbeStrategy]
    )
    verify: bool = False

    def validate(self) -> None:
        for name in ("table_sizes", "dataset_sizes"):
            values = getattr(self, name)
            if not isinstance(values, list) or not values:
                raise BadInputError(f"sweep.{name} must be a non-empty list")
            for value in values:
                if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                    raise BadInputError(f"sweep.{name} entries must be integers > 0")
        if not isinstance(self.seeds, list) or not self.seeds:
            raise BadInputError("sweep.seeds must be a non-empty list")
        if any(isinstance(seed, bool) or not isinstance(seed, int) for seed in self.seeds):
            raise BadInputError("sweep.seeds entries must be integers")
        if not self.hash_functions:
            raise BadInputError("sweep.hash_functions must not be empty")
        if not self.probe_strategies:
            raise BadInputError("sweep.probe_strategies must not be empty")
        self.hash_functions = [fn.label for fn in self.resolved_hash_functions()]
        self.probe_strategies = [probe.label for probe in self.resolved_probe_strategies()]

    def resolved_hash_functions(self) -> list[HashFunction]:
        return [HashFunction.from_label(str(label)) for label in self.hash_functions]

    def resolved_probe_strategies(self) -> list[ProbeStrategy]:
        return [ProbeStrategy.from_label(str(label)) for label in self.probe_strategies]


@dataclass
class OutputPolicy:
    output_dir: str = "results"
    per_table_csv: bool = True
    json_summary: bool = True

    def validate(self) -> None:
        if not str(self.output_dir).strip():
            raise BadInputError("output.output_dir must not be empty")


@dataclass
class AppConfig:
    sweep: SweepPolicy = field(default_factory=SweepPolicy)
    output: OutputPolicy = field(default_factory=OutputPolicy)

    @classmethod
    def load(cls, path: Path | None) -> AppConfig:
        if path is None:
            cfg = cls()
        else:
            try:
                data = tomllib.loads(path.read_text(encoding="utf-8"))
            except FileNotFoundError as exc:
                raise BadInputError(f"Config file not found: {path}") from exc
            except tomllib.TOMLDecodeError as exc:
                raise BadInputError(f"Invalid TOML: {exc}") from exc
            cfg = cls.from_dict(data)
        cfg.apply_env_overrides(os.environ)
        cfg.validate()
        return cfg

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        sweep_data = data.get("sweep", {})
        if not isinstance(sweep_data, dict):
            raise BadInputError("[sweep] section must be a table")
        output_data = data.get("output", {})
        if not isinstance(output_data, dict):
            raise BadInputError("[output] section must be a table")

        sweep_kwargs = dict(sweep_data)
        if "verify" in sweep_kwargs:
            sweep_kwargs["verify"] = _parse_bool(sweep_kwargs["verify"], "sweep.verify")
        output_kwargs = dict(output_data)
        for key in ("per_table_csv", "json_summary"):
            if key in output_kwargs:
                output_kwargs[key] = _parse_bool(output_kwargs[key], f"output.{key}")
        try:
            sweep = SweepPolicy(**sweep_kwargs)
            output = OutputPolicy(**output_kwargs)
        except TypeError as exc:
            raise BadInputError(f"Unknown config field: {exc}") from exc
        return cls(sweep=sweep, output=output)

    def apply_env_overrides(self, env: Mapping[str, str]) -> None:
        sweep_mapping: dict[str, tuple[str, Callable[[str], Any]]] = {
            "HASHSTUDY_TABLE_SIZES": ("table_sizes", _parse_int_list),
            "HASHSTUDY_DATASET_SIZES": ("dataset_sizes", _parse_int_list),
            "HASHSTUDY_SEEDS": ("seeds", _parse_int_list),
            "HASHSTUDY_HASH_FUNCTIONS": ("hash_functions", _parse_label_list),
            "HASHSTUDY_PROBE_STRATEGIES": ("probe_strategies", _parse_label_list),
        }
        for key, (attr, caster) in sweep_mapping.items():
            raw_value = env.get(key)
            if raw_value is None:
                continue
            try:
                value = caster(raw_value)
            except ValueError as exc:
                raise BadInputError(f"Invalid env override {key}={raw_value!r}") from exc
            setattr(self.sweep, attr, value)

        raw_verify = env.get("HASHSTUDY_VERIFY")
        if raw_verify is not None:
            self.sweep.verify = _parse_bool(raw_verify, "HASHSTUDY_VERIFY")

        raw_output = env.get("HASHSTUDY_OUTPUT_DIR")
        if raw_output is not None:
            self.output.output_dir = raw_output

    def validate(self) -> None:
        self.sweep.validate()
        self.output.validate()

    def to_dict(self) -> dict[str, Any]:
        return {
            "table_sizes": list(self.sweep.table_sizes),
            "dataset_sizes": list(self.sweep.dataset_sizes),
            "seeds": list(self.sweep.seeds),
            "hash_functions": list(self.sweep.hash_functions),
            "probe_strategies": list(self.sweep.probe_strategies),
        }


def load_app_config(path: str | None) -> AppConfig:
    config_path = Path(path) if path else None
    return AppConfig.load(config_path)
