"""CLI command registration and handlers for hashstudy."""

from __future__ import annotations

import argparse
import copy
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from hashstudy.analysis.probe import format_trace_lines, trace_probe_contains, trace_probe_insert
from hashstudy.config import AppConfig
from hashstudy.contracts.error import BadInputError, Exit, InvariantError, IOErrorEnvelope
from hashstudy.contracts.schema import load_results_schema, validate_summary
from hashstudy.core.hashing import HashFunction
from hashstudy.core.keys import Key
from hashstudy.core.tables import OpenAddressingTable, ProbeStrategy
from hashstudy.experiments.runner import secondary_for
from hashstudy.workloads.datasets import generate_keys, read_keys, write_keys

_HASH_CHOICES = [member.label for member in HashFunction]
_PROBE_CHOICES = [member.label for member in ProbeStrategy]
_STRUCTURE_CHOICES = ["chaining", "open"]


@dataclass(frozen=True)
class CLIContext:
    """Runtime hooks supplied by the top-level CLI entrypoint."""

    emit_success: Callable[..., None]
    app_config: Callable[[], AppConfig]
    run_sweep: Callable[..., Dict[str, Any]]
    build_table: Callable[[str, int], Any]
    load_table: Callable[..., int]
    inspect_table: Callable[..., Any]
    logger: logging.Logger
    json_enabled: Callable[[], bool]
    guard: Callable[[Callable[[argparse.Namespace], int]], Callable[[argparse.Namespace], int]]


def register_subcommands(
    subparsers: argparse._SubParsersAction[argparse.ArgumentParser],
    ctx: CLIContext,
) -> Dict[str, Callable[[argparse.Namespace], int]]:
    """Define CLI subcommands and return their handlers."""

    handlers: Dict[str, Callable[[argparse.Namespace], int]] = {}

    def _register(
        name: str,
        help_text: Optional[str],
        configure: Callable[[argparse.ArgumentParser], Callable[[argparse.Namespace], int]],
    ) -> None:
        parser = subparsers.add_parser(name, help=help_text)
        handler = configure(parser)
        handlers[name] = ctx.guard(handler)

    _register(
        "run",
        "Sweep chaining and open addressing over datasets and table sizes.",
        lambda parser: _configure_run(parser, ctx),
    )
    _register(
        "generate-keys",
        "Write a seeded dataset of 9-digit keys, one per line.",
        lambda parser: _configure_generate_keys(parser, ctx),
    )
    _register(
        "inspect",
        "Load a keys file into one table and report occupancy statistics.",
        lambda parser: _configure_inspect(parser, ctx),
    )
    _register(
        "probe-trace",
        "Trace the probe path of an insert or lookup.",
        lambda parser: _configure_probe_trace(parser, ctx),
    )
    _register(
        "validate-summary",
        "Validate a JSON results summary against the bundled schema.",
        lambda parser: _configure_validate_summary(parser, ctx),
    )
    return handlers


def _add_table_arguments(parser: argparse.ArgumentParser, *, capacity_default: Optional[int]) -> None:
    parser.add_argument("--structure", choices=_STRUCTURE_CHOICES, default="chaining")
    parser.add_argument(
        "--capacity",
        type=int,
        default=capacity_default,
        required=capacity_default is None,
        help="Number of buckets/slots",
    )
    parser.add_argument("--hash", choices=_HASH_CHOICES, default=HashFunction.MODULO.label)
    parser.add_argument(
        "--probe",
        choices=_PROBE_CHOICES,
        default=ProbeStrategy.LINEAR.label,
        help="Probe strategy (open addressing only)",
    )


def _build_from_args(args: argparse.Namespace, ctx: CLIContext) -> Any:
    if args.capacity <= 0:
        raise BadInputError(f"--capacity must be > 0 (got {args.capacity})")
    return ctx.build_table(args.structure, args.capacity)


def _configure_run(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument(
        "--table-size", type=int, action="append", help="Override sweep.table_sizes (repeatable)"
    )
    parser.add_argument(
        "--dataset-size",
        type=int,
        action="append",
        help="Override sweep.dataset_sizes (repeatable)",
    )
    parser.add_argument("--seed", type=int, action="append", help="Override sweep.seeds (repeatable)")
    parser.add_argument("--output-dir", help="Override output.output_dir")
    parser.add_argument("--verify", action="store_true", help="Check table invariants after each run")
    parser.add_argument("--quiet", action="store_true", help="Suppress per-run console lines")

    def handler(args: argparse.Namespace) -> int:
        cfg = copy.deepcopy(ctx.app_config())
        if args.table_size:
            cfg.sweep.table_sizes = list(args.table_size)
        if args.dataset_size:
            cfg.sweep.dataset_sizes = list(args.dataset_size)
        if args.seed:
            cfg.sweep.seeds = list(args.seed)
        if args.output_dir:
            cfg.output.output_dir = args.output_dir
        if args.verify:
            cfg.sweep.verify = True
        cfg.validate()
        try:
            result = ctx.run_sweep(cfg, quiet=args.quiet)
        except OSError as exc:
            raise IOErrorEnvelope(str(exc)) from exc
        ctx.emit_success(
            "run",
            text=f"Experiment complete: {result['runs']} runs written to {cfg.output.output_dir}",
            data=result,
        )
        return int(Exit.OK)

    return handler


def _configure_generate_keys(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("--outfile", required=True)
    parser.add_argument("--count", type=int, default=100_000)
    parser.add_argument("--seed", type=int, default=42)

    def handler(args: argparse.Namespace) -> int:
        if args.count <= 0:
            raise BadInputError(f"--count must be > 0 (got {args.count})")
        try:
            written = write_keys(args.outfile, generate_keys(args.count, args.seed))
        except OSError as exc:
            raise IOErrorEnvelope(str(exc)) from exc
        ctx.logger.info("Wrote %d keys to %s", written, args.outfile)
        ctx.emit_success(
            "generate-keys",
            data={"outfile": args.outfile, "count": written, "seed": args.seed},
        )
        return int(Exit.OK)

    return handler


def _configure_inspect(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("--keys", required=True, help="Keys file produced by generate-keys")
    _add_table_arguments(parser, capacity_default=None)
    parser.add_argument("--verify", action="store_true", help="Fail if table invariants break")

    def handler(args: argparse.Namespace) -> int:
        keys = read_keys(args.keys)
        table = _build_from_args(args, ctx)
        primary = HashFunction.from_label(args.hash)
        strategy = ProbeStrategy.from_label(args.probe)
        failures = ctx.load_table(table, keys, primary, strategy)
        found = sum(1 for key in keys if _contains(table, key, primary, strategy))
        report = ctx.inspect_table(table, verify=args.verify)
        data = report.to_dict()
        data.update(
            {
                "hash": primary.label,
                "probe": strategy.label if args.structure == "open" else None,
                "insert_failures": failures,
                "found": found,
            }
        )
        gaps = report.gap_summary
        lines = [
            f"Structure: {report.structure} | capacity={report.capacity} | hash={primary.label}"
            + (f" | probe={strategy.label}" if args.structure == "open" else ""),
            f"Keys: {len(keys)} | stored={report.keys} | failures={failures} | found={found}",
            f"Collisions: {report.collisions}",
            f"Occupied slots: {report.occupied} (load factor {report.load_factor:.3f})",
            f"Largest chain/cluster: {report.largest_chain_or_cluster}",
            f"Gaps: count={gaps.count} min={gaps.minimum} max={gaps.maximum} avg={gaps.average:.2f}",
        ]
        ctx.emit_success("inspect", text="\n".join(lines), data=data)
        return int(Exit.OK)

    return handler


def _contains(table: Any, key: Key, primary: HashFunction, strategy: ProbeStrategy) -> bool:
    if isinstance(table, OpenAddressingTable):
        secondary = secondary_for(primary) if strategy is ProbeStrategy.DOUBLE else None
        return table.contains(key, primary, secondary, strategy)
    return table.contains(key, primary)


def _configure_probe_trace(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument(
        "--operation",
        choices=["insert", "contains"],
        required=True,
        help="Operation to trace",
    )
    parser.add_argument("--key", required=True, help="9-digit key to probe")
    parser.add_argument(
        "--seed-key",
        action="append",
        default=[],
        metavar="KEY",
        help="Insert this 9-digit key before tracing (repeatable)",
    )
    parser.add_argument("--keys", help="Keys file to insert before tracing")
    _add_table_arguments(parser, capacity_default=10)
    parser.add_argument("--export-json", help="Write the trace payload to a JSON file (indent=2)")

    def handler(args: argparse.Namespace) -> int:
        key = Key.parse(args.key)
        seeds: List[Key] = [Key.parse(raw) for raw in args.seed_key]
        if args.keys:
            seeds.extend(read_keys(args.keys))
        table = _build_from_args(args, ctx)
        primary = HashFunction.from_label(args.hash)
        strategy = ProbeStrategy.from_label(args.probe)
        failures = ctx.load_table(table, seeds, primary, strategy)
        if failures:
            ctx.logger.warning("%d seed keys did not fit in the table", failures)

        secondary = None
        if args.structure == "open" and strategy is ProbeStrategy.DOUBLE:
            secondary = secondary_for(primary)
        if args.operation == "insert":
            trace = trace_probe_insert(table, key, primary, secondary, strategy)
        else:
            trace = trace_probe_contains(table, key, primary, secondary, strategy)

        export_path: Optional[Path] = None
        if args.export_json:
            export_path = Path(args.export_json).expanduser().resolve()
            try:
                export_path.parent.mkdir(parents=True, exist_ok=True)
                export_path.write_text(json.dumps(trace, indent=2), encoding="utf-8")
            except OSError as exc:
                raise IOErrorEnvelope(str(exc)) from exc

        text_output = "\n".join(
            format_trace_lines(trace, seeds=[str(seed) for seed in seeds], export_path=export_path)
        )
        data: Dict[str, Any] = {"trace": trace}
        if export_path is not None:
            data["export_json"] = str(export_path)
        ctx.emit_success("probe-trace", text=text_output, data=data)
        return int(Exit.OK)

    return handler


def _configure_validate_summary(
    parser: argparse.ArgumentParser, ctx: CLIContext
) -> Callable[[argparse.Namespace], int]:
    parser.add_argument("summary", type=Path, help="Path to results_summary.json")
    parser.add_argument(
        "--schema",
        type=Path,
        default=None,
        help="Schema JSON path (default: bundled hashstudy.results.v1 schema)",
    )

    def handler(args: argparse.Namespace) -> int:
        try:
            payload = json.loads(args.summary.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise BadInputError(f"{args.summary}: invalid JSON: {exc}") from exc
        problems = validate_summary(payload, load_results_schema(args.schema))
        if problems:
            for problem in problems:
                ctx.logger.error("%s: %s", args.summary, problem)
            raise InvariantError(
                f"{args.summary}: {len(problems)} schema violation(s); first: {problems[0]}"
            )
        rows = len(payload.get("rows", []))
        ctx.emit_success(
            "validate-summary",
            text=f"Validation finished: {rows} row(s) valid",
            data={"summary": str(args.summary), "rows": rows},
        )
        return int(Exit.OK)

    return handler


__all__ = ["CLIContext", "register_subcommands"]
