"""Module entry-point for `python -m hashstudy`."""

from __future__ import annotations

from hashstudy.cli.app import console_main


def main() -> None:  # pragma: no cover - thin wrapper
    console_main()


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    main()
