#!/usr/bin/env python3
"""Repair invalid byte sequences in a file using the persisted mapping table.

Applies every safely-applicable mapping from ``mappings.txt``, then lists the
high-byte runs that are still unmapped and appends them to the table as
``TODO`` entries. Edit the table to resolve them and run again.

Usage::

    python3 scripts/clean_encoding.py input.txt
    python3 scripts/clean_encoding.py input.txt cleaned.txt --mappings maps.txt
    python3 scripts/clean_encoding.py input.txt --dry-run --summary run.json

The human report goes to stdout; log messages go to stderr.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from colorama import init as colorama_init

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from encoding_cleaner.display import Painter, render_applied, render_finding
from encoding_cleaner.mappings import DEFAULT_MAPPINGS_PATH, MappingParseError
from encoding_cleaner.pipeline import RunConfig, RunOutcome, run_cleaning

log = logging.getLogger("clean_encoding")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Repair invalid byte sequences using a mapping table."
    )
    parser.add_argument("input", type=Path, help="File to clean")
    parser.add_argument(
        "output", type=Path, nargs="?", default=None,
        help="Where to write the cleaned file (omit to only report)",
    )
    parser.add_argument(
        "--mappings", type=Path, default=DEFAULT_MAPPINGS_PATH,
        help=f"Mapping table path (default: {DEFAULT_MAPPINGS_PATH})",
    )
    parser.add_argument(
        "--context", type=int, default=30,
        help="Bytes of context shown around each match (default: 30)",
    )
    parser.add_argument(
        "--color", action=argparse.BooleanOptionalAction, default=None,
        help="Force ANSI colors on or off (default: on when stdout is a tty)",
    )
    parser.add_argument(
        "--summary", type=Path, default=None,
        help="Write a JSON run summary to this path",
    )
    parser.add_argument(
        "--dry-run", action="store_true",
        help="Report only; write neither the output file nor the table",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Verbose logging",
    )
    return parser


def print_report(outcome: RunOutcome, painter: Painter, context: int) -> None:
    for applied in outcome.applied.applied:
        if applied.count == 0:
            log.debug(
                "Mapping %d did not occur", applied.mapping.sequence_id,
            )
            continue
        print()
        for line in render_applied(applied, painter):
            print(line)

    print("\n\nRemaining unmapped bad sequences:")
    for finding in outcome.discovery.findings:
        print(render_finding(finding, painter, context=context))
    if not outcome.discovery.findings:
        print("  None.")
    elif outcome.discovery.registered:
        print(f"\n  ({len(outcome.discovery.registered)} new TODO entries)")

    print()
    if outcome.output_written is not None:
        print(f"Wrote cleaned file to {outcome.output_written}.")
    else:
        print("No output file requested.")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.context < 0:
        parser.error("--context must be >= 0")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stderr,
    )

    color = sys.stdout.isatty() if args.color is None else args.color
    if color:
        colorama_init(strip=False)
    painter = Painter(enabled=color)

    config = RunConfig(
        input_path=args.input,
        output_path=args.output,
        mappings_path=args.mappings,
        context=args.context,
        dry_run=args.dry_run,
        summary_path=args.summary,
    )

    try:
        outcome = run_cleaning(config)
    except MappingParseError as exc:
        log.error("Corrupt mapping table: %s", exc)
        return 1
    except ValueError as exc:
        log.error("Mapping table cannot be saved: %s", exc)
        return 1
    except OSError as exc:
        log.error("I/O failure: %s", exc)
        return 1

    print_report(outcome, painter, args.context)
    if args.dry_run:
        log.info("Dry run: mapping table not saved")
    return 0


if __name__ == "__main__":
    sys.exit(main())
