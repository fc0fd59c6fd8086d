"""Command line entry point for the case status poller."""

from __future__ import annotations

import argparse
import os
import sys
from typing import Optional, Sequence

from casewatch.poller import config
from casewatch.poller.config_validation import validate_runtime_config
from casewatch.poller.identifiers import InvalidRangeError
from casewatch.poller.run import PollSummary, RunOptions, run_poll
from casewatch.poller.utils import ensure_dirs, flush_logging

EXIT_OK = 0
EXIT_NO_RESULTS = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def _build_parser() -> argparse.ArgumentParser:
    """Return an argument parser for the poller CLI."""

    parser = argparse.ArgumentParser(
        description="Poll a range of case numbers and summarise their statuses.",
        epilog="Example: %(prog)s -p IOE -n 0900677923 -t 1 -l 10 -o out.csv",
    )
    parser.add_argument(
        "-p",
        "--prefix",
        default=config.DEFAULT_PREFIX,
        help="The prefix used for the case numbers.",
    )
    parser.add_argument(
        "-n",
        "--case-number",
        default=config.DEFAULT_START,
        help="The case number from which to start the search.",
    )
    parser.add_argument(
        "-t",
        "--total",
        type=int,
        default=config.DEFAULT_TOTAL,
        help="The total number of cases to query.",
    )
    parser.add_argument(
        "-l",
        "--limit",
        type=int,
        default=config.DEFAULT_BATCH_SIZE,
        help="The number of requests to make at once.",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="File to which the grouped results are written.",
    )
    return parser


def exit_code_for(summary: PollSummary) -> int:
    if summary.interrupted:
        return EXIT_INTERRUPTED
    if not summary.has_results:
        return EXIT_NO_RESULTS
    return EXIT_OK


def _exit_interrupted(code: int) -> None:
    """End the process right after the interrupt flush.

    Lookups abandoned by the interrupt may still be waiting on the remote;
    a normal interpreter exit would join their worker threads first.
    """

    flush_logging()
    sys.stdout.flush()
    sys.stderr.flush()
    os._exit(code)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the poller CLI."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    ensure_dirs()
    try:
        validate_runtime_config("cli")
    except ValueError as exc:
        parser.error(str(exc))

    options = RunOptions(
        prefix=args.prefix,
        start=args.case_number,
        total=args.total,
        batch_size=args.limit,
        outfile=args.output,
    )
    try:
        summary = run_poll(options)
    except InvalidRangeError as exc:
        parser.error(str(exc))

    code = exit_code_for(summary)
    if code == EXIT_INTERRUPTED:
        _exit_interrupted(code)
    return code


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
