"""CLI entry point — ``structlit [PATTERN ...]``."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import signal
import sys

from pydantic import ValidationError

from structlit import __version__
from structlit.config import Settings
from structlit.constants import EXIT_FAILURE, EXIT_INTERRUPTED, EXIT_OK
from structlit.logging_config import setup_logging
from structlit.loading.go_list import PackageLoadError
from structlit.report import render_report
from structlit.services.census_service import CensusResult, run_census

logger = logging.getLogger("structlit")


def main() -> None:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args()

    if args.version:
        print(f"structlit {__version__}")
        return

    sys.exit(run(args.patterns))


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="structlit",
        description=(
            "Count how keyed struct literal fields are initialized "
            "in Go packages."
        ),
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "patterns",
        nargs="*",
        metavar="PATTERN",
        help=(
            "Package patterns, as understood by 'go list' "
            "(default: the package in the current directory)"
        ),
    )
    return parser


def run(patterns: list[str], settings: Settings | None = None) -> int:
    """Run the census, print the report and return the exit status."""
    if settings is None:
        try:
            settings = Settings()
        except ValidationError as exc:
            print(f"Error: invalid configuration: {exc}", file=sys.stderr)
            return EXIT_FAILURE
    setup_logging(settings.log_level)

    try:
        result = asyncio.run(_run_census(patterns, settings))
    except PackageLoadError as exc:
        logger.error("%s", exc)
        return EXIT_FAILURE

    print(render_report(result.counters, result.total))
    if result.cancelled:
        return EXIT_INTERRUPTED
    return EXIT_OK


async def _run_census(
    patterns: list[str], settings: Settings
) -> CensusResult:
    """Run with SIGINT turned into a cooperative cancel event."""
    cancel = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed = False
    with contextlib.suppress(NotImplementedError, RuntimeError):
        loop.add_signal_handler(signal.SIGINT, cancel.set)
        installed = True
    try:
        return await run_census(patterns, settings, cancel)
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)
