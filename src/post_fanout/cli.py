"""Command-line interface for post-fanout.

Usage:
    post-fanout --without-concurrent [options]
    post-fanout --with-concurrent [options]

The first argument selects the mode. A missing or empty first argument prints
"arguments are missing"; any other first argument is ignored silently.

Options:
    --base-url URL         API root (default: https://jsonplaceholder.typicode.com)
    --limit N              Number of posts to fetch (default: 100)
    --max-concurrent N     Cap on in-flight requests in concurrent mode (default: unbounded)
    --timeout SECONDS      Per-request timeout (default: none)
    --verbose, -v          Emit debug logs on stderr
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from post_fanout.engine import (
    ConcurrentRunner,
    FetchConfig,
    FetchFailure,
    RunMode,
    RunResult,
    SequentialRunner,
)
from post_fanout.engine.models import DEFAULT_BASE_URL, DEFAULT_LIMIT
from post_fanout.report import banner, print_summary

MODE_FLAGS = {
    "--without-concurrent": RunMode.SEQUENTIAL,
    "--with-concurrent": RunMode.CONCURRENT,
}

MISSING_ARGUMENTS = "arguments are missing"


def build_parser() -> argparse.ArgumentParser:
    """Build the parser for the options that follow the mode flag."""
    parser = argparse.ArgumentParser(
        prog="post-fanout",
        usage="%(prog)s {--without-concurrent,--with-concurrent} [options]",
        description="Fetch posts sequentially or concurrently and report the outcome",
    )
    parser.add_argument(
        "--base-url",
        type=str,
        default=DEFAULT_BASE_URL,
        help=f"API root serving /posts/{{id}} (default: {DEFAULT_BASE_URL})",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_LIMIT,
        help=f"Number of posts to fetch (default: {DEFAULT_LIMIT})",
    )
    parser.add_argument(
        "--max-concurrent",
        type=int,
        default=None,
        help="Cap on in-flight requests in concurrent mode (default: unbounded)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds (default: none)",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )


def _print_failure(failure: FetchFailure) -> None:
    print(failure.reason)


def run_mode(mode: RunMode, config: FetchConfig) -> RunResult:
    """Run one mode end to end and print its summary.

    Args:
        mode: Which runner to use.
        config: Run configuration.

    Returns:
        The finalized RunResult that was printed.
    """
    print(banner(mode))

    if mode is RunMode.SEQUENTIAL:
        result = SequentialRunner(config).run()
    else:
        runner = ConcurrentRunner(config, on_failure=_print_failure)
        result = asyncio.run(runner.run())

    print_summary(result)
    return result


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code. Always 0 once a run completes, whatever its failure count.
    """
    args_list = list(sys.argv[1:] if argv is None else argv)

    if not args_list or args_list[0] == "":
        print(MISSING_ARGUMENTS)
        return 0

    mode = MODE_FLAGS.get(args_list[0])
    if mode is None:
        return 0

    parser = build_parser()
    args = parser.parse_args(args_list[1:])
    configure_logging(args.verbose)

    try:
        config = FetchConfig(
            base_url=args.base_url,
            limit=args.limit,
            timeout=args.timeout,
            max_concurrent=args.max_concurrent,
        )
    except ValueError as e:
        parser.error(str(e))

    run_mode(mode, config)
    return 0
