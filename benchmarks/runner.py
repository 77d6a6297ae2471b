#!/usr/bin/env python3
"""Mode comparison runner for post-fanout.

Runs the sequential and the concurrent runner against the same API several
times and writes a JSON comparison.

Usage:
    python -m benchmarks.runner [--base-url URL] [--limit N] [--runs N] [--output FILE]

Options:
    --base-url URL      API root (default: https://jsonplaceholder.typicode.com)
    --limit N           Posts per run (default: 100)
    --runs N            Runs per mode (default: 3)
    --max-concurrent N  Bound for the concurrent runner (default: unbounded)
    --output FILE       Output JSON file (default: comparison_output.json)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import UTC, datetime
from pathlib import Path
from statistics import mean, stdev

from post_fanout.engine import ConcurrentRunner, FetchConfig, RunMode, RunResult, SequentialRunner
from post_fanout.engine.models import DEFAULT_BASE_URL, DEFAULT_LIMIT
from post_fanout.report import format_duration


def calculate_stats(mode: RunMode, results: list[RunResult]) -> dict:
    """Calculate aggregate statistics for the runs of one mode.

    Args:
        mode: The mode the results came from.
        results: Finalized RunResult objects.

    Returns:
        Dictionary with aggregate statistics.
    """
    durations = [r.total_duration for r in results]
    total_requests = sum(r.total for r in results)
    total_success = sum(r.success_count for r in results)

    return {
        "mode": mode.value,
        "runs": len(results),
        "total_requests": total_requests,
        "successful_requests": total_success,
        "failed_requests": sum(r.fail_count for r in results),
        "success_rate": total_success / total_requests if total_requests > 0 else 0,
        "average_time_sec": mean(durations) if durations else 0,
        "std_dev_sec": stdev(durations) if len(durations) > 1 else 0,
        "fail_ids": sorted({post_id for r in results for post_id in r.fail_ids}),
        "last_run": results[-1].to_dict() if results else None,
    }


def compare(sequential: dict, concurrent: dict) -> dict:
    """Build the comparison section from the per-mode statistics."""
    speedup = (
        sequential["average_time_sec"] / concurrent["average_time_sec"]
        if concurrent["average_time_sec"] > 0
        else 0
    )
    return {
        "speedup_factor": speedup,
        "concurrent_faster": concurrent["average_time_sec"] < sequential["average_time_sec"],
        "time_saved_sec": sequential["average_time_sec"] - concurrent["average_time_sec"],
        "same_fail_ids": sequential["fail_ids"] == concurrent["fail_ids"],
    }


def run_mode(mode: RunMode, config: FetchConfig, runs: int) -> list[RunResult]:
    """Run one mode ``runs`` times, printing progress."""
    print(f"Running {mode.value} mode ({runs} runs)...")
    results: list[RunResult] = []

    for i in range(runs):
        print(f"  Run {i + 1}/{runs}...", end=" ", flush=True)
        if mode is RunMode.SEQUENTIAL:
            result = SequentialRunner(config).run()
        else:
            result = asyncio.run(ConcurrentRunner(config).run())
        results.append(result)
        print(format_duration(result.total_duration))

    return results


def main() -> int:
    """Main entry point for the comparison runner.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    parser = argparse.ArgumentParser(description="Compare sequential and concurrent fetching")
    parser.add_argument("--base-url", type=str, default=DEFAULT_BASE_URL)
    parser.add_argument("--limit", type=int, default=DEFAULT_LIMIT)
    parser.add_argument("--runs", type=int, default=3, help="Runs per mode (default: 3)")
    parser.add_argument("--max-concurrent", type=int, default=None)
    parser.add_argument(
        "--output",
        type=str,
        default="comparison_output.json",
        help="Output JSON file (default: comparison_output.json)",
    )
    args = parser.parse_args()

    try:
        config = FetchConfig(
            base_url=args.base_url,
            limit=args.limit,
            max_concurrent=args.max_concurrent,
        )
        sequential = calculate_stats(
            RunMode.SEQUENTIAL, run_mode(RunMode.SEQUENTIAL, config, args.runs)
        )
        print()
        concurrent = calculate_stats(
            RunMode.CONCURRENT, run_mode(RunMode.CONCURRENT, config, args.runs)
        )
        print()

        output = {
            "timestamp": datetime.now(UTC).isoformat(),
            "base_url": config.base_url,
            "limit": config.limit,
            "sequential": sequential,
            "concurrent": concurrent,
            "comparison": compare(sequential, concurrent),
        }

        output_path = Path(args.output)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(output, f, indent=2)

        print("=" * 50)
        print("COMPARISON RESULTS")
        print("=" * 50)
        print(f"Sequential: {format_duration(sequential['average_time_sec'])}")
        print(f"Concurrent: {format_duration(concurrent['average_time_sec'])}")
        print(f"Speedup Factor: {output['comparison']['speedup_factor']:.2f}x")
        print(f"Results saved to: {output_path}")
        print("=" * 50)

        return 0

    except Exception as e:
        print(f"Error running comparison: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
