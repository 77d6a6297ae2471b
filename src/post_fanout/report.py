"""Console rendering of run results."""

from __future__ import annotations

import sys
from typing import TextIO

from post_fanout.engine.models import RunMode, RunResult

_BANNERS = {
    RunMode.SEQUENTIAL: "start API calls without concurrent, please wait...",
    RunMode.CONCURRENT: "start API calls with concurrent, please wait...",
}


def format_duration(seconds: float) -> str:
    """Format a duration the way a person would read it.

    Examples:
        >>> format_duration(0.2124)
        '212.4ms'
        >>> format_duration(1.5321)
        '1.532s'
        >>> format_duration(75.0)
        '1m15.000s'
    """
    if seconds < 0:
        raise ValueError("duration must be non-negative")
    if seconds < 1e-3:
        return f"{seconds * 1e6:.1f}µs"
    if seconds < 1:
        return f"{seconds * 1e3:.1f}ms"
    if seconds < 60:
        return f"{seconds:.3f}s"

    minutes, rest = divmod(seconds, 60)
    hours, minutes = divmod(int(minutes), 60)
    if hours:
        return f"{hours}h{minutes}m{rest:.3f}s"
    return f"{minutes}m{rest:.3f}s"


def banner(mode: RunMode) -> str:
    """Line printed before a run starts."""
    return _BANNERS[mode]


def render_summary(result: RunResult) -> list[str]:
    """Render the end-of-run summary as console lines."""
    return [
        "API calls complete",
        f"Total success: {result.success_count}",
        f"Total fail: {result.fail_count}",
        f"Total duration: {format_duration(result.total_duration)}",
        "Success IDs:",
        str(result.success_ids),
        "Fail IDs:",
        str(result.fail_ids),
    ]


def print_summary(result: RunResult, file: TextIO | None = None) -> None:
    """Print the end-of-run summary (to stdout by default)."""
    out = file or sys.stdout
    for line in render_summary(result):
        print(line, file=out)
