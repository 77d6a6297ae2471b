"""post-fanout.

Fetch a numbered range of posts from a JSON API, either one at a time or all
at once, and compare the two runs.
"""

from post_fanout.engine import (
    ConcurrentRunner,
    FetchConfig,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    Post,
    RunMode,
    RunResult,
    SequentialRunner,
)
from post_fanout.patterns.channel import ChannelClosedError

__version__ = "0.1.0"

__all__ = [
    "ChannelClosedError",
    "ConcurrentRunner",
    "FetchConfig",
    "FetchFailure",
    "FetchOutcome",
    "FetchSuccess",
    "Post",
    "RunMode",
    "RunResult",
    "SequentialRunner",
]
