"""Runners and fetchers for the sequential and concurrent fetch modes."""

from post_fanout.engine.async_base import AsyncFetcher, AsyncRunner
from post_fanout.engine.base import Fetcher, Runner
from post_fanout.engine.concurrent import ConcurrentRunner
from post_fanout.engine.fetcher import AsyncPostFetcher, PostFetcher
from post_fanout.engine.models import (
    FetchConfig,
    FetchFailure,
    FetchOutcome,
    FetchSuccess,
    Post,
    RunMode,
    RunResult,
)
from post_fanout.engine.sequential import SequentialRunner

__all__ = [
    "AsyncFetcher",
    "AsyncPostFetcher",
    "AsyncRunner",
    "ConcurrentRunner",
    "FetchConfig",
    "FetchFailure",
    "FetchOutcome",
    "FetchSuccess",
    "Fetcher",
    "Post",
    "PostFetcher",
    "RunMode",
    "RunResult",
    "Runner",
    "SequentialRunner",
]
