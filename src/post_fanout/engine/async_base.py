"""AsyncRunner Protocol for asyncio-based runners.

Unlike the base Runner protocol, AsyncRunner and AsyncFetcher use async
methods for proper async/await support.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from post_fanout.engine.models import FetchOutcome, RunResult


@runtime_checkable
class AsyncFetcher(Protocol):
    """Protocol for an awaitable "fetch post by id" capability.

    Like Fetcher, implementations report errors as FetchFailure outcomes.
    """

    async def fetch(self, post_id: int) -> FetchOutcome:
        """Fetch and decode a single post without blocking the event loop."""
        ...


@runtime_checkable
class AsyncRunner(Protocol):
    """Protocol defining the interface for async runners.

    Example:
        >>> from post_fanout.engine.async_base import AsyncRunner
        >>> from post_fanout.engine import ConcurrentRunner
        >>> isinstance(ConcurrentRunner(), AsyncRunner)
        True
    """

    @property
    def name(self) -> str:
        """Name of the runner (e.g., "concurrent")."""
        ...

    async def run(self, limit: int | None = None) -> RunResult:
        """Fetch posts 1..limit concurrently and aggregate the outcomes.

        Args:
            limit: Number of posts to fetch; defaults to the configured limit.

        Returns:
            A finalized RunResult.
        """
        ...
