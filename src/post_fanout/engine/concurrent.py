"""Concurrent runner using asyncio and httpx.AsyncClient.

This module implements the AsyncRunner protocol with a fan-out/fan-in model:

- one task per post id, all started immediately (unless a bound is configured)
- every task sends exactly one outcome onto a shared OutcomeChannel
- a watcher task waits for all fetch tasks, then closes the channel
- a single merge loop drains the channel into the RunResult until closure

Since closure is queued behind every outcome, the merge loop cannot finish
before all outcomes have been recorded.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Callable

from post_fanout.engine.async_base import AsyncFetcher
from post_fanout.engine.fetcher import AsyncPostFetcher
from post_fanout.engine.models import (
    FetchConfig,
    FetchFailure,
    FetchOutcome,
    RunMode,
    RunResult,
)
from post_fanout.patterns.channel import OutcomeChannel
from post_fanout.patterns.semaphore import ConcurrencyLimiter

logger = logging.getLogger(__name__)


class ConcurrentRunner:
    """Runner that fetches every post concurrently and merges outcomes as they arrive.

    The id lists of the result are in arrival order, which varies between runs.
    No task is ever cancelled: a failure in one fetch does not affect the others.

    Args:
        config: Run configuration (default: FetchConfig()).
        fetcher: AsyncFetcher to use. When omitted, an AsyncPostFetcher is
            created per run.
        on_failure: Called from the merge loop for each failure as it arrives.

    Example:
        ```python
        import asyncio
        from post_fanout.engine import ConcurrentRunner, FetchConfig

        async def main():
            runner = ConcurrentRunner(FetchConfig(limit=100))
            result = await runner.run()
            print(f"{result.success_count} succeeded in {result.total_duration:.2f}s")

        asyncio.run(main())
        ```
    """

    def __init__(
        self,
        config: FetchConfig | None = None,
        fetcher: AsyncFetcher | None = None,
        on_failure: Callable[[FetchFailure], None] | None = None,
    ) -> None:
        self._config = config or FetchConfig()
        self._fetcher = fetcher
        self._on_failure = on_failure
        self._limiter: ConcurrencyLimiter | None = None

    @property
    def name(self) -> str:
        return RunMode.CONCURRENT.value

    @property
    def config(self) -> FetchConfig:
        return self._config

    @property
    def peak_in_flight(self) -> int:
        """Highest number of fetches in flight at once during the last run."""
        if self._limiter is None:
            return 0
        return self._limiter.get_metrics().peak_active

    async def run(self, limit: int | None = None) -> RunResult:
        """Fetch posts 1..limit concurrently.

        Args:
            limit: Number of posts to fetch (default: config.limit).

        Returns:
            A finalized RunResult. Id lists are in arrival order.
        """
        post_ids = list(self._config.post_ids(limit))
        result = RunResult(mode=RunMode.CONCURRENT)
        limiter = ConcurrencyLimiter(self._config.max_concurrent)
        self._limiter = limiter
        start_time = time.perf_counter()
        logger.info(
            json.dumps(
                {
                    "event": "run_started",
                    "mode": self.name,
                    "base_url": self._config.base_url,
                    "tasks": len(post_ids),
                    "max_concurrent": self._config.max_concurrent,
                }
            )
        )

        if self._fetcher is not None:
            await self._fan_out(self._fetcher, limiter, post_ids, result)
        else:
            async with AsyncPostFetcher(self._config) as fetcher:
                await self._fan_out(fetcher, limiter, post_ids, result)

        result.finalize(start_time)
        logger.info(
            json.dumps(
                {
                    "event": "run_completed",
                    "mode": self.name,
                    "success": result.success_count,
                    "fail": result.fail_count,
                    "duration_sec": result.total_duration,
                    "peak_in_flight": self.peak_in_flight,
                }
            )
        )
        return result

    async def _fan_out(
        self,
        fetcher: AsyncFetcher,
        limiter: ConcurrencyLimiter,
        post_ids: list[int],
        result: RunResult,
    ) -> None:
        """Dispatch one task per id and merge their outcomes into ``result``."""
        channel: OutcomeChannel[FetchOutcome] = OutcomeChannel()

        # Use TaskGroup for structured concurrency
        async with asyncio.TaskGroup() as tg:
            tasks = [
                tg.create_task(self._fetch_one(fetcher, limiter, channel, post_id))
                for post_id in post_ids
            ]
            tg.create_task(self._close_when_done(tasks, channel))

            # Sole mutator of result
            async for outcome in channel:
                result.record(outcome)
                if isinstance(outcome, FetchFailure) and self._on_failure is not None:
                    self._on_failure(outcome)

    @staticmethod
    async def _fetch_one(
        fetcher: AsyncFetcher,
        limiter: ConcurrencyLimiter,
        channel: OutcomeChannel[FetchOutcome],
        post_id: int,
    ) -> None:
        """Fetch one post and send exactly one outcome for it."""
        async with limiter:
            try:
                outcome = await fetcher.fetch(post_id)
            except Exception as e:
                outcome = FetchFailure(post_id, f"Unexpected error: {e}", e)

        channel.send(outcome)

    @staticmethod
    async def _close_when_done(
        tasks: list[asyncio.Task[None]],
        channel: OutcomeChannel[FetchOutcome],
    ) -> None:
        """Close the channel once every fetch task has finished."""
        if tasks:
            await asyncio.wait(tasks)
        channel.close()
