"""Sequential runner using the `requests` library.

This module provides the baseline for comparison with the concurrent runner:
posts are fetched one at a time, so the total duration is roughly the limit
times the latency of a single request.
"""

from __future__ import annotations

import json
import logging
import time

from post_fanout.engine.base import Fetcher
from post_fanout.engine.fetcher import PostFetcher
from post_fanout.engine.models import FetchConfig, FetchFailure, FetchOutcome, RunMode, RunResult

logger = logging.getLogger(__name__)


class SequentialRunner:
    """Runner that fetches posts strictly in ascending id order.

    A failed fetch is counted and the loop moves on to the next id; nothing
    aborts the run.

    Attributes:
        name: Always returns "sequential".
        config: The run configuration.

    Example:
        >>> runner = SequentialRunner(FetchConfig(limit=10))
        >>> result = runner.run()
        >>> print(f"{result.success_count} succeeded in {result.total_duration:.2f}s")
    """

    def __init__(self, config: FetchConfig | None = None, fetcher: Fetcher | None = None) -> None:
        """Initialize the SequentialRunner.

        Args:
            config: Run configuration (default: FetchConfig()).
            fetcher: Fetcher to use. When omitted, a PostFetcher is created per run.
        """
        self._config = config or FetchConfig()
        self._fetcher = fetcher

    @property
    def name(self) -> str:
        return RunMode.SEQUENTIAL.value

    @property
    def config(self) -> FetchConfig:
        return self._config

    def run(self, limit: int | None = None) -> RunResult:
        """Fetch posts 1..limit one after another.

        Args:
            limit: Number of posts to fetch (default: config.limit).

        Returns:
            A finalized RunResult whose id lists are in ascending order.
        """
        post_ids = self._config.post_ids(limit)
        result = RunResult(mode=RunMode.SEQUENTIAL)
        start_time = time.perf_counter()
        logger.info(
            json.dumps({"event": "run_started", "mode": self.name, "base_url": self._config.base_url})
        )

        if self._fetcher is not None:
            for post_id in post_ids:
                result.record(self._fetch_one(self._fetcher, post_id))
        else:
            with PostFetcher(self._config) as fetcher:
                for post_id in post_ids:
                    result.record(self._fetch_one(fetcher, post_id))

        result.finalize(start_time)
        logger.info(
            json.dumps(
                {
                    "event": "run_completed",
                    "mode": self.name,
                    "success": result.success_count,
                    "fail": result.fail_count,
                    "duration_sec": result.total_duration,
                }
            )
        )
        return result

    @staticmethod
    def _fetch_one(fetcher: Fetcher, post_id: int) -> FetchOutcome:
        """Fetch one post, turning any unexpected exception into a failure."""
        try:
            return fetcher.fetch(post_id)
        except Exception as e:
            return FetchFailure(post_id, f"Unexpected error: {e}", e)
