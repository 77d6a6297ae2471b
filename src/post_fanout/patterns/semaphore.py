"""ConcurrencyLimiter pattern for optionally bounded fan-out using asyncio.Semaphore."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Self


@dataclass
class LimiterMetrics:
    """Metrics for tracking limiter acquisitions and active tasks."""

    current_active: int
    peak_active: int
    total_acquisitions: int


class ConcurrencyLimiter:
    """
    Async context manager that optionally limits concurrent execution.

    With ``max_concurrent=None`` every caller enters immediately and the
    limiter only counts; otherwise an asyncio.Semaphore caps how many callers
    are inside at once.

    Args:
        max_concurrent: Maximum number of concurrent tasks allowed, or None
                        for no limit. Defaults to None.

    Example:
        ```python
        limiter = ConcurrencyLimiter(max_concurrent=5)

        async def fetch_all(ids):
            async with limiter:
                # Only 5 of these will execute concurrently
                await fetch(post_id)
        ```
    """

    def __init__(self, max_concurrent: int | None = None) -> None:
        """Initialize the ConcurrencyLimiter.

        Args:
            max_concurrent: Maximum number of concurrent operations allowed.

        Raises:
            ValueError: If max_concurrent is less than 1.
        """
        if max_concurrent is not None and max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")

        self._max_concurrent = max_concurrent
        self._semaphore = asyncio.Semaphore(max_concurrent) if max_concurrent else None
        self._current_active = 0
        self._peak_active = 0
        self._total_acquisitions = 0

    @property
    def max_concurrent(self) -> int | None:
        """Maximum number of concurrent operations allowed (None if unbounded)."""
        return self._max_concurrent

    async def __aenter__(self) -> Self:
        """Acquire a slot and enter the context manager.

        Returns:
            Self: The ConcurrencyLimiter instance.
        """
        if self._semaphore is not None:
            await self._semaphore.acquire()

        # Counters are only touched between awaits on a single event loop.
        self._current_active += 1
        self._total_acquisitions += 1
        self._peak_active = max(self._peak_active, self._current_active)

        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Release the slot when exiting the context manager."""
        self._current_active -= 1

        if self._semaphore is not None:
            self._semaphore.release()

    def get_metrics(self) -> LimiterMetrics:
        """Get current metrics for this limiter.

        Returns:
            LimiterMetrics: Current metrics including active count, peak, and total.
        """
        return LimiterMetrics(
            current_active=self._current_active,
            peak_active=self._peak_active,
            total_acquisitions=self._total_acquisitions,
        )
