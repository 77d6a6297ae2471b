"""Pytest configuration and fixtures for post-fanout tests."""

from __future__ import annotations

import asyncio
import random
import time
from collections.abc import Callable, Iterable

import pytest

from post_fanout.engine.models import FetchFailure, FetchOutcome, FetchSuccess, Post


def make_post(post_id: int) -> Post:
    return Post(id=post_id, user_id=1, title=f"title {post_id}", body=f"body {post_id}")


class StubFetcher:
    """Blocking fetcher that fails or raises for fixed sets of ids."""

    def __init__(
        self,
        failing_ids: Iterable[int] = (),
        delay: float = 0.0,
        raising_ids: Iterable[int] = (),
    ) -> None:
        self.failing_ids = frozenset(failing_ids)
        self.raising_ids = frozenset(raising_ids)
        self.delay = delay
        self.calls: list[int] = []

    def fetch(self, post_id: int) -> FetchOutcome:
        self.calls.append(post_id)
        if self.delay:
            time.sleep(self.delay)
        if post_id in self.raising_ids:
            raise RuntimeError(f"boom {post_id}")
        if post_id in self.failing_ids:
            return FetchFailure(post_id, f"stub failure for {post_id}")
        return FetchSuccess(post_id, make_post(post_id))


class AsyncStubFetcher:
    """Async fetcher with configurable latency, jitter and failures.

    ``delay`` may be a number or a callable mapping a post id to seconds.
    """

    def __init__(
        self,
        failing_ids: Iterable[int] = (),
        raising_ids: Iterable[int] = (),
        delay: float | Callable[[int], float] = 0.0,
        jitter: float = 0.0,
        seed: int | None = None,
    ) -> None:
        self.failing_ids = frozenset(failing_ids)
        self.raising_ids = frozenset(raising_ids)
        self.delay = delay
        self.jitter = jitter
        self.calls: list[int] = []
        self.in_flight = 0
        self.peak_in_flight = 0
        self._random = random.Random(seed)

    def _delay_for(self, post_id: int) -> float:
        base = self.delay(post_id) if callable(self.delay) else self.delay
        return base + (self._random.uniform(0, self.jitter) if self.jitter else 0.0)

    async def fetch(self, post_id: int) -> FetchOutcome:
        self.calls.append(post_id)
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self._delay_for(post_id))
        finally:
            self.in_flight -= 1

        if post_id in self.raising_ids:
            raise RuntimeError(f"boom {post_id}")
        if post_id in self.failing_ids:
            return FetchFailure(post_id, f"stub failure for {post_id}")
        return FetchSuccess(post_id, make_post(post_id))


@pytest.fixture()
def post_payload() -> dict:
    """Wire form of post 1."""
    return {"userId": 1, "id": 1, "title": "sunt aut facere", "body": "quia et suscipit"}


@pytest.fixture()
def stub_fetcher() -> type[StubFetcher]:
    """Factory for blocking stub fetchers."""
    return StubFetcher


@pytest.fixture()
def async_stub_fetcher() -> type[AsyncStubFetcher]:
    """Factory for async stub fetchers."""
    return AsyncStubFetcher
