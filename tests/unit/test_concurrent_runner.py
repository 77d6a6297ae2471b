"""Unit tests for the ConcurrentRunner.

Tests cover:
- Protocol conformance
- Count and id-set invariants (id lists compared as sets)
- Fault injection and unexpected fetcher exceptions
- Drain-before-signal under randomized completion order
- Unbounded and bounded fan-out
"""

from __future__ import annotations

import random
import time
from unittest.mock import patch

import pytest

from post_fanout.engine import ConcurrentRunner, FetchConfig, RunMode, RunResult, SequentialRunner
from post_fanout.engine.async_base import AsyncRunner
from post_fanout.engine.models import FetchFailure


def assert_covers_every_id_once(result: RunResult, limit: int) -> None:
    all_ids = result.success_ids + result.fail_ids
    assert result.success_count + result.fail_count == limit
    assert len(all_ids) == limit
    assert set(all_ids) == set(range(1, limit + 1))


class TestConcurrentRunnerProtocol:
    """Tests for AsyncRunner protocol conformance."""

    def test_implements_async_runner_protocol(self) -> None:
        assert isinstance(ConcurrentRunner(), AsyncRunner)

    def test_name(self) -> None:
        assert ConcurrentRunner().name == "concurrent"

    def test_default_config_is_unbounded(self) -> None:
        assert ConcurrentRunner().config.max_concurrent is None

    def test_peak_in_flight_is_zero_before_first_run(self) -> None:
        assert ConcurrentRunner(FetchConfig(max_concurrent=3)).peak_in_flight == 0


class TestConcurrentRunnerRun:
    """Tests for ConcurrentRunner.run()."""

    @pytest.mark.asyncio()
    async def test_returns_finalized_result(self, async_stub_fetcher) -> None:
        result = await ConcurrentRunner(FetchConfig(limit=5), async_stub_fetcher()).run()

        assert isinstance(result, RunResult)
        assert result.mode is RunMode.CONCURRENT
        assert result.is_finalized

    @pytest.mark.asyncio()
    @pytest.mark.parametrize("limit", [0, 1, 10, 100])
    async def test_counts_cover_every_id_once(self, async_stub_fetcher, limit: int) -> None:
        fetcher = async_stub_fetcher(failing_ids={3, 8, 50}, jitter=0.005, seed=limit)
        result = await ConcurrentRunner(fetcher=fetcher).run(limit)

        assert_covers_every_id_once(result, limit)

    @pytest.mark.asyncio()
    async def test_fetches_every_id_exactly_once(self, async_stub_fetcher) -> None:
        fetcher = async_stub_fetcher(jitter=0.002, seed=1)
        await ConcurrentRunner(FetchConfig(limit=30), fetcher).run()
        assert sorted(fetcher.calls) == list(range(1, 31))

    @pytest.mark.asyncio()
    async def test_single_failure_scenario(self, async_stub_fetcher) -> None:
        """N=3 with id 2 failing gives successes {1, 3} and failures {2}."""
        result = await ConcurrentRunner(
            FetchConfig(limit=3), async_stub_fetcher(failing_ids={2})
        ).run()

        assert result.success_count == 2
        assert result.fail_count == 1
        assert set(result.success_ids) == {1, 3}
        assert result.fail_ids == [2]

    @pytest.mark.asyncio()
    async def test_fault_injection_random_subset(self, async_stub_fetcher) -> None:
        rng = random.Random(7)
        failing = set(rng.sample(range(1, 101), 23))

        result = await ConcurrentRunner(
            fetcher=async_stub_fetcher(failing_ids=failing, jitter=0.003, seed=7)
        ).run()

        assert result.fail_count == len(failing)
        assert set(result.fail_ids) == failing
        assert result.success_count == 100 - len(failing)

    @pytest.mark.asyncio()
    async def test_unexpected_exception_is_one_failure(self, async_stub_fetcher) -> None:
        result = await ConcurrentRunner(
            FetchConfig(limit=5), async_stub_fetcher(raising_ids={4})
        ).run()

        assert_covers_every_id_once(result, 5)
        assert result.fail_ids == [4]

    @pytest.mark.asyncio()
    async def test_id_lists_follow_arrival_order(self, async_stub_fetcher) -> None:
        """Later ids answer sooner, so arrival order is descending."""
        fetcher = async_stub_fetcher(delay=lambda post_id: (10 - post_id) * 0.01)
        result = await ConcurrentRunner(FetchConfig(limit=10), fetcher).run()

        assert result.success_ids == list(range(10, 0, -1))

    @pytest.mark.asyncio()
    async def test_repeat_runs_give_same_sets(self, async_stub_fetcher) -> None:
        runner = ConcurrentRunner(
            FetchConfig(limit=40),
            async_stub_fetcher(failing_ids={1, 20, 40}, jitter=0.004),
        )

        first = await runner.run()
        second = await runner.run()

        assert first.success_count == second.success_count
        assert set(first.success_ids) == set(second.success_ids)
        assert set(first.fail_ids) == set(second.fail_ids)

    @pytest.mark.asyncio()
    async def test_on_failure_called_once_per_failure(self, async_stub_fetcher) -> None:
        seen: list[FetchFailure] = []
        runner = ConcurrentRunner(
            FetchConfig(limit=10),
            async_stub_fetcher(failing_ids={2, 6}, raising_ids={9}),
            on_failure=seen.append,
        )

        result = await runner.run()

        assert sorted(f.post_id for f in seen) == [2, 6, 9]
        assert [f.post_id for f in seen] == result.fail_ids
        assert any("Unexpected error" in f.reason for f in seen)

    @pytest.mark.asyncio()
    async def test_creates_async_post_fetcher_when_none_given(self, async_stub_fetcher) -> None:
        config = FetchConfig(base_url="http://api.test", limit=4)
        stub = async_stub_fetcher()

        with patch("post_fanout.engine.concurrent.AsyncPostFetcher") as fetcher_class:
            fetcher_class.return_value.__aenter__.return_value = stub
            result = await ConcurrentRunner(config).run()

        fetcher_class.assert_called_once_with(config)
        fetcher_class.return_value.__aexit__.assert_awaited_once()
        assert set(result.success_ids) == {1, 2, 3, 4}


class TestDrainBeforeSignal:
    """The run must never finish before every outcome has been merged."""

    @pytest.mark.asyncio()
    async def test_finalize_sees_every_outcome(self, async_stub_fetcher, monkeypatch) -> None:
        totals_at_finalize: list[int] = []

        class CheckingResult(RunResult):
            def finalize(self, start_time: float) -> None:
                totals_at_finalize.append(self.total)
                super().finalize(start_time)

        monkeypatch.setattr("post_fanout.engine.concurrent.RunResult", CheckingResult)

        for seed in range(200):
            limit = 1 + seed % 40
            fetcher = async_stub_fetcher(
                failing_ids=set(range(1, limit + 1, 3)),
                jitter=0.001,
                seed=seed,
            )
            result = await ConcurrentRunner(fetcher=fetcher).run(limit)
            assert_covers_every_id_once(result, limit)
            assert totals_at_finalize[-1] == limit

    @pytest.mark.asyncio()
    async def test_zero_delay_burst(self, async_stub_fetcher) -> None:
        """All tasks finish in the same loop iteration; none may be dropped."""
        for _ in range(50):
            result = await ConcurrentRunner(
                FetchConfig(limit=100), async_stub_fetcher(failing_ids={50})
            ).run()
            assert_covers_every_id_once(result, 100)


class TestFanOut:
    """Tests for unbounded and bounded fan-out."""

    @pytest.mark.asyncio()
    async def test_unbounded_starts_every_fetch_at_once(self, async_stub_fetcher) -> None:
        fetcher = async_stub_fetcher(delay=0.02)
        runner = ConcurrentRunner(FetchConfig(limit=100), fetcher)

        await runner.run()

        assert fetcher.peak_in_flight == 100
        assert runner.peak_in_flight == 100

    @pytest.mark.asyncio()
    async def test_bounded_caps_in_flight_fetches(self, async_stub_fetcher) -> None:
        fetcher = async_stub_fetcher(delay=0.005)
        runner = ConcurrentRunner(FetchConfig(limit=30, max_concurrent=4), fetcher)

        result = await runner.run()

        assert_covers_every_id_once(result, 30)
        assert fetcher.peak_in_flight <= 4
        assert runner.peak_in_flight == 4

    @pytest.mark.asyncio()
    async def test_faster_than_sequential(self, stub_fetcher, async_stub_fetcher) -> None:
        config = FetchConfig(limit=20)

        start = time.perf_counter()
        sequential = SequentialRunner(config, stub_fetcher(delay=0.02)).run()
        assert time.perf_counter() - start >= 0.4

        concurrent = await ConcurrentRunner(config, async_stub_fetcher(delay=0.02)).run()

        assert concurrent.total_duration * 5 < sequential.total_duration
