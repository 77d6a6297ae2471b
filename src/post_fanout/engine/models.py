"""Domain models for the post-fanout runners.

This module defines the core data structures shared by the sequential and
concurrent runners.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

DEFAULT_BASE_URL = "https://jsonplaceholder.typicode.com"
DEFAULT_LIMIT = 100


class RunMode(str, Enum):
    """Execution mode of a run.

    Attributes:
        SEQUENTIAL: One request at a time, ids in ascending order.
        CONCURRENT: One task per id, outcomes merged by a single consumer.
    """

    SEQUENTIAL = "sequential"
    CONCURRENT = "concurrent"


@dataclass(frozen=True, slots=True)
class FetchConfig:
    """Immutable parameters for a run.

    Attributes:
        base_url: Root of the remote API; posts live under ``/posts/{id}``.
        limit: Number of posts to fetch (ids 1..limit).
        timeout: Per-request timeout in seconds. ``None`` disables the timeout,
            so a hung request hangs the run.
        max_concurrent: Upper bound on in-flight requests in concurrent mode.
            ``None`` starts every request at once.
    """

    base_url: str = DEFAULT_BASE_URL
    limit: int = DEFAULT_LIMIT
    timeout: float | None = None
    max_concurrent: int | None = None

    def __post_init__(self) -> None:
        if self.limit < 0:
            raise ValueError("limit must be non-negative")
        if self.max_concurrent is not None and self.max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be positive")

    def post_url(self, post_id: int) -> str:
        """Build the URL of a single post."""
        return f"{self.base_url.rstrip('/')}/posts/{post_id}"

    def post_ids(self, limit: int | None = None) -> Iterator[int]:
        """Yield post ids 1..limit in ascending order."""
        count = self.limit if limit is None else limit
        if count < 0:
            raise ValueError("limit must be non-negative")
        return iter(range(1, count + 1))


def _require(data: dict[str, Any], key: str, expected: type) -> Any:
    if key not in data:
        raise ValueError(f"missing field {key!r}")
    value = data[key]
    # bool is a subclass of int but never a valid id
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise ValueError(f"field {key!r} must be {expected.__name__}, got {type(value).__name__}")
    return value


@dataclass(frozen=True, slots=True)
class Post:
    """A decoded post record.

    Attributes:
        id: Post identifier.
        user_id: Identifier of the owning user.
        title: Post title.
        body: Post body text.
    """

    id: int
    user_id: int
    title: str
    body: str

    @classmethod
    def from_json(cls, data: Any) -> Post:
        """Decode the wire form ``{id, userId, title, body}``.

        Raises:
            ValueError: If the payload is not an object or a field is missing
                or has the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return cls(
            id=_require(data, "id", int),
            user_id=_require(data, "userId", int),
            title=_require(data, "title", str),
            body=_require(data, "body", str),
        )


@dataclass(frozen=True, slots=True)
class FetchSuccess:
    """A post that was fetched and decoded."""

    post_id: int
    post: Post


@dataclass(frozen=True, slots=True)
class FetchFailure:
    """A post that could not be fetched or decoded.

    Attributes:
        post_id: The id that failed.
        reason: Human-readable description of the failure.
        cause: The underlying exception, if any.
    """

    post_id: int
    reason: str
    cause: BaseException | None = None


FetchOutcome = FetchSuccess | FetchFailure


@dataclass(slots=True)
class RunResult:
    """Aggregate of every outcome of a single run.

    Mutated incrementally by exactly one owner (the runner's loop), then sealed
    by :meth:`finalize`.

    Attributes:
        mode: Which runner produced the result.
        success_count: Number of successful fetches.
        fail_count: Number of failed fetches.
        success_ids: Successful ids, in the order they were recorded.
        fail_ids: Failed ids, in the order they were recorded.
        total_duration: Wall-clock seconds from run start to finalize.
    """

    mode: RunMode
    success_count: int = 0
    fail_count: int = 0
    success_ids: list[int] = field(default_factory=list)
    fail_ids: list[int] = field(default_factory=list)
    total_duration: float = 0.0
    _finalized: bool = field(default=False, init=False, repr=False)

    @property
    def total(self) -> int:
        """Number of outcomes recorded so far."""
        return self.success_count + self.fail_count

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def record(self, outcome: FetchOutcome) -> None:
        """Fold one outcome into the result.

        Raises:
            RuntimeError: If the result has already been finalized.
        """
        if self._finalized:
            raise RuntimeError("cannot record an outcome after finalize()")
        if isinstance(outcome, FetchSuccess):
            self.success_ids.append(outcome.post_id)
            self.success_count += 1
        else:
            self.fail_ids.append(outcome.post_id)
            self.fail_count += 1

    def finalize(self, start_time: float) -> None:
        """Stamp the elapsed duration since ``start_time`` (a ``perf_counter`` value).

        Raises:
            RuntimeError: If called more than once.
        """
        if self._finalized:
            raise RuntimeError("result is already finalized")
        self.total_duration = time.perf_counter() - start_time
        self._finalized = True

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the ``{success, fail, totalDuration, successIds, failIds}`` shape."""
        return {
            "mode": self.mode.value,
            "success": self.success_count,
            "fail": self.fail_count,
            "totalDuration": self.total_duration,
            "successIds": list(self.success_ids),
            "failIds": list(self.fail_ids),
        }
