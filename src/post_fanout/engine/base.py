"""Base Protocols for runners and fetchers.

This module defines the synchronous Runner and Fetcher protocols that the
sequential implementation follows.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from post_fanout.engine.models import FetchOutcome, RunResult


@runtime_checkable
class Fetcher(Protocol):
    """Protocol for a blocking "fetch post by id" capability.

    Implementations must never raise for transport or decode problems; they
    report them as a FetchFailure outcome instead.
    """

    def fetch(self, post_id: int) -> FetchOutcome:
        """Fetch and decode a single post.

        Args:
            post_id: Identifier of the post to fetch.

        Returns:
            FetchSuccess with the decoded post, or FetchFailure with the cause.
        """
        ...


@runtime_checkable
class Runner(Protocol):
    """Protocol defining the interface for synchronous runners.

    The @runtime_checkable decorator enables isinstance() checks for protocol conformance.

    Example:
        >>> from post_fanout.engine.base import Runner
        >>> from post_fanout.engine import SequentialRunner
        >>> isinstance(SequentialRunner(), Runner)
        True
    """

    @property
    def name(self) -> str:
        """Name of the runner (e.g., "sequential")."""
        ...

    def run(self, limit: int | None = None) -> RunResult:
        """Fetch posts 1..limit and aggregate the outcomes.

        Args:
            limit: Number of posts to fetch; defaults to the configured limit.

        Returns:
            A finalized RunResult.
        """
        ...
