"""Concurrency patterns module."""

from post_fanout.patterns.channel import ChannelClosedError, OutcomeChannel
from post_fanout.patterns.semaphore import ConcurrencyLimiter, LimiterMetrics

__all__ = [
    # Channel
    "ChannelClosedError",
    "OutcomeChannel",
    # Limiter
    "ConcurrencyLimiter",
    "LimiterMetrics",
]
