"""Closable single-consumer channel for fan-in of concurrent producers."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

T = TypeVar("T")

_CLOSED = object()


class ChannelClosedError(Exception):
    """Raised when sending on a channel that has been closed."""

    pass


class OutcomeChannel(Generic[T]):
    """
    Unbounded FIFO channel that many producers send to and one consumer drains.

    Closing the channel enqueues an end marker behind everything already sent,
    so a consumer iterating with ``async for`` sees every item sent before
    ``close()`` and only then stops. Completion is therefore signalled through
    the same ordered stream as the data, never alongside it.

    Example:
        ```python
        channel: OutcomeChannel[int] = OutcomeChannel()

        async def produce(n: int) -> None:
            channel.send(n)

        async def watch(tasks) -> None:
            await asyncio.gather(*tasks)
            channel.close()

        async for item in channel:
            handle(item)
        ```
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False
        self._sent = 0
        self._received = 0

    @property
    def closed(self) -> bool:
        """Whether close() has been called."""
        return self._closed

    @property
    def pending(self) -> int:
        """Number of items sent but not yet received."""
        return self._sent - self._received

    def send(self, item: T) -> None:
        """Send an item to the consumer.

        Raises:
            ChannelClosedError: If the channel is closed.
        """
        if self._closed:
            raise ChannelClosedError("Channel is closed")
        self._queue.put_nowait(item)
        self._sent += 1

    def close(self) -> None:
        """Close the channel. Calling it again has no effect."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    async def __aiter__(self) -> AsyncIterator[T]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            self._received += 1
            yield item
