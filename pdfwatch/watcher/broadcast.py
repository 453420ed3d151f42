"""Bounded multi-subscriber channel for FileReadyEvents.

Every subscriber gets its own bounded queue. ``publish`` never blocks: when a
subscriber's queue is full its oldest event is dropped and counted as lag.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Generic, TypeVar

from pdfwatch.kernel.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_CAPACITY = 100


class ChannelClosed(Exception):
    """Raised by :meth:`Receiver.recv` once the channel is closed and drained."""


_CLOSED = object()


class Receiver(Generic[T]):
    """One subscriber's view of a :class:`Broadcast`."""

    def __init__(self, broadcast: Broadcast[T], capacity: int) -> None:
        self._broadcast = broadcast
        # One extra slot so the close sentinel always fits
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=capacity + 1)
        self._capacity = capacity
        self._closed = False
        self.lagged = 0

    def _push(self, item: T) -> None:
        if self._queue.qsize() >= self._capacity:
            self._queue.get_nowait()
            self.lagged += 1
            logger.warning("Receiver lagging, dropped oldest event ({} total)", self.lagged)
        self._queue.put_nowait(item)

    def _close(self) -> None:
        self._queue.put_nowait(_CLOSED)

    async def recv(self) -> T:
        """Wait for the next event.

        Raises
        ------
        ChannelClosed
            When the channel was closed and every queued event was consumed
        """
        if self._closed:
            raise ChannelClosed()
        item = await self._queue.get()
        if item is _CLOSED:
            self._closed = True
            raise ChannelClosed()
        return item  # type: ignore[return-value]

    def try_recv(self) -> T | None:
        """Return the next queued event without waiting, or None."""
        if self._closed or self._queue.empty():
            return None
        item = self._queue.get_nowait()
        if item is _CLOSED:
            self._closed = True
            return None
        return item  # type: ignore[return-value]

    def unsubscribe(self) -> None:
        self._broadcast._receivers.discard(self)

    def __aiter__(self) -> AsyncIterator[T]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[T]:
        while True:
            try:
                yield await self.recv()
            except ChannelClosed:
                return


class Broadcast(Generic[T]):
    """Fan-out channel; each subscriber sees every event published after it subscribed."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._receivers: set[Receiver[T]] = set()
        self._closed = False

    def subscribe(self) -> Receiver[T]:
        receiver: Receiver[T] = Receiver(self, self._capacity)
        if self._closed:
            receiver._close()
        else:
            self._receivers.add(receiver)
        return receiver

    def publish(self, item: T) -> int:
        """Deliver ``item`` to every subscriber; returns the number reached."""
        if self._closed:
            return 0
        for receiver in self._receivers:
            receiver._push(item)
        return len(self._receivers)

    def close(self) -> None:
        """Close the channel; receivers drain what is queued then stop."""
        if self._closed:
            return
        self._closed = True
        for receiver in self._receivers:
            receiver._close()
        self._receivers.clear()

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self._receivers)
