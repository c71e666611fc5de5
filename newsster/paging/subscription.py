"""Explicit subscription objects for snapshot streams.

A ``Broadcast`` fans immutable values out to every open ``Subscription``.
Subscribers consume with ``async for`` or poll with ``drain()``; closing
either side ends the iteration.
"""

import asyncio
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

_CLOSED = object()


class Subscription(Generic[T]):
    """
    An async iterator over values published after it was opened.

    With ``latest_only`` a slow reader holds at most one pending value:
    each push replaces whatever it has not consumed yet.
    """

    def __init__(
        self, owner: Optional["Broadcast[T]"] = None, latest_only: bool = False
    ):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._owner = owner
        self.latest_only = latest_only
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, item: T) -> None:
        if self._closed:
            return
        if self.latest_only:
            while not self._queue.empty():
                self._queue.get_nowait()
        self._queue.put_nowait(item)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
        if self._owner is not None:
            self._owner._detach(self)

    def drain(self) -> list[T]:
        """Return every value already delivered, without waiting."""
        items = []
        while not self._queue.empty():
            item = self._queue.get_nowait()
            if item is _CLOSED:
                # keep the end marker so async iteration still stops
                self._queue.put_nowait(_CLOSED)
                break
            items.append(item)
        return items

    def __aiter__(self) -> "Subscription[T]":
        return self

    async def __anext__(self) -> T:
        item = await self._queue.get()
        if item is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            raise StopAsyncIteration
        return item


class Broadcast(Generic[T]):
    """Publishes values to all open subscriptions."""

    def __init__(self):
        self._subscriptions: list[Subscription[T]] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, latest_only: bool = False) -> Subscription[T]:
        subscription: Subscription[T] = Subscription(self, latest_only)
        if self._closed:
            subscription.close()
        else:
            self._subscriptions.append(subscription)
        return subscription

    def publish(self, item: T) -> None:
        for subscription in list(self._subscriptions):
            subscription.push(item)

    def close(self) -> None:
        self._closed = True
        for subscription in list(self._subscriptions):
            subscription.close()

    def _detach(self, subscription: Subscription[T]) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
