"""
Collection Subscription - live, ordered snapshots of a collection.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from .interface import DocumentSnapshot

logger = logging.getLogger(__name__)

_CLOSED = object()
_CHANGED = object()


class CollectionSubscription:
    """
    Async iterator over snapshots of one collection.

    The first snapshot is the current contents; each later one is produced
    after a change notification. Notifications that pile up while the consumer
    is busy are coalesced into a single snapshot. Subscribing again restarts
    the sequence from the current contents.

    Usage:
        subscription = store.subscribe("users/123/chatHistory", order_by="timestamp")
        async for snapshot in subscription:
            ...
        subscription.unsubscribe()
    """

    def __init__(
        self,
        collection_path: str,
        fetch: Callable[[], Awaitable[List[DocumentSnapshot]]],
        on_close: Optional[Callable[["CollectionSubscription"], None]] = None,
    ):
        self.collection_path = collection_path
        self._fetch = fetch
        self._on_close = on_close
        self._queue: asyncio.Queue = asyncio.Queue()
        self._started = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def notify(self) -> None:
        """Signal that the collection changed."""
        if not self._closed:
            self._queue.put_nowait(_CHANGED)

    def unsubscribe(self) -> None:
        """Stop the subscription; a pending iteration ends with StopAsyncIteration."""
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)
        if self._on_close:
            self._on_close(self)
        logger.debug(f"Unsubscribed from {self.collection_path}")

    def __aiter__(self) -> "CollectionSubscription":
        return self

    async def __anext__(self) -> List[DocumentSnapshot]:
        if not self._started:
            self._started = True
            if self._closed:
                raise StopAsyncIteration
            return await self._fetch()

        signal = await self._queue.get()
        while signal is _CHANGED and not self._queue.empty():
            signal = self._queue.get_nowait()
        if signal is _CLOSED:
            raise StopAsyncIteration
        return await self._fetch()

    async def __aenter__(self) -> "CollectionSubscription":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()
