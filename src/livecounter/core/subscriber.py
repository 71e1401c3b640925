"""
Subscriber - one live delivery channel

A subscriber wraps a bounded queue of serialized updates plus a cancellation
signal tied to the client connection. The web layer drains the queue through
``stream()``; when the client goes away the stream is cancelled, which fires
the cleanup callbacks registered by the owning session.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable, List, Optional
from uuid import uuid4

from ..errors import DeliveryError

logger = logging.getLogger(__name__)

_CLOSED = None


@dataclass(eq=False)
class Subscriber:
    """Represents an attached update stream"""

    id: str = field(default_factory=lambda: str(uuid4()))
    buffer_size: int = 64
    created_at: float = field(default_factory=time.time)
    delivered: int = 0

    _queue: Optional[asyncio.Queue] = field(default=None, repr=False)
    _cancelled: bool = field(default=False, repr=False)
    _cleanup_callbacks: List[Callable[[], None]] = field(default_factory=list, repr=False)

    def __post_init__(self):
        if self._queue is None:
            self._queue = asyncio.Queue(maxsize=self.buffer_size)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def pending(self) -> int:
        """Number of records waiting to be written to the client."""
        return self._queue.qsize()

    def send(self, record: str) -> None:
        """
        Enqueue a record without waiting.

        Raises:
            DeliveryError: the subscriber is cancelled or its buffer is full
        """
        if self._cancelled:
            raise DeliveryError(f"Subscriber {self.id} is closed")
        try:
            self._queue.put_nowait(record)
        except asyncio.QueueFull:
            raise DeliveryError(f"Buffer full for subscriber {self.id}") from None
        self.delivered += 1

    def add_cleanup_callback(self, callback: Callable[[], None]) -> None:
        """Register a callback to run once when the subscriber is cancelled."""
        if self._cancelled:
            callback()
            return
        self._cleanup_callbacks.append(callback)

    def cancel(self) -> None:
        """Fire the cancellation signal. Safe to call more than once."""
        if self._cancelled:
            return
        self._cancelled = True

        # Wake a reader blocked on an empty queue
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            pass

        callbacks, self._cleanup_callbacks = self._cleanup_callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Error in cleanup callback for subscriber {self.id}: {e}")

    async def stream(self) -> AsyncIterator[str]:
        """
        Yield queued records until the subscriber is cancelled.

        Closing or cancelling the iterator (client disconnect) cancels the
        subscriber.
        """
        try:
            while not (self._cancelled and self._queue.empty()):
                record = await self._queue.get()
                if record is _CLOSED:
                    break
                yield record
        finally:
            self.cancel()
