"""
Counter Session - the per-session actor

⚡ Durable counter with live fan-out:
One ``CounterSession`` exists per session identifier. It owns the counter
value, the set of attached subscribers and the tick task that advances the
counter once per interval while anyone is watching.

Every operation that awaits (activation, catch-up, ticks) runs under the
session lock, so one session's state is never mutated concurrently. Detach
is synchronous and therefore atomic on the event loop.
"""

import asyncio
import logging
import time
from typing import Any, Dict, FrozenSet, Optional, Set

from ..config import CatchUpPolicy, SessionConfig
from ..errors import DeliveryError, LiveCounterError, PersistenceError
from ..persistence.base import ScalarStore
from .protocol import encode_update
from .subscriber import Subscriber

logger = logging.getLogger(__name__)

COUNTER_KEY = "counter"


class CounterSession:
    """
    Session actor owning one monotonically increasing counter.

    The tick loop is Running iff there are subscribers: the first attach
    starts it, and it stops once the subscriber set is empty (immediately
    if it is waiting for the next tick, otherwise right after the tick in
    progress has broadcast).
    """

    def __init__(
        self,
        session_id: str,
        store: ScalarStore,
        tick_interval: float = 1.0,
        catch_up: CatchUpPolicy = CatchUpPolicy.LATE_JOINERS,
        subscriber_buffer: int = 64
    ):
        self.session_id = session_id
        self.store = store
        self.tick_interval = tick_interval
        self.catch_up = catch_up
        self.subscriber_buffer = subscriber_buffer

        self._counter: Optional[int] = None
        self._committed: Optional[int] = None
        self._subscribers: Set[Subscriber] = set()
        self._lock = asyncio.Lock()
        self._tick_task: Optional[asyncio.Task] = None
        self._in_tick = False
        self._closed = False
        self.last_active = time.monotonic()

        self._metrics = {
            'activations': 0,
            'ticks': 0,
            'ticks_failed': 0,
            'deliveries': 0,
            'delivery_failures': 0,
            'subscribers_attached': 0,
            'subscribers_detached': 0
        }

    @classmethod
    def from_config(cls, session_id: str, store: ScalarStore, config: SessionConfig) -> 'CounterSession':
        return cls(
            session_id,
            store,
            tick_interval=config.tick_interval,
            catch_up=config.catch_up,
            subscriber_buffer=config.subscriber_buffer
        )

    @property
    def counter(self) -> Optional[int]:
        """In-memory counter value, None until the session is activated."""
        return self._counter

    @property
    def committed(self) -> Optional[int]:
        """Last value known to be in the store."""
        return self._committed

    @property
    def activated(self) -> bool:
        return self._counter is not None

    @property
    def subscribers(self) -> FrozenSet[Subscriber]:
        return frozenset(self._subscribers)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    @property
    def is_running(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def idle_for(self) -> float:
        """Seconds since the session last had subscribers, 0 while in use."""
        if self._subscribers or self.is_running:
            return 0.0
        return time.monotonic() - self.last_active

    def new_subscriber(self) -> Subscriber:
        return Subscriber(buffer_size=self.subscriber_buffer)

    # ------------------------------------------------------------------ #
    # Activation

    async def activate(self) -> int:
        """Load the counter from the store once per activation."""
        async with self._lock:
            return await self._activate_locked()

    async def _activate_locked(self) -> int:
        if self._counter is None:
            try:
                value = await self.store.get(self.session_id, COUNTER_KEY, 0)
            except PersistenceError:
                raise
            except Exception as e:
                raise PersistenceError(f"Failed to load counter for {self.session_id}: {e}") from e
            self._counter = int(value or 0)
            self._committed = self._counter
            self._metrics['activations'] += 1
            logger.info(f"Activated session {self.session_id} at counter={self._counter}")
        return self._counter

    # ------------------------------------------------------------------ #
    # Subscribers

    async def attach(self, subscriber: Subscriber) -> None:
        """
        Register a subscriber and start the tick loop or send catch-up.

        Raises:
            PersistenceError: the counter could not be loaded
            LiveCounterError: the session has been shut down
        """
        async with self._lock:
            if self._closed:
                raise LiveCounterError(f"Session {self.session_id} is shut down")

            await self._activate_locked()

            if subscriber.cancelled:
                logger.debug(f"Subscriber {subscriber.id} went away before attaching")
                return

            self._subscribers.add(subscriber)
            subscriber.add_cleanup_callback(lambda: self.detach(subscriber))
            self._metrics['subscribers_attached'] += 1
            self.last_active = time.monotonic()
            logger.info(
                f"Attached subscriber {subscriber.id} to session {self.session_id} "
                f"({len(self._subscribers)} live)"
            )

            starting = not self.is_running
            if starting:
                self._start_ticking()

            if not starting or self.catch_up is CatchUpPolicy.ALWAYS:
                self._deliver(subscriber, encode_update(self._committed))

    def detach(self, subscriber: Subscriber) -> None:
        """Remove a subscriber; stops the tick loop when none remain. Idempotent."""
        if subscriber not in self._subscribers:
            return

        self._subscribers.discard(subscriber)
        self._metrics['subscribers_detached'] += 1
        self.last_active = time.monotonic()
        subscriber.cancel()
        logger.info(
            f"Detached subscriber {subscriber.id} from session {self.session_id} "
            f"({len(self._subscribers)} live)"
        )

        if not self._subscribers:
            self._stop_ticking()

    def _deliver(self, subscriber: Subscriber, record: str) -> None:
        try:
            subscriber.send(record)
        except DeliveryError as e:
            logger.warning(f"Delivery failed in session {self.session_id}: {e}")
            self._metrics['delivery_failures'] += 1
            self.detach(subscriber)
            return
        self._metrics['deliveries'] += 1

    # ------------------------------------------------------------------ #
    # Tick loop

    def _start_ticking(self) -> None:
        if self.is_running:
            return
        self._tick_task = asyncio.create_task(self._run(), name=f"livecounter-tick-{self.session_id}")
        logger.info(f"Session {self.session_id} running (interval={self.tick_interval}s)")

    def _stop_ticking(self) -> None:
        if self._tick_task is None or self._in_tick:
            # A tick in progress finishes its broadcast and then goes idle
            return
        task, self._tick_task = self._tick_task, None
        if task is not asyncio.current_task():
            task.cancel()
        logger.info(f"Session {self.session_id} idle")

    async def _run(self) -> None:
        while self._tick_task is asyncio.current_task():
            await asyncio.sleep(self.tick_interval)
            try:
                await self.tick()
            except PersistenceError as e:
                logger.error(f"Tick failed in session {self.session_id}: {e}")

    async def tick(self) -> int:
        """
        Run one tick: increment, persist, broadcast.

        Goes idle afterwards if no subscriber is left.

        Returns:
            The new counter value

        Raises:
            PersistenceError: the new value could not be committed; nothing
            was broadcast
        """
        async with self._lock:
            self._in_tick = True
            try:
                return await self._tick_locked()
            finally:
                self._in_tick = False
                if not self._subscribers:
                    self._stop_ticking()

    async def _tick_locked(self) -> int:
        await self._activate_locked()

        self._counter += 1
        value = self._counter

        try:
            await self.store.put(self.session_id, COUNTER_KEY, value)
        except Exception as e:
            self._metrics['ticks_failed'] += 1
            if isinstance(e, PersistenceError):
                raise
            raise PersistenceError(f"Failed to persist counter for {self.session_id}: {e}") from e

        self._committed = value
        record = encode_update(value)
        for subscriber in list(self._subscribers):
            self._deliver(subscriber, record)

        self._metrics['ticks'] += 1
        logger.debug(f"Session {self.session_id} tick {value} -> {len(self._subscribers)} subscribers")
        return value

    # ------------------------------------------------------------------ #
    # Deactivation

    async def shutdown(self) -> None:
        """Stop the tick loop and cancel every subscriber."""
        async with self._lock:
            self._closed = True
            task, self._tick_task = self._tick_task, None
            if task is not None:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

            for subscriber in list(self._subscribers):
                self.detach(subscriber)

            self._counter = None
            self._committed = None
            logger.info(f"Session {self.session_id} shut down")

    def stats(self) -> Dict[str, Any]:
        """Get session state and metrics"""
        return {
            **self._metrics,
            'session_id': self.session_id,
            'counter': self._counter,
            'committed': self._committed,
            'subscribers': len(self._subscribers),
            'running': self.is_running
        }
