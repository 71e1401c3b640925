"""Shared fixtures for the LiveCounter test suite."""

import asyncio
import os
import sys
from typing import List, Optional

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from livecounter.config import CatchUpPolicy
from livecounter.core.session import CounterSession
from livecounter.core.subscriber import Subscriber
from livecounter.errors import PersistenceError
from livecounter.persistence.memory import MemoryStore

# Long enough that the background loop never fires during a test that
# drives ticks by hand
MANUAL = 3600.0


class FlakyStore(MemoryStore):
    """Memory store that can be told to fail, and records every write."""

    def __init__(self):
        super().__init__()
        self.fail_gets = False
        self.fail_puts = False
        self.gets = 0
        self.puts: List[int] = []

    async def get(self, partition, key, default=None):
        self.gets += 1
        if self.fail_gets:
            raise PersistenceError("store offline")
        return await super().get(partition, key, default)

    async def put(self, partition, key, value):
        if self.fail_puts:
            raise PersistenceError("store offline")
        await super().put(partition, key, value)
        self.puts.append(value)


class GatedStore(MemoryStore):
    """Memory store whose writes block until released."""

    def __init__(self):
        super().__init__()
        self.writing = asyncio.Event()
        self.release = asyncio.Event()

    async def put(self, partition, key, value):
        self.writing.set()
        await self.release.wait()
        await super().put(partition, key, value)


def drain(subscriber: Subscriber) -> List[str]:
    """Pop every record currently queued for a subscriber."""
    records = []
    while not subscriber._queue.empty():
        record = subscriber._queue.get_nowait()
        if record is not None:
            records.append(record)
    return records


async def next_record(subscriber: Subscriber, timeout: float = 2.0) -> Optional[str]:
    return await asyncio.wait_for(subscriber._queue.get(), timeout)


@pytest.fixture
def store():
    return FlakyStore()


@pytest.fixture
def make_session(store):
    """Factory for sessions backed by the test store."""
    def factory(session_id: str = "session-1", tick_interval: float = MANUAL,
                catch_up: CatchUpPolicy = CatchUpPolicy.LATE_JOINERS, **kwargs):
        return CounterSession(
            session_id,
            kwargs.pop("store", store),
            tick_interval=tick_interval,
            catch_up=catch_up,
            **kwargs
        )
    return factory
