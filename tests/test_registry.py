"""Session registry tests."""

import asyncio

import pytest

from conftest import MANUAL
from livecounter.config import SessionConfig
from livecounter.core.registry import SessionRegistry
from livecounter.core.session import COUNTER_KEY


@pytest.fixture
def registry(store):
    return SessionRegistry(store, SessionConfig(tick_interval=MANUAL))


@pytest.mark.asyncio
async def test_same_identifier_same_actor(registry):
    assert registry.get("a") is registry.get("a")
    assert "a" in registry
    assert len(registry) == 1


@pytest.mark.asyncio
async def test_distinct_identifiers_are_independent(registry):
    first, second = registry.get("a"), registry.get("b")
    assert first is not second

    subscriber = first.new_subscriber()
    await first.attach(subscriber)
    await first.tick()

    assert first.counter == 1
    assert await second.activate() == 0
    await registry.shutdown()


@pytest.mark.asyncio
async def test_sessions_use_registry_config(store):
    config = SessionConfig(tick_interval=2.5, subscriber_buffer=4)
    registry = SessionRegistry(store, config)

    session = registry.get("a")

    assert session.tick_interval == 2.5
    assert session.new_subscriber().buffer_size == 4


@pytest.mark.asyncio
async def test_evict_idle_keeps_sessions_in_use(registry):
    busy, idle = registry.get("busy"), registry.get("idle")
    await busy.attach(busy.new_subscriber())
    await idle.activate()

    evicted = await registry.evict_idle(idle_timeout=0)

    assert evicted == 1
    assert "busy" in registry
    assert "idle" not in registry
    await registry.shutdown()


@pytest.mark.asyncio
async def test_evict_idle_respects_timeout(registry):
    registry.get("a")
    assert await registry.evict_idle(idle_timeout=60) == 0
    assert "a" in registry


@pytest.mark.asyncio
async def test_evicted_session_reactivates_from_store(store, registry):
    session = registry.get("a")
    subscriber = session.new_subscriber()
    await session.attach(subscriber)
    await session.tick()
    await session.tick()
    subscriber.cancel()

    assert await registry.evict("a")
    assert session.closed
    assert await store.get("a", COUNTER_KEY) == 2

    fresh = registry.get("a")
    assert fresh is not session
    assert await fresh.activate() == 2


@pytest.mark.asyncio
async def test_evict_unknown_session(registry):
    assert not await registry.evict("missing")


@pytest.mark.asyncio
async def test_shutdown_stops_every_session(registry):
    first, second = registry.get("a"), registry.get("b")
    sub_a, sub_b = first.new_subscriber(), second.new_subscriber()
    await first.attach(sub_a)
    await second.attach(sub_b)

    await registry.shutdown()

    assert len(registry) == 0
    assert sub_a.cancelled and sub_b.cancelled
    assert not first.is_running and not second.is_running


@pytest.mark.asyncio
async def test_stats(registry):
    session = registry.get("a")
    registry.get("b")
    await session.attach(session.new_subscriber())

    stats = registry.stats()

    assert stats == {'sessions': 2, 'running_sessions': 1, 'subscribers': 1}
    await registry.shutdown()


@pytest.mark.asyncio
async def test_cleanup_loop_evicts_idle_sessions(store):
    registry = SessionRegistry(
        store,
        SessionConfig(tick_interval=MANUAL, idle_timeout=0, cleanup_interval=0.01)
    )
    registry.get("a")

    registry.start_cleanup()
    await asyncio.sleep(0.05)

    assert "a" not in registry
    await registry.stop_cleanup()
    assert registry._cleanup_task is None
