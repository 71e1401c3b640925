"""Subscriber channel tests."""

import asyncio

import pytest

from conftest import drain
from livecounter.core.protocol import encode_update
from livecounter.core.subscriber import Subscriber
from livecounter.errors import DeliveryError


def test_encode_update():
    assert encode_update(0) == "data: 0\n\n"
    assert encode_update(1234) == "data: 1234\n\n"


def test_subscribers_have_distinct_identities():
    first, second = Subscriber(), Subscriber()
    assert first.id != second.id
    assert first != second
    assert len({first, second}) == 2


def test_send_queues_records():
    subscriber = Subscriber()
    subscriber.send("data: 1\n\n")
    subscriber.send("data: 2\n\n")

    assert subscriber.pending == 2
    assert subscriber.delivered == 2
    assert drain(subscriber) == ["data: 1\n\n", "data: 2\n\n"]


def test_send_to_full_buffer_fails():
    subscriber = Subscriber(buffer_size=1)
    subscriber.send("data: 1\n\n")

    with pytest.raises(DeliveryError):
        subscriber.send("data: 2\n\n")
    assert subscriber.delivered == 1


def test_send_after_cancel_fails():
    subscriber = Subscriber()
    subscriber.cancel()

    with pytest.raises(DeliveryError):
        subscriber.send("data: 1\n\n")


def test_cleanup_callbacks_run_once():
    subscriber = Subscriber()
    calls = []
    subscriber.add_cleanup_callback(lambda: calls.append("a"))
    subscriber.add_cleanup_callback(lambda: calls.append("b"))

    subscriber.cancel()
    subscriber.cancel()

    assert subscriber.cancelled
    assert calls == ["a", "b"]


def test_callback_added_after_cancel_runs_immediately():
    subscriber = Subscriber()
    subscriber.cancel()
    calls = []

    subscriber.add_cleanup_callback(lambda: calls.append(True))

    assert calls == [True]


def test_failing_callback_does_not_block_others():
    subscriber = Subscriber()
    calls = []

    def broken():
        raise RuntimeError("boom")

    subscriber.add_cleanup_callback(broken)
    subscriber.add_cleanup_callback(lambda: calls.append(True))
    subscriber.cancel()

    assert calls == [True]


@pytest.mark.asyncio
async def test_stream_yields_until_cancelled():
    subscriber = Subscriber()
    subscriber.send("data: 1\n\n")
    subscriber.send("data: 2\n\n")
    received = []

    async def consume():
        async for record in subscriber.stream():
            received.append(record)

    consumer = asyncio.create_task(consume())
    await asyncio.sleep(0.01)
    subscriber.cancel()
    await asyncio.wait_for(consumer, 1.0)

    assert received == ["data: 1\n\n", "data: 2\n\n"]


@pytest.mark.asyncio
async def test_stream_flushes_full_buffer_after_cancel():
    subscriber = Subscriber(buffer_size=2)
    subscriber.send("data: 1\n\n")
    subscriber.send("data: 2\n\n")
    subscriber.cancel()

    received = [record async for record in subscriber.stream()]

    assert received == ["data: 1\n\n", "data: 2\n\n"]


@pytest.mark.asyncio
async def test_closing_stream_cancels_subscriber():
    subscriber = Subscriber()
    calls = []
    subscriber.add_cleanup_callback(lambda: calls.append(True))
    subscriber.send("data: 1\n\n")

    stream = subscriber.stream()
    assert await stream.__anext__() == "data: 1\n\n"
    await stream.aclose()

    assert subscriber.cancelled
    assert calls == [True]


@pytest.mark.asyncio
async def test_task_cancellation_cancels_subscriber():
    subscriber = Subscriber()

    async def consume():
        async for _ in subscriber.stream():
            pass

    consumer = asyncio.create_task(consume())
    await asyncio.sleep(0.01)
    consumer.cancel()
    with pytest.raises(asyncio.CancelledError):
        await consumer

    assert subscriber.cancelled
