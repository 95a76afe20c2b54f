"""Unit tests for the EventBus and its SSE relay."""

import asyncio
import json

import pytest

from datakeeper.application.services import EventBus, SSEManager
from datakeeper.application.services.event_bus import COMPANY_DATA_CHANGED, NOTIFICATION


def test_publish_delivers_in_subscription_order():
    bus = EventBus()
    calls = []
    bus.subscribe(COMPANY_DATA_CHANGED, lambda name, payload: calls.append(("first", payload)))
    bus.subscribe(COMPANY_DATA_CHANGED, lambda name, payload: calls.append(("second", payload)))
    bus.subscribe("other", lambda name, payload: calls.append(("other", payload)))

    delivered = bus.publish(COMPANY_DATA_CHANGED, {"source": "save"})

    assert delivered == 2
    assert calls == [("first", {"source": "save"}), ("second", {"source": "save"})]


def test_failing_subscriber_is_isolated():
    bus = EventBus()
    calls = []

    def broken(name, payload):
        raise RuntimeError("boom")

    bus.subscribe(COMPANY_DATA_CHANGED, broken)
    bus.subscribe(COMPANY_DATA_CHANGED, lambda name, payload: calls.append(name))

    assert bus.publish(COMPANY_DATA_CHANGED) == 1
    assert calls == [COMPANY_DATA_CHANGED]


def test_unsubscribe_both_ways():
    bus = EventBus()
    first = bus.subscribe(COMPANY_DATA_CHANGED, lambda name, payload: None)
    second = bus.subscribe(COMPANY_DATA_CHANGED, lambda name, payload: None)

    first.unsubscribe()
    assert bus.unsubscribe(second.id) is True
    assert bus.unsubscribe(second.id) is False
    assert bus.subscriber_count() == 0


def test_notify_publishes_notification_payload():
    bus = EventBus()
    received = []
    bus.subscribe(NOTIFICATION, lambda name, payload: received.append(payload))

    bus.notify("Sync failed", "Could not reach the server", variant="destructive")

    assert received == [
        {"title": "Sync failed", "description": "Could not reach the server", "variant": "destructive"}
    ]


@pytest.mark.asyncio
async def test_sse_manager_relays_attached_events():
    bus = EventBus()
    sse = SSEManager()
    sse.attach(bus, [COMPANY_DATA_CHANGED])

    stream = sse.subscribe()
    pending = asyncio.ensure_future(stream.__anext__())
    await asyncio.sleep(0)
    assert sse.client_count == 1

    bus.publish(COMPANY_DATA_CHANGED, {"source": "save"})
    message = await asyncio.wait_for(pending, timeout=1)

    assert message.startswith(f"event: {COMPANY_DATA_CHANGED}\n")
    assert json.loads(message.split("data: ", 1)[1]) == {"source": "save"}

    await sse.shutdown()
    assert bus.subscriber_count() == 0
    with pytest.raises(StopAsyncIteration):
        await stream.__anext__()
