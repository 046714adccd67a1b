import asyncio
import json

import pytest
from fastapi.responses import StreamingResponse

from app.api.endpoints.events import stream_events
from app.services.notifier import ChangeNotifier, Subscription, event_stream


def decode(frame: str) -> dict:
    assert frame.startswith("data: ") and frame.endswith("\n\n")
    return json.loads(frame[len("data: "):])


class BrokenSubscription(Subscription):
    def deliver(self, message: str) -> None:
        raise ConnectionResetError("cliente caído")


async def test_publish_reaches_every_subscriber(notifier):
    first = notifier.subscribe()
    second = notifier.subscribe()

    delivered = notifier.publish("ciudad_agregada", {"id": 1, "name": "Lima"})

    assert delivered == 2
    for subscription in (first, second):
        message = json.loads(await subscription.next_message())
        assert message["type"] == "ciudad_agregada"
        assert message["data"] == {"id": 1, "name": "Lima"}
        assert message["timestamp"].endswith("+00:00")


async def test_publish_without_subscribers(notifier):
    assert notifier.publish("ciudad_eliminada", {"id": 1}) == 0


async def test_late_subscriber_misses_earlier_events(notifier):
    notifier.publish("ciudad_agregada", {"id": 1})
    late = notifier.subscribe()
    notifier.publish("ciudad_agregada", {"id": 2})

    message = json.loads(await late.next_message())

    assert message["data"] == {"id": 2}


async def test_unsubscribe_is_idempotent(notifier):
    subscription = notifier.subscribe()
    assert notifier.subscriber_count == 1

    notifier.unsubscribe(subscription)
    notifier.unsubscribe(subscription)

    assert notifier.subscriber_count == 0
    assert notifier.publish("ciudad_agregada", {"id": 1}) == 0


async def test_failing_subscriber_does_not_block_others():
    kinds = iter([BrokenSubscription, Subscription])
    notifier = ChangeNotifier(subscription_factory=lambda: next(kinds)())
    notifier.subscribe()
    healthy = notifier.subscribe()

    delivered = notifier.publish("restaurante_agregado", {"id": 7})

    assert delivered == 1
    assert json.loads(await healthy.next_message())["data"] == {"id": 7}


async def test_unserializable_payload_is_swallowed(notifier):
    subscription = notifier.subscribe()

    assert notifier.publish("ciudad_agregada", {"nan": float("nan"), "obj": object()}) == 1
    message = json.loads(await subscription.next_message())
    assert message["type"] == "ciudad_agregada"

    circular = []
    circular.append(circular)
    assert notifier.publish("ciudad_agregada", circular) == 0


async def test_event_stream_sends_connected_then_events(notifier):
    stream = event_stream(notifier)

    connected = decode(await stream.__anext__())
    assert notifier.subscriber_count == 1
    assert connected["type"] == "connected"
    assert connected["message"] == "Conectado al servidor"

    notifier.publish("patrocinador_eliminado", {"id": 3, "message": "Patrocinador eliminado"})
    event = decode(await stream.__anext__())
    assert event["type"] == "patrocinador_eliminado"
    assert event["data"]["id"] == 3

    await stream.aclose()
    assert notifier.subscriber_count == 0


async def test_event_stream_pings_when_idle(notifier):
    stream = event_stream(notifier, ping_interval=0.01)

    await stream.__anext__()
    assert await stream.__anext__() == ": ping\n\n"

    await stream.aclose()


async def test_close_ends_open_streams(notifier):
    stream = event_stream(notifier)
    await stream.__anext__()

    notifier.close()

    with pytest.raises(StopAsyncIteration):
        await asyncio.wait_for(stream.__anext__(), timeout=1)
    assert notifier.subscriber_count == 0


async def test_events_endpoint_registers_subscriber(notifier):
    response = await stream_events(notifier)

    assert isinstance(response, StreamingResponse)
    assert response.media_type == "text/event-stream"
    assert response.headers["cache-control"] == "no-cache"
    assert notifier.subscriber_count == 0

    first = decode(await response.body_iterator.__anext__())
    assert first["type"] == "connected"
    assert notifier.subscriber_count == 1

    await response.body_iterator.aclose()
    assert notifier.subscriber_count == 0


async def test_stream_never_started_leaves_no_subscriber(notifier):
    response = await stream_events(notifier)

    await response.body_iterator.aclose()

    assert notifier.subscriber_count == 0
    assert notifier.publish("ciudad_agregada", {"id": 1}) == 0


async def test_stalled_subscriber_drops_events():
    notifier = ChangeNotifier(subscription_factory=lambda: Subscription(max_pending=2))
    stalled = notifier.subscribe()

    delivered = [notifier.publish("ciudad_agregada", {"id": i}) for i in range(1, 4)]

    assert delivered == [1, 1, 0]
    assert stalled.pending == 2
    assert json.loads(await stalled.next_message())["data"] == {"id": 1}
    assert json.loads(await stalled.next_message())["data"] == {"id": 2}


async def test_close_reaches_a_full_queue():
    notifier = ChangeNotifier(subscription_factory=lambda: Subscription(max_pending=1))
    stream = event_stream(notifier)
    await stream.__anext__()
    notifier.publish("ciudad_agregada", {"id": 1})

    notifier.close()

    with pytest.raises(StopAsyncIteration):
        await asyncio.wait_for(stream.__anext__(), timeout=1)
