import logging
from uuid import uuid4

import pytest

from app.infra.realtime.channels import notifications_channel, post_channel
from app.infra.realtime.events import RealtimeEvent
from app.infra.realtime.hub import InMemoryRealtimeHub, build_envelope
from app.infra.realtime.publisher import safe_publish


class FakeWebSocket:
    def __init__(self, broken: bool = False) -> None:
        self.broken = broken
        self.accepted = False
        self.sent: list[dict] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, data: dict) -> None:
        if self.broken:
            raise RuntimeError("Cannot call send once a close message has been sent.")
        self.sent.append(data)


class ExplodingPublisher:
    async def publish(self, channels, event, payload) -> None:
        raise ConnectionError("broker down")


def test_envelope_shape() -> None:
    envelope = build_envelope("system.pong", {}, channel=None)

    assert envelope["event"] == "system.pong"
    assert envelope["payload"] == {}
    assert "sent_at" in envelope
    assert "channel" not in envelope


def test_channel_names() -> None:
    user_id = uuid4()
    post_id = uuid4()

    assert notifications_channel(user_id) == f"notifications:{user_id}"
    assert post_channel(post_id) == f"post:{post_id}"


@pytest.mark.asyncio
async def test_publish_reaches_only_subscribers() -> None:
    hub = InMemoryRealtimeHub()
    watcher = FakeWebSocket()
    bystander = FakeWebSocket()
    channel = post_channel(uuid4())
    await hub.connect(watcher)
    await hub.subscribe(watcher, channel)
    await hub.subscribe(bystander, notifications_channel(uuid4()))

    await hub.publish([channel], RealtimeEvent.LIKE_CHANGED, {"liked": True})

    assert watcher.accepted
    [envelope] = watcher.sent
    assert envelope["event"] == RealtimeEvent.LIKE_CHANGED.value
    assert envelope["channel"] == channel
    assert envelope["payload"] == {"liked": True}
    assert bystander.sent == []


@pytest.mark.asyncio
async def test_duplicate_channels_deliver_once() -> None:
    hub = InMemoryRealtimeHub()
    socket = FakeWebSocket()
    channel = post_channel(uuid4())
    await hub.subscribe(socket, channel)

    await hub.publish([channel, channel, ""], RealtimeEvent.POST_UPDATED, {})

    assert len(socket.sent) == 1


@pytest.mark.asyncio
async def test_unsubscribe_and_disconnect() -> None:
    hub = InMemoryRealtimeHub()
    socket = FakeWebSocket()
    first = post_channel(uuid4())
    second = notifications_channel(uuid4())
    await hub.subscribe(socket, first)
    await hub.subscribe(socket, second)

    await hub.unsubscribe(socket, first)
    assert hub.channels_for(socket) == {second}
    assert hub.subscriber_count(first) == 0

    await hub.disconnect(socket)
    assert hub.channels_for(socket) == set()
    assert hub.subscriber_count(second) == 0


@pytest.mark.asyncio
async def test_broken_sockets_are_dropped() -> None:
    hub = InMemoryRealtimeHub()
    healthy = FakeWebSocket()
    broken = FakeWebSocket(broken=True)
    channel = post_channel(uuid4())
    await hub.subscribe(healthy, channel)
    await hub.subscribe(broken, channel)

    await hub.publish([channel], RealtimeEvent.COMMENT_CREATED, {"post_id": "x"})

    assert len(healthy.sent) == 1
    assert hub.subscriber_count(channel) == 1
    assert hub.channels_for(broken) == set()


@pytest.mark.asyncio
async def test_safe_publish_logs_and_swallows_failures(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="app.infra.realtime.publisher"):
        await safe_publish(
            ExplodingPublisher(), ["post:1"], RealtimeEvent.POST_DELETED, {"post_id": "1"}
        )

    assert "Realtime publish failed for event post.deleted" in caplog.text
