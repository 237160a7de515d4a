import asyncio
from collections import defaultdict
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from fastapi import WebSocket
from starlette.websockets import WebSocketDisconnect

from app.infra.realtime.events import RealtimeEvent


def build_envelope(event: str, payload: Mapping[str, Any], channel: str | None = None) -> dict:
    envelope: dict[str, Any] = {
        "event": event,
        "payload": dict(payload),
        "sent_at": datetime.now(UTC).isoformat(),
    }
    if channel is not None:
        envelope["channel"] = channel
    return envelope


class InMemoryRealtimeHub:
    """In-process channel hub; one process owns every socket it fans out to."""

    def __init__(self) -> None:
        self._subscribers: dict[str, set[WebSocket]] = defaultdict(set)
        self._channels_by_socket: dict[WebSocket, set[str]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()

    def subscriber_count(self, channel: str) -> int:
        return len(self._subscribers.get(channel, ()))

    def channels_for(self, websocket: WebSocket) -> set[str]:
        return set(self._channels_by_socket.get(websocket, ()))

    async def subscribe(self, websocket: WebSocket, channel: str) -> None:
        async with self._lock:
            self._subscribers[channel].add(websocket)
            self._channels_by_socket[websocket].add(channel)

    async def unsubscribe(self, websocket: WebSocket, channel: str) -> None:
        async with self._lock:
            self._detach_locked(websocket, channel)

    async def disconnect(self, websocket: WebSocket) -> None:
        async with self._lock:
            for channel in list(self._channels_by_socket.get(websocket, ())):
                self._detach_locked(websocket, channel)
            self._channels_by_socket.pop(websocket, None)

    async def publish(
        self,
        channels: Sequence[str],
        event: RealtimeEvent,
        payload: Mapping[str, Any],
    ) -> None:
        targets = [channel for channel in dict.fromkeys(channels) if channel]
        if not targets:
            return

        async with self._lock:
            snapshot = {channel: set(self._subscribers.get(channel, ())) for channel in targets}

        for channel, sockets in snapshot.items():
            if not sockets:
                continue

            envelope = build_envelope(event.value, payload, channel=channel)
            stale: list[WebSocket] = []
            for websocket in sockets:
                try:
                    await websocket.send_json(envelope)
                except (RuntimeError, WebSocketDisconnect):
                    stale.append(websocket)

            if stale:
                async with self._lock:
                    for websocket in stale:
                        self._detach_locked(websocket, channel)

    def _detach_locked(self, websocket: WebSocket, channel: str) -> None:
        sockets = self._subscribers.get(channel)
        if sockets is not None:
            sockets.discard(websocket)
            if not sockets:
                self._subscribers.pop(channel, None)

        channels = self._channels_by_socket.get(websocket)
        if channels is not None:
            channels.discard(channel)
            if not channels:
                self._channels_by_socket.pop(websocket, None)
