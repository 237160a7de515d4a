"""Websocket fanout for notifications and post activity."""

from app.infra.realtime.hub import InMemoryRealtimeHub

__all__ = ["InMemoryRealtimeHub"]
