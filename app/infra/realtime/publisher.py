import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from app.infra.realtime.events import RealtimeEvent

logger = logging.getLogger(__name__)


class RealtimePublisher(Protocol):
    async def publish(
        self,
        channels: Sequence[str],
        event: RealtimeEvent,
        payload: Mapping[str, Any],
    ) -> None: ...


class NoopRealtimePublisher:
    async def publish(
        self,
        channels: Sequence[str],
        event: RealtimeEvent,
        payload: Mapping[str, Any],
    ) -> None:
        return None


async def safe_publish(
    publisher: RealtimePublisher,
    channels: Sequence[str],
    event: RealtimeEvent,
    payload: Mapping[str, Any],
) -> None:
    """Publish without letting transport failures reach the caller."""
    try:
        await publisher.publish(channels, event, payload)
    except Exception:
        logger.warning(
            "Realtime publish failed for event %s on %s",
            event.value,
            ",".join(channels),
            exc_info=True,
        )
