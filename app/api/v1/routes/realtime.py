import json
from uuid import UUID

from fastapi import APIRouter, WebSocket
from starlette.websockets import WebSocketDisconnect

from app.core.config import get_settings
from app.core.db import get_session_factory
from app.core.security import decode_access_token
from app.infra.db.repositories import PostRepository
from app.infra.realtime.channels import notifications_channel, post_channel
from app.infra.realtime.hub import build_envelope
from app.services.profile_service import ProfileService

router = APIRouter()


def _parse_uuid(raw: object) -> UUID | None:
    if not isinstance(raw, str):
        return None
    try:
        return UUID(raw)
    except ValueError:
        return None


async def _send_system(websocket: WebSocket, event: str, payload: dict | None = None) -> None:
    await websocket.send_json(build_envelope(f"system.{event}", payload or {}))


@router.websocket("/ws")
async def realtime_ws(websocket: WebSocket) -> None:
    hub = getattr(websocket.app.state, "realtime_hub", None)
    if hub is None:
        await websocket.close(code=1011, reason="Realtime hub not initialized")
        return

    try:
        session_factory = get_session_factory()
    except RuntimeError:
        await websocket.close(code=1011, reason="Database session is not initialized")
        return

    access_token = websocket.query_params.get("access_token", "").strip()
    if not access_token:
        await websocket.close(code=1008, reason="access_token query parameter is required")
        return

    try:
        claims = decode_access_token(access_token, get_settings().auth_token_secret)
    except ValueError:
        await websocket.close(code=1008, reason="Invalid or expired session")
        return

    async with session_factory() as session:
        user = await ProfileService(session=session).ensure_user(claims.email)
        user_id = user.id

    own_channel = notifications_channel(user_id)
    await hub.connect(websocket)
    await hub.subscribe(websocket, own_channel)
    await _send_system(websocket, "connected", {"user_id": str(user_id), "channels": [own_channel]})

    try:
        while True:
            raw_message = await websocket.receive_text()
            if raw_message.strip().lower() == "ping":
                await _send_system(websocket, "pong")
                continue

            try:
                message = json.loads(raw_message)
            except json.JSONDecodeError:
                await _send_system(websocket, "error", {"detail": "Expected JSON payload"})
                continue
            if not isinstance(message, dict):
                await _send_system(websocket, "error", {"detail": "Expected JSON object"})
                continue

            action = message.get("action")
            if action == "ping":
                await _send_system(websocket, "pong")
                continue

            if action not in ("subscribe_post", "unsubscribe_post"):
                await _send_system(websocket, "error", {"detail": "Unsupported action"})
                continue

            post_id = _parse_uuid(message.get("post_id"))
            if post_id is None:
                await _send_system(websocket, "error", {"detail": "Invalid post_id"})
                continue

            channel = post_channel(post_id)
            if action == "unsubscribe_post":
                await hub.unsubscribe(websocket, channel)
                await _send_system(websocket, "unsubscribed", {"channel": channel})
                continue

            async with session_factory() as session:
                post = await PostRepository(session).get_by_id(post_id)
            if post is None:
                await _send_system(websocket, "error", {"detail": "Post not found"})
                continue

            await hub.subscribe(websocket, channel)
            await _send_system(websocket, "subscribed", {"channel": channel})
    except WebSocketDisconnect:
        return
    finally:
        await hub.disconnect(websocket)
