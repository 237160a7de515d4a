from dataclasses import dataclass
from uuid import UUID, uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.deps import THROTTLE_MESSAGES, get_current_user
from app.api.router import api_router
from app.api.v1.routes.events import get_event_service
from app.api.v1.routes.marketplace import get_marketplace_service
from app.api.v1.routes.posts import get_post_service
from app.api.v1.routes.profile import get_profile_service
from app.api.v1.routes.servers import get_server_service
from app.api.v1.routes.support import get_ticket_service
from app.core.config import get_settings
from app.core.rate_limit import FixedWindowRateLimiter

POST_ID = uuid4()


@dataclass(slots=True)
class FakeUser:
    id: UUID
    email: str = "player@example.com"
    is_admin: bool = False
    has_marketplace_access: bool = True


class RecordingService:
    """Counts every write that reached the service layer, then rejects it."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def _record(self, name: str):
        self.calls.append(name)
        raise ValueError("rejected by service")

    async def create_post(self, **_: object):
        await self._record("create_post")

    async def add_comment(self, **_: object):
        await self._record("add_comment")

    async def update_profile(self, user, **_: object):
        await self._record("update_profile")

    async def create_server(self, owner, draft):
        await self._record("create_server")

    async def create_listing(self, **_: object):
        await self._record("create_listing")

    async def create_event(self, **_: object):
        await self._record("create_event")

    async def create_ticket(self, **_: object):
        await self._record("create_ticket")


THROTTLED_ENDPOINTS = [
    ("post", "post", "/v1/posts", {"content": "Hello Los Santos"}),
    ("comment", "post", f"/v1/posts/{POST_ID}/comments", {"content": "Great post!"}),
    ("profile", "put", "/v1/profile", {"bio": "Whitelisted EMS"}),
    ("server", "post", "/v1/servers", {"name": "Paradise RP"}),
    ("marketplace", "post", "/v1/marketplace", {"title": "Police MDT", "category": "scripts"}),
    (
        "event",
        "post",
        "/v1/events",
        {
            "title": "Car meet",
            "start_at": "2026-11-01T20:00:00Z",
            "end_at": "2026-11-01T22:00:00Z",
        },
    ),
    (
        "ticket",
        "post",
        "/v1/support/tickets",
        {"type": "other", "subject": "Bug", "description": "Map does not load"},
    ),
]


def _client(service: RecordingService) -> tuple[TestClient, FastAPI, FakeUser]:
    app = FastAPI()
    app.include_router(api_router)
    app.state.rate_limiter = FixedWindowRateLimiter()
    user = FakeUser(id=uuid4())
    app.dependency_overrides[get_current_user] = lambda: user
    for provider in (
        get_post_service,
        get_profile_service,
        get_server_service,
        get_marketplace_service,
        get_event_service,
        get_ticket_service,
    ):
        app.dependency_overrides[provider] = lambda: service
    return TestClient(app), app, user


@pytest.mark.parametrize(
    ("action", "method", "path", "body"),
    THROTTLED_ENDPOINTS,
    ids=[endpoint[0] for endpoint in THROTTLED_ENDPOINTS],
)
def test_write_endpoint_is_throttled_by_its_action(
    action: str, method: str, path: str, body: dict
) -> None:
    service = RecordingService()
    client, app, user = _client(service)
    max_requests = get_settings().rate_limit_policy(action).max_requests

    for _ in range(max_requests):
        assert client.request(method, path, json=body).status_code == 400

    rejected = client.request(method, path, json=body)

    assert rejected.status_code == 429
    assert rejected.json() == {"detail": THROTTLE_MESSAGES[action]}
    assert int(rejected.headers["Retry-After"]) >= 1
    assert len(service.calls) == max_requests
    assert len(app.state.rate_limiter) == 1
    assert f"{action}:{user.id}" in app.state.rate_limiter


def test_every_throttled_action_has_a_route() -> None:
    assert {endpoint[0] for endpoint in THROTTLED_ENDPOINTS} == set(THROTTLE_MESSAGES)
