from dataclasses import dataclass
from uuid import UUID, uuid4

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.deps import get_current_user
from app.api.router import api_router
from app.api.v1.routes.posts import get_post_service
from app.api.v1.routes.profile import get_profile_service
from app.core.rate_limit import FixedWindowRateLimiter, RateLimitPolicy
from app.services.errors import NotAuthorizedError, PostNotFoundError, UsernameTakenError


@dataclass(slots=True)
class FakeUser:
    id: UUID
    email: str = "player@example.com"
    is_admin: bool = False


class FailingPostService:
    def __init__(self, error: Exception) -> None:
        self.error = error

    async def get_post(self, post_id: UUID):
        raise self.error

    async def delete_post(self, actor, post_id: UUID) -> None:
        raise self.error

    async def create_post(self, **_: object):
        raise self.error


class FailingProfileService:
    async def update_profile(self, user, **_: object):
        raise UsernameTakenError("taken")


def _client(post_error: Exception | None = None) -> tuple[TestClient, FastAPI]:
    app = FastAPI()
    app.include_router(api_router)
    app.state.rate_limiter = FixedWindowRateLimiter()
    user = FakeUser(id=uuid4())
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_profile_service] = FailingProfileService
    if post_error is not None:
        app.dependency_overrides[get_post_service] = lambda: FailingPostService(post_error)
    return TestClient(app), app


def test_health_does_not_reveal_limiter_state() -> None:
    client, app = _client()
    policy = RateLimitPolicy(window_ms=60_000, max_requests=5)
    app.state.rate_limiter.check("post:someone", policy)

    response = client.get("/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_missing_post_maps_to_404() -> None:
    client, _ = _client(PostNotFoundError(uuid4()))

    response = client.get(f"/v1/posts/{uuid4()}")

    assert response.status_code == 404
    assert response.json() == {"detail": "Post not found"}


def test_foreign_post_delete_maps_to_403() -> None:
    client, _ = _client(NotAuthorizedError())

    response = client.delete(f"/v1/posts/{uuid4()}")

    assert response.status_code == 403
    assert response.json() == {"detail": "Forbidden"}


def test_validation_error_maps_to_400_and_spends_quota() -> None:
    client, app = _client(ValueError("Post must have content or media"))

    response = client.post("/v1/posts", json={"content": ""})

    assert response.status_code == 400
    assert response.json() == {"detail": "Post must have content or media"}
    assert len(app.state.rate_limiter) == 1


def test_username_conflict_maps_to_409() -> None:
    client, _ = _client()

    response = client.put("/v1/profile", json={"username": "taken"})

    assert response.status_code == 409
    assert response.json() == {"detail": "Username already taken"}


def test_malformed_post_id_is_rejected() -> None:
    client, _ = _client(PostNotFoundError(uuid4()))

    assert client.get("/v1/posts/not-a-uuid").status_code == 422
