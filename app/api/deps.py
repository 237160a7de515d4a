import logging
from collections.abc import Awaitable, Callable

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.db import get_db_session
from app.core.rate_limit import FixedWindowRateLimiter
from app.core.security import decode_access_token
from app.infra.db.models import User
from app.services.errors import RateLimitExceededError
from app.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

THROTTLE_MESSAGES: dict[str, str] = {
    "post": "Too many requests. Please wait before posting again.",
    "comment": "Too many requests. Please wait before commenting again.",
    "profile": "Too many requests. Please wait before updating again.",
    "server": "Too many server listings created. Please wait before creating another.",
    "marketplace": "Too many listings created",
    "event": "Too many events created",
    "ticket": "Too many tickets created. Please wait before submitting another.",
}


async def _resolve_user(
    credentials: HTTPAuthorizationCredentials | None,
    session: AsyncSession,
) -> User | None:
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None

    try:
        claims = decode_access_token(credentials.credentials, get_settings().auth_token_secret)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired session",
        ) from exc

    return await ProfileService(session=session).ensure_user(claims.email)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> User:
    user = await _resolve_user(credentials, session)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user


async def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
) -> User | None:
    return await _resolve_user(credentials, session)


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return user


async def require_owner(user: User = Depends(get_current_user)) -> User:
    if user.email.lower() != get_settings().owner_email.strip().lower():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return user


def get_rate_limiter(request: Request) -> FixedWindowRateLimiter:
    limiter = getattr(request.app.state, "rate_limiter", None)
    if limiter is None:
        raise RuntimeError("Rate limiter is not initialized")
    return limiter


def enforce_rate_limit(
    limiter: FixedWindowRateLimiter,
    action: str,
    user: User,
) -> tuple[int, int]:
    """Consume one unit of ``action`` quota for ``user``.

    Returns ``(remaining, reset_at)`` or raises ``RateLimitExceededError``.
    """
    key = f"{action}:{user.id}"
    result = limiter.check(key, get_settings().rate_limit_policy(action))
    if not result.allowed:
        retry_after = limiter.retry_after_seconds(result)
        logger.warning("Rate limit exceeded for %s, retry after %ss", key, retry_after)
        raise RateLimitExceededError(
            action=action,
            message=THROTTLE_MESSAGES[action],
            retry_after=retry_after,
            reset_at=result.reset_at,
        )
    return result.remaining, result.reset_at


def throttled_user(action: str) -> Callable[..., Awaitable[User]]:
    """Dependency that authenticates the caller and spends one ``action`` request."""
    if action not in THROTTLE_MESSAGES:
        raise KeyError(f"Unknown throttled action '{action}'")

    async def dependency(
        response: Response,
        user: User = Depends(get_current_user),
        limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
    ) -> User:
        try:
            remaining, reset_at = enforce_rate_limit(limiter, action, user)
        except RateLimitExceededError as exc:
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=exc.message,
                headers={"Retry-After": str(exc.retry_after)},
            ) from exc

        response.headers["X-RateLimit-Remaining"] = str(remaining)
        response.headers["X-RateLimit-Reset"] = str(reset_at)
        return user

    return dependency
