from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, throttled_user
from app.core.db import get_db_session
from app.infra.db.models import User
from app.schemas.profile import ProfileResponse, ProfileStats, UpdateProfileRequest
from app.services.errors import UsernameTakenError
from app.services.profile_service import ProfileResult, ProfileService

router = APIRouter()


async def get_profile_service(
    session: AsyncSession = Depends(get_db_session),
) -> ProfileService:
    return ProfileService(session=session)


def _to_profile_response(result: ProfileResult) -> ProfileResponse:
    user = result.user
    return ProfileResponse(
        id=user.id,
        email=user.email,
        username=user.username,
        avatar_url=user.avatar_url,
        banner_url=user.banner_url,
        bio=user.bio,
        is_admin=user.is_admin,
        has_marketplace_access=user.has_marketplace_access,
        badges=user.badges,
        created_at=user.created_at,
        stats=ProfileStats.model_validate(result.stats),
    )


def _raise_for_service_error(exc: Exception) -> None:
    if isinstance(exc, UsernameTakenError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if isinstance(exc, ValueError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    raise exc


@router.get("", response_model=ProfileResponse)
async def get_profile(
    user: User = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    return _to_profile_response(await service.get_profile(user))


@router.put("", response_model=ProfileResponse)
async def update_profile(
    payload: UpdateProfileRequest,
    user: User = Depends(throttled_user("profile")),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    try:
        result = await service.update_profile(
            user,
            username=payload.username,
            bio=payload.bio,
            avatar_url=payload.avatar_url,
            banner_url=payload.banner_url,
        )
    except ValueError as exc:
        _raise_for_service_error(exc)
    return _to_profile_response(result)
