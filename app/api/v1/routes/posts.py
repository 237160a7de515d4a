from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_optional_user, throttled_user
from app.core.db import get_db_session
from app.infra.db.models import User
from app.schemas.common import PaginationResponse, SuccessResponse, split_tags
from app.schemas.post import (
    CommentResponse,
    CreateCommentRequest,
    CreatePostRequest,
    DislikeStatusResponse,
    LikeStatusResponse,
    PostDetailResponse,
    PostListResponse,
    PostResponse,
    ReactionRequest,
    ReactionStatusResponse,
    UpdatePostRequest,
    to_post_detail_response,
    to_post_response,
)
from app.services.errors import NotAuthorizedError, PostNotFoundError
from app.services.pagination import PageRequest
from app.services.post_service import PostService

router = APIRouter()


async def get_post_service(
    request: Request,
    session: AsyncSession = Depends(get_db_session),
) -> PostService:
    realtime = getattr(request.app.state, "realtime_hub", None)
    return PostService(session=session, realtime=realtime)


def _raise_for_service_error(exc: Exception) -> None:
    if isinstance(exc, PostNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, NotAuthorizedError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    if isinstance(exc, ValueError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    raise exc


def _media_payload(media) -> list[dict] | None:
    if media is None:
        return None
    return [item.model_dump(mode="json", exclude_none=True) for item in media]


@router.get("", response_model=PostListResponse)
async def list_posts(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    tags: str | None = Query(default=None),
    service: PostService = Depends(get_post_service),
) -> PostListResponse:
    result = await service.list_feed(PageRequest(page=page, limit=limit), split_tags(tags))
    return PostListResponse(
        items=[to_post_response(view) for view in result.items],
        pagination=PaginationResponse.from_page(result),
    )


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    payload: CreatePostRequest,
    user: User = Depends(throttled_user("post")),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    try:
        view = await service.create_post(
            author=user,
            content=payload.content,
            media=_media_payload(payload.media),
            tags=payload.tags,
            visibility=payload.visibility,
        )
    except (LookupError, PermissionError, ValueError) as exc:
        _raise_for_service_error(exc)
    return to_post_response(view)


@router.get("/{post_id}", response_model=PostDetailResponse)
async def get_post(
    post_id: UUID,
    service: PostService = Depends(get_post_service),
) -> PostDetailResponse:
    try:
        detail = await service.get_post(post_id)
    except (LookupError, PermissionError, ValueError) as exc:
        _raise_for_service_error(exc)
    return to_post_detail_response(detail)


@router.put("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: UUID,
    payload: UpdatePostRequest,
    user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    try:
        view = await service.update_post(
            actor=user,
            post_id=post_id,
            content=payload.content,
            media=_media_payload(payload.media),
            tags=payload.tags,
            visibility=payload.visibility,
        )
    except (LookupError, PermissionError, ValueError) as exc:
        _raise_for_service_error(exc)
    return to_post_response(view)


@router.delete("/{post_id}", response_model=SuccessResponse)
async def delete_post(
    post_id: UUID,
    user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> SuccessResponse:
    try:
        await service.delete_post(actor=user, post_id=post_id)
    except (LookupError, PermissionError, ValueError) as exc:
        _raise_for_service_error(exc)
    return SuccessResponse()


@router.get("/{post_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    post_id: UUID,
    service: PostService = Depends(get_post_service),
) -> list[CommentResponse]:
    try:
        comments = await service.list_comments(post_id)
    except (LookupError, PermissionError, ValueError) as exc:
        _raise_for_service_error(exc)
    return [CommentResponse.model_validate(comment) for comment in comments]


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: UUID,
    payload: CreateCommentRequest,
    user: User = Depends(throttled_user("comment")),
    service: PostService = Depends(get_post_service),
) -> CommentResponse:
    try:
        comment = await service.add_comment(actor=user, post_id=post_id, content=payload.content)
    except (LookupError, PermissionError, ValueError) as exc:
        _raise_for_service_error(exc)
    return CommentResponse.model_validate(comment)


@router.get("/{post_id}/like", response_model=LikeStatusResponse)
async def get_like_status(
    post_id: UUID,
    user: User | None = Depends(get_optional_user),
    service: PostService = Depends(get_post_service),
) -> LikeStatusResponse:
    return LikeStatusResponse(liked=await service.is_liked(post_id, user))


@router.post("/{post_id}/like", response_model=LikeStatusResponse)
async def like_post(
    post_id: UUID,
    user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> LikeStatusResponse:
    try:
        result = await service.like(actor=user, post_id=post_id)
    except (LookupError, PermissionError, ValueError) as exc:
        _raise_for_service_error(exc)
    return LikeStatusResponse(liked=result.active, message=result.message)


@router.delete("/{post_id}/like", response_model=LikeStatusResponse)
async def unlike_post(
    post_id: UUID,
    user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> LikeStatusResponse:
    result = await service.unlike(actor=user, post_id=post_id)
    return LikeStatusResponse(liked=result.active, message=result.message)


@router.get("/{post_id}/dislike", response_model=DislikeStatusResponse)
async def get_dislike_status(
    post_id: UUID,
    user: User | None = Depends(get_optional_user),
    service: PostService = Depends(get_post_service),
) -> DislikeStatusResponse:
    return DislikeStatusResponse(disliked=await service.is_disliked(post_id, user))


@router.post("/{post_id}/dislike", response_model=DislikeStatusResponse)
async def dislike_post(
    post_id: UUID,
    user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> DislikeStatusResponse:
    try:
        result = await service.dislike(actor=user, post_id=post_id)
    except (LookupError, PermissionError, ValueError) as exc:
        _raise_for_service_error(exc)
    return DislikeStatusResponse(disliked=result.active, message=result.message)


@router.delete("/{post_id}/dislike", response_model=DislikeStatusResponse)
async def remove_dislike(
    post_id: UUID,
    user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> DislikeStatusResponse:
    result = await service.remove_dislike(actor=user, post_id=post_id)
    return DislikeStatusResponse(disliked=result.active, message=result.message)


@router.get("/{post_id}/reaction", response_model=ReactionStatusResponse)
async def get_reaction(
    post_id: UUID,
    user: User | None = Depends(get_optional_user),
    service: PostService = Depends(get_post_service),
) -> ReactionStatusResponse:
    return ReactionStatusResponse(emoji=await service.get_reaction(post_id, user))


@router.post("/{post_id}/reaction", response_model=ReactionStatusResponse)
async def react_to_post(
    post_id: UUID,
    payload: ReactionRequest,
    user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> ReactionStatusResponse:
    try:
        result = await service.react(actor=user, post_id=post_id, emoji=payload.emoji)
    except (LookupError, PermissionError, ValueError) as exc:
        _raise_for_service_error(exc)
    return ReactionStatusResponse(emoji=result.emoji, message=result.message)


@router.delete("/{post_id}/reaction", response_model=ReactionStatusResponse)
async def remove_reaction(
    post_id: UUID,
    user: User = Depends(get_current_user),
    service: PostService = Depends(get_post_service),
) -> ReactionStatusResponse:
    result = await service.remove_reaction(actor=user, post_id=post_id)
    return ReactionStatusResponse(emoji=result.emoji, message=result.message)
