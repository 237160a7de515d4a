from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import PostVisibility, ReactionEmoji
from app.schemas.common import MediaItem, PaginationResponse, UserSummary


class PostCountsResponse(BaseModel):
    likes: int
    comments: int
    reactions: int
    dislikes: int

    model_config = ConfigDict(from_attributes=True)


class PostResponse(BaseModel):
    id: UUID
    author: UserSummary
    content: str | None
    media: list[MediaItem] | None
    tags: list[str]
    visibility: PostVisibility
    created_at: datetime
    updated_at: datetime
    counts: PostCountsResponse


class CommentResponse(BaseModel):
    id: UUID
    post_id: UUID
    author: UserSummary
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PostDetailResponse(PostResponse):
    comments: list[CommentResponse]


class PostListResponse(BaseModel):
    items: list[PostResponse]
    pagination: PaginationResponse


class CreatePostRequest(BaseModel):
    content: str | None = Field(default=None, max_length=10000)
    media: list[MediaItem] | None = None
    tags: list[str] = Field(default_factory=list, max_length=20)
    visibility: PostVisibility = PostVisibility.PUBLIC


class UpdatePostRequest(BaseModel):
    content: str | None = Field(default=None, max_length=10000)
    media: list[MediaItem] | None = None
    tags: list[str] | None = Field(default=None, max_length=20)
    visibility: PostVisibility | None = None


class CreateCommentRequest(BaseModel):
    content: str = Field(max_length=4000)


class LikeStatusResponse(BaseModel):
    liked: bool
    message: str | None = None


class DislikeStatusResponse(BaseModel):
    disliked: bool
    message: str | None = None


class ReactionRequest(BaseModel):
    emoji: ReactionEmoji


class ReactionStatusResponse(BaseModel):
    emoji: ReactionEmoji | None
    message: str | None = None


def to_post_response(view) -> PostResponse:
    post = view.post
    return PostResponse(
        id=post.id,
        author=UserSummary.model_validate(post.author),
        content=post.content,
        media=post.media,
        tags=list(post.tags or []),
        visibility=post.visibility,
        created_at=post.created_at,
        updated_at=post.updated_at,
        counts=PostCountsResponse.model_validate(view.counts),
    )


def to_post_detail_response(detail) -> PostDetailResponse:
    base = to_post_response(detail)
    return PostDetailResponse(
        **base.model_dump(),
        comments=[CommentResponse.model_validate(comment) for comment in detail.comments],
    )
