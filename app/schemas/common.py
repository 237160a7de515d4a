from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import MediaKind
from app.services.pagination import Page


class ApiMessage(BaseModel):
    detail: str
    timestamp: datetime


class SuccessResponse(BaseModel):
    success: bool = True
    message: str | None = None


class PaginationResponse(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page) -> "PaginationResponse":
        return cls(
            page=page.page,
            limit=page.limit,
            total=page.total,
            total_pages=page.total_pages,
        )


class UserSummary(BaseModel):
    id: UUID
    username: str
    avatar_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class MediaItem(BaseModel):
    type: MediaKind
    url: str = Field(min_length=1, max_length=2048)
    thumbnail_url: str | None = None


def split_tags(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [tag.strip() for tag in raw.split(",") if tag.strip()]
