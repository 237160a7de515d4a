from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import ListingStatus
from app.schemas.common import MediaItem, PaginationResponse, UserSummary


class ListingResponse(BaseModel):
    id: UUID
    owner: UserSummary
    title: str
    description: str | None
    category: str
    price: Decimal | None
    media: list[MediaItem] | None
    tags: list[str]
    tebex_link: str | None
    status: ListingStatus
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ListingListResponse(BaseModel):
    items: list[ListingResponse]
    pagination: PaginationResponse


class CreateListingRequest(BaseModel):
    title: str = Field(max_length=200)
    category: str = Field(max_length=60)
    description: str | None = Field(default=None, max_length=10000)
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    media: list[MediaItem] | None = None
    tags: list[str] = Field(default_factory=list, max_length=20)
    tebex_link: str | None = Field(default=None, max_length=1024)


class UpdateListingRequest(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    category: str | None = Field(default=None, max_length=60)
    description: str | None = Field(default=None, max_length=10000)
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    media: list[MediaItem] | None = None
    tags: list[str] | None = Field(default=None, max_length=20)
    tebex_link: str | None = Field(default=None, max_length=1024)
