from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import ServerStatus
from app.schemas.common import PaginationResponse, UserSummary


class ServerResponse(BaseModel):
    id: UUID
    owner: UserSummary
    name: str
    ip: str | None
    connect_url: str | None
    logo_url: str | None
    description: str | None
    features: list | None
    tags: list[str]
    trailer_url: str | None
    screenshots: list | None
    upvotes: int
    is_featured: bool
    status: ServerStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ServerListResponse(BaseModel):
    items: list[ServerResponse]
    pagination: PaginationResponse


class CreateServerRequest(BaseModel):
    name: str = Field(max_length=120)
    ip: str | None = Field(default=None, max_length=255)
    connect_url: str | None = Field(default=None, max_length=1024)
    logo_url: str | None = Field(default=None, max_length=1024)
    description: str | None = Field(default=None, max_length=10000)
    features: list[str] | None = None
    tags: list[str] = Field(default_factory=list, max_length=20)
    trailer_url: str | None = Field(default=None, max_length=1024)
    screenshots: list[str] | None = None
