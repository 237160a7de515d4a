from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import ActivityAction, ActivityTarget, ServerStatus
from app.schemas.common import PaginationResponse


class SetServerStatusRequest(BaseModel):
    server_id: UUID
    status: ServerStatus


class SetFeaturedRequest(BaseModel):
    server_id: UUID
    featured: bool


class SetMarketplaceAccessRequest(BaseModel):
    user_id: UUID
    has_marketplace_access: bool


class MarketplaceAccessUser(BaseModel):
    id: UUID
    email: str
    username: str
    avatar_url: str | None
    has_marketplace_access: bool
    is_admin: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MarketplaceAccessEntryResponse(MarketplaceAccessUser):
    listing_count: int


class MarketplaceAccessListResponse(BaseModel):
    items: list[MarketplaceAccessEntryResponse]
    pagination: PaginationResponse


class AdminIdentity(BaseModel):
    id: UUID
    email: str
    username: str

    model_config = ConfigDict(from_attributes=True)


class ActivityResponse(BaseModel):
    id: UUID
    user: AdminIdentity
    action: ActivityAction
    target_type: ActivityTarget
    target_id: str
    metadata: dict | None = Field(default=None, alias="metadata_json")
    created_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class AdminActivityResponse(BaseModel):
    activities: list[ActivityResponse]
    pagination: PaginationResponse
    admins: list[AdminIdentity]
