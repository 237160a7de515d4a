from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ProfileStats(BaseModel):
    posts: int
    servers: int
    followers: int
    following: int

    model_config = ConfigDict(from_attributes=True)


class ProfileResponse(BaseModel):
    id: UUID
    email: str
    username: str
    avatar_url: str | None
    banner_url: str | None
    bio: str | None
    is_admin: bool
    has_marketplace_access: bool
    badges: list | None
    created_at: datetime
    stats: ProfileStats


class UpdateProfileRequest(BaseModel):
    username: str | None = Field(default=None, max_length=64)
    bio: str | None = Field(default=None, max_length=2000)
    avatar_url: str | None = Field(default=None, max_length=1024)
    banner_url: str | None = Field(default=None, max_length=1024)
