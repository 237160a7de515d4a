from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.domain.enums import TicketStatus, TicketType
from app.schemas.common import PaginationResponse, UserSummary


class TicketReply(BaseModel):
    user_id: UUID
    username: str
    message: str
    created_at: datetime
    is_admin: bool


class TicketResponse(BaseModel):
    id: UUID
    user: UserSummary
    type: TicketType
    subject: str
    description: str
    status: TicketStatus
    responses: list[TicketReply]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TicketListResponse(BaseModel):
    items: list[TicketResponse]
    pagination: PaginationResponse


class CreateTicketRequest(BaseModel):
    type: TicketType
    subject: str = Field(max_length=200)
    description: str = Field(max_length=10000)


class UpdateTicketRequest(BaseModel):
    status: TicketStatus | None = None
    response: str | None = Field(default=None, max_length=10000)
