from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.common import PaginationResponse, UserSummary


class EventResponse(BaseModel):
    id: UUID
    host: UserSummary
    title: str
    description: str | None
    start_at: datetime
    end_at: datetime
    location: str | None
    capacity: int | None
    is_recurring: bool
    recurrence_rule: str | None
    attendee_count: int
    created_at: datetime


class EventListResponse(BaseModel):
    items: list[EventResponse]
    pagination: PaginationResponse


class CreateEventRequest(BaseModel):
    title: str = Field(max_length=200)
    start_at: datetime
    end_at: datetime
    description: str | None = Field(default=None, max_length=10000)
    location: str | None = Field(default=None, max_length=255)
    capacity: int | None = None
    is_recurring: bool = False
    recurrence_rule: str | None = Field(default=None, max_length=255)


def to_event_response(view) -> EventResponse:
    event = view.event
    return EventResponse(
        id=event.id,
        host=UserSummary.model_validate(event.host),
        title=event.title,
        description=event.description,
        start_at=event.start_at,
        end_at=event.end_at,
        location=event.location,
        capacity=event.capacity,
        is_recurring=event.is_recurring,
        recurrence_rule=event.recurrence_rule,
        attendee_count=view.attendee_count,
        created_at=event.created_at,
    )
