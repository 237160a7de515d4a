from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.rules import normalize_optional_text
from app.infra.db.models import Event, User
from app.infra.db.repositories import EventRepository
from app.services.pagination import Page, PageRequest


@dataclass(slots=True)
class EventView:
    event: Event
    attendee_count: int


class EventService:
    def __init__(self, session: AsyncSession, events: EventRepository | None = None) -> None:
        self.session = session
        self.events = events or EventRepository(session)

    async def list_events(self, request: PageRequest, upcoming: bool = False) -> Page[EventView]:
        starting_after = datetime.now(UTC) if upcoming else None
        events, total = await self.events.list(starting_after, request.offset, request.limit)
        counts = await self.events.get_attendee_counts([event.id for event in events])
        return Page(
            items=[EventView(event=event, attendee_count=counts.get(event.id, 0)) for event in events],
            page=request.page,
            limit=request.limit,
            total=total,
        )

    async def create_event(
        self,
        host: User,
        title: str,
        start_at: datetime,
        end_at: datetime,
        description: str | None = None,
        location: str | None = None,
        capacity: int | None = None,
        is_recurring: bool = False,
        recurrence_rule: str | None = None,
    ) -> EventView:
        cleaned_title = title.strip()
        if not cleaned_title:
            raise ValueError("Title, start date, and end date are required")
        if end_at < start_at:
            raise ValueError("Event end must not precede its start")
        if capacity is not None and capacity < 1:
            raise ValueError("Capacity must be at least 1")

        event = await self.events.create(
            host_id=host.id,
            title=cleaned_title,
            description=normalize_optional_text(description),
            start_at=start_at,
            end_at=end_at,
            location=normalize_optional_text(location),
            capacity=capacity,
            is_recurring=is_recurring,
            recurrence_rule=normalize_optional_text(recurrence_rule) if is_recurring else None,
        )
        await self.session.commit()
        await self.session.refresh(event)
        return EventView(event=event, attendee_count=0)
