from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import throttled_user
from app.core.db import get_db_session
from app.infra.db.models import User
from app.schemas.common import PaginationResponse
from app.schemas.event import (
    CreateEventRequest,
    EventListResponse,
    EventResponse,
    to_event_response,
)
from app.services.event_service import EventService
from app.services.pagination import PageRequest

router = APIRouter()


async def get_event_service(
    session: AsyncSession = Depends(get_db_session),
) -> EventService:
    return EventService(session=session)


@router.get("", response_model=EventListResponse)
async def list_events(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    upcoming: bool = Query(default=False),
    service: EventService = Depends(get_event_service),
) -> EventListResponse:
    result = await service.list_events(PageRequest(page=page, limit=limit), upcoming=upcoming)
    return EventListResponse(
        items=[to_event_response(view) for view in result.items],
        pagination=PaginationResponse.from_page(result),
    )


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    payload: CreateEventRequest,
    user: User = Depends(throttled_user("event")),
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    try:
        view = await service.create_event(host=user, **payload.model_dump())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return to_event_response(view)
