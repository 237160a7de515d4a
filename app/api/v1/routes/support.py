from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, throttled_user
from app.core.db import get_db_session
from app.domain.enums import TicketStatus
from app.infra.db.models import User
from app.schemas.common import PaginationResponse
from app.schemas.ticket import (
    CreateTicketRequest,
    TicketListResponse,
    TicketResponse,
    UpdateTicketRequest,
)
from app.services.errors import AdminRequiredError, NotAuthorizedError, TicketNotFoundError
from app.services.pagination import PageRequest
from app.services.ticket_service import TicketService

router = APIRouter()


async def get_ticket_service(
    session: AsyncSession = Depends(get_db_session),
) -> TicketService:
    return TicketService(session=session)


def _raise_for_service_error(exc: Exception) -> None:
    if isinstance(exc, TicketNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, (NotAuthorizedError, AdminRequiredError)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden") from exc
    if isinstance(exc, ValueError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    raise exc


@router.get("/tickets", response_model=TicketListResponse)
async def list_tickets(
    status_filter: TicketStatus | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    user: User = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service),
) -> TicketListResponse:
    result = await service.list_tickets(
        user, PageRequest(page=page, limit=limit), status_filter=status_filter
    )
    return TicketListResponse(
        items=[TicketResponse.model_validate(ticket) for ticket in result.items],
        pagination=PaginationResponse.from_page(result),
    )


@router.post("/tickets", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(
    payload: CreateTicketRequest,
    user: User = Depends(throttled_user("ticket")),
    service: TicketService = Depends(get_ticket_service),
) -> TicketResponse:
    try:
        ticket = await service.create_ticket(
            author=user,
            ticket_type=payload.type,
            subject=payload.subject,
            description=payload.description,
        )
    except ValueError as exc:
        _raise_for_service_error(exc)
    return TicketResponse.model_validate(ticket)


@router.get("/tickets/{ticket_id}", response_model=TicketResponse)
async def get_ticket(
    ticket_id: UUID,
    user: User = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service),
) -> TicketResponse:
    try:
        ticket = await service.get_ticket(user, ticket_id)
    except (LookupError, PermissionError) as exc:
        _raise_for_service_error(exc)
    return TicketResponse.model_validate(ticket)


@router.put("/tickets/{ticket_id}", response_model=TicketResponse)
async def update_ticket(
    ticket_id: UUID,
    payload: UpdateTicketRequest,
    user: User = Depends(get_current_user),
    service: TicketService = Depends(get_ticket_service),
) -> TicketResponse:
    try:
        ticket = await service.update_ticket(
            user, ticket_id, status=payload.status, response=payload.response
        )
    except (LookupError, PermissionError, ValueError) as exc:
        _raise_for_service_error(exc)
    return TicketResponse.model_validate(ticket)
