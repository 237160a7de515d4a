from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import throttled_user
from app.core.db import get_db_session
from app.infra.db.models import User
from app.schemas.common import PaginationResponse, split_tags
from app.schemas.server import CreateServerRequest, ServerListResponse, ServerResponse
from app.services.pagination import PageRequest
from app.services.server_service import ServerDraft, ServerService

router = APIRouter()


async def get_server_service(
    session: AsyncSession = Depends(get_db_session),
) -> ServerService:
    return ServerService(session=session)


@router.get("", response_model=ServerListResponse)
async def list_servers(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    tags: str | None = Query(default=None),
    featured: bool = Query(default=False),
    service: ServerService = Depends(get_server_service),
) -> ServerListResponse:
    result = await service.list_servers(
        PageRequest(page=page, limit=limit), split_tags(tags), featured_only=featured
    )
    return ServerListResponse(
        items=[ServerResponse.model_validate(server) for server in result.items],
        pagination=PaginationResponse.from_page(result),
    )


@router.post("", response_model=ServerResponse, status_code=status.HTTP_201_CREATED)
async def create_server(
    payload: CreateServerRequest,
    user: User = Depends(throttled_user("server")),
    service: ServerService = Depends(get_server_service),
) -> ServerResponse:
    try:
        server = await service.create_server(user, ServerDraft(**payload.model_dump()))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return ServerResponse.model_validate(server)
