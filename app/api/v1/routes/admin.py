from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_admin
from app.core.db import get_db_session
from app.domain.enums import ServerStatus
from app.infra.db.models import User
from app.schemas.admin import (
    MarketplaceAccessEntryResponse,
    MarketplaceAccessListResponse,
    MarketplaceAccessUser,
    SetFeaturedRequest,
    SetMarketplaceAccessRequest,
    SetServerStatusRequest,
)
from app.schemas.common import PaginationResponse
from app.schemas.server import ServerListResponse, ServerResponse
from app.services.admin_service import AdminService
from app.services.errors import ServerListingNotFoundError, UserNotFoundError
from app.services.pagination import PageRequest

router = APIRouter()


async def get_admin_service(
    session: AsyncSession = Depends(get_db_session),
) -> AdminService:
    return AdminService(session=session)


def _raise_for_service_error(exc: Exception) -> None:
    if isinstance(exc, (ServerListingNotFoundError, UserNotFoundError)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, PermissionError):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden") from exc
    raise exc


@router.get("/servers", response_model=ServerListResponse)
async def list_servers(
    status_filter: ServerStatus | None = Query(default=None, alias="status"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=200),
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> ServerListResponse:
    result = await service.list_servers(
        admin, PageRequest(page=page, limit=limit), status_filter=status_filter
    )
    return ServerListResponse(
        items=[ServerResponse.model_validate(server) for server in result.items],
        pagination=PaginationResponse.from_page(result),
    )


@router.put("/servers", response_model=ServerResponse)
async def set_server_status(
    payload: SetServerStatusRequest,
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> ServerResponse:
    try:
        server = await service.set_server_status(admin, payload.server_id, payload.status)
    except (LookupError, PermissionError) as exc:
        _raise_for_service_error(exc)
    return ServerResponse.model_validate(server)


@router.post("/feature", response_model=ServerResponse)
async def set_featured(
    payload: SetFeaturedRequest,
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> ServerResponse:
    try:
        server = await service.set_featured(admin, payload.server_id, payload.featured)
    except (LookupError, PermissionError) as exc:
        _raise_for_service_error(exc)
    return ServerResponse.model_validate(server)


@router.get("/marketplace-access", response_model=MarketplaceAccessListResponse)
async def list_marketplace_access(
    search: str = Query(default="", max_length=100),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=200),
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> MarketplaceAccessListResponse:
    result = await service.list_marketplace_access(
        admin, PageRequest(page=page, limit=limit), search=search
    )
    return MarketplaceAccessListResponse(
        items=[
            MarketplaceAccessEntryResponse(
                **MarketplaceAccessUser.model_validate(entry.user).model_dump(),
                listing_count=entry.listing_count,
            )
            for entry in result.items
        ],
        pagination=PaginationResponse.from_page(result),
    )


@router.put("/marketplace-access", response_model=MarketplaceAccessUser)
async def set_marketplace_access(
    payload: SetMarketplaceAccessRequest,
    admin: User = Depends(require_admin),
    service: AdminService = Depends(get_admin_service),
) -> MarketplaceAccessUser:
    try:
        user = await service.set_marketplace_access(
            admin, payload.user_id, payload.has_marketplace_access
        )
    except (LookupError, PermissionError) as exc:
        _raise_for_service_error(exc)
    return MarketplaceAccessUser.model_validate(user)
