from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, throttled_user
from app.core.db import get_db_session
from app.infra.db.models import User
from app.schemas.common import PaginationResponse, SuccessResponse, split_tags
from app.schemas.marketplace import (
    CreateListingRequest,
    ListingListResponse,
    ListingResponse,
    UpdateListingRequest,
)
from app.services.errors import (
    ListingNotFoundError,
    MarketplaceAccessRequiredError,
    NotAuthorizedError,
)
from app.services.marketplace_service import MarketplaceService
from app.services.pagination import PageRequest

router = APIRouter()


async def get_marketplace_service(
    session: AsyncSession = Depends(get_db_session),
) -> MarketplaceService:
    return MarketplaceService(session=session)


def _raise_for_service_error(exc: Exception) -> None:
    if isinstance(exc, ListingNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, (NotAuthorizedError, MarketplaceAccessRequiredError)):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    if isinstance(exc, ValueError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    raise exc


@router.get("", response_model=ListingListResponse)
async def list_listings(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    category: str | None = Query(default=None),
    tags: str | None = Query(default=None),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> ListingListResponse:
    result = await service.list_listings(
        PageRequest(page=page, limit=limit), category or None, split_tags(tags)
    )
    return ListingListResponse(
        items=[ListingResponse.model_validate(listing) for listing in result.items],
        pagination=PaginationResponse.from_page(result),
    )


@router.post("", response_model=ListingResponse, status_code=status.HTTP_201_CREATED)
async def create_listing(
    payload: CreateListingRequest,
    user: User = Depends(throttled_user("marketplace")),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> ListingResponse:
    try:
        listing = await service.create_listing(
            owner=user,
            title=payload.title,
            category=payload.category,
            description=payload.description,
            price=payload.price,
            media=(
                [item.model_dump(mode="json", exclude_none=True) for item in payload.media]
                if payload.media
                else None
            ),
            tags=payload.tags,
            tebex_link=payload.tebex_link,
        )
    except (PermissionError, ValueError) as exc:
        _raise_for_service_error(exc)
    return ListingResponse.model_validate(listing)


@router.get("/{listing_id}", response_model=ListingResponse)
async def get_listing(
    listing_id: UUID,
    service: MarketplaceService = Depends(get_marketplace_service),
) -> ListingResponse:
    try:
        listing = await service.get_listing(listing_id)
    except ListingNotFoundError as exc:
        _raise_for_service_error(exc)
    return ListingResponse.model_validate(listing)


@router.put("/{listing_id}", response_model=ListingResponse)
async def update_listing(
    listing_id: UUID,
    payload: UpdateListingRequest,
    user: User = Depends(get_current_user),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> ListingResponse:
    changes = payload.model_dump(mode="json", exclude_unset=True)
    if "price" in payload.model_fields_set:
        changes["price"] = payload.price
    try:
        listing = await service.update_listing(user, listing_id, changes)
    except (LookupError, PermissionError, ValueError) as exc:
        _raise_for_service_error(exc)
    return ListingResponse.model_validate(listing)


@router.delete("/{listing_id}", response_model=SuccessResponse)
async def delete_listing(
    listing_id: UUID,
    user: User = Depends(get_current_user),
    service: MarketplaceService = Depends(get_marketplace_service),
) -> SuccessResponse:
    try:
        await service.delete_listing(user, listing_id)
    except (LookupError, PermissionError) as exc:
        _raise_for_service_error(exc)
    return SuccessResponse()
