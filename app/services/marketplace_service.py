import logging
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.enums import ActivityAction, ActivityTarget
from app.domain.rules import normalize_optional_text
from app.infra.db.models import MarketplaceListing, User
from app.infra.db.repositories import ActivityLogRepository, MarketplaceRepository
from app.services.errors import (
    ListingNotFoundError,
    MarketplaceAccessRequiredError,
    NotAuthorizedError,
)
from app.services.pagination import Page, PageRequest

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = ("title", "description", "category", "price", "media", "tags", "tebex_link")


def _clean_tebex_link(raw: str | None) -> str | None:
    if raw is None:
        return None
    if not raw.strip():
        raise ValueError("Tebex link cannot be empty")
    return raw.strip()


class MarketplaceService:
    def __init__(
        self,
        session: AsyncSession,
        listings: MarketplaceRepository | None = None,
        activity: ActivityLogRepository | None = None,
    ) -> None:
        self.session = session
        self.listings = listings or MarketplaceRepository(session)
        self.activity = activity or ActivityLogRepository(session)

    async def list_listings(
        self,
        request: PageRequest,
        category: str | None,
        tags: list[str],
    ) -> Page[MarketplaceListing]:
        listings, total = await self.listings.list_active(
            category, tags, request.offset, request.limit
        )
        return Page(items=listings, page=request.page, limit=request.limit, total=total)

    async def get_listing(self, listing_id: UUID) -> MarketplaceListing:
        return await self._get_listing_or_raise(listing_id)

    async def create_listing(
        self,
        owner: User,
        title: str,
        category: str,
        description: str | None = None,
        price: Decimal | None = None,
        media: list[dict[str, Any]] | None = None,
        tags: list[str] | None = None,
        tebex_link: str | None = None,
    ) -> MarketplaceListing:
        if not (owner.has_marketplace_access or owner.is_admin):
            raise MarketplaceAccessRequiredError()

        cleaned_title = title.strip()
        cleaned_category = category.strip()
        if not cleaned_title or not cleaned_category:
            raise ValueError("Title and category are required")

        listing = await self.listings.create(
            owner_id=owner.id,
            title=cleaned_title,
            category=cleaned_category,
            description=normalize_optional_text(description),
            price=price,
            media=media or None,
            tags=tags or [],
            tebex_link=_clean_tebex_link(tebex_link),
        )
        await self.session.commit()
        await self.session.refresh(listing)
        return listing

    async def update_listing(
        self,
        actor: User,
        listing_id: UUID,
        changes: dict[str, Any],
    ) -> MarketplaceListing:
        """Apply only the fields present in ``changes``; only the owner may edit."""
        listing = await self._get_listing_or_raise(listing_id)
        if listing.owner_id != actor.id:
            raise NotAuthorizedError()

        unknown = set(changes) - set(_EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unsupported fields: {', '.join(sorted(unknown))}")

        if "title" in changes:
            title = (changes["title"] or "").strip()
            if not title:
                raise ValueError("Title cannot be empty")
            listing.title = title
        if "category" in changes:
            category = (changes["category"] or "").strip()
            if not category:
                raise ValueError("Category is required")
            listing.category = category
        if "description" in changes:
            listing.description = normalize_optional_text(changes["description"])
        if "price" in changes:
            listing.price = changes["price"]
        if "media" in changes:
            listing.media = changes["media"] or None
        if "tags" in changes:
            listing.tags = changes["tags"] or []
        if "tebex_link" in changes:
            listing.tebex_link = _clean_tebex_link(changes["tebex_link"])

        await self.listings.save(listing)
        await self.session.commit()
        await self.session.refresh(listing)
        return listing

    async def delete_listing(self, actor: User, listing_id: UUID) -> None:
        listing = await self._get_listing_or_raise(listing_id)
        if listing.owner_id != actor.id and not actor.is_admin:
            raise NotAuthorizedError()

        if listing.owner_id != actor.id:
            await self.activity.create(
                user_id=actor.id,
                action=ActivityAction.MARKETPLACE_LISTING_DELETED,
                target_type=ActivityTarget.MARKETPLACE_LISTING,
                target_id=listing.id,
                description=f"Admin deleted marketplace listing by user {listing.owner_id}",
            )
            logger.info("Admin %s deleted marketplace listing %s", actor.id, listing.id)

        await self.listings.delete(listing)
        await self.session.commit()

    async def _get_listing_or_raise(self, listing_id: UUID) -> MarketplaceListing:
        listing = await self.listings.get_by_id(listing_id)
        if listing is None:
            raise ListingNotFoundError(listing_id)
        return listing
