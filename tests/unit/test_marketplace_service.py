from dataclasses import dataclass, field
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from app.domain.enums import ActivityAction, ListingStatus
from app.services.errors import (
    ListingNotFoundError,
    MarketplaceAccessRequiredError,
    NotAuthorizedError,
)
from app.services.marketplace_service import MarketplaceService


class DummySession:
    async def commit(self) -> None:
        return None

    async def refresh(self, _: object) -> None:
        return None


@dataclass(slots=True)
class FakeUser:
    id: UUID
    has_marketplace_access: bool = False
    is_admin: bool = False


@dataclass(slots=True)
class FakeListing:
    id: UUID
    owner_id: UUID
    title: str
    category: str
    description: str | None = None
    price: Decimal | None = None
    media: list[dict] | None = None
    tags: list[str] = field(default_factory=list)
    tebex_link: str | None = None
    status: ListingStatus = ListingStatus.ACTIVE


class FakeMarketplaceRepository:
    def __init__(self) -> None:
        self.listings: dict[UUID, FakeListing] = {}

    async def get_by_id(self, listing_id: UUID) -> FakeListing | None:
        return self.listings.get(listing_id)

    async def create(self, owner_id: UUID, **fields) -> FakeListing:
        listing = FakeListing(id=uuid4(), owner_id=owner_id, **fields)
        self.listings[listing.id] = listing
        return listing

    async def save(self, listing: FakeListing) -> None:
        self.listings[listing.id] = listing

    async def delete(self, listing: FakeListing) -> None:
        self.listings.pop(listing.id, None)


class FakeActivityRepository:
    def __init__(self) -> None:
        self.entries: list[dict] = []

    async def create(self, **entry) -> None:
        self.entries.append(entry)


@pytest.fixture
def listings() -> FakeMarketplaceRepository:
    return FakeMarketplaceRepository()


@pytest.fixture
def activity() -> FakeActivityRepository:
    return FakeActivityRepository()


@pytest.fixture
def service(
    listings: FakeMarketplaceRepository, activity: FakeActivityRepository
) -> MarketplaceService:
    return MarketplaceService(session=DummySession(), listings=listings, activity=activity)


@pytest.fixture
def seller() -> FakeUser:
    return FakeUser(id=uuid4(), has_marketplace_access=True)


async def _listing(service: MarketplaceService, seller: FakeUser) -> FakeListing:
    return await service.create_listing(
        owner=seller,
        title=" Police MDT ",
        category=" scripts ",
        price=Decimal("24.99"),
        tags=["police"],
        tebex_link="https://store.tebex.io/mdt",
    )


@pytest.mark.asyncio
async def test_create_listing_requires_access(service: MarketplaceService) -> None:
    with pytest.raises(MarketplaceAccessRequiredError):
        await service.create_listing(owner=FakeUser(id=uuid4()), title="MDT", category="scripts")


@pytest.mark.asyncio
async def test_admin_may_create_without_access_flag(service: MarketplaceService) -> None:
    listing = await service.create_listing(
        owner=FakeUser(id=uuid4(), is_admin=True), title="MDT", category="scripts"
    )

    assert listing.title == "MDT"


@pytest.mark.asyncio
async def test_create_listing_cleans_fields(service: MarketplaceService, seller: FakeUser) -> None:
    listing = await _listing(service, seller)

    assert listing.title == "Police MDT"
    assert listing.category == "scripts"
    assert listing.price == Decimal("24.99")
    assert listing.status == ListingStatus.ACTIVE


@pytest.mark.asyncio
@pytest.mark.parametrize(("title", "category"), [("  ", "scripts"), ("MDT", "")])
async def test_create_listing_requires_title_and_category(
    service: MarketplaceService, seller: FakeUser, title: str, category: str
) -> None:
    with pytest.raises(ValueError, match="Title and category are required"):
        await service.create_listing(owner=seller, title=title, category=category)


@pytest.mark.asyncio
async def test_blank_tebex_link_is_rejected(service: MarketplaceService, seller: FakeUser) -> None:
    with pytest.raises(ValueError, match="Tebex link cannot be empty"):
        await service.create_listing(owner=seller, title="MDT", category="scripts", tebex_link=" ")


@pytest.mark.asyncio
async def test_partial_update_only_touches_given_fields(
    service: MarketplaceService, seller: FakeUser
) -> None:
    listing = await _listing(service, seller)

    updated = await service.update_listing(
        actor=seller, listing_id=listing.id, changes={"price": None, "tags": ["police", "mdt"]}
    )

    assert updated.price is None
    assert updated.tags == ["police", "mdt"]
    assert updated.title == "Police MDT"
    assert updated.tebex_link == "https://store.tebex.io/mdt"


@pytest.mark.asyncio
async def test_update_rejects_unknown_fields_before_changing_anything(
    service: MarketplaceService, seller: FakeUser
) -> None:
    listing = await _listing(service, seller)

    with pytest.raises(ValueError, match="Unsupported fields: owner_id"):
        await service.update_listing(
            actor=seller, listing_id=listing.id, changes={"title": "Renamed", "owner_id": uuid4()}
        )

    assert listing.title == "Police MDT"


@pytest.mark.asyncio
async def test_only_owner_may_update(service: MarketplaceService, seller: FakeUser) -> None:
    listing = await _listing(service, seller)
    admin = FakeUser(id=uuid4(), is_admin=True)

    with pytest.raises(NotAuthorizedError):
        await service.update_listing(actor=admin, listing_id=listing.id, changes={"title": "x"})


@pytest.mark.asyncio
async def test_owner_delete_is_not_logged(
    service: MarketplaceService,
    seller: FakeUser,
    activity: FakeActivityRepository,
    listings: FakeMarketplaceRepository,
) -> None:
    listing = await _listing(service, seller)

    await service.delete_listing(actor=seller, listing_id=listing.id)

    assert listings.listings == {}
    assert activity.entries == []


@pytest.mark.asyncio
async def test_admin_delete_is_logged(
    service: MarketplaceService, seller: FakeUser, activity: FakeActivityRepository
) -> None:
    listing = await _listing(service, seller)
    admin = FakeUser(id=uuid4(), is_admin=True)

    await service.delete_listing(actor=admin, listing_id=listing.id)

    [entry] = activity.entries
    assert entry["action"] == ActivityAction.MARKETPLACE_LISTING_DELETED
    assert entry["user_id"] == admin.id
    assert entry["target_id"] == listing.id


@pytest.mark.asyncio
async def test_stranger_cannot_delete(service: MarketplaceService, seller: FakeUser) -> None:
    listing = await _listing(service, seller)

    with pytest.raises(NotAuthorizedError):
        await service.delete_listing(actor=FakeUser(id=uuid4()), listing_id=listing.id)


@pytest.mark.asyncio
async def test_missing_listing(service: MarketplaceService) -> None:
    with pytest.raises(ListingNotFoundError):
        await service.get_listing(uuid4())
