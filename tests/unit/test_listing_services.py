from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

from app.domain.enums import SearchScope, ServerStatus
from app.infra.db.repositories import PostCounts
from app.services.event_service import EventService
from app.services.pagination import PageRequest
from app.services.search_service import SECTION_LIMIT, SearchService
from app.services.server_service import ServerDraft, ServerService


class DummySession:
    async def commit(self) -> None:
        return None

    async def refresh(self, _: object) -> None:
        return None


@dataclass(slots=True)
class FakeUser:
    id: UUID = field(default_factory=uuid4)


class FakeServerRepository:
    def __init__(self) -> None:
        self.created: list[SimpleNamespace] = []
        self.list_calls: list[tuple] = []
        self.search_calls: list[tuple] = []

    async def list_active(self, tags, featured_only, offset, limit):
        self.list_calls.append((tags, featured_only, offset, limit))
        return [], 0

    async def create(self, owner_id: UUID, **fields) -> SimpleNamespace:
        server = SimpleNamespace(
            id=uuid4(), owner_id=owner_id, status=ServerStatus.PENDING, **fields
        )
        self.created.append(server)
        return server

    async def search(self, query, tags, limit):
        self.search_calls.append((query, tags, limit))
        return ["server"]


class FakeEventRepository:
    def __init__(self) -> None:
        self.events: list[SimpleNamespace] = []
        self.starting_after: datetime | None = None
        self.counts: dict[UUID, int] = {}

    async def list(self, starting_after, offset, limit):
        self.starting_after = starting_after
        return self.events[offset : offset + limit], len(self.events)

    async def create(self, host_id: UUID, **fields) -> SimpleNamespace:
        event = SimpleNamespace(id=uuid4(), host_id=host_id, **fields)
        self.events.append(event)
        return event

    async def get_attendee_counts(self, event_ids):
        return {event_id: self.counts[event_id] for event_id in event_ids if event_id in self.counts}


class FakePostSearch:
    def __init__(self) -> None:
        self.post = SimpleNamespace(id=uuid4())
        self.calls = 0

    async def search(self, query, tags, limit):
        self.calls += 1
        return [self.post]

    async def get_counts(self, post_ids):
        return {self.post.id: PostCounts(likes=2)}


class FakeListingSearch:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    async def search(self, query, category, tags, limit):
        self.calls.append((query, category, tags, limit))
        return ["listing"]


@pytest.mark.asyncio
async def test_new_server_waits_for_approval() -> None:
    servers = FakeServerRepository()
    service = ServerService(session=DummySession(), servers=servers)

    server = await service.create_server(
        FakeUser(),
        ServerDraft(name="  Paradise RP ", ip=" ", tags=["economy"], features=[]),
    )

    assert server.name == "Paradise RP"
    assert server.status == ServerStatus.PENDING
    assert server.ip is None
    assert server.features is None
    assert server.tags == ["economy"]


@pytest.mark.asyncio
async def test_server_name_is_required() -> None:
    service = ServerService(session=DummySession(), servers=FakeServerRepository())

    with pytest.raises(ValueError, match="Server name is required"):
        await service.create_server(FakeUser(), ServerDraft(name="   "))


@pytest.mark.asyncio
async def test_server_listing_passes_paging_and_filters() -> None:
    servers = FakeServerRepository()
    service = ServerService(session=DummySession(), servers=servers)

    page = await service.list_servers(PageRequest(page=3, limit=10), ["police"], featured_only=True)

    assert servers.list_calls == [(["police"], True, 20, 10)]
    assert page.total == 0
    assert page.total_pages == 0


@pytest.mark.asyncio
async def test_create_event_validations() -> None:
    service = EventService(session=DummySession(), events=FakeEventRepository())
    start = datetime(2026, 11, 1, 20, tzinfo=UTC)

    with pytest.raises(ValueError, match="required"):
        await service.create_event(FakeUser(), "  ", start, start)
    with pytest.raises(ValueError, match="must not precede"):
        await service.create_event(FakeUser(), "Car meet", start, start - timedelta(minutes=1))
    with pytest.raises(ValueError, match="Capacity"):
        await service.create_event(FakeUser(), "Car meet", start, start, capacity=0)


@pytest.mark.asyncio
async def test_recurrence_rule_only_kept_for_recurring_events() -> None:
    service = EventService(session=DummySession(), events=FakeEventRepository())
    start = datetime(2026, 11, 1, 20, tzinfo=UTC)

    one_off = await service.create_event(
        FakeUser(), "Car meet", start, start + timedelta(hours=2), recurrence_rule="FREQ=WEEKLY"
    )
    weekly = await service.create_event(
        FakeUser(),
        "Weekly heist",
        start,
        start + timedelta(hours=2),
        is_recurring=True,
        recurrence_rule=" FREQ=WEEKLY ",
    )

    assert one_off.event.recurrence_rule is None
    assert one_off.attendee_count == 0
    assert weekly.event.recurrence_rule == "FREQ=WEEKLY"


@pytest.mark.asyncio
async def test_list_events_attaches_attendee_counts() -> None:
    events = FakeEventRepository()
    service = EventService(session=DummySession(), events=events)
    start = datetime(2026, 11, 1, 20, tzinfo=UTC)
    created = await service.create_event(FakeUser(), "Car meet", start, start)
    events.counts[created.event.id] = 7

    page = await service.list_events(PageRequest(), upcoming=True)

    assert [view.attendee_count for view in page.items] == [7]
    assert events.starting_after is not None


@pytest.mark.asyncio
async def test_search_all_sections() -> None:
    posts = FakePostSearch()
    servers = FakeServerRepository()
    listings = FakeListingSearch()
    service = SearchService(
        session=DummySession(), posts=posts, servers=servers, listings=listings
    )

    results = await service.search("  police ", ["rp"], category="scripts")

    assert [view.counts.likes for view in results.posts] == [2]
    assert results.servers == ["server"]
    assert results.marketplace == ["listing"]
    assert servers.search_calls == [("police", ["rp"], SECTION_LIMIT)]
    assert listings.calls == [("police", "scripts", ["rp"], SECTION_LIMIT)]


@pytest.mark.asyncio
async def test_search_scope_limits_sections() -> None:
    posts = FakePostSearch()
    listings = FakeListingSearch()
    service = SearchService(
        session=DummySession(), posts=posts, servers=FakeServerRepository(), listings=listings
    )

    results = await service.search("mdt", [], scope=SearchScope.MARKETPLACE)

    assert posts.calls == 0
    assert results.posts == []
    assert results.servers == []
    assert results.marketplace == ["listing"]
