from dataclasses import dataclass
from uuid import UUID, uuid4

import pytest

from app.domain.enums import OWNER_AUDITED_ACTIONS, ActivityAction, ServerStatus
from app.services.admin_service import AdminService
from app.services.errors import AdminRequiredError, ServerListingNotFoundError, UserNotFoundError
from app.services.pagination import PageRequest


class DummySession:
    async def commit(self) -> None:
        return None

    async def refresh(self, _: object) -> None:
        return None


@dataclass(slots=True)
class FakeUser:
    id: UUID
    username: str
    email: str
    is_admin: bool = False
    has_marketplace_access: bool = False


@dataclass(slots=True)
class FakeServer:
    id: UUID
    name: str
    status: ServerStatus = ServerStatus.PENDING
    is_featured: bool = False


class FakeUserRepository:
    def __init__(self, users: list[FakeUser]) -> None:
        self.users = {user.id: user for user in users}
        self.listing_counts: dict[UUID, int] = {}
        self.last_search: str | None = None

    async def get_by_id(self, user_id: UUID) -> FakeUser | None:
        return self.users.get(user_id)

    async def save(self, user: FakeUser) -> None:
        self.users[user.id] = user

    async def list_admins(self) -> list[FakeUser]:
        return [user for user in self.users.values() if user.is_admin]

    async def search_with_listing_counts(self, search: str, offset: int, limit: int):
        self.last_search = search
        rows = [
            (user, self.listing_counts.get(user.id, 0))
            for user in self.users.values()
            if search.lower() in user.username.lower() or search.lower() in user.email
        ]
        return rows[offset : offset + limit], len(rows)


class FakeServerRepository:
    def __init__(self) -> None:
        self.servers: dict[UUID, FakeServer] = {}

    def add(self, name: str, status: ServerStatus = ServerStatus.PENDING) -> FakeServer:
        server = FakeServer(id=uuid4(), name=name, status=status)
        self.servers[server.id] = server
        return server

    async def get_by_id(self, server_id: UUID) -> FakeServer | None:
        return self.servers.get(server_id)

    async def list_for_moderation(self, status_filter, offset: int, limit: int):
        servers = [
            server
            for server in self.servers.values()
            if status_filter is None or server.status == status_filter
        ]
        return servers[offset : offset + limit], len(servers)

    async def save(self, server: FakeServer) -> None:
        self.servers[server.id] = server


class FakeActivityRepository:
    def __init__(self) -> None:
        self.entries: list[dict] = []
        self.last_query: tuple | None = None

    async def create(self, **entry) -> None:
        self.entries.append(entry)

    async def list_for_users(self, user_ids, actions, offset: int, limit: int):
        self.last_query = (list(user_ids), tuple(actions), offset, limit)
        rows = [entry for entry in self.entries if entry["user_id"] in user_ids]
        return rows[offset : offset + limit], len(rows)


class Moderation:
    def __init__(self) -> None:
        self.admin = FakeUser(id=uuid4(), username="admin", email="admin@example.com", is_admin=True)
        self.player = FakeUser(id=uuid4(), username="player", email="player@example.com")
        self.users = FakeUserRepository([self.admin, self.player])
        self.servers = FakeServerRepository()
        self.activity = FakeActivityRepository()
        self.service = AdminService(
            session=DummySession(),
            users=self.users,
            servers=self.servers,
            activity=self.activity,
        )


@pytest.fixture
def moderation() -> Moderation:
    return Moderation()


@pytest.mark.asyncio
async def test_non_admin_is_rejected_everywhere(moderation: Moderation) -> None:
    server = moderation.servers.add("Paradise RP")
    player = moderation.player

    with pytest.raises(AdminRequiredError):
        await moderation.service.list_servers(player, PageRequest())
    with pytest.raises(AdminRequiredError):
        await moderation.service.set_server_status(player, server.id, ServerStatus.ACTIVE)
    with pytest.raises(AdminRequiredError):
        await moderation.service.set_featured(player, server.id, True)
    with pytest.raises(AdminRequiredError):
        await moderation.service.set_marketplace_access(player, player.id, True)

    assert moderation.activity.entries == []


@pytest.mark.asyncio
async def test_list_servers_filters_by_status(moderation: Moderation) -> None:
    moderation.servers.add("Paradise RP")
    moderation.servers.add("Elite Roleplay", ServerStatus.ACTIVE)

    page = await moderation.service.list_servers(
        moderation.admin, PageRequest(limit=50), ServerStatus.PENDING
    )

    assert [server.name for server in page.items] == ["Paradise RP"]
    assert page.total == 1


@pytest.mark.asyncio
async def test_status_change_is_logged(moderation: Moderation) -> None:
    server = moderation.servers.add("Paradise RP")

    updated = await moderation.service.set_server_status(
        moderation.admin, server.id, ServerStatus.ACTIVE
    )

    assert updated.status == ServerStatus.ACTIVE
    [entry] = moderation.activity.entries
    assert entry["action"] == ActivityAction.SERVER_STATUS_CHANGED
    assert entry["description"] == "Admin changed server Paradise RP from pending to active"


@pytest.mark.asyncio
async def test_unchanged_status_is_not_logged(moderation: Moderation) -> None:
    server = moderation.servers.add("Paradise RP", ServerStatus.ACTIVE)

    await moderation.service.set_server_status(moderation.admin, server.id, ServerStatus.ACTIVE)

    assert moderation.activity.entries == []


@pytest.mark.asyncio
async def test_missing_server(moderation: Moderation) -> None:
    with pytest.raises(ServerListingNotFoundError):
        await moderation.service.set_featured(moderation.admin, uuid4(), True)


@pytest.mark.asyncio
async def test_feature_and_unfeature(moderation: Moderation) -> None:
    server = moderation.servers.add("Paradise RP", ServerStatus.ACTIVE)

    await moderation.service.set_featured(moderation.admin, server.id, True)
    assert server.is_featured
    await moderation.service.set_featured(moderation.admin, server.id, False)

    assert not server.is_featured
    assert [entry["action"] for entry in moderation.activity.entries] == [
        ActivityAction.SERVER_FEATURED,
        ActivityAction.SERVER_UNFEATURED,
    ]
    assert moderation.activity.entries[0]["description"] == "Admin featured server: Paradise RP"


@pytest.mark.asyncio
async def test_grant_and_revoke_marketplace_access(moderation: Moderation) -> None:
    player = moderation.player

    granted = await moderation.service.set_marketplace_access(moderation.admin, player.id, True)
    assert granted.has_marketplace_access
    revoked = await moderation.service.set_marketplace_access(moderation.admin, player.id, False)

    assert not revoked.has_marketplace_access
    actions = [entry["action"] for entry in moderation.activity.entries]
    assert actions == [
        ActivityAction.MARKETPLACE_ACCESS_GRANTED,
        ActivityAction.MARKETPLACE_ACCESS_REVOKED,
    ]
    assert moderation.activity.entries[0]["target_id"] == player.id


@pytest.mark.asyncio
async def test_marketplace_access_for_unknown_user(moderation: Moderation) -> None:
    with pytest.raises(UserNotFoundError):
        await moderation.service.set_marketplace_access(moderation.admin, uuid4(), True)


@pytest.mark.asyncio
async def test_marketplace_access_listing_includes_counts(moderation: Moderation) -> None:
    moderation.users.listing_counts[moderation.player.id] = 4

    page = await moderation.service.list_marketplace_access(
        moderation.admin, PageRequest(), search="  play "
    )

    assert moderation.users.last_search == "play"
    [entry] = page.items
    assert entry.user is moderation.player
    assert entry.listing_count == 4


@pytest.mark.asyncio
async def test_admin_activity_report_covers_admins_and_audited_actions(
    moderation: Moderation,
) -> None:
    server = moderation.servers.add("Paradise RP", ServerStatus.ACTIVE)
    await moderation.service.set_featured(moderation.admin, server.id, True)

    report = await moderation.service.get_admin_activity(PageRequest(page=1, limit=20))

    assert report.admins == [moderation.admin]
    assert report.activities.total == 1
    admin_ids, actions, offset, limit = moderation.activity.last_query
    assert admin_ids == [moderation.admin.id]
    assert actions == OWNER_AUDITED_ACTIONS
    assert (offset, limit) == (0, 20)
