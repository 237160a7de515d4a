import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.enums import OWNER_AUDITED_ACTIONS, ActivityAction, ActivityTarget, ServerStatus
from app.infra.db.models import ActivityLog, ServerListing, User
from app.infra.db.repositories import (
    ActivityLogRepository,
    ServerListingRepository,
    UserRepository,
)
from app.services.errors import AdminRequiredError, ServerListingNotFoundError, UserNotFoundError
from app.services.pagination import Page, PageRequest

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MarketplaceAccessEntry:
    user: User
    listing_count: int


@dataclass(slots=True)
class AdminActivityReport:
    activities: Page[ActivityLog]
    admins: list[User]


class AdminService:
    """Moderation actions; every mutation leaves an activity log entry."""

    def __init__(
        self,
        session: AsyncSession,
        users: UserRepository | None = None,
        servers: ServerListingRepository | None = None,
        activity: ActivityLogRepository | None = None,
    ) -> None:
        self.session = session
        self.users = users or UserRepository(session)
        self.servers = servers or ServerListingRepository(session)
        self.activity = activity or ActivityLogRepository(session)

    async def list_servers(
        self,
        actor: User,
        request: PageRequest,
        status_filter: ServerStatus | None = None,
    ) -> Page[ServerListing]:
        self._assert_admin(actor)
        servers, total = await self.servers.list_for_moderation(
            status_filter, request.offset, request.limit
        )
        return Page(items=servers, page=request.page, limit=request.limit, total=total)

    async def set_server_status(
        self, actor: User, server_id: UUID, status: ServerStatus
    ) -> ServerListing:
        self._assert_admin(actor)
        server = await self._get_server_or_raise(server_id)
        previous = server.status
        server.status = status
        await self.servers.save(server)

        if previous != status:
            await self.activity.create(
                user_id=actor.id,
                action=ActivityAction.SERVER_STATUS_CHANGED,
                target_type=ActivityTarget.SERVER_LISTING,
                target_id=server.id,
                description=(
                    f"Admin changed server {server.name} from {previous.value} to {status.value}"
                ),
            )
            logger.info(
                "Admin %s set server %s status %s -> %s",
                actor.id,
                server.id,
                previous.value,
                status.value,
            )

        await self.session.commit()
        await self.session.refresh(server)
        return server

    async def set_featured(self, actor: User, server_id: UUID, featured: bool) -> ServerListing:
        self._assert_admin(actor)
        server = await self._get_server_or_raise(server_id)
        server.is_featured = featured
        await self.servers.save(server)

        verb = "featured" if featured else "unfeatured"
        await self.activity.create(
            user_id=actor.id,
            action=ActivityAction.SERVER_FEATURED if featured else ActivityAction.SERVER_UNFEATURED,
            target_type=ActivityTarget.SERVER_LISTING,
            target_id=server.id,
            description=f"Admin {verb} server: {server.name}",
        )
        logger.info("Admin %s %s server %s", actor.id, verb, server.id)

        await self.session.commit()
        await self.session.refresh(server)
        return server

    async def list_marketplace_access(
        self,
        actor: User,
        request: PageRequest,
        search: str = "",
    ) -> Page[MarketplaceAccessEntry]:
        self._assert_admin(actor)
        rows, total = await self.users.search_with_listing_counts(
            search.strip(), request.offset, request.limit
        )
        return Page(
            items=[MarketplaceAccessEntry(user=user, listing_count=count) for user, count in rows],
            page=request.page,
            limit=request.limit,
            total=total,
        )

    async def set_marketplace_access(
        self, actor: User, user_id: UUID, has_access: bool
    ) -> User:
        self._assert_admin(actor)
        user = await self.users.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)

        user.has_marketplace_access = has_access
        await self.users.save(user)

        verb = "granted" if has_access else "revoked"
        await self.activity.create(
            user_id=actor.id,
            action=(
                ActivityAction.MARKETPLACE_ACCESS_GRANTED
                if has_access
                else ActivityAction.MARKETPLACE_ACCESS_REVOKED
            ),
            target_type=ActivityTarget.USER,
            target_id=user.id,
            description=(
                f"Admin {verb} marketplace access for user {user.username} ({user.email})"
            ),
        )
        logger.info("Admin %s %s marketplace access for %s", actor.id, verb, user.id)

        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def get_admin_activity(self, request: PageRequest) -> AdminActivityReport:
        admins = await self.users.list_admins()
        activities, total = await self.activity.list_for_users(
            [admin.id for admin in admins],
            OWNER_AUDITED_ACTIONS,
            request.offset,
            request.limit,
        )
        return AdminActivityReport(
            activities=Page(items=activities, page=request.page, limit=request.limit, total=total),
            admins=admins,
        )

    @staticmethod
    def _assert_admin(actor: User) -> None:
        if not actor.is_admin:
            raise AdminRequiredError()

    async def _get_server_or_raise(self, server_id: UUID) -> ServerListing:
        server = await self.servers.get_by_id(server_id)
        if server is None:
            raise ServerListingNotFoundError(server_id)
        return server
