from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.rules import normalize_optional_text
from app.infra.db.models import ServerListing, User
from app.infra.db.repositories import ServerListingRepository
from app.services.pagination import Page, PageRequest


@dataclass(slots=True)
class ServerDraft:
    name: str
    ip: str | None = None
    connect_url: str | None = None
    logo_url: str | None = None
    description: str | None = None
    features: list[str] | None = None
    tags: list[str] = field(default_factory=list)
    trailer_url: str | None = None
    screenshots: list[str] | None = None


class ServerService:
    def __init__(
        self,
        session: AsyncSession,
        servers: ServerListingRepository | None = None,
    ) -> None:
        self.session = session
        self.servers = servers or ServerListingRepository(session)

    async def list_servers(
        self,
        request: PageRequest,
        tags: list[str],
        featured_only: bool = False,
    ) -> Page[ServerListing]:
        servers, total = await self.servers.list_active(
            tags, featured_only, request.offset, request.limit
        )
        return Page(items=servers, page=request.page, limit=request.limit, total=total)

    async def create_server(self, owner: User, draft: ServerDraft) -> ServerListing:
        name = draft.name.strip()
        if not name:
            raise ValueError("Server name is required")

        # New listings wait for an admin to approve them.
        server = await self.servers.create(
            owner_id=owner.id,
            name=name,
            ip=normalize_optional_text(draft.ip),
            connect_url=normalize_optional_text(draft.connect_url),
            logo_url=normalize_optional_text(draft.logo_url),
            description=normalize_optional_text(draft.description),
            features=draft.features or None,
            tags=list(draft.tags),
            trailer_url=normalize_optional_text(draft.trailer_url),
            screenshots=draft.screenshots or None,
        )
        await self.session.commit()
        await self.session.refresh(server)
        return server
