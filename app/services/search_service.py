from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.enums import SearchScope
from app.infra.db.models import MarketplaceListing, ServerListing
from app.infra.db.repositories import (
    MarketplaceRepository,
    PostCounts,
    PostRepository,
    ServerListingRepository,
)
from app.services.post_service import PostView

SECTION_LIMIT = 10


@dataclass(slots=True)
class SearchResults:
    posts: list[PostView] = field(default_factory=list)
    servers: list[ServerListing] = field(default_factory=list)
    marketplace: list[MarketplaceListing] = field(default_factory=list)


class SearchService:
    def __init__(
        self,
        session: AsyncSession,
        posts: PostRepository | None = None,
        servers: ServerListingRepository | None = None,
        listings: MarketplaceRepository | None = None,
    ) -> None:
        self.session = session
        self.posts = posts or PostRepository(session)
        self.servers = servers or ServerListingRepository(session)
        self.listings = listings or MarketplaceRepository(session)

    async def search(
        self,
        query: str,
        tags: list[str],
        category: str | None = None,
        scope: SearchScope = SearchScope.ALL,
    ) -> SearchResults:
        query = query.strip()
        results = SearchResults()

        if scope in (SearchScope.ALL, SearchScope.POSTS):
            posts = await self.posts.search(query, tags, SECTION_LIMIT)
            counts = await self.posts.get_counts([post.id for post in posts])
            results.posts = [
                PostView(post=post, counts=counts.get(post.id, PostCounts())) for post in posts
            ]

        if scope in (SearchScope.ALL, SearchScope.SERVERS):
            results.servers = await self.servers.search(query, tags, SECTION_LIMIT)

        if scope in (SearchScope.ALL, SearchScope.MARKETPLACE):
            results.marketplace = await self.listings.search(
                query, category, tags, SECTION_LIMIT
            )

        return results
