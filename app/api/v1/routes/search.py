from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db_session
from app.domain.enums import SearchScope
from app.schemas.common import split_tags
from app.schemas.marketplace import ListingResponse
from app.schemas.post import to_post_response
from app.schemas.search import SearchResponse
from app.schemas.server import ServerResponse
from app.services.search_service import SearchService

router = APIRouter()


@router.get("", response_model=SearchResponse)
async def search(
    q: str = Query(default="", max_length=200),
    tags: str | None = Query(default=None),
    category: str | None = Query(default=None),
    scope: SearchScope = Query(default=SearchScope.ALL, alias="type"),
    session: AsyncSession = Depends(get_db_session),
) -> SearchResponse:
    results = await SearchService(session=session).search(
        q, split_tags(tags), category=category or None, scope=scope
    )
    return SearchResponse(
        posts=[to_post_response(view) for view in results.posts],
        servers=[ServerResponse.model_validate(server) for server in results.servers],
        marketplace=[ListingResponse.model_validate(listing) for listing in results.marketplace],
    )
