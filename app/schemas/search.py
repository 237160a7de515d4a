from pydantic import BaseModel

from app.schemas.marketplace import ListingResponse
from app.schemas.post import PostResponse
from app.schemas.server import ServerResponse


class SearchResponse(BaseModel):
    posts: list[PostResponse]
    servers: list[ServerResponse]
    marketplace: list[ListingResponse]
