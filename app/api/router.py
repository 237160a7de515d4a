from fastapi import APIRouter

from app.api.v1.routes import (
    admin,
    events,
    health,
    marketplace,
    owners,
    posts,
    profile,
    realtime,
    search,
    servers,
    support,
    uploads,
)

api_router = APIRouter()
api_router.include_router(health.router, prefix="/v1", tags=["health"])
api_router.include_router(profile.router, prefix="/v1/profile", tags=["profile"])
api_router.include_router(posts.router, prefix="/v1/posts", tags=["posts"])
api_router.include_router(servers.router, prefix="/v1/servers", tags=["servers"])
api_router.include_router(marketplace.router, prefix="/v1/marketplace", tags=["marketplace"])
api_router.include_router(events.router, prefix="/v1/events", tags=["events"])
api_router.include_router(support.router, prefix="/v1/support", tags=["support"])
api_router.include_router(admin.router, prefix="/v1/admin", tags=["admin"])
api_router.include_router(owners.router, prefix="/v1/owners", tags=["owners"])
api_router.include_router(search.router, prefix="/v1/search", tags=["search"])
api_router.include_router(uploads.router, prefix="/v1/uploads", tags=["uploads"])
api_router.include_router(realtime.router, prefix="/v1/realtime", tags=["realtime"])
