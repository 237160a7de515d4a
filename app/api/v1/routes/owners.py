from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import require_owner
from app.core.db import get_db_session
from app.infra.db.models import User
from app.schemas.admin import ActivityResponse, AdminActivityResponse, AdminIdentity
from app.schemas.common import PaginationResponse
from app.services.admin_service import AdminService
from app.services.pagination import PageRequest

router = APIRouter()


@router.get("/admin-activity", response_model=AdminActivityResponse)
async def admin_activity(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=200),
    _owner: User = Depends(require_owner),
    session: AsyncSession = Depends(get_db_session),
) -> AdminActivityResponse:
    report = await AdminService(session=session).get_admin_activity(
        PageRequest(page=page, limit=limit)
    )
    return AdminActivityResponse(
        activities=[ActivityResponse.model_validate(entry) for entry in report.activities.items],
        pagination=PaginationResponse.from_page(report.activities),
        admins=[AdminIdentity.model_validate(admin) for admin in report.admins],
    )
