from fastapi import APIRouter, Depends, HTTPException, status

from app.api.deps import get_current_user
from app.infra.db.models import User
from app.schemas.upload import UploadUrlRequest, UploadUrlResponse
from app.services.upload_service import UploadService

router = APIRouter()


def get_upload_service() -> UploadService:
    return UploadService()


@router.post("/url", response_model=UploadUrlResponse)
async def create_upload_url(
    payload: UploadUrlRequest,
    _user: User = Depends(get_current_user),
    service: UploadService = Depends(get_upload_service),
) -> UploadUrlResponse:
    try:
        target = service.prepare_upload(
            file_name=payload.file_name,
            content_type=payload.file_type,
            size_bytes=payload.file_size,
            bucket=payload.bucket,
        )
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return UploadUrlResponse(
        path=target.path,
        bucket=target.bucket,
        kind=target.kind,
        public_url=target.public_url,
    )
