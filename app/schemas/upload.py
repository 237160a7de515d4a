from pydantic import BaseModel, Field

from app.domain.enums import MediaKind


class UploadUrlRequest(BaseModel):
    file_name: str = Field(min_length=1, max_length=255)
    file_type: str = Field(min_length=1, max_length=100)
    file_size: int = Field(gt=0)
    bucket: str = Field(default="uploads", pattern=r"^[a-z0-9][a-z0-9_-]{0,62}$")


class UploadUrlResponse(BaseModel):
    path: str
    bucket: str
    kind: MediaKind
    public_url: str
