import time
from collections.abc import Callable
from dataclasses import dataclass

from app.core.config import Settings, get_settings
from app.domain.enums import MediaKind
from app.domain.rules import check_media_size, classify_media, storage_folder

DEFAULT_BUCKET = "uploads"


@dataclass(slots=True)
class UploadTarget:
    path: str
    bucket: str
    kind: MediaKind
    public_url: str


def public_url(base_url: str, bucket: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/storage/v1/object/public/{bucket}/{path}"


class UploadService:
    """Validates client uploads and hands back where the object should live."""

    def __init__(
        self,
        settings: Settings | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.settings = settings or get_settings()
        self.clock = clock

    def prepare_upload(
        self,
        file_name: str,
        content_type: str,
        size_bytes: int,
        bucket: str = DEFAULT_BUCKET,
    ) -> UploadTarget:
        cleaned_name = file_name.strip().replace("/", "_")
        if not cleaned_name or size_bytes <= 0:
            raise ValueError("Missing required fields")

        kind = classify_media(content_type)
        check_media_size(
            kind,
            size_bytes,
            max_image=self.settings.upload_max_image_bytes,
            max_video=self.settings.upload_max_video_bytes,
        )

        path = f"{storage_folder(kind)}/{int(self.clock() * 1000)}-{cleaned_name}"
        return UploadTarget(
            path=path,
            bucket=bucket,
            kind=kind,
            public_url=public_url(self.settings.storage_public_base_url, bucket, path),
        )
