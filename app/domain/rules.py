import math
import re

from app.domain.enums import MediaKind
from app.domain.exceptions import (
    InvalidUsernameError,
    MediaTooLargeError,
    UnsupportedMediaTypeError,
)

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{3,30}$")
BIO_MAX_LENGTH = 500

IMAGE_CONTENT_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")
VIDEO_CONTENT_TYPES = ("video/mp4", "video/webm", "video/quicktime")


def normalize_username(raw: str) -> str:
    username = raw.strip()
    if not USERNAME_PATTERN.fullmatch(username):
        raise InvalidUsernameError(username)
    return username


def username_from_email(email: str) -> str:
    """Derive a default handle from the email local part."""
    local_part = email.split("@", 1)[0]
    cleaned = re.sub(r"[^a-zA-Z0-9_-]", "", local_part)[:30]
    if len(cleaned) < 3:
        cleaned = f"{cleaned}user"[:30]
    return cleaned


def normalize_optional_text(raw: str | None) -> str | None:
    if raw is None:
        return None
    stripped = raw.strip()
    return stripped or None


def classify_media(content_type: str) -> MediaKind:
    if content_type in IMAGE_CONTENT_TYPES:
        return MediaKind.IMAGE
    if content_type in VIDEO_CONTENT_TYPES:
        return MediaKind.VIDEO
    raise UnsupportedMediaTypeError(content_type)


def check_media_size(kind: MediaKind, size_bytes: int, max_image: int, max_video: int) -> None:
    limit = max_image if kind == MediaKind.IMAGE else max_video
    if size_bytes > limit:
        raise MediaTooLargeError(kind, limit)


def storage_folder(kind: MediaKind) -> str:
    return "images" if kind == MediaKind.IMAGE else "videos"


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return math.ceil(total / limit)
