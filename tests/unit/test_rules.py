import pytest

from app.domain.enums import MediaKind
from app.domain.exceptions import (
    InvalidUsernameError,
    MediaTooLargeError,
    UnsupportedMediaTypeError,
)
from app.domain.rules import (
    check_media_size,
    classify_media,
    normalize_optional_text,
    normalize_username,
    storage_folder,
    total_pages,
    username_from_email,
)


@pytest.mark.parametrize("username", ["abc", "role_player-42", "A" * 30])
def test_valid_usernames_are_accepted(username: str) -> None:
    assert normalize_username(f"  {username} ") == username


@pytest.mark.parametrize("username", ["ab", "A" * 31, "has space", "emoji!", "dot.name", ""])
def test_invalid_usernames_are_rejected(username: str) -> None:
    with pytest.raises(InvalidUsernameError):
        normalize_username(username)


def test_username_from_email_strips_unsupported_characters() -> None:
    assert username_from_email("john.doe+rp@example.com") == "johndoerp"


def test_username_from_email_pads_short_local_parts() -> None:
    assert username_from_email("a@example.com") == "auser"


def test_optional_text_blank_becomes_none() -> None:
    assert normalize_optional_text("   ") is None
    assert normalize_optional_text(None) is None
    assert normalize_optional_text(" bio ") == "bio"


@pytest.mark.parametrize(
    ("content_type", "kind"),
    [
        ("image/jpeg", MediaKind.IMAGE),
        ("image/webp", MediaKind.IMAGE),
        ("video/mp4", MediaKind.VIDEO),
        ("video/quicktime", MediaKind.VIDEO),
    ],
)
def test_classify_media(content_type: str, kind: MediaKind) -> None:
    assert classify_media(content_type) == kind


def test_classify_media_rejects_unknown_types() -> None:
    with pytest.raises(UnsupportedMediaTypeError):
        classify_media("application/pdf")


def test_media_size_limits_depend_on_kind() -> None:
    check_media_size(MediaKind.VIDEO, 50 * 1024 * 1024, max_image=10 * 1024 * 1024, max_video=100 * 1024 * 1024)

    with pytest.raises(MediaTooLargeError) as exc_info:
        check_media_size(
            MediaKind.IMAGE,
            11 * 1024 * 1024,
            max_image=10 * 1024 * 1024,
            max_video=100 * 1024 * 1024,
        )
    assert str(exc_info.value) == "File size exceeds maximum of 10MB"


def test_storage_folders() -> None:
    assert storage_folder(MediaKind.IMAGE) == "images"
    assert storage_folder(MediaKind.VIDEO) == "videos"


def test_total_pages_rounds_up() -> None:
    assert total_pages(0, 20) == 0
    assert total_pages(20, 20) == 1
    assert total_pages(21, 20) == 2
