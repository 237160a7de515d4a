from app.domain.enums import MediaKind


class InvalidUsernameError(ValueError):
    def __init__(self, username: str) -> None:
        super().__init__(
            "Username must be 3-30 characters and contain only letters, numbers, "
            "underscores, and hyphens"
        )
        self.username = username


class UnsupportedMediaTypeError(ValueError):
    def __init__(self, content_type: str) -> None:
        super().__init__("File type not allowed")
        self.content_type = content_type


class MediaTooLargeError(ValueError):
    def __init__(self, kind: MediaKind, max_bytes: int) -> None:
        super().__init__(f"File size exceeds maximum of {max_bytes // (1024 * 1024)}MB")
        self.kind = kind
        self.max_bytes = max_bytes
