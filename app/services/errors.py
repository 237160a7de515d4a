from uuid import UUID


class UserNotFoundError(LookupError):
    def __init__(self, user_id: UUID) -> None:
        super().__init__(f"User '{user_id}' not found")
        self.user_id = user_id


class PostNotFoundError(LookupError):
    def __init__(self, post_id: UUID) -> None:
        super().__init__("Post not found")
        self.post_id = post_id


class ServerListingNotFoundError(LookupError):
    def __init__(self, server_id: UUID) -> None:
        super().__init__("Server not found")
        self.server_id = server_id


class ListingNotFoundError(LookupError):
    def __init__(self, listing_id: UUID) -> None:
        super().__init__("Listing not found")
        self.listing_id = listing_id


class TicketNotFoundError(LookupError):
    def __init__(self, ticket_id: UUID) -> None:
        super().__init__("Ticket not found")
        self.ticket_id = ticket_id


class NotAuthorizedError(PermissionError):
    """The caller is authenticated but may not touch this resource."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(detail)


class AdminRequiredError(PermissionError):
    def __init__(self) -> None:
        super().__init__("Admin access required")


class MarketplaceAccessRequiredError(PermissionError):
    def __init__(self) -> None:
        super().__init__(
            "Marketplace access required. Please submit a support ticket to request access."
        )


class UsernameTakenError(ValueError):
    def __init__(self, username: str) -> None:
        super().__init__("Username already taken")
        self.username = username


class RateLimitExceededError(Exception):
    """A throttled action was rejected; carries what the 429 response needs."""

    def __init__(self, action: str, message: str, retry_after: int, reset_at: int) -> None:
        super().__init__(message)
        self.action = action
        self.message = message
        self.retry_after = retry_after
        self.reset_at = reset_at
