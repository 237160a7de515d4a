from enum import Enum


class PostVisibility(str, Enum):
    PUBLIC = "public"
    FOLLOWERS = "followers"
    PRIVATE = "private"


class ReactionEmoji(str, Enum):
    LIKE = "like"
    LOVE = "love"
    LAUGH = "laugh"
    WOW = "wow"
    SAD = "sad"
    ANGRY = "angry"


class ServerStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class ListingStatus(str, Enum):
    ACTIVE = "active"
    SOLD = "sold"
    HIDDEN = "hidden"


class TicketType(str, Enum):
    FEATURE_REQUEST = "feature_request"
    MARKETPLACE_ACCESS = "marketplace_access"
    OTHER = "other"


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class NotificationType(str, Enum):
    LIKE = "like"
    COMMENT = "comment"
    REACTION = "reaction"


class MediaKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class ActivityAction(str, Enum):
    POST_EDITED = "post_edited"
    POST_DELETED = "post_deleted"
    MARKETPLACE_LISTING_EDITED = "marketplace_listing_edited"
    MARKETPLACE_LISTING_DELETED = "marketplace_listing_deleted"
    MARKETPLACE_ACCESS_GRANTED = "marketplace_access_granted"
    MARKETPLACE_ACCESS_REVOKED = "marketplace_access_revoked"
    SERVER_FEATURED = "server_featured"
    SERVER_UNFEATURED = "server_unfeatured"
    SERVER_STATUS_CHANGED = "server_status_changed"
    TICKET_RESPONDED = "ticket_responded"
    USER_BANNED = "user_banned"
    USER_UNBANNED = "user_unbanned"


class ActivityTarget(str, Enum):
    POST = "post"
    MARKETPLACE_LISTING = "marketplace_listing"
    SERVER_LISTING = "server_listing"
    TICKET = "ticket"
    USER = "user"


# Actions surfaced to the owner in the admin oversight feed.
OWNER_AUDITED_ACTIONS: tuple[ActivityAction, ...] = (
    ActivityAction.POST_DELETED,
    ActivityAction.POST_EDITED,
    ActivityAction.MARKETPLACE_LISTING_DELETED,
    ActivityAction.MARKETPLACE_LISTING_EDITED,
    ActivityAction.MARKETPLACE_ACCESS_GRANTED,
    ActivityAction.MARKETPLACE_ACCESS_REVOKED,
    ActivityAction.SERVER_FEATURED,
    ActivityAction.SERVER_UNFEATURED,
    ActivityAction.SERVER_STATUS_CHANGED,
    ActivityAction.TICKET_RESPONDED,
    ActivityAction.USER_BANNED,
    ActivityAction.USER_UNBANNED,
)


class SearchScope(str, Enum):
    ALL = "all"
    POSTS = "posts"
    SERVERS = "servers"
    MARKETPLACE = "marketplace"
