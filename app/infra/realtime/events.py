from enum import Enum


class RealtimeEvent(str, Enum):
    NOTIFICATION_CREATED = "notification.created"
    COMMENT_CREATED = "comment.created"
    LIKE_CHANGED = "like.changed"
    REACTION_CHANGED = "reaction.changed"
    POST_UPDATED = "post.updated"
    POST_DELETED = "post.deleted"
