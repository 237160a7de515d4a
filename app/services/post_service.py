import logging
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.enums import (
    ActivityAction,
    ActivityTarget,
    NotificationType,
    PostVisibility,
    ReactionEmoji,
)
from app.infra.db.models import Comment, Notification, Post, User
from app.infra.db.repositories import (
    ActivityLogRepository,
    CommentRepository,
    EngagementRepository,
    NotificationRepository,
    PostCounts,
    PostRepository,
)
from app.infra.realtime.channels import notifications_channel, post_channel
from app.infra.realtime.events import RealtimeEvent
from app.infra.realtime.publisher import NoopRealtimePublisher, RealtimePublisher, safe_publish
from app.services.errors import NotAuthorizedError, PostNotFoundError
from app.services.pagination import Page, PageRequest

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PostView:
    post: Post
    counts: PostCounts


@dataclass(slots=True)
class PostDetail:
    post: Post
    counts: PostCounts
    comments: list[Comment]


@dataclass(slots=True)
class ToggleResult:
    active: bool
    message: str


@dataclass(slots=True)
class ReactionResult:
    emoji: ReactionEmoji | None
    message: str


class PostService:
    def __init__(
        self,
        session: AsyncSession,
        posts: PostRepository | None = None,
        comments: CommentRepository | None = None,
        engagement: EngagementRepository | None = None,
        notifications: NotificationRepository | None = None,
        activity: ActivityLogRepository | None = None,
        realtime: RealtimePublisher | None = None,
    ) -> None:
        self.session = session
        self.posts = posts or PostRepository(session)
        self.comments = comments or CommentRepository(session)
        self.engagement = engagement or EngagementRepository(session)
        self.notifications = notifications or NotificationRepository(session)
        self.activity = activity or ActivityLogRepository(session)
        self.realtime = realtime or NoopRealtimePublisher()

    async def list_feed(self, request: PageRequest, tags: list[str]) -> Page[PostView]:
        posts, total = await self.posts.list_public(tags, request.offset, request.limit)
        counts = await self.posts.get_counts([post.id for post in posts])
        return Page(
            items=[PostView(post=post, counts=counts.get(post.id, PostCounts())) for post in posts],
            page=request.page,
            limit=request.limit,
            total=total,
        )

    async def create_post(
        self,
        author: User,
        content: str | None,
        media: list[dict[str, Any]] | None,
        tags: list[str],
        visibility: PostVisibility = PostVisibility.PUBLIC,
    ) -> PostView:
        cleaned_content = content.strip() if content else None
        if not cleaned_content and not media:
            raise ValueError("Post must have content or media")

        post = await self.posts.create(
            author_id=author.id,
            content=cleaned_content or None,
            media=media or None,
            tags=_clean_tags(tags),
            visibility=visibility,
        )
        await self.session.commit()
        await self.session.refresh(post)
        return PostView(post=post, counts=PostCounts())

    async def get_post(self, post_id: UUID) -> PostDetail:
        post = await self._get_post_or_raise(post_id)
        comments = await self.comments.list_by_post(post.id)
        counts = await self.posts.get_counts([post.id])
        return PostDetail(post=post, counts=counts.get(post.id, PostCounts()), comments=comments)

    async def update_post(
        self,
        actor: User,
        post_id: UUID,
        content: str | None = None,
        media: list[dict[str, Any]] | None = None,
        tags: list[str] | None = None,
        visibility: PostVisibility | None = None,
    ) -> PostView:
        post = await self._get_post_or_raise(post_id)
        self._assert_can_moderate(actor, post)

        if content is not None:
            post.content = content.strip() or None
        if media is not None:
            post.media = media or None
        if tags is not None:
            post.tags = _clean_tags(tags)
        if visibility is not None:
            post.visibility = visibility
        await self.posts.save(post)

        if actor.is_admin and post.author_id != actor.id:
            await self.activity.create(
                user_id=actor.id,
                action=ActivityAction.POST_EDITED,
                target_type=ActivityTarget.POST,
                target_id=post.id,
                description=f"Edited post by {post.author.username}",
            )
            logger.info("Admin %s edited post %s", actor.id, post.id)

        await self.session.commit()
        await self.session.refresh(post)
        counts = await self.posts.get_counts([post.id])

        await safe_publish(
            self.realtime,
            [post_channel(post.id)],
            RealtimeEvent.POST_UPDATED,
            {"post_id": str(post.id)},
        )
        return PostView(post=post, counts=counts.get(post.id, PostCounts()))

    async def delete_post(self, actor: User, post_id: UUID) -> None:
        post = await self._get_post_or_raise(post_id)
        self._assert_can_moderate(actor, post)

        if actor.is_admin and post.author_id != actor.id:
            await self.activity.create(
                user_id=actor.id,
                action=ActivityAction.POST_DELETED,
                target_type=ActivityTarget.POST,
                target_id=post.id,
                description=f"Deleted post by {post.author.username}",
            )
            logger.info("Admin %s deleted post %s", actor.id, post.id)

        await self.posts.delete(post)
        await self.session.commit()

        await safe_publish(
            self.realtime,
            [post_channel(post_id)],
            RealtimeEvent.POST_DELETED,
            {"post_id": str(post_id)},
        )

    async def list_comments(self, post_id: UUID) -> list[Comment]:
        await self._get_post_or_raise(post_id)
        return await self.comments.list_by_post(post_id)

    async def add_comment(self, actor: User, post_id: UUID, content: str) -> Comment:
        post = await self._get_post_or_raise(post_id)
        cleaned_content = content.strip()
        if not cleaned_content:
            raise ValueError("Content is required")

        comment = await self.comments.create(
            post_id=post.id, author_id=actor.id, content=cleaned_content
        )
        notification = await self._notify_author(
            post,
            actor,
            NotificationType.COMMENT,
            {"comment_id": str(comment.id)},
        )
        await self.session.commit()
        await self.session.refresh(comment)

        await safe_publish(
            self.realtime,
            [post_channel(post.id)],
            RealtimeEvent.COMMENT_CREATED,
            {
                "post_id": str(post.id),
                "comment": {
                    "id": str(comment.id),
                    "author_id": str(actor.id),
                    "username": actor.username,
                    "content": comment.content,
                },
            },
        )
        await self._emit_notification(notification)
        return comment

    async def is_liked(self, post_id: UUID, user: User | None) -> bool:
        if user is None:
            return False
        return await self.engagement.get_like(post_id, user.id) is not None

    async def like(self, actor: User, post_id: UUID) -> ToggleResult:
        post = await self._get_post_or_raise(post_id)
        if await self.engagement.get_like(post.id, actor.id) is not None:
            return ToggleResult(active=True, message="Already liked")

        await self.engagement.create_like(post.id, actor.id)
        notification = await self._notify_author(post, actor, NotificationType.LIKE, {})
        await self.session.commit()

        await self._emit_like_changed(post.id, actor.id, liked=True)
        await self._emit_notification(notification)
        return ToggleResult(active=True, message="Post liked")

    async def unlike(self, actor: User, post_id: UUID) -> ToggleResult:
        await self.engagement.delete_likes(post_id, actor.id)
        await self.session.commit()
        await self._emit_like_changed(post_id, actor.id, liked=False)
        return ToggleResult(active=False, message="Post unliked")

    async def is_disliked(self, post_id: UUID, user: User | None) -> bool:
        if user is None:
            return False
        return await self.engagement.get_dislike(post_id, user.id) is not None

    async def dislike(self, actor: User, post_id: UUID) -> ToggleResult:
        post = await self._get_post_or_raise(post_id)
        if await self.engagement.get_dislike(post.id, actor.id) is not None:
            return ToggleResult(active=True, message="Already disliked")

        # A dislike and an emoji reaction are mutually exclusive.
        await self.engagement.delete_reactions(post.id, actor.id)
        await self.engagement.create_dislike(post.id, actor.id)
        await self.session.commit()
        return ToggleResult(active=True, message="Post disliked")

    async def remove_dislike(self, actor: User, post_id: UUID) -> ToggleResult:
        await self.engagement.delete_dislikes(post_id, actor.id)
        await self.session.commit()
        return ToggleResult(active=False, message="Dislike removed")

    async def get_reaction(self, post_id: UUID, user: User | None) -> ReactionEmoji | None:
        if user is None:
            return None
        reaction = await self.engagement.get_reaction(post_id, user.id)
        return reaction.emoji if reaction is not None else None

    async def react(self, actor: User, post_id: UUID, emoji: ReactionEmoji) -> ReactionResult:
        post = await self._get_post_or_raise(post_id)
        await self.engagement.delete_dislikes(post.id, actor.id)

        existing = await self.engagement.get_reaction(post.id, actor.id)
        if existing is not None:
            if existing.emoji == emoji:
                await self.session.commit()
                return ReactionResult(emoji=emoji, message="Already reacted with this emoji")
            await self.engagement.update_reaction(existing, emoji)
            await self.session.commit()
            await self._emit_reaction_changed(post.id, actor.id, emoji)
            return ReactionResult(emoji=emoji, message="Reaction updated")

        await self.engagement.create_reaction(post.id, actor.id, emoji)
        notification = await self._notify_author(
            post, actor, NotificationType.REACTION, {"emoji": emoji.value}
        )
        await self.session.commit()

        await self._emit_reaction_changed(post.id, actor.id, emoji)
        await self._emit_notification(notification)
        return ReactionResult(emoji=emoji, message="Reaction added")

    async def remove_reaction(self, actor: User, post_id: UUID) -> ReactionResult:
        await self.engagement.delete_reactions(post_id, actor.id)
        await self.session.commit()
        await self._emit_reaction_changed(post_id, actor.id, None)
        return ReactionResult(emoji=None, message="Reaction removed")

    async def _get_post_or_raise(self, post_id: UUID) -> Post:
        post = await self.posts.get_by_id(post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        return post

    @staticmethod
    def _assert_can_moderate(actor: User, post: Post) -> None:
        if post.author_id != actor.id and not actor.is_admin:
            raise NotAuthorizedError()

    async def _notify_author(
        self,
        post: Post,
        actor: User,
        notification_type: NotificationType,
        extra: dict[str, Any],
    ) -> Notification | None:
        if post.author_id == actor.id:
            return None

        data = {
            "post_id": str(post.id),
            "user_id": str(actor.id),
            "username": actor.username,
            **extra,
        }
        return await self.notifications.create(post.author_id, notification_type, data)

    async def _emit_notification(self, notification: Notification | None) -> None:
        if notification is None:
            return
        await safe_publish(
            self.realtime,
            [notifications_channel(notification.user_id)],
            RealtimeEvent.NOTIFICATION_CREATED,
            {
                "id": str(notification.id),
                "type": notification.type.value,
                "data": notification.data,
            },
        )

    async def _emit_like_changed(self, post_id: UUID, user_id: UUID, liked: bool) -> None:
        await safe_publish(
            self.realtime,
            [post_channel(post_id)],
            RealtimeEvent.LIKE_CHANGED,
            {"post_id": str(post_id), "user_id": str(user_id), "liked": liked},
        )

    async def _emit_reaction_changed(
        self, post_id: UUID, user_id: UUID, emoji: ReactionEmoji | None
    ) -> None:
        await safe_publish(
            self.realtime,
            [post_channel(post_id)],
            RealtimeEvent.REACTION_CHANGED,
            {
                "post_id": str(post_id),
                "user_id": str(user_id),
                "emoji": emoji.value if emoji is not None else None,
            },
        )


def _clean_tags(tags: list[str] | None) -> list[str]:
    if not tags:
        return []
    return [tag.strip() for tag in dict.fromkeys(tags) if tag and tag.strip()]
