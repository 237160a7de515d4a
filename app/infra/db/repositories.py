from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import Select, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.enums import (
    ActivityAction,
    ActivityTarget,
    ListingStatus,
    NotificationType,
    PostVisibility,
    ReactionEmoji,
    ServerStatus,
    TicketStatus,
    TicketType,
)
from app.infra.db.models import (
    ActivityLog,
    Comment,
    Dislike,
    Event,
    EventAttendee,
    Follow,
    Like,
    MarketplaceListing,
    Notification,
    Post,
    Reaction,
    ServerListing,
    Ticket,
    User,
)


@dataclass(slots=True)
class UserStats:
    posts: int = 0
    servers: int = 0
    followers: int = 0
    following: int = 0


@dataclass(slots=True)
class PostCounts:
    likes: int = 0
    comments: int = 0
    reactions: int = 0
    dislikes: int = 0


def _contains(column, needle: str):
    return column.ilike(f"%{needle}%")


async def _count_grouped(
    session: AsyncSession,
    key_column,
    id_column,
    ids: Sequence[UUID],
) -> dict[UUID, int]:
    if not ids:
        return {}
    stmt = (
        select(key_column, func.count(id_column))
        .where(key_column.in_(list(ids)))
        .group_by(key_column)
    )
    result = await session.execute(stmt)
    return {row[0]: int(row[1]) for row in result.all()}


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        stmt: Select[tuple[User]] = select(User).where(User.email == email).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        stmt: Select[tuple[User]] = (
            select(User).where(func.lower(User.username) == username.lower()).limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, email: str, username: str, is_admin: bool = False) -> User:
        user = User(email=email, username=username, is_admin=is_admin)
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def save(self, user: User) -> None:
        await self.session.flush()

    async def get_stats(self, user_id: UUID) -> UserStats:
        posts = await self.session.execute(
            select(func.count(Post.id)).where(Post.author_id == user_id)
        )
        servers = await self.session.execute(
            select(func.count(ServerListing.id)).where(ServerListing.owner_id == user_id)
        )
        followers = await self.session.execute(
            select(func.count(Follow.id)).where(Follow.following_id == user_id)
        )
        following = await self.session.execute(
            select(func.count(Follow.id)).where(Follow.follower_id == user_id)
        )
        return UserStats(
            posts=int(posts.scalar_one() or 0),
            servers=int(servers.scalar_one() or 0),
            followers=int(followers.scalar_one() or 0),
            following=int(following.scalar_one() or 0),
        )

    async def list_admins(self) -> list[User]:
        stmt: Select[tuple[User]] = (
            select(User).where(User.is_admin.is_(True)).order_by(User.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def search_with_listing_counts(
        self,
        search: str,
        offset: int,
        limit: int,
    ) -> tuple[list[tuple[User, int]], int]:
        filters = []
        if search:
            filters.append(or_(_contains(User.email, search), _contains(User.username, search)))

        listing_count = (
            select(func.count(MarketplaceListing.id))
            .where(MarketplaceListing.owner_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        stmt = (
            select(User, listing_count)
            .where(*filters)
            .order_by(User.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        rows = (await self.session.execute(stmt)).all()
        total = await self.session.execute(select(func.count(User.id)).where(*filters))
        return [(row[0], int(row[1] or 0)) for row in rows], int(total.scalar_one() or 0)


class PostRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, post_id: UUID) -> Post | None:
        return await self.session.get(Post, post_id)

    async def list_public(
        self, tags: Sequence[str], offset: int, limit: int
    ) -> tuple[list[Post], int]:
        filters = [Post.visibility == PostVisibility.PUBLIC]
        if tags:
            filters.append(Post.tags.overlap(list(tags)))

        stmt: Select[tuple[Post]] = (
            select(Post)
            .where(*filters)
            .order_by(Post.created_at.desc(), Post.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        total = await self.session.execute(select(func.count(Post.id)).where(*filters))
        return list(result.scalars().all()), int(total.scalar_one() or 0)

    async def search(self, query: str, tags: Sequence[str], limit: int) -> list[Post]:
        filters = [Post.visibility == PostVisibility.PUBLIC]
        if query:
            filters.append(or_(_contains(Post.content, query), Post.tags.contains([query])))
        if tags:
            filters.append(Post.tags.overlap(list(tags)))

        stmt: Select[tuple[Post]] = (
            select(Post).where(*filters).order_by(Post.created_at.desc()).limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(
        self,
        author_id: UUID,
        content: str | None,
        media: list | None,
        tags: list[str],
        visibility: PostVisibility,
    ) -> Post:
        post = Post(
            author_id=author_id,
            content=content,
            media=media,
            tags=tags,
            visibility=visibility,
        )
        self.session.add(post)
        await self.session.flush()
        await self.session.refresh(post)
        return post

    async def save(self, post: Post) -> None:
        await self.session.flush()

    async def delete(self, post: Post) -> None:
        await self.session.delete(post)
        await self.session.flush()

    async def get_counts(self, post_ids: Sequence[UUID]) -> dict[UUID, PostCounts]:
        likes = await _count_grouped(self.session, Like.post_id, Like.id, post_ids)
        comments = await _count_grouped(self.session, Comment.post_id, Comment.id, post_ids)
        reactions = await _count_grouped(self.session, Reaction.post_id, Reaction.id, post_ids)
        dislikes = await _count_grouped(self.session, Dislike.post_id, Dislike.id, post_ids)
        return {
            post_id: PostCounts(
                likes=likes.get(post_id, 0),
                comments=comments.get(post_id, 0),
                reactions=reactions.get(post_id, 0),
                dislikes=dislikes.get(post_id, 0),
            )
            for post_id in post_ids
        }


class CommentRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_by_post(self, post_id: UUID) -> list[Comment]:
        stmt: Select[tuple[Comment]] = (
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, post_id: UUID, author_id: UUID, content: str) -> Comment:
        comment = Comment(post_id=post_id, author_id=author_id, content=content)
        self.session.add(comment)
        await self.session.flush()
        await self.session.refresh(comment)
        return comment


class EngagementRepository:
    """Likes, dislikes and emoji reactions; each is unique per (post, user)."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_like(self, post_id: UUID, user_id: UUID) -> Like | None:
        stmt = select(Like).where(Like.post_id == post_id, Like.user_id == user_id)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def create_like(self, post_id: UUID, user_id: UUID) -> Like:
        like = Like(post_id=post_id, user_id=user_id)
        self.session.add(like)
        await self.session.flush()
        return like

    async def delete_likes(self, post_id: UUID, user_id: UUID) -> None:
        await self.session.execute(
            delete(Like).where(Like.post_id == post_id, Like.user_id == user_id)
        )

    async def get_dislike(self, post_id: UUID, user_id: UUID) -> Dislike | None:
        stmt = select(Dislike).where(Dislike.post_id == post_id, Dislike.user_id == user_id)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def create_dislike(self, post_id: UUID, user_id: UUID) -> Dislike:
        dislike = Dislike(post_id=post_id, user_id=user_id)
        self.session.add(dislike)
        await self.session.flush()
        return dislike

    async def delete_dislikes(self, post_id: UUID, user_id: UUID) -> None:
        await self.session.execute(
            delete(Dislike).where(Dislike.post_id == post_id, Dislike.user_id == user_id)
        )

    async def get_reaction(self, post_id: UUID, user_id: UUID) -> Reaction | None:
        stmt = select(Reaction).where(Reaction.post_id == post_id, Reaction.user_id == user_id)
        return (await self.session.execute(stmt)).scalar_one_or_none()

    async def create_reaction(
        self, post_id: UUID, user_id: UUID, emoji: ReactionEmoji
    ) -> Reaction:
        reaction = Reaction(post_id=post_id, user_id=user_id, emoji=emoji)
        self.session.add(reaction)
        await self.session.flush()
        return reaction

    async def update_reaction(self, reaction: Reaction, emoji: ReactionEmoji) -> None:
        reaction.emoji = emoji
        await self.session.flush()

    async def delete_reactions(self, post_id: UUID, user_id: UUID) -> None:
        await self.session.execute(
            delete(Reaction).where(Reaction.post_id == post_id, Reaction.user_id == user_id)
        )


class NotificationRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self, user_id: UUID, notification_type: NotificationType, data: dict
    ) -> Notification:
        notification = Notification(user_id=user_id, type=notification_type, data=data)
        self.session.add(notification)
        await self.session.flush()
        await self.session.refresh(notification)
        return notification


class ServerListingRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, server_id: UUID) -> ServerListing | None:
        return await self.session.get(ServerListing, server_id)

    async def list_active(
        self,
        tags: Sequence[str],
        featured_only: bool,
        offset: int,
        limit: int,
    ) -> tuple[list[ServerListing], int]:
        filters = [ServerListing.status == ServerStatus.ACTIVE]
        if featured_only:
            filters.append(ServerListing.is_featured.is_(True))
        if tags:
            filters.append(ServerListing.tags.overlap(list(tags)))

        ordering = [ServerListing.upvotes.desc(), ServerListing.created_at.desc()]
        if featured_only:
            ordering.insert(0, ServerListing.is_featured.desc())

        stmt: Select[tuple[ServerListing]] = (
            select(ServerListing).where(*filters).order_by(*ordering).offset(offset).limit(limit)
        )
        result = await self.session.execute(stmt)
        total = await self.session.execute(
            select(func.count(ServerListing.id)).where(*filters)
        )
        return list(result.scalars().all()), int(total.scalar_one() or 0)

    async def list_for_moderation(
        self,
        status_filter: ServerStatus | None,
        offset: int,
        limit: int,
    ) -> tuple[list[ServerListing], int]:
        filters = []
        if status_filter is not None:
            filters.append(ServerListing.status == status_filter)

        stmt: Select[tuple[ServerListing]] = (
            select(ServerListing)
            .where(*filters)
            .order_by(ServerListing.status.asc(), ServerListing.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        total = await self.session.execute(
            select(func.count(ServerListing.id)).where(*filters)
        )
        return list(result.scalars().all()), int(total.scalar_one() or 0)

    async def search(self, query: str, tags: Sequence[str], limit: int) -> list[ServerListing]:
        filters = [ServerListing.status == ServerStatus.ACTIVE]
        if query:
            filters.append(
                or_(
                    _contains(ServerListing.name, query),
                    _contains(ServerListing.description, query),
                    ServerListing.tags.contains([query]),
                )
            )
        if tags:
            filters.append(ServerListing.tags.overlap(list(tags)))

        stmt: Select[tuple[ServerListing]] = (
            select(ServerListing)
            .where(*filters)
            .order_by(ServerListing.upvotes.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, owner_id: UUID, **fields) -> ServerListing:
        server = ServerListing(owner_id=owner_id, status=ServerStatus.PENDING, **fields)
        self.session.add(server)
        await self.session.flush()
        await self.session.refresh(server)
        return server

    async def save(self, server: ServerListing) -> None:
        await self.session.flush()


class MarketplaceRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, listing_id: UUID) -> MarketplaceListing | None:
        return await self.session.get(MarketplaceListing, listing_id)

    async def list_active(
        self,
        category: str | None,
        tags: Sequence[str],
        offset: int,
        limit: int,
    ) -> tuple[list[MarketplaceListing], int]:
        filters = [MarketplaceListing.status == ListingStatus.ACTIVE]
        if category:
            filters.append(MarketplaceListing.category == category)
        if tags:
            filters.append(MarketplaceListing.tags.overlap(list(tags)))

        stmt: Select[tuple[MarketplaceListing]] = (
            select(MarketplaceListing)
            .where(*filters)
            .order_by(MarketplaceListing.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        total = await self.session.execute(
            select(func.count(MarketplaceListing.id)).where(*filters)
        )
        return list(result.scalars().all()), int(total.scalar_one() or 0)

    async def search(
        self,
        query: str,
        category: str | None,
        tags: Sequence[str],
        limit: int,
    ) -> list[MarketplaceListing]:
        filters = [MarketplaceListing.status == ListingStatus.ACTIVE]
        if query:
            filters.append(
                or_(
                    _contains(MarketplaceListing.title, query),
                    _contains(MarketplaceListing.description, query),
                    MarketplaceListing.tags.contains([query]),
                )
            )
        if category:
            filters.append(MarketplaceListing.category == category)
        if tags:
            filters.append(MarketplaceListing.tags.overlap(list(tags)))

        stmt: Select[tuple[MarketplaceListing]] = (
            select(MarketplaceListing)
            .where(*filters)
            .order_by(MarketplaceListing.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create(
        self,
        owner_id: UUID,
        title: str,
        category: str,
        description: str | None = None,
        price: Decimal | None = None,
        media: list | None = None,
        tags: list[str] | None = None,
        tebex_link: str | None = None,
    ) -> MarketplaceListing:
        listing = MarketplaceListing(
            owner_id=owner_id,
            title=title,
            category=category,
            description=description,
            price=price,
            media=media,
            tags=tags or [],
            tebex_link=tebex_link,
        )
        self.session.add(listing)
        await self.session.flush()
        await self.session.refresh(listing)
        return listing

    async def save(self, listing: MarketplaceListing) -> None:
        await self.session.flush()

    async def delete(self, listing: MarketplaceListing) -> None:
        await self.session.delete(listing)
        await self.session.flush()


class EventRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list(
        self,
        starting_after: datetime | None,
        offset: int,
        limit: int,
    ) -> tuple[list[Event], int]:
        filters = []
        if starting_after is not None:
            filters.append(Event.start_at >= starting_after)

        stmt: Select[tuple[Event]] = (
            select(Event)
            .where(*filters)
            .order_by(Event.start_at.asc(), Event.id.asc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        total = await self.session.execute(select(func.count(Event.id)).where(*filters))
        return list(result.scalars().all()), int(total.scalar_one() or 0)

    async def create(self, host_id: UUID, **fields) -> Event:
        event = Event(host_id=host_id, **fields)
        self.session.add(event)
        await self.session.flush()
        await self.session.refresh(event)
        return event

    async def get_attendee_counts(self, event_ids: Sequence[UUID]) -> dict[UUID, int]:
        return await _count_grouped(
            self.session, EventAttendee.event_id, EventAttendee.id, event_ids
        )


class TicketRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, ticket_id: UUID) -> Ticket | None:
        return await self.session.get(Ticket, ticket_id)

    async def list(
        self,
        user_id: UUID | None,
        status_filter: TicketStatus | None,
        offset: int,
        limit: int,
    ) -> tuple[list[Ticket], int]:
        filters = []
        if user_id is not None:
            filters.append(Ticket.user_id == user_id)
        if status_filter is not None:
            filters.append(Ticket.status == status_filter)

        stmt: Select[tuple[Ticket]] = (
            select(Ticket)
            .where(*filters)
            .order_by(Ticket.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        total = await self.session.execute(select(func.count(Ticket.id)).where(*filters))
        return list(result.scalars().all()), int(total.scalar_one() or 0)

    async def create(
        self,
        user_id: UUID,
        ticket_type: TicketType,
        subject: str,
        description: str,
    ) -> Ticket:
        ticket = Ticket(
            user_id=user_id,
            type=ticket_type,
            subject=subject,
            description=description,
            status=TicketStatus.OPEN,
            responses=[],
        )
        self.session.add(ticket)
        await self.session.flush()
        await self.session.refresh(ticket)
        return ticket

    async def save(self, ticket: Ticket) -> None:
        await self.session.flush()


class ActivityLogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(
        self,
        user_id: UUID,
        action: ActivityAction,
        target_type: ActivityTarget,
        target_id: UUID,
        description: str,
    ) -> ActivityLog:
        entry = ActivityLog(
            user_id=user_id,
            action=action,
            target_type=target_type,
            target_id=str(target_id),
            metadata_json={"description": description},
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def list_for_users(
        self,
        user_ids: Sequence[UUID],
        actions: Sequence[ActivityAction],
        offset: int,
        limit: int,
    ) -> tuple[list[ActivityLog], int]:
        if not user_ids:
            return [], 0

        filters = [ActivityLog.user_id.in_(list(user_ids)), ActivityLog.action.in_(list(actions))]
        stmt: Select[tuple[ActivityLog]] = (
            select(ActivityLog)
            .where(*filters)
            .order_by(ActivityLog.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        total = await self.session.execute(select(func.count(ActivityLog.id)).where(*filters))
        return list(result.scalars().all()), int(total.scalar_one() or 0)
