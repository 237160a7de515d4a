from datetime import UTC, datetime, timedelta
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.enums import ServerStatus
from app.infra.db.models import (
    Comment,
    Event,
    Like,
    MarketplaceListing,
    Post,
    ServerListing,
    User,
)

ADMIN_ACCOUNT: dict[str, object] = {
    "email": "admin@roleplayrealm.com",
    "username": "admin",
    "bio": "Administrator of Roleplay Realm",
    "badges": [{"type": "admin", "verified": True}],
}

SAMPLE_USER_COUNT = 10

SAMPLE_POST_CONTENT = [
    "Just had an amazing RP session!",
    "Check out this cool clip from our server!",
    "New script release coming soon...",
    "Looking for a good FiveM server? Check us out!",
    "Amazing car meetup last night!",
]

SAMPLE_COMMENTS = ["Great post!", "Love this!", "Amazing work!", "Keep it up!", "This is awesome!"]

SAMPLE_SERVER_NAMES = [
    "Los Santos Roleplay",
    "San Andreas RP",
    "Liberty City RP",
    "Vice City Stories",
    "Paradise RP",
    "Elite Roleplay",
    "Premium RP",
    "City Life RP",
]

SAMPLE_SERVER_FEATURES = [
    ["Custom Scripts", "Active Staff", "Economy System"],
    ["Realistic Economy", "Housing System", "Job System"],
    ["Custom Vehicles", "Weapon System", "Gang System"],
    ["Business System", "Farming", "Fishing"],
]

SAMPLE_LISTINGS: list[dict[str, object]] = [
    {"title": "Advanced Police MDT", "category": "scripts", "price": Decimal("24.99")},
    {"title": "Custom Sports Car Pack", "category": "vehicles", "price": Decimal("14.50")},
    {"title": "Downtown Nightclub MLO", "category": "maps", "price": Decimal("39.00")},
    {"title": "Gang Clothing Bundle", "category": "clothing", "price": None},
]


async def seed_admin(session: AsyncSession) -> User:
    email = str(ADMIN_ACCOUNT["email"])
    admin = (await session.execute(select(User).where(User.email == email))).scalar_one_or_none()
    if admin is not None:
        return admin

    admin = User(
        email=email,
        username=str(ADMIN_ACCOUNT["username"]),
        bio=str(ADMIN_ACCOUNT["bio"]),
        badges=ADMIN_ACCOUNT["badges"],
        is_admin=True,
        has_marketplace_access=True,
    )
    session.add(admin)
    await session.flush()
    return admin


async def seed_sample_users(session: AsyncSession) -> list[User]:
    emails = [f"user{index}@example.com" for index in range(1, SAMPLE_USER_COUNT + 1)]
    existing_rows = await session.execute(select(User).where(User.email.in_(emails)))
    existing = {user.email: user for user in existing_rows.scalars().all()}

    users: list[User] = []
    for index, email in enumerate(emails, start=1):
        user = existing.get(email)
        if user is None:
            user = User(
                email=email,
                username=f"user{index}",
                bio=f"FiveM enthusiast and roleplayer #{index}",
                avatar_url=f"https://api.dicebear.com/7.x/avataaars/svg?seed=user{index}",
                badges=[{"type": "creator", "verified": True}] if index <= 3 else None,
                has_marketplace_access=index <= 2,
            )
            session.add(user)
        users.append(user)

    await session.flush()
    return users


async def seed_sample_posts(session: AsyncSession, users: list[User]) -> None:
    if await _count(session, Post) > 0:
        return

    posts: list[Post] = []
    for index in range(20):
        media = None
        if index % 3 == 0:
            media = [{"type": "image", "url": f"https://picsum.photos/800/600?random={index}"}]
        posts.append(
            Post(
                author_id=users[index % len(users)].id,
                content=SAMPLE_POST_CONTENT[index % len(SAMPLE_POST_CONTENT)],
                tags=["fivem", "roleplay", "gaming"],
                media=media,
            )
        )
    session.add_all(posts)
    await session.flush()

    for post_index, post in enumerate(posts):
        likers = users[: post_index % len(users)]
        session.add_all(Like(post_id=post.id, user_id=user.id) for user in likers)

    for post_index, post in enumerate(posts[:10]):
        for comment_index in range(post_index % 5):
            session.add(
                Comment(
                    post_id=post.id,
                    author_id=users[(post_index + comment_index + 1) % len(users)].id,
                    content=SAMPLE_COMMENTS[comment_index % len(SAMPLE_COMMENTS)],
                )
            )
    await session.flush()


async def seed_sample_servers(session: AsyncSession, users: list[User]) -> None:
    if await _count(session, ServerListing) > 0:
        return

    for index, name in enumerate(SAMPLE_SERVER_NAMES):
        session.add(
            ServerListing(
                owner_id=users[index % len(users)].id,
                name=name,
                ip=f"192.168.1.{100 + index}:30120",
                connect_url=f"fivem://connect/server{index}.example.com",
                logo_url=f"https://picsum.photos/200/200?random={index + 100}",
                description=f"Join {name} for the best FiveM roleplay experience!",
                features=SAMPLE_SERVER_FEATURES[index % len(SAMPLE_SERVER_FEATURES)],
                tags=["roleplay", "economy", "custom-scripts"],
                screenshots=[
                    f"https://picsum.photos/800/600?random={index + 200}",
                    f"https://picsum.photos/800/600?random={index + 201}",
                ],
                upvotes=(index * 37) % 100,
                is_featured=index < 3,
                status=ServerStatus.ACTIVE,
            )
        )
    await session.flush()


async def seed_sample_marketplace(session: AsyncSession, sellers: list[User]) -> None:
    if await _count(session, MarketplaceListing) > 0:
        return

    for index, item in enumerate(SAMPLE_LISTINGS):
        session.add(
            MarketplaceListing(
                owner_id=sellers[index % len(sellers)].id,
                title=str(item["title"]),
                category=str(item["category"]),
                description=f"{item['title']} ready to drop into your server.",
                price=item["price"],
                tags=["fivem", str(item["category"])],
            )
        )
    await session.flush()


async def seed_sample_events(session: AsyncSession, users: list[User]) -> None:
    if await _count(session, Event) > 0:
        return

    start = datetime.now(UTC).replace(minute=0, second=0, microsecond=0) + timedelta(days=1)
    for index in range(5):
        start_at = start + timedelta(days=index * 2)
        session.add(
            Event(
                host_id=users[index % len(users)].id,
                title=f"Community Event #{index + 1}",
                description="Join us for an exciting roleplay event!",
                start_at=start_at,
                end_at=start_at + timedelta(hours=3),
                location="Los Santos",
                capacity=50 + index * 10,
            )
        )
    await session.flush()


async def seed_default_community(session: AsyncSession) -> None:
    admin = await seed_admin(session)
    users = await seed_sample_users(session)
    sellers = [admin, *(user for user in users if user.has_marketplace_access)]

    await seed_sample_posts(session, users)
    await seed_sample_servers(session, users)
    await seed_sample_marketplace(session, sellers)
    await seed_sample_events(session, users)


async def _count(session: AsyncSession, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return int(result.scalar_one() or 0)
