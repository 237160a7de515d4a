from dataclasses import dataclass
from uuid import uuid4

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.rules import (
    BIO_MAX_LENGTH,
    normalize_optional_text,
    normalize_username,
    username_from_email,
)
from app.infra.db.models import User
from app.infra.db.repositories import UserRepository, UserStats
from app.services.errors import UsernameTakenError


@dataclass(slots=True)
class ProfileResult:
    user: User
    stats: UserStats


def _suffixed(username: str) -> str:
    return f"{username[:21]}-{uuid4().hex[:8]}"


class ProfileService:
    def __init__(self, session: AsyncSession, users: UserRepository | None = None) -> None:
        self.session = session
        self.users = users or UserRepository(session)

    async def ensure_user(self, email: str) -> User:
        """Return the local row for an identity, creating it on first sight."""
        normalized_email = email.strip().lower()
        user = await self.users.get_by_email(normalized_email)
        if user is not None:
            return user

        username = username_from_email(normalized_email)
        if await self.users.get_by_username(username) is not None:
            username = _suffixed(username)

        try:
            return await self._create_user(normalized_email, username)
        except IntegrityError:
            # Parallel first requests race on the email or the handle.
            await self.session.rollback()

        user = await self.users.get_by_email(normalized_email)
        if user is not None:
            return user
        return await self._create_user(normalized_email, _suffixed(username))

    async def _create_user(self, email: str, username: str) -> User:
        user = await self.users.create(email=email, username=username)
        await self.session.commit()
        return user

    async def get_profile(self, user: User) -> ProfileResult:
        stats = await self.users.get_stats(user.id)
        return ProfileResult(user=user, stats=stats)

    async def update_profile(
        self,
        user: User,
        username: str | None = None,
        bio: str | None = None,
        avatar_url: str | None = None,
        banner_url: str | None = None,
    ) -> ProfileResult:
        if username is not None:
            cleaned_username = normalize_username(username)
            existing = await self.users.get_by_username(cleaned_username)
            if existing is not None and existing.id != user.id:
                raise UsernameTakenError(cleaned_username)
            user.username = cleaned_username

        if bio is not None:
            if len(bio) > BIO_MAX_LENGTH:
                raise ValueError(f"Bio must be {BIO_MAX_LENGTH} characters or less")
            user.bio = normalize_optional_text(bio)

        if avatar_url is not None:
            user.avatar_url = normalize_optional_text(avatar_url)
        if banner_url is not None:
            user.banner_url = normalize_optional_text(banner_url)

        await self.users.save(user)
        await self.session.commit()
        await self.session.refresh(user)
        return await self.get_profile(user)
