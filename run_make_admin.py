import argparse
import asyncio
import logging

from app.core.db import close_engine, get_session_factory, init_engine
from app.core.logging_config import configure_logging
from app.domain.rules import username_from_email
from app.infra.db.repositories import UserRepository

logger = logging.getLogger("run_make_admin")


async def make_admin(email: str) -> None:
    normalized_email = email.strip().lower()
    engine = init_engine()
    try:
        async with get_session_factory()() as session:
            users = UserRepository(session)
            user = await users.get_by_email(normalized_email)
            if user is None:
                # The account may not have signed in yet; create it up front.
                user = await users.create(
                    email=normalized_email,
                    username=username_from_email(normalized_email),
                    is_admin=True,
                )
                logger.info("Created admin user %s (%s)", user.username, user.email)
            else:
                user.is_admin = True
                await users.save(user)
                logger.info("User %s (%s) is now an admin", user.username, user.email)
            await session.commit()
    finally:
        await close_engine(engine)


def main() -> None:
    parser = argparse.ArgumentParser(description="Grant admin rights to a user by email.")
    parser.add_argument("email")
    args = parser.parse_args()

    configure_logging()
    asyncio.run(make_admin(args.email))


if __name__ == "__main__":
    main()
