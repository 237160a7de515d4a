import asyncio
import logging

from app.core.db import close_engine, get_session_factory, init_engine
from app.core.logging_config import configure_logging
from app.infra.db.seed import seed_default_community

logger = logging.getLogger("run_seed")


async def main() -> None:
    configure_logging()
    engine = init_engine()
    try:
        async with get_session_factory()() as session:
            await seed_default_community(session)
            await session.commit()
        logger.info("Seed data loaded")
    finally:
        await close_engine(engine)


if __name__ == "__main__":
    asyncio.run(main())
