from collections.abc import AsyncIterator

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import get_settings
from app.infra.db.models import Base

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def init_engine() -> AsyncEngine:
    global _engine, _session_factory

    if _engine is not None:
        return _engine

    settings = get_settings()
    _engine = create_async_engine(
        settings.database_url,
        echo=False,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
    )
    _session_factory = async_sessionmaker(
        _engine, autoflush=False, expire_on_commit=False
    )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    if _session_factory is None:
        raise RuntimeError("Database engine is not initialized")
    return _session_factory


async def close_engine(engine: AsyncEngine) -> None:
    global _engine, _session_factory

    await engine.dispose()
    if engine is _engine:
        _engine = None
        _session_factory = None


async def get_db_session() -> AsyncIterator[AsyncSession]:
    async with get_session_factory()() as session:
        yield session


async def initialize_database(engine: AsyncEngine) -> None:
    settings = get_settings()
    if settings.db_auto_create:
        async with engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)

    if settings.db_seed_defaults and await _table_exists(engine, "users"):
        from app.infra.db.seed import seed_default_community

        async with get_session_factory()() as session:
            await seed_default_community(session)
            await session.commit()


async def _table_exists(engine: AsyncEngine, table_name: str) -> bool:
    async with engine.begin() as connection:
        return await connection.run_sync(
            lambda sync_connection: inspect(sync_connection).has_table(table_name)
        )
