"""Async engine, session factory and schema bootstrap.

Sessions are created with ``expire_on_commit=False`` so read models can be
built from rows after their commit. Services own their transactions: each
mutation commits explicitly and rolls back on a guarded failure.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from workhub.core.config import get_settings

settings = get_settings()


def _engine_options(url: str) -> dict:
    # SQLite pools reject sizing arguments
    if url.startswith("sqlite"):
        return {}
    return {"pool_size": 20, "max_overflow": 10, "pool_pre_ping": True}


engine = create_async_engine(
    settings.database_url,
    echo=False,
    **_engine_options(settings.database_url),
)

async_session_factory = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """One session per request; closing it discards anything left uncommitted."""
    async with async_session_factory() as session:
        yield session


async def init_db() -> None:
    import workhub.models  # noqa: F401  (populate metadata)

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def dispose_db() -> None:
    await engine.dispose()
