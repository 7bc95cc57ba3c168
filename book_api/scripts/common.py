"""Shared plumbing for the command-line scripts."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from book_api import models  # noqa: F401
from book_api.config import Settings
from book_api.database import Base, build_engine, build_sessionmaker


@asynccontextmanager
async def open_session(settings: Settings) -> AsyncIterator[AsyncSession]:
    """
    Yield a session against the configured database.

    Tables are created if missing. The session commits when the block exits
    normally and rolls back if it raises.
    """
    engine = build_engine(settings)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with build_sessionmaker(engine)() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
    finally:
        await engine.dispose()
