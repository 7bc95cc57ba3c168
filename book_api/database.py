"""
Database engine, session management, and base model class.

This module sets up SQLAlchemy 2.0 with async support. Key components:

  - build_engine(): Creates the async engine from the Settings object
  - build_sessionmaker(): Factory for async sessions bound to an engine
  - Base: Declarative base class that all ORM models inherit from
  - get_db(): FastAPI dependency that provides a session per request

The engine and session factory are created once by create_app() and stored
on ``app.state``; get_db() reads them from the incoming request, so tests
can build an application against an in-memory database without overriding
anything.

Session lifecycle:
  Each API request gets its own session via get_db(). The session commits
  on success and rolls back on any exception, so a failed request never
  leaves a partial write behind.
"""

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from book_api.config import Settings


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine.

    echo=True in debug mode logs all SQL statements. Only password hashes
    ever appear in INSERT/UPDATE statements, never plaintext.
    """
    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False prevents lazy-load errors after commit in
    # async context
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


async def get_db(request: Request):
    """
    FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/books")
        async def list_books(db: AsyncSession = Depends(get_db)):
            ...
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.sessionmaker
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
