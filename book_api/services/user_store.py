"""
User store — persistence operations for User records.

Every function takes the request's AsyncSession as its first argument and
only flushes; the session dependency (or the CLI) owns the commit.

Uniqueness:
  username and email are protected by unique indexes. create_user() does
  not look for an existing row first: it inserts and lets the database
  reject a collision.

Password writes:
  update_password() is the only function that produces a new hash.
  update_profile() changes everything else and never touches password_hash.
"""

import uuid

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from book_api.exceptions import DuplicateError, NotFoundError, StoreError
from book_api.logging_config import get_logger
from book_api.models.user import Role, User
from book_api.security import PasswordHasher

logger = get_logger(__name__)

# Fields update_profile() may change; username and password are excluded
PROFILE_FIELDS = frozenset({"email", "full_name", "role"})


async def _flush(db: AsyncSession) -> None:
    """Flush pending changes, translating database failures to domain errors."""
    try:
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        raise DuplicateError() from exc
    except SQLAlchemyError as exc:
        await db.rollback()
        raise StoreError() from exc


async def create_user(
    db: AsyncSession,
    hasher: PasswordHasher,
    username: str,
    email: str,
    password: str,
    full_name: str,
    role: Role = Role.USER,
) -> User:
    """
    Insert a new user with a freshly hashed password.

    Raises:
        DuplicateError: If the username or the email is already taken.
            Nothing is written in that case.
    """
    user = User(
        username=username,
        email=email,
        password_hash=await run_in_threadpool(hasher.hash, password),
        full_name=full_name,
        role=role,
    )
    db.add(user)
    await _flush(db)
    logger.info("user_created", user_id=str(user.id), username=username, role=role.value)
    return user


async def find_by_username(db: AsyncSession, username: str) -> User | None:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def find_by_id(db: AsyncSession, user_id: uuid.UUID) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def update_profile(db: AsyncSession, user: User, **fields) -> User:
    """
    Update non-secret fields of a user (email, full_name, role).

    Raises:
        ValueError: If a field outside PROFILE_FIELDS is passed.
        DuplicateError: If the new email belongs to another user.
    """
    unknown = set(fields) - PROFILE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

    for field, value in fields.items():
        setattr(user, field, value)

    await _flush(db)
    return user


async def update_password(
    db: AsyncSession,
    hasher: PasswordHasher,
    user: User,
    new_password: str,
) -> User:
    """Replace the user's password hash with a hash of ``new_password``."""
    user.password_hash = await run_in_threadpool(hasher.hash, new_password)
    await _flush(db)
    logger.info("password_changed", user_id=str(user.id))
    return user


async def delete_user(db: AsyncSession, user_id: uuid.UUID) -> None:
    """
    Hard-delete a user.

    Tokens already issued to this user stay valid until they expire.

    Raises:
        NotFoundError: If no user has this id.
    """
    user = await find_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")

    await db.delete(user)
    await _flush(db)
    logger.info("user_deleted", user_id=str(user_id))


async def list_users(db: AsyncSession) -> list[User]:
    """All users, newest first."""
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return list(result.scalars().all())


async def count_users(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(User))
    return result.scalar_one()
