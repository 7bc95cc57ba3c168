"""
Authentication service — register, login, profile and password change.

This module contains the account logic, separated from HTTP concerns. The
router calls these functions and translates the results into responses, so
the logic can be tested without spinning up a web server.

Register flow:
  1. Insert the user with role forced to USER (admins are never
     self-registered); the unique indexes reject duplicate usernames/emails
  2. Issue a token so the user is immediately logged in

Login flow:
  1. Look up user by username
  2. Verify password against stored hash
  3. Issue a token

Security notes:
  - Login returns the same error for "wrong password" and "unknown
    username" to prevent user enumeration
  - Tokens are stateless; changing a password does not revoke tokens
    issued before the change
"""

import uuid

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from book_api.exceptions import AuthenticationError, NotFoundError, ValidationError
from book_api.logging_config import get_logger
from book_api.models.user import Role, User
from book_api.security import PasswordHasher, TokenClaims, TokenService
from book_api.services import user_store

logger = get_logger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid username or password"


def claims_for(user: User) -> TokenClaims:
    """Build the token claims that identify ``user``."""
    return TokenClaims(id=str(user.id), username=user.username, role=user.role)


async def register(
    db: AsyncSession,
    hasher: PasswordHasher,
    tokens: TokenService,
    username: str,
    email: str,
    password: str,
    full_name: str,
) -> tuple[User, str]:
    """
    Register a new regular user.

    Returns:
        Tuple of (User instance, token string).

    Raises:
        DuplicateError: If the username or email is already registered.
    """
    user = await user_store.create_user(
        db,
        hasher,
        username=username,
        email=email,
        password=password,
        full_name=full_name,
        role=Role.USER,
    )
    logger.info("user_registered", user_id=str(user.id), username=username)
    return user, tokens.issue(claims_for(user))


async def login(
    db: AsyncSession,
    hasher: PasswordHasher,
    tokens: TokenService,
    username: str,
    password: str,
) -> tuple[User, str]:
    """
    Authenticate a user and return a token.

    Raises:
        AuthenticationError: If the username doesn't exist or the password
            is wrong (same message for both).
    """
    user = await user_store.find_by_username(db, username)

    # Same error for both cases — prevents user enumeration
    if user is None:
        logger.info("login_failed", reason="unknown_user")
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

    if not await run_in_threadpool(hasher.verify, password, user.password_hash):
        logger.info("login_failed", reason="bad_password", user_id=str(user.id))
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)

    return user, tokens.issue(claims_for(user))


async def get_profile(db: AsyncSession, claims: TokenClaims) -> User:
    """
    Load the user identified by verified token claims.

    Raises:
        NotFoundError: If the user was deleted after the token was issued.
    """
    try:
        user_id = uuid.UUID(claims.id)
    except ValueError:
        user = None
    else:
        user = await user_store.find_by_id(db, user_id)

    if user is None:
        raise NotFoundError("User not found")
    return user


async def change_password(
    db: AsyncSession,
    hasher: PasswordHasher,
    claims: TokenClaims,
    current_password: str,
    new_password: str,
) -> User:
    """
    Change the caller's password after re-checking the current one.

    The caller's role has already been checked by the route. No new token
    is issued; existing tokens stay valid until they expire.

    Raises:
        NotFoundError: If the user no longer exists.
        ValidationError: If ``current_password`` does not match.
    """
    user = await get_profile(db, claims)

    if not await run_in_threadpool(hasher.verify, current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")

    return await user_store.update_password(db, hasher, user, new_password)
