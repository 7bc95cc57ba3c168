"""
Security utilities: password hashing and JWT bearer tokens.

This module centralizes all cryptographic operations so they're easy to
audit and update. Two concerns are handled here:

1. PASSWORD HASHING (Argon2)
   - Passwords are never stored in plaintext
   - Every hash embeds its own random salt and cost parameters, so
     verification needs nothing but the stored string
   - The time cost is configurable (PASSWORD_HASH_TIME_COST)
   - We use passlib's CryptContext for safe, high-level Argon2 operations;
     its verify() compares digests in constant time

2. JWT TOKENS (JSON Web Tokens)
   - At login/registration the user receives a signed JWT carrying their
     id, username and role
   - The token is signed with SECRET_KEY using HS256 (HMAC-SHA256)
   - Tokens expire after ACCESS_TOKEN_EXPIRE_MINUTES (default: 7 days)
   - The server is stateless: tokens are never looked up in the database,
     so a password change, role change or deletion does not revoke tokens
     already issued. They stay valid, with their original role, until
     they expire.

Both services are constructed once by create_app() from the Settings object
and stored on ``app.state``.
"""

import re
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel, ValidationError as PydanticValidationError

from book_api.exceptions import InvalidTokenError
from book_api.models.user import Role


# ---------------------------------------------------------------------------
# 1. Password Hashing (Argon2)
# ---------------------------------------------------------------------------

_SPECIAL_CHARACTERS = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")


class PasswordHasher:
    """
    Salted one-way password hashing backed by passlib's Argon2 handler.

    Hashing is CPU-bound on purpose. Request handlers call these methods
    through ``run_in_threadpool`` so one slow hash does not stall the event
    loop for every other request.
    """

    def __init__(self, time_cost: int = 3):
        # "deprecated='auto'" lets a future scheme replace argon2 while old
        # hashes keep verifying
        self._context = CryptContext(
            schemes=["argon2"],
            deprecated="auto",
            argon2__rounds=time_cost,
        )

    def hash(self, plain_password: str) -> str:
        """
        Hash a plaintext password.

        Returns:
            An Argon2 hash string (e.g., "$argon2id$v=19$m=65536,t=3,p=4$...").
        """
        return self._context.hash(plain_password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a plaintext password against a stored hash.

        Returns False on mismatch. Raises ValueError only if
        ``hashed_password`` is not a recognizable hash.
        """
        return self._context.verify(plain_password, hashed_password)


def check_password_strength(password: str) -> bool:
    """
    True if the password has 6+ characters including a letter, a digit and
    a special character.
    """
    return (
        len(password) >= 6
        and re.search(r"[a-zA-Z]", password) is not None
        and re.search(r"[0-9]", password) is not None
        and _SPECIAL_CHARACTERS.search(password) is not None
    )


# ---------------------------------------------------------------------------
# 2. JWT Tokens
# ---------------------------------------------------------------------------


class TokenClaims(BaseModel):
    """The identity payload carried by every bearer token."""
    id: str
    username: str
    role: Role


class TokenService:
    """Issues and verifies signed, time-limited bearer tokens."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", ttl: timedelta = timedelta(days=7)):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.ttl = ttl

    def issue(self, claims: TokenClaims, ttl: timedelta | None = None) -> str:
        """
        Create a signed JWT for ``claims``.

        The token payload contains:
          - "id", "username", "role": the identity claims
          - "iat": issue timestamp
          - "exp": absolute expiry, ``ttl`` after issuance (defaults to the
            service's configured ttl)
        """
        now = datetime.now(timezone.utc)
        to_encode = claims.model_dump(mode="json")
        to_encode.update({
            "iat": now,
            "exp": now + (ttl if ttl is not None else self.ttl),
        })
        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Decode and verify a JWT.

        Only the signature and expiry are checked; the user record is not
        consulted.

        Raises:
            InvalidTokenError: If the token is expired, tampered with,
                signed with another key, or does not carry valid claims.
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[self._algorithm])
            return TokenClaims.model_validate(payload)
        except (JWTError, PydanticValidationError) as exc:
            raise InvalidTokenError() from exc
