"""
User model — the authentication identity.

Each User is a login credential (username + hashed password) with exactly
one role:

  - ADMIN: may add, edit and delete books, and change their own password
    through the API
  - USER: may view and search books; the default for self-registration

Uniqueness of username and email is enforced by unique indexes, so two
concurrent registrations with the same name cannot both succeed: the second
INSERT fails at the database and is reported as a DuplicateError.

The password is stored as an Argon2id hash, never in plaintext.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Enum
from sqlalchemy.orm import Mapped, mapped_column

from book_api.database import Base


class Role(str, enum.Enum):
    """
    Permission tier of an account.

    Inherits from str so the value serializes naturally to JSON and into
    token claims.
    """
    ADMIN = "admin"
    USER = "user"


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # Login identifier, case-sensitive exact match
    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
        index=True,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    # Argon2id hash (never store plaintext!)
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    full_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    role: Mapped[Role] = mapped_column(
        Enum(Role),
        default=Role.USER,
        nullable=False,
    )

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
