"""
Pydantic schemas for User-related responses.

These schemas control what user data is exposed through the API.
password_hash is NEVER included in any response schema.
"""

import uuid
from datetime import datetime

from book_api.models.user import Role
from book_api.schemas.base import CamelModel


class UserPublic(CamelModel):
    """Public representation of a User returned by register and login."""
    id: uuid.UUID
    username: str
    email: str
    full_name: str
    role: Role


class UserProfile(UserPublic):
    """Profile view: the public fields plus audit timestamps."""
    created_at: datetime
    updated_at: datetime


class ProfileResponse(CamelModel):
    """Response body for GET /profile."""
    success: bool = True
    data: UserProfile
