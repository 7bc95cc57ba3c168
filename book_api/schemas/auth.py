"""
Pydantic schemas for authentication endpoints (register, login, password).

Required string fields use min_length=1, so both a missing key and an empty
string are rejected before any handler runs. The exception handlers turn
those failures into a 400 "Please provide ..." envelope.
"""

from pydantic import EmailStr, Field

from book_api.schemas.base import CamelModel
from book_api.schemas.user import UserPublic


class RegisterRequest(CamelModel):
    """Request body for POST /register."""
    username: str = Field(min_length=1, max_length=50)
    email: EmailStr
    password: str = Field(min_length=1)
    full_name: str = Field(min_length=1, max_length=100)


class LoginRequest(CamelModel):
    """Request body for POST /login."""
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class ChangePasswordRequest(CamelModel):
    """Request body for PUT /admin/change-password."""
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=1)


class AuthResponse(CamelModel):
    """Response body for successful register/login: token + public user."""
    success: bool = True
    message: str
    token: str
    user: UserPublic
