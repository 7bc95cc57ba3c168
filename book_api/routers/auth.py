"""
Authentication router — register, login and profile endpoints.

Endpoints:
  POST /register — Create a regular user account and get a token
  POST /login    — Authenticate and get a token
  GET  /profile  — Current user's profile (requires a bearer token)

Security audit notes:
  - Plaintext passwords exist only in memory during request processing;
    they are hashed before any database operation and never logged.
  - Tokens appear only in response bodies, which are not logged.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from book_api.database import get_db
from book_api.dependencies import get_current_claims, get_password_hasher, get_token_service
from book_api.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from book_api.schemas.user import ProfileResponse, UserProfile, UserPublic
from book_api.security import PasswordHasher, TokenClaims, TokenService
from book_api.services import auth_service

router = APIRouter()


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    request: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Register a new user with the ``user`` role.

    Admin accounts are never created through this endpoint; use the
    manage_users command instead.

    - **username**: Unique, case-sensitive
    - **email**: Valid e-mail address, unique
    - **password**: Required
    - **fullName**: Required
    """
    user, token = await auth_service.register(
        db=db,
        hasher=hasher,
        tokens=tokens,
        username=request.username,
        email=request.email,
        password=request.password,
        full_name=request.full_name,
    )

    return AuthResponse(
        message="User registered successfully!",
        token=token,
        user=UserPublic.model_validate(user),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Authenticate and get a token",
)
async def login(
    request: LoginRequest,
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
):
    """
    Authenticate with username and password.

    Returns a bearer token that must be included in the Authorization
    header of protected requests:

        Authorization: Bearer <token>
    """
    user, token = await auth_service.login(
        db=db,
        hasher=hasher,
        tokens=tokens,
        username=request.username,
        password=request.password,
    )

    return AuthResponse(
        message="Login successful!",
        token=token,
        user=UserPublic.model_validate(user),
    )


@router.get(
    "/profile",
    response_model=ProfileResponse,
    summary="Get current user's profile",
)
async def get_profile(
    claims: TokenClaims = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
):
    """Return the authenticated user's profile (never the password hash)."""
    user = await auth_service.get_profile(db, claims)
    return ProfileResponse(data=UserProfile.model_validate(user))
