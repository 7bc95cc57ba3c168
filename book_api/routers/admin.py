"""
Admin router — endpoints restricted to the ADMIN role.

Endpoints:
  PUT /admin/change-password — Change the calling admin's own password

The route authenticates first and checks the role second; a regular user
with a valid token gets 403, a request without a token gets 401.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from book_api.database import get_db
from book_api.dependencies import get_password_hasher, require_role
from book_api.models.user import Role
from book_api.schemas.auth import ChangePasswordRequest
from book_api.schemas.base import MessageResponse
from book_api.security import PasswordHasher, TokenClaims
from book_api.services import auth_service

router = APIRouter()

require_admin = require_role(
    Role.ADMIN,
    "Access denied. Only admins can update their password.",
)


@router.put(
    "/change-password",
    response_model=MessageResponse,
    summary="[Admin] Change own password",
)
async def change_password(
    request: ChangePasswordRequest,
    claims: TokenClaims = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
):
    """
    Change the authenticated admin's password.

    ``currentPassword`` must match the stored password. Tokens issued
    before the change keep working until they expire.
    """
    await auth_service.change_password(
        db=db,
        hasher=hasher,
        claims=claims,
        current_password=request.current_password,
        new_password=request.new_password,
    )
    return MessageResponse(message="Admin password updated successfully!")
