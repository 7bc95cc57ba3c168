"""
FastAPI dependencies for authentication and authorization.

Dependencies are reusable functions that FastAPI injects into route
handlers. They form a chain that enforces authentication first and role
checks second:

  get_current_claims (Bearer header -> TokenClaims)
      └── require_role(Role.ADMIN, message) (TokenClaims -> TokenClaims)

Status codes:
  - No "Authorization: Bearer ..." header      -> 401 "Access denied. No token provided."
  - Malformed, expired or forged token         -> 403 "Invalid or expired token"
  - Valid token but the role is not allowed    -> 403 with the route's message

The claims come from the token alone. The database is not consulted, so a
token keeps its original role until it expires even if the user was
demoted or deleted in the meantime.

The services built by create_app() (settings, password hasher, token
service) are also exposed here as dependencies that read ``app.state``.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from book_api.config import Settings
from book_api.exceptions import AuthenticationError, AuthorizationError
from book_api.logging_config import get_logger
from book_api.models.user import Role
from book_api.security import PasswordHasher, TokenClaims, TokenService

logger = get_logger(__name__)

# auto_error=False: a missing header must become our 401 envelope, not
# FastAPI's default 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_current_claims(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """
    Extract and verify the bearer token, then return its claims.

    On success the claims are also stored on ``request.state.claims`` for
    downstream code.

    Raises:
        AuthenticationError (401): If no bearer token was sent.
        InvalidTokenError (403): If the token does not verify.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError()

    try:
        claims = tokens.verify(credentials.credentials)
    except AuthorizationError:
        logger.info("token_rejected", path=request.url.path)
        raise

    request.state.claims = claims
    return claims


def ensure_role(claims: TokenClaims, role: Role, message: str = "Access denied") -> TokenClaims:
    """
    Check that verified claims carry ``role``.

    Raises:
        AuthorizationError (403): If the role does not match.
    """
    if claims.role != role:
        raise AuthorizationError(message)
    return claims


def require_role(role: Role, message: str = "Access denied"):
    """
    Build a dependency that authenticates the request, then requires ``role``.

    Usage:
        @router.post("", dependencies=[Depends(require_role(Role.ADMIN, "Only admins can add books"))])
    """

    async def role_dependency(
        claims: TokenClaims = Depends(get_current_claims),
    ) -> TokenClaims:
        return ensure_role(claims, role, message)

    return role_dependency
