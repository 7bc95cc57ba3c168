"""
Custom exception classes and FastAPI exception handlers.

Service code raises these domain errors without importing HTTP concepts;
the handlers registered here translate them into the uniform response
envelope used by every endpoint:

    {"success": false, "message": "<human readable message>"}

Exception hierarchy:
    BookAPIError (base)
    ├── ValidationError       — 400, missing or malformed fields
    ├── DuplicateError        — 400, username/email or ISBN already taken
    ├── AuthenticationError   — 401, no token or bad login credentials
    ├── AuthorizationError    — 403, role does not allow the operation
    │   └── InvalidTokenError — 403, bad signature, expired or malformed token
    ├── NotFoundError         — 404, unknown id
    └── StoreError            — 500, persistence failure (message is opaque)

A *missing* token is 401; a *bad* token is 403.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from book_api.logging_config import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class BookAPIError(Exception):
    """Base exception for all Book API domain errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class ValidationError(BookAPIError):
    """Raised when required fields are missing or malformed."""

    status_code = status.HTTP_400_BAD_REQUEST


class DuplicateError(BookAPIError):
    """Raised when a unique field (username, email, ISBN) is already taken."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str = "Username or email already exists"):
        super().__init__(detail)


class AuthenticationError(BookAPIError):
    """Raised when no credential is presented, or login credentials are wrong."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, detail: str = "Access denied. No token provided."):
        super().__init__(detail)


class AuthorizationError(BookAPIError):
    """Raised when the authenticated identity may not perform the operation."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, detail: str = "Access denied"):
        super().__init__(detail)


class InvalidTokenError(AuthorizationError):
    """Raised when a bearer token fails signature, expiry or shape checks."""

    def __init__(self, detail: str = "Invalid or expired token"):
        super().__init__(detail)


class NotFoundError(BookAPIError):
    """Raised when a requested record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, detail: str = "Not found"):
        super().__init__(detail)


class StoreError(BookAPIError):
    """Raised when the database fails underneath an operation."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(detail)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def error_response(status_code: int, message: str) -> JSONResponse:
    """Build the failure envelope shared by every handler."""
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


def _join_fields(fields: list[str]) -> str:
    if len(fields) == 1:
        return fields[0]
    if len(fields) == 2:
        return f"{fields[0]} and {fields[1]}"
    return ", ".join(fields[:-1]) + f", and {fields[-1]}"


def describe_validation_errors(errors: list[dict]) -> str:
    """
    Turn pydantic error dicts into one client-facing sentence.

    Missing or empty fields are grouped into "Please provide a, b, and c";
    anything else (bad e-mail, wrong type) is reported per field.
    """
    missing: list[str] = []
    invalid: list[str] = []

    for error in errors:
        if error.get("type") == "json_invalid":
            return "Invalid JSON body"
        loc = [part for part in error.get("loc", ()) if part != "body"]
        field = str(loc[-1]) if loc else "request body"
        if error.get("type") in ("missing", "string_too_short"):
            if field not in missing:
                missing.append(field)
        else:
            invalid.append(f"{field}: {error.get('msg', 'invalid value')}")

    parts = []
    if missing:
        parts.append(f"Please provide {_join_fields(missing)}")
    if invalid:
        parts.append("Invalid " + "; ".join(invalid))
    return ". ".join(parts) or "Invalid request"


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Called once by create_app().
    """

    @app.exception_handler(BookAPIError)
    async def book_api_error_handler(
        request: Request, exc: BookAPIError
    ) -> JSONResponse:
        if isinstance(exc, StoreError):
            logger.error(
                "store_error",
                path=request.url.path,
                error=repr(exc.__cause__ or exc),
            )
        return error_response(exc.status_code, exc.detail)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Pydantic reports 422 by default; the API contract is 400
        return error_response(
            status.HTTP_400_BAD_REQUEST,
            describe_validation_errors(exc.errors()),
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(
        request: Request, exc: SQLAlchemyError
    ) -> JSONResponse:
        logger.error("database_error", path=request.url.path, error=repr(exc))
        store_error = StoreError()
        return error_response(store_error.status_code, store_error.detail)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return error_response(exc.status_code, str(exc.detail))
