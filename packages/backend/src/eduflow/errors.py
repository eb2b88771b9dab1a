"""Application error taxonomy and the FastAPI handlers that render it.

Learn: Services raise AppError subclasses instead of HTTPException, so
they stay usable outside HTTP (CLI, tests). The handlers below turn them
into the uniform error body:

    {"status": "error", "message": "...", "code": "..."}
"""

from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger()


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    message: str = "Something went wrong"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        super().__init__(message or self.message)
        if message:
            self.message = message
        if code:
            self.code = code

    def to_body(self) -> dict:
        return {"status": "error", "message": self.message, "code": self.code}


# ─── Authentication ─────────────────────────────────────


class AuthenticationRequired(AppError):
    status_code = 401
    code = "AUTHENTICATION_REQUIRED"
    message = "Authentication required"


class InvalidCredentials(AppError):
    status_code = 401
    code = "INVALID_CREDENTIALS"
    message = "Invalid credentials"


class TokenError(AppError):
    """Raised when a token can't be verified."""

    status_code = 401
    code = "INVALID_TOKEN"
    message = "Invalid token"


class InvalidSignature(TokenError):
    code = "INVALID_TOKEN"
    message = "Token signature is invalid"


class Expired(TokenError):
    code = "TOKEN_EXPIRED"
    message = "Token has expired"


class MalformedToken(TokenError):
    code = "MALFORMED_TOKEN"
    message = "Token is malformed"


# ─── Tenancy ────────────────────────────────────────────


class MissingInstituteContext(AppError):
    status_code = 403
    code = "MISSING_INSTITUTE_CONTEXT"
    message = (
        "This action requires an institute affiliation. "
        "Please join an institute first."
    )


class MissingTenantContext(AppError):
    """A tenant-scoped query ran without an institute. Always a bug upstream."""

    status_code = 500
    code = "MISSING_TENANT_CONTEXT"
    message = "Institute ID required for tenant-scoped query"


# ─── Generic ────────────────────────────────────────────


class Forbidden(AppError):
    status_code = 403
    code = "FORBIDDEN"
    message = "Access denied"


class NotFound(AppError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Resource not found"


class PrincipalNotFound(NotFound):
    code = "USER_NOT_FOUND"
    message = "User not found"


class Conflict(AppError):
    status_code = 409
    code = "CONFLICT"
    message = "Resource already exists"


class EmailAlreadyRegistered(Conflict):
    code = "EMAIL_EXISTS"
    message = "Email already registered"


# ─── Handlers ───────────────────────────────────────────


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if isinstance(exc, MissingTenantContext):
        logger.error(
            "tenant.unscoped_query",
            path=request.url.path,
            error=exc.message,
        )
    elif exc.status_code >= 500:
        logger.error("request.failed", path=request.url.path, code=exc.code)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code, content=exc.to_body(), headers=headers
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    if field:
        message = f"{field}: {message}"
    return JSONResponse(
        status_code=422,
        content={"status": "error", "message": message, "code": "VALIDATION_ERROR"},
    )


def install_error_handlers(app: FastAPI) -> None:
    """Register the AppError and validation handlers on an app."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
