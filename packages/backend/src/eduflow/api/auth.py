"""Auth API — registration, login, refresh, logout, profile.

Learn: Routes for the session lifecycle:
- POST /auth/register → create a student account
- POST /auth/login → email/password → access token (body) + refresh token (cookie)
- POST /auth/refresh → refresh cookie → new pair
- POST /auth/logout → clears the refresh cookie
- GET /auth/profile → current user's stored profile

The refresh token never appears in a response body. It lives in an
HTTP-only, SameSite=strict cookie that JavaScript can't read.
"""

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Response
from pydantic import BaseModel, Field

from eduflow.auth.context import Principal
from eduflow.auth.dependencies import get_auth_service, get_current_user
from eduflow.auth.service import AuthService, LoginResult
from eduflow.config import settings
from eduflow.errors import AuthenticationRequired

router = APIRouter(prefix="/auth")

REFRESH_COOKIE = "refreshToken"


# ─── Schemas ─────────────────────────────────────────────


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = None


class PrincipalRead(BaseModel):
    id: str
    email: str
    role: str
    institute_id: Optional[str] = None


class SessionResponse(BaseModel):
    status: str = "success"
    user: PrincipalRead
    access_token: str
    token_type: str = "bearer"


class UserRead(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    role: str
    institute_id: Optional[uuid.UUID] = None
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


# ─── Helpers ─────────────────────────────────────────────


def _principal_read(principal: Principal) -> PrincipalRead:
    return PrincipalRead(
        id=principal.id,
        email=principal.email,
        role=principal.role.value,
        institute_id=principal.institute_id,
    )


def set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=token,
        max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=REFRESH_COOKIE,
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        path="/",
    )


def _session(response: Response, result: LoginResult) -> SessionResponse:
    set_refresh_cookie(response, result.refresh_token)
    return SessionResponse(
        user=_principal_read(result.principal),
        access_token=result.access_token,
    )


# ─── Routes ──────────────────────────────────────────────


@router.post("/register", response_model=UserRead, status_code=201)
async def register(
    body: RegisterRequest,
    svc: AuthService = Depends(get_auth_service),
):
    """Create a new student account."""
    principal = await svc.register(
        email=body.email, password=body.password, name=body.name
    )
    return await svc.profile(principal.id)


@router.post("/login", response_model=SessionResponse)
async def login(
    body: LoginRequest,
    response: Response,
    svc: AuthService = Depends(get_auth_service),
):
    """Login with email and password."""
    result = await svc.login(body.email, body.password)
    return _session(response, result)


@router.post("/refresh", response_model=SessionResponse)
async def refresh(
    response: Response,
    body: Optional[RefreshRequest] = None,
    refresh_cookie: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    svc: AuthService = Depends(get_auth_service),
):
    """Exchange the refresh cookie (or a body token) for a new pair."""
    token = refresh_cookie or (body.refresh_token if body else None)
    if not token:
        raise AuthenticationRequired("Refresh token required")
    result = await svc.refresh(token)
    return _session(response, result)


@router.post("/logout")
async def logout(response: Response, svc: AuthService = Depends(get_auth_service)):
    """Clear the refresh cookie. Access tokens simply expire."""
    svc.logout()
    clear_refresh_cookie(response)
    return {"status": "success", "message": "Logged out successfully"}


@router.get("/profile", response_model=UserRead)
async def profile(
    principal: Principal = Depends(get_current_user),
    svc: AuthService = Depends(get_auth_service),
):
    """Get the current authenticated user's profile."""
    return await svc.profile(principal.id)
