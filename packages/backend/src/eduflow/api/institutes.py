"""Institute and member API routes.

Learn: POST /institutes only needs an authenticated principal (that's how
a principal *gets* an institute). Everything else runs behind the tenant
guard via Depends(require_institute).
"""

from typing import Optional

from fastapi import APIRouter, Depends

from eduflow.auth.context import Principal, Role
from eduflow.auth.dependencies import get_current_user
from eduflow.auth.tenant_guard import TenantContext, require_institute
from eduflow.repositories.institutes import InstituteRepository
from eduflow.repositories.providers import (
    get_institute_repository,
    get_user_repository,
)
from eduflow.repositories.users import UserRepository
from eduflow.schemas.institute import InstituteCreate, InstituteRead, MemberRead
from eduflow.services.institute_service import InstituteService

router = APIRouter()


def _svc(
    institutes: InstituteRepository = Depends(get_institute_repository),
    users: UserRepository = Depends(get_user_repository),
) -> InstituteService:
    return InstituteService(institutes=institutes, users=users)


# ─── Institutes ─────────────────────────────────────────

@router.post("/institutes", response_model=InstituteRead, status_code=201)
async def create_institute(
    body: InstituteCreate,
    principal: Principal = Depends(get_current_user),
    svc: InstituteService = Depends(_svc),
):
    """Create an institute and become its owner."""
    return await svc.create_institute(principal, name=body.name, type=body.type)


@router.get("/institutes", response_model=list[InstituteRead])
async def list_institutes(
    ctx: TenantContext = Depends(require_institute),
    svc: InstituteService = Depends(_svc),
):
    """All institutes. Platform administrators only."""
    return await svc.list_institutes(ctx)


@router.get("/institutes/me", response_model=InstituteRead)
async def get_my_institute(
    ctx: TenantContext = Depends(require_institute),
    svc: InstituteService = Depends(_svc),
):
    return await svc.get_institute(ctx)


# ─── Members ────────────────────────────────────────────

@router.get("/students", response_model=list[MemberRead])
async def list_students(
    institute_id: Optional[str] = None,
    ctx: TenantContext = Depends(require_institute),
    svc: InstituteService = Depends(_svc),
):
    return await svc.list_members(ctx, Role.STUDENT, institute_id)


@router.get("/teachers", response_model=list[MemberRead])
async def list_teachers(
    institute_id: Optional[str] = None,
    ctx: TenantContext = Depends(require_institute),
    svc: InstituteService = Depends(_svc),
):
    return await svc.list_members(ctx, Role.TEACHER, institute_id)
