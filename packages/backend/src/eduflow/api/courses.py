"""Course API routes — tenant-scoped CRUD.

Learn: Every route depends on require_institute, so a principal without
an institute gets 403 MISSING_INSTITUTE_CONTEXT before the handler runs.
Platform administrators may pass ?institute_id= to act on a specific
institute; for everyone else the parameter is ignored.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from eduflow.auth.tenant_guard import TenantContext, require_institute
from eduflow.repositories.courses import CourseRepository
from eduflow.repositories.institutes import InstituteRepository
from eduflow.repositories.providers import (
    get_course_repository,
    get_institute_repository,
)
from eduflow.schemas.course import CourseCreate, CourseRead, CourseUpdate
from eduflow.services.course_service import CourseService

router = APIRouter(prefix="/courses")


def _svc(
    courses: CourseRepository = Depends(get_course_repository),
    institutes: InstituteRepository = Depends(get_institute_repository),
) -> CourseService:
    return CourseService(courses, institutes)


@router.post("", response_model=CourseRead, status_code=201)
async def create_course(
    body: CourseCreate,
    institute_id: Optional[str] = None,
    ctx: TenantContext = Depends(require_institute),
    svc: CourseService = Depends(_svc),
):
    return await svc.create_course(
        ctx,
        title=body.title,
        description=body.description,
        price=body.price,
        status=body.status,
        institute_id=institute_id,
    )


@router.get("", response_model=list[CourseRead])
async def list_courses(
    status: Optional[str] = None,
    institute_id: Optional[str] = None,
    ctx: TenantContext = Depends(require_institute),
    svc: CourseService = Depends(_svc),
):
    return await svc.list_courses(ctx, status=status, institute_id=institute_id)


@router.get("/{course_id}", response_model=CourseRead)
async def get_course(
    course_id: str,
    institute_id: Optional[str] = None,
    ctx: TenantContext = Depends(require_institute),
    svc: CourseService = Depends(_svc),
):
    return await svc.get_course(ctx, course_id, institute_id)


@router.patch("/{course_id}", response_model=CourseRead)
async def update_course(
    course_id: str,
    body: CourseUpdate,
    institute_id: Optional[str] = None,
    ctx: TenantContext = Depends(require_institute),
    svc: CourseService = Depends(_svc),
):
    return await svc.update_course(
        ctx, course_id, body.model_dump(exclude_unset=True, exclude_none=True), institute_id
    )


@router.delete("/{course_id}")
async def delete_course(
    course_id: str,
    institute_id: Optional[str] = None,
    ctx: TenantContext = Depends(require_institute),
    svc: CourseService = Depends(_svc),
):
    await svc.delete_course(ctx, course_id, institute_id)
    return {"deleted": True}
