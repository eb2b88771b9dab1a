"""Course service — tenant-scoped course management.

Learn: Every method starts from a TenantContext (produced by the tenant
guard) and turns it into a TenantScope. Queries are built with
scope.where(), and fetched rows go through scope.validate() before they
are returned. If a query path ever drops the institute filter, the row
is treated as not found.
"""

from typing import Any, Optional

import structlog

from eduflow.auth.context import Role
from eduflow.auth.tenant_guard import TenantContext
from eduflow.errors import AppError, Forbidden, NotFound
from eduflow.repositories.courses import CourseRepository
from eduflow.repositories.institutes import InstituteRepository
from eduflow.services.institute_service import InstituteNotFound
from eduflow.services.tenant_scope import resolve_scope

logger = structlog.get_logger()

# Roles allowed to create/modify courses
MANAGE_ROLES = frozenset({Role.INSTITUTE, Role.TEACHER, Role.ADMIN, Role.SUPER_ADMIN})


class CourseNotFound(NotFound):
    code = "COURSE_NOT_FOUND"
    message = "Course not found"


class InstituteRequired(AppError):
    status_code = 400
    code = "INSTITUTE_ID_REQUIRED"
    message = "institute_id is required for this action"


class CourseService:
    """Business logic for courses."""

    def __init__(self, courses: CourseRepository, institutes: InstituteRepository):
        self.courses = courses
        self.institutes = institutes

    def _check_can_manage(self, ctx: TenantContext) -> None:
        if ctx.principal is None or ctx.principal.role not in MANAGE_ROLES:
            raise Forbidden("Only institute staff can manage courses")

    async def create_course(
        self,
        ctx: TenantContext,
        title: str,
        description: str = "",
        price: Any = 0,
        status: str = "draft",
        institute_id: Optional[str] = None,
    ):
        self._check_can_manage(ctx)
        scope = resolve_scope(ctx, institute_id)
        if scope.institute_id is None:
            raise InstituteRequired()
        # An institute named by an exempt caller must exist
        if ctx.exempt and await self.institutes.get(scope.institute_id) is None:
            raise InstituteNotFound()

        course = await self.courses.create(
            scope.institute_id,
            title=title,
            description=description,
            price=price,
            status=status,
        )
        logger.info(
            "course.created",
            course_id=str(course.id),
            institute_id=scope.institute_id,
        )
        return course

    async def list_courses(
        self,
        ctx: TenantContext,
        status: Optional[str] = None,
        institute_id: Optional[str] = None,
    ) -> list:
        scope = resolve_scope(ctx, institute_id)
        filters = {"status": status} if status else {}
        rows = await self.courses.list(scope.where(filters))
        return [row for row in rows if scope.validate(row)]

    async def get_course(
        self,
        ctx: TenantContext,
        course_id: str,
        institute_id: Optional[str] = None,
    ):
        scope = resolve_scope(ctx, institute_id)
        course = await self.courses.find_one(scope.where({"id": course_id}))
        if not scope.validate(course):
            if course is not None:
                logger.warning(
                    "tenant.ownership_mismatch",
                    course_id=course_id,
                    expected=scope.institute_id,
                )
            raise CourseNotFound()
        return course

    async def update_course(
        self,
        ctx: TenantContext,
        course_id: str,
        fields: dict[str, Any],
        institute_id: Optional[str] = None,
    ):
        self._check_can_manage(ctx)
        course = await self.get_course(ctx, course_id, institute_id)
        # institute_id is never writable through an update
        fields = {k: v for k, v in fields.items() if k not in ("id", "institute_id")}
        if not fields:
            return course
        return await self.courses.update(course, fields)

    async def delete_course(
        self,
        ctx: TenantContext,
        course_id: str,
        institute_id: Optional[str] = None,
    ) -> None:
        self._check_can_manage(ctx)
        course = await self.get_course(ctx, course_id, institute_id)
        await self.courses.delete(course)
        logger.info("course.deleted", course_id=course_id)
