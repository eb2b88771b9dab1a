"""Institute service — tenant creation, lookup, and membership listing."""

from typing import Optional

import structlog

from eduflow.auth.context import Principal, Role
from eduflow.auth.tenant_guard import TenantContext
from eduflow.errors import Conflict, Forbidden, NotFound, PrincipalNotFound
from eduflow.repositories.institutes import InstituteRepository
from eduflow.repositories.users import UserRepository
from eduflow.services.tenant_scope import resolve_scope

logger = structlog.get_logger()


class InstituteNotFound(NotFound):
    code = "INSTITUTE_NOT_FOUND"
    message = "Institute not found"


class AlreadyInInstitute(Conflict):
    code = "ALREADY_IN_INSTITUTE"
    message = "You already belong to an institute"


class InstituteService:
    """Business logic for institutes (tenants)."""

    def __init__(self, institutes: InstituteRepository, users: UserRepository):
        self.institutes = institutes
        self.users = users

    async def create_institute(self, principal: Principal, name: str, type: str):
        """Create an institute and bind the caller to it as its owner.

        Exempt principals create institutes without being bound to them.
        A bound principal's institute is immutable, so a second call fails.
        The check reads the stored row, not the token: the caller's current
        tokens still carry the old claims until the next refresh.
        """
        bind = not principal.is_exempt
        if bind:
            user = await self.users.get(principal.id)
            if user is None:
                raise PrincipalNotFound()
            if user.institute_id is not None:
                raise AlreadyInInstitute()

        institute = await self.institutes.create(
            name=name, type=type, owner_id=principal.id
        )
        if bind:
            bound = await self.users.assign_institute(
                principal.id, str(institute.id), Role.INSTITUTE.value
            )
            if bound is None:
                # A concurrent request bound this user first
                await self.institutes.delete(institute)
                raise AlreadyInInstitute()

        logger.info(
            "institute.created",
            institute_id=str(institute.id),
            owner_id=principal.id,
        )
        return institute

    async def get_institute(
        self, ctx: TenantContext, institute_id: Optional[str] = None
    ):
        scope = resolve_scope(ctx, institute_id)
        if scope.institute_id is None:
            raise InstituteNotFound()
        institute = await self.institutes.get(scope.institute_id)
        if institute is None:
            raise InstituteNotFound()
        return institute

    async def list_institutes(self, ctx: TenantContext) -> list:
        if not ctx.exempt:
            raise Forbidden("Only platform administrators can list institutes")
        return await self.institutes.list()

    async def list_members(
        self,
        ctx: TenantContext,
        role: Role,
        institute_id: Optional[str] = None,
    ) -> list:
        """Principals of one role inside the caller's institute."""
        scope = resolve_scope(ctx, institute_id)
        rows = await self.users.list(scope.where({"role": role.value}))
        return [row for row in rows if scope.validate(row)]
