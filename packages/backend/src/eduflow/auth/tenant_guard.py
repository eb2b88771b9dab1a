"""Tenant guard — binds each request to an institute, or rejects it.

Learn: The guard is a small state machine over the request lifecycle:

    UNAUTHENTICATED → AUTHENTICATED → EXEMPT        (admin roles)
                                    → TENANT_BOUND  (has institute_id)
                                    → REJECTED      (403 MISSING_INSTITUTE_CONTEXT)

evaluate() is the pure decision; require_institute is the FastAPI
dependency that runs it after authentication and before any handler that
touches tenant-scoped data.
"""

import enum
from dataclasses import dataclass
from typing import Optional

import structlog
from fastapi import Depends

from eduflow.auth.context import Principal
from eduflow.auth.dependencies import get_current_user
from eduflow.errors import AuthenticationRequired, MissingInstituteContext

logger = structlog.get_logger()


class GuardState(str, enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    EXEMPT = "exempt"
    TENANT_BOUND = "tenant_bound"
    REJECTED = "rejected"


@dataclass(frozen=True)
class TenantContext:
    """Outcome of the guard for one request.

    institute_id is None for exempt principals: they act across all
    institutes and must name the target institute explicitly.
    """

    principal: Optional[Principal]
    state: GuardState
    institute_id: Optional[str] = None

    @property
    def exempt(self) -> bool:
        return self.state is GuardState.EXEMPT


def evaluate(principal: Optional[Principal]) -> TenantContext:
    """Decide the guard state for a principal (None = unauthenticated)."""
    if principal is None:
        return TenantContext(principal=None, state=GuardState.UNAUTHENTICATED)
    if principal.is_exempt:
        return TenantContext(principal=principal, state=GuardState.EXEMPT)
    if principal.institute_id:
        return TenantContext(
            principal=principal,
            state=GuardState.TENANT_BOUND,
            institute_id=principal.institute_id,
        )
    return TenantContext(principal=principal, state=GuardState.REJECTED)


def enforce(principal: Optional[Principal]) -> TenantContext:
    """Run the guard, raising on anything but EXEMPT or TENANT_BOUND."""
    ctx = evaluate(principal)
    if ctx.state is GuardState.UNAUTHENTICATED:
        raise AuthenticationRequired()
    if ctx.state is GuardState.REJECTED:
        logger.info(
            "tenant.guard_rejected",
            user_id=principal.id,
            role=principal.role.value,
        )
        raise MissingInstituteContext()
    return ctx


async def require_institute(
    principal: Principal = Depends(get_current_user),
) -> TenantContext:
    """FastAPI dependency — tenant context for the current request."""
    return enforce(principal)


def get_institute_id(principal: Principal) -> Optional[str]:
    """The institute to scope by; None for exempt roles.

    Raises MissingInstituteContext for a non-exempt principal without one.
    """
    return enforce(principal).institute_id


def can_access_institute(principal: Optional[Principal], institute_id: str) -> bool:
    """Check whether principal may touch the given institute's data."""
    if principal is None:
        return False
    if principal.is_exempt:
        return True
    return principal.institute_id is not None and principal.institute_id == str(
        institute_id
    )
