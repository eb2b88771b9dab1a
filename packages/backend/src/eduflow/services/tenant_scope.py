"""Resolve the TenantScope a service call should run under."""

from typing import Optional

from eduflow.auth.tenant_guard import TenantContext
from eduflow.tenancy.query import TenantScope


def resolve_scope(ctx: TenantContext, institute_id: Optional[str] = None) -> TenantScope:
    """Scope for this request.

    Tenant-bound principals always get their own institute; an explicit
    institute_id is ignored for them. Exempt principals get the institute
    they asked for, or an unscoped view when they didn't ask.
    """
    if ctx.exempt and institute_id:
        return TenantScope(institute_id)
    return TenantScope.for_context(ctx)
