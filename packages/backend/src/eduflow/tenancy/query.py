"""Tenant query helpers — keep every query inside one institute.

Learn: Tenant isolation is enforced twice:

1. scope_filter() injects institute_id into the filter *before* the query
   runs, so a scoped query can't return another institute's rows.
2. validate_ownership() re-checks each fetched record *after* the query,
   catching any code path that forgot step 1.

Filters are plain dicts of column → value, which the SQLAlchemy
repositories hand to select().filter_by(**filters).
"""

from typing import Any, Mapping, Optional

from eduflow.errors import MissingTenantContext

TENANT_KEY = "institute_id"


def _normalize(institute_id: Any) -> Optional[str]:
    if institute_id is None or institute_id == "":
        return None
    return str(institute_id)


def scope_filter(
    institute_id: Any,
    filters: Optional[Mapping[str, Any]] = None,
    allow_exempt: bool = False,
) -> dict[str, Any]:
    """Return a copy of filters with institute_id merged in.

    A missing institute_id raises MissingTenantContext, unless the caller
    explicitly declares the exempt case with allow_exempt=True, in which
    case the filter is returned unscoped. An institute_id already present
    in filters is always overwritten.
    """
    scoped = dict(filters or {})
    tenant = _normalize(institute_id)
    if tenant is None:
        if allow_exempt:
            return scoped
        raise MissingTenantContext()
    scoped[TENANT_KEY] = tenant
    return scoped


def record_institute_id(record: Any) -> Optional[str]:
    """Read institute_id from an ORM row, object, or mapping."""
    if isinstance(record, Mapping):
        value = record.get(TENANT_KEY)
    else:
        value = getattr(record, TENANT_KEY, None)
    return _normalize(value)


def validate_ownership(record: Any, expected_institute_id: Any) -> bool:
    """True only if record exists and belongs to expected_institute_id."""
    if record is None:
        return False
    expected = _normalize(expected_institute_id)
    if expected is None:
        return False
    return record_institute_id(record) == expected


class TenantScope:
    """A bound institute for the lifetime of one request.

    An unscoped TenantScope (institute_id=None) is only produced for
    exempt principals; it passes filters through untouched and accepts
    any record.
    """

    def __init__(self, institute_id: Any, exempt: bool = False):
        self.institute_id = _normalize(institute_id)
        self.exempt = exempt and self.institute_id is None
        if self.institute_id is None and not self.exempt:
            raise MissingTenantContext()

    @classmethod
    def for_context(cls, ctx) -> "TenantScope":
        """Build from a TenantContext produced by the tenant guard."""
        return cls(ctx.institute_id, exempt=ctx.exempt)

    def where(self, filters: Optional[Mapping[str, Any]] = None) -> dict[str, Any]:
        return scope_filter(self.institute_id, filters, allow_exempt=self.exempt)

    def validate(self, record: Any) -> bool:
        if self.exempt:
            return record is not None
        return validate_ownership(record, self.institute_id)

    def __repr__(self) -> str:
        return f"TenantScope(institute_id={self.institute_id!r}, exempt={self.exempt})"
