"""Tenant (institute) isolation helpers."""

from eduflow.tenancy.query import (
    TenantScope,
    scope_filter,
    validate_ownership,
)

__all__ = ["TenantScope", "scope_filter", "validate_ownership"]
