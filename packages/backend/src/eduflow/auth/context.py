"""Typed request context — who is calling, and for which institute.

Learn: Instead of hanging arbitrary attributes off the request, the auth
dependency produces a Principal and the tenant guard produces a
TenantContext. Route handlers declare which of the two they need via
Depends(), so the type checker (and the reader) knows what is available.
"""

import enum
from dataclasses import dataclass
from typing import Any, Mapping, Optional


class Role(str, enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    INSTITUTE = "institute"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


# Roles that act across all institutes without a bound institute_id
EXEMPT_ROLES = frozenset({Role.ADMIN, Role.SUPER_ADMIN})


@dataclass(frozen=True)
class Principal:
    """The authenticated identity making the request."""

    id: str
    email: str
    role: Role
    institute_id: Optional[str] = None

    @property
    def is_exempt(self) -> bool:
        return self.role in EXEMPT_ROLES

    def to_claims(self) -> dict[str, Any]:
        """Token claims for this principal (without timing fields)."""
        return {
            "sub": self.id,
            "email": self.email,
            "role": self.role.value,
            "institute_id": self.institute_id,
        }

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> "Principal":
        return cls(
            id=str(claims["sub"]),
            email=claims.get("email", ""),
            role=Role(claims["role"]),
            institute_id=claims.get("institute_id"),
        )

    @classmethod
    def from_user(cls, user: Any) -> "Principal":
        """Build from a User row (or anything shaped like one)."""
        return cls(
            id=str(user.id),
            email=user.email,
            role=Role(user.role),
            institute_id=str(user.institute_id) if user.institute_id else None,
        )
