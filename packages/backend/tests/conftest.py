"""Test fixtures — in-memory repositories wired in through dependency overrides.

Learn: The services only know the repository *protocols*, so tests swap
the SQL repositories for the dict-backed ones below via
app.dependency_overrides. No database is needed, and every test starts
from empty repositories.
"""

import os

# Must be set before eduflow.config is imported
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from typing import Any, Mapping, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from eduflow.auth.context import Principal, Role
from eduflow.auth.dependencies import get_token_service
from eduflow.auth.password import hash_password
from eduflow.auth.tokens import TokenService
from eduflow.main import app
from eduflow.repositories.providers import (
    get_course_repository,
    get_institute_repository,
    get_user_repository,
)

ACCESS_SECRET = "test-access-secret-0123456789abcdef"
REFRESH_SECRET = "test-refresh-secret-0123456789abcdef"
DEFAULT_PASSWORD = "password_123"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _matches(row: Any, filters: Mapping[str, Any]) -> bool:
    for key, value in filters.items():
        actual = getattr(row, key, None)
        if value is None:
            if actual is not None:
                return False
        elif actual is None or str(actual) != str(value):
            return False
    return True


def _as_uuid(value: Any) -> Optional[uuid.UUID]:
    return uuid.UUID(str(value)) if value is not None else None


# ─── In-memory repositories ─────────────────────────────


class InMemoryUserRepository:
    def __init__(self):
        self.rows: dict[str, SimpleNamespace] = {}
        self.fail_last_login = False

    async def get(self, user_id):
        return self.rows.get(str(user_id))

    async def get_by_email(self, email):
        return next((u for u in self.rows.values() if u.email == email), None)

    async def create(self, email, name, password_hash, role="student", institute_id=None):
        user = SimpleNamespace(
            id=uuid.uuid4(),
            email=email,
            name=name,
            password_hash=password_hash,
            role=role,
            institute_id=_as_uuid(institute_id),
            last_login_at=None,
            created_at=_now(),
        )
        self.rows[str(user.id)] = user
        return user

    async def update_last_login(self, user_id, when):
        if self.fail_last_login:
            raise ConnectionError("database unavailable")
        self.rows[str(user_id)].last_login_at = when

    async def assign_institute(self, user_id, institute_id, role):
        user = self.rows.get(str(user_id))
        if user is None or user.institute_id is not None:
            return None
        user.institute_id = _as_uuid(institute_id)
        user.role = role
        return user

    async def list(self, filters):
        return [u for u in self.rows.values() if _matches(u, filters)]


class InMemoryInstituteRepository:
    def __init__(self):
        self.rows: dict[str, SimpleNamespace] = {}

    async def create(self, name, type, owner_id):
        institute = SimpleNamespace(
            id=uuid.uuid4(),
            name=name,
            type=type,
            owner_id=_as_uuid(owner_id),
            created_at=_now(),
        )
        self.rows[str(institute.id)] = institute
        return institute

    async def get(self, institute_id):
        return self.rows.get(str(institute_id))

    async def list(self):
        return sorted(self.rows.values(), key=lambda i: i.name)

    async def delete(self, institute):
        self.rows.pop(str(institute.id), None)

    async def delete(self, institute):
        self.rows.pop(str(institute.id), None)


class InMemoryCourseRepository:
    def __init__(self):
        self.rows: dict[str, SimpleNamespace] = {}
        self.queries: list[dict] = []

    async def create(self, institute_id, **fields):
        course = SimpleNamespace(
            id=uuid.uuid4(),
            institute_id=_as_uuid(institute_id),
            title=fields["title"],
            description=fields.get("description", ""),
            price=Decimal(str(fields.get("price", 0))),
            status=fields.get("status", "draft"),
            created_at=_now(),
        )
        self.rows[str(course.id)] = course
        return course

    async def find_one(self, filters):
        self.queries.append(dict(filters))
        return next((c for c in self.rows.values() if _matches(c, filters)), None)

    async def list(self, filters):
        self.queries.append(dict(filters))
        return [c for c in self.rows.values() if _matches(c, filters)]

    async def update(self, course, fields):
        for key, value in fields.items():
            setattr(course, key, value)
        return course

    async def delete(self, course):
        self.rows.pop(str(course.id), None)


# ─── Fixtures ───────────────────────────────────────────


@pytest.fixture()
def token_service():
    return TokenService(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET)


@pytest.fixture()
def users():
    return InMemoryUserRepository()


@pytest.fixture()
def institutes():
    return InMemoryInstituteRepository()


@pytest.fixture()
def courses():
    return InMemoryCourseRepository()


@pytest_asyncio.fixture()
async def client(users, institutes, courses, token_service):
    """HTTP client against the real app with in-memory repositories."""
    app.dependency_overrides[get_user_repository] = lambda: users
    app.dependency_overrides[get_institute_repository] = lambda: institutes
    app.dependency_overrides[get_course_repository] = lambda: courses
    app.dependency_overrides[get_token_service] = lambda: token_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture()
def make_user(users):
    """Create a stored user and return its Principal."""

    async def _make(
        role: Role = Role.STUDENT,
        institute_id: Optional[str] = None,
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
    ) -> Principal:
        user = await users.create(
            email=email or f"{role.value}-{uuid.uuid4().hex[:8]}@example.com",
            name=f"Test {role.value}",
            password_hash=hash_password(password),
            role=role.value,
            institute_id=institute_id,
        )
        return Principal.from_user(user)

    return _make


@pytest.fixture()
def auth_headers(token_service):
    """Bearer headers carrying a principal's access token."""

    def _headers(principal: Principal) -> dict[str, str]:
        token = token_service.issue(principal.to_claims())
        return {"Authorization": f"Bearer {token}"}

    return _headers
