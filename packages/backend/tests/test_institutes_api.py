"""Institute and member API tests."""

import uuid

import pytest

from eduflow.auth.context import Role
from eduflow.services.institute_service import AlreadyInInstitute, InstituteService


@pytest.mark.asyncio
async def test_create_institute_binds_owner(client, make_user, auth_headers, users):
    principal = await make_user(Role.STUDENT)

    r = await client.post(
        "/api/v1/institutes",
        json={"name": "Everest Academy", "type": "school"},
        headers=auth_headers(principal),
    )
    assert r.status_code == 201
    institute = r.json()
    assert institute["owner_id"] == principal.id

    stored = await users.get(principal.id)
    assert str(stored.institute_id) == institute["id"]
    assert stored.role == "institute"


@pytest.mark.asyncio
async def test_new_institute_reaches_claims_after_refresh(client, make_user):
    principal = await make_user(Role.STUDENT)
    r = await client.post(
        "/api/v1/auth/login",
        json={"email": principal.email, "password": "password_123"},
    )
    headers = {"Authorization": f"Bearer {r.json()['access_token']}"}
    refresh_cookie = next(
        v.split(";")[0]
        for k, v in r.headers.multi_items()
        if k == "set-cookie" and v.startswith("refreshToken=")
    )
    client.cookies.clear()

    r = await client.post(
        "/api/v1/institutes", json={"name": "Himal College"}, headers=headers
    )
    institute_id = r.json()["id"]

    # The old token still carries no institute
    r = await client.get("/api/v1/institutes/me", headers=headers)
    assert r.status_code == 403

    r = await client.post("/api/v1/auth/refresh", headers={"Cookie": refresh_cookie})
    assert r.status_code == 200
    assert r.json()["user"]["institute_id"] == institute_id
    headers = {"Authorization": f"Bearer {r.json()['access_token']}"}

    r = await client.get("/api/v1/institutes/me", headers=headers)
    assert r.status_code == 200
    assert r.json()["name"] == "Himal College"


@pytest.mark.asyncio
async def test_cannot_create_second_institute(client, make_user, auth_headers):
    principal = await make_user(Role.INSTITUTE, institute_id=str(uuid.uuid4()))
    r = await client.post(
        "/api/v1/institutes", json={"name": "Second"}, headers=auth_headers(principal)
    )
    assert r.status_code == 409
    assert r.json()["code"] == "ALREADY_IN_INSTITUTE"


@pytest.mark.asyncio
async def test_invalid_institute_type(client, make_user, auth_headers):
    principal = await make_user()
    r = await client.post(
        "/api/v1/institutes",
        json={"name": "X", "type": "spaceship"},
        headers=auth_headers(principal),
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_list_institutes_admin_only(client, make_user, auth_headers):
    owner = await make_user(Role.STUDENT)
    await client.post(
        "/api/v1/institutes", json={"name": "Alpha"}, headers=auth_headers(owner)
    )
    admin = await make_user(Role.SUPER_ADMIN)

    r = await client.get("/api/v1/institutes", headers=auth_headers(admin))
    assert r.status_code == 200
    assert [i["name"] for i in r.json()] == ["Alpha"]

    teacher = await make_user(Role.TEACHER, institute_id=str(uuid.uuid4()))
    r = await client.get("/api/v1/institutes", headers=auth_headers(teacher))
    assert r.status_code == 403
    assert r.json()["code"] == "FORBIDDEN"


@pytest.mark.asyncio
async def test_students_are_scoped(client, make_user, auth_headers):
    institute_a = str(uuid.uuid4())
    institute_b = str(uuid.uuid4())
    teacher = await make_user(Role.TEACHER, institute_id=institute_a)
    mine = await make_user(Role.STUDENT, institute_id=institute_a)
    await make_user(Role.STUDENT, institute_id=institute_b)
    await make_user(Role.STUDENT)  # unaffiliated

    r = await client.get("/api/v1/students", headers=auth_headers(teacher))
    assert r.status_code == 200
    assert [s["id"] for s in r.json()] == [mine.id]

    # institute_id is ignored for tenant-bound callers
    r = await client.get(
        "/api/v1/students",
        params={"institute_id": institute_b},
        headers=auth_headers(teacher),
    )
    assert [s["id"] for s in r.json()] == [mine.id]


@pytest.mark.asyncio
async def test_teachers_listing_requires_institute(client, make_user, auth_headers):
    student = await make_user(Role.STUDENT)
    r = await client.get("/api/v1/teachers", headers=auth_headers(student))
    assert r.status_code == 403
    assert r.json()["code"] == "MISSING_INSTITUTE_CONTEXT"


@pytest.mark.asyncio
async def test_second_create_with_same_token_is_rejected(
    client, make_user, auth_headers, users, institutes
):
    """The token still says "no institute" after the first create."""
    principal = await make_user(Role.STUDENT)
    headers = auth_headers(principal)

    r = await client.post("/api/v1/institutes", json={"name": "First"}, headers=headers)
    assert r.status_code == 201
    first_id = r.json()["id"]

    r = await client.post("/api/v1/institutes", json={"name": "Second"}, headers=headers)
    assert r.status_code == 409
    assert r.json()["code"] == "ALREADY_IN_INSTITUTE"

    stored = await users.get(principal.id)
    assert str(stored.institute_id) == first_id
    assert [i.name for i in await institutes.list()] == ["First"]


@pytest.mark.asyncio
async def test_concurrent_bind_removes_the_extra_institute(
    make_user, users, institutes, monkeypatch
):
    principal = await make_user(Role.STUDENT)
    svc = InstituteService(institutes=institutes, users=users)

    # Another request binds the user between the check and the bind
    async def already_bound(user_id, institute_id, role):
        return None

    monkeypatch.setattr(users, "assign_institute", already_bound)

    with pytest.raises(AlreadyInInstitute):
        await svc.create_institute(principal, name="Racer", type="school")
    assert await institutes.list() == []


@pytest.mark.asyncio
async def test_admin_with_institute_can_create_more(
    client, make_user, auth_headers, users
):
    home = str(uuid.uuid4())
    admin = await make_user(Role.ADMIN, institute_id=home)

    r = await client.post(
        "/api/v1/institutes", json={"name": "Branch"}, headers=auth_headers(admin)
    )
    assert r.status_code == 201
    assert str((await users.get(admin.id)).institute_id) == home
