"""Tests for middleware — security headers, request IDs, rate limiting.

Learn: Redis isn't running in tests, so the rate limiter normally skips
itself. The rate-limit tests swap in a tiny in-memory counter instead.
"""

import uuid

import pytest

from eduflow.middleware import rate_limit


class FakeRedis:
    def __init__(self):
        self.counts: dict[str, int] = {}
        self.ttls: dict[str, int] = {}

    async def incr(self, key):
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key, seconds):
        self.ttls[key] = seconds


@pytest.mark.asyncio
async def test_security_headers(client):
    r = await client.post("/api/v1/auth/logout")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"
    assert r.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert "Strict-Transport-Security" not in r.headers


@pytest.mark.asyncio
async def test_security_headers_on_errors(client):
    r = await client.get("/api/v1/auth/profile")
    assert r.status_code == 401
    assert r.headers["X-Frame-Options"] == "DENY"


@pytest.mark.asyncio
async def test_request_id_generated(client):
    r1 = await client.post("/api/v1/auth/logout")
    r2 = await client.post("/api/v1/auth/logout")
    assert r1.headers["X-Request-ID"] != r2.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_request_id_propagated(client):
    r = await client.post(
        "/api/v1/auth/logout", headers={"X-Request-ID": "trace-12345"}
    )
    assert r.headers["X-Request-ID"] == "trace-12345"


@pytest.mark.asyncio
@pytest.mark.parametrize("incoming", ["x" * 129, "id with spaces", "../etc/passwd"])
async def test_unusual_request_id_is_replaced(client, incoming):
    r = await client.post("/api/v1/auth/logout", headers={"X-Request-ID": incoming})
    echoed = r.headers["X-Request-ID"]
    assert echoed != incoming
    assert uuid.UUID(echoed)


@pytest.mark.asyncio
async def test_rate_limit_skipped_without_redis(client):
    r = await client.post("/api/v1/auth/logout")
    assert "X-RateLimit-Limit" not in r.headers


@pytest.mark.asyncio
async def test_login_attempts_are_rate_limited(client, monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(rate_limit, "get_redis", lambda: fake)

    limit = None
    for _ in range(10):
        r = await client.post(
            "/api/v1/auth/login", json={"email": "a@test.com", "password": "P1"}
        )
        assert r.status_code == 401
        limit = r.headers["X-RateLimit-Limit"]
    assert limit == "10"

    r = await client.post(
        "/api/v1/auth/login", json={"email": "a@test.com", "password": "P1"}
    )
    assert r.status_code == 429
    assert r.json()["code"] == "RATE_LIMITED"
    assert r.headers["Retry-After"] == "60"
    assert all(ttl == 120 for ttl in fake.ttls.values())


@pytest.mark.asyncio
async def test_api_bucket_is_separate(client, monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(rate_limit, "get_redis", lambda: fake)

    r = await client.post("/api/v1/auth/logout")
    assert r.headers["X-RateLimit-Limit"] == "100"
    assert r.headers["X-RateLimit-Remaining"] == "99"
    assert all(":api:" in key for key in fake.counts)
