"""Tests for storefront/middleware/rate_limit.py.

Covers:
- ``get_user_key``: key extraction from a Bearer JWT with IP fallback
- ``rate_limit_exceeded_handler``: 429 envelope format and header injection
- ``limiter``: rate limit enforcement via ``@limiter.limit()`` decorator
- Rate-limit response headers (X-RateLimit-*, Retry-After) on normal and 429 responses
"""

import uuid
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI, Request, Response
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient
from jose import jwt as jose_jwt
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from storefront.api.auth import router as auth_router
from storefront.config import settings
from storefront.database import get_db
from storefront.middleware.rate_limit import (
    get_remote_address,
    get_user_key,
    limiter,
    rate_limit_exceeded_handler,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_access_token(user_id: str | None = None) -> str:
    """Return a signed JWT with the given subject claim."""
    uid = user_id or str(uuid.uuid4())
    payload: dict[str, Any] = {"sub": uid, "type": "access"}
    return jose_jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _make_request(headers: dict[str, str] | None = None, client_host: str = "127.0.0.1") -> Request:
    """Build a minimal Starlette Request from a dict of headers."""
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    scope: dict[str, Any] = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "query_string": b"",
        "headers": raw_headers,
        "client": (client_host, 12345),
    }
    return Request(scope)


def _make_app(limit: str = "2/minute") -> FastAPI:
    """Return a minimal FastAPI app with a fresh per-test limiter."""
    test_limiter = Limiter(key_func=get_remote_address, headers_enabled=True)
    app = FastAPI()
    app.state.limiter = test_limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]

    @app.get("/limited")
    @test_limiter.limit(limit)
    async def limited(request: Request, response: Response) -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/user-limited")
    @test_limiter.limit(limit, key_func=get_user_key)
    async def user_limited(request: Request, response: Response) -> dict[str, str]:
        return {"status": "ok"}

    return app


# ---------------------------------------------------------------------------
# get_user_key: JWT extraction
# ---------------------------------------------------------------------------


class TestGetUserKeyFromJWT:
    def test_valid_bearer_jwt_returns_user_prefix(self) -> None:
        user_id = str(uuid.uuid4())
        token = _make_access_token(user_id)
        request = _make_request({"Authorization": f"Bearer {token}"})
        key = get_user_key(request)
        assert key == f"user:{user_id}"

    def test_bearer_prefix_required(self) -> None:
        token = _make_access_token()
        # Token without "Bearer " prefix should not be parsed as JWT
        request = _make_request({"Authorization": token})
        key = get_user_key(request)
        # Falls back to IP since no Bearer prefix
        assert not key.startswith("user:")

    def test_invalid_jwt_signature_falls_through(self) -> None:
        request = _make_request({"Authorization": "Bearer not.a.valid.jwt"})
        key = get_user_key(request)
        assert not key.startswith("user:")

    def test_jwt_without_sub_falls_through(self) -> None:
        # Token with no 'sub' claim
        payload: dict[str, Any] = {"type": "access"}
        token = jose_jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
        request = _make_request({"Authorization": f"Bearer {token}"})
        key = get_user_key(request)
        assert not key.startswith("user:")

    def test_expired_jwt_still_returns_user_key(self) -> None:
        """Expired tokens still identify the user for rate-limiting purposes."""
        user_id = str(uuid.uuid4())
        payload: dict[str, Any] = {
            "sub": user_id,
            "type": "access",
            "exp": datetime.now(UTC) - timedelta(hours=1),  # already expired
        }
        token = jose_jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
        request = _make_request({"Authorization": f"Bearer {token}"})
        key = get_user_key(request)
        assert key == f"user:{user_id}"


# ---------------------------------------------------------------------------
# get_user_key: IP fallback
# ---------------------------------------------------------------------------


class TestGetUserKeyIPFallback:
    def test_no_credentials_returns_ip(self) -> None:
        request = _make_request(client_host="10.0.0.1")
        key = get_user_key(request)
        assert key == "10.0.0.1"

    def test_invalid_bearer_falls_back_to_ip(self) -> None:
        request = _make_request({"Authorization": "Bearer bad-token"}, client_host="192.168.1.1")
        key = get_user_key(request)
        assert key == "192.168.1.1"

    def test_empty_bearer_falls_back_to_ip(self) -> None:
        request = _make_request({"Authorization": "Bearer "}, client_host="10.10.10.10")
        key = get_user_key(request)
        assert key == "10.10.10.10"


# ---------------------------------------------------------------------------
# rate_limit_exceeded_handler and X-RateLimit-* headers
# ---------------------------------------------------------------------------


class TestRateLimitExceededHandler:
    def test_429_uses_error_envelope(self) -> None:
        client = TestClient(_make_app(limit="1/minute"), raise_server_exceptions=False)
        client.get("/limited")
        res = client.get("/limited")

        assert res.status_code == 429
        assert res.json() == {
            "error": {
                "code": "RATE_LIMITED",
                "message": "Rate limit exceeded. Please try again later.",
                "details": None,
            }
        }
        assert "retry-after" in res.headers

    def test_429_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        client = TestClient(_make_app(limit="1/minute"), raise_server_exceptions=False)
        client.get("/limited")
        with caplog.at_level("WARNING", logger="storefront.middleware.rate_limit"):
            client.get("/limited")

        assert any("Rate limit" in r.getMessage() for r in caplog.records)


def test_normal_response_carries_rate_limit_headers() -> None:
    client = TestClient(_make_app(limit="100/minute"))
    first = client.get("/limited")
    second = client.get("/limited")

    assert first.status_code == 200
    assert first.headers["x-ratelimit-limit"] == "100"
    assert "x-ratelimit-reset" in first.headers
    assert int(second.headers["x-ratelimit-remaining"]) < int(first.headers["x-ratelimit-remaining"])


# ---------------------------------------------------------------------------
# Rate limit enforcement
# ---------------------------------------------------------------------------


class TestRateLimitEnforcement:
    def test_requests_within_limit_succeed(self) -> None:
        client = TestClient(_make_app(limit="3/minute"), raise_server_exceptions=False)
        for _ in range(3):
            res = client.get("/limited")
            assert res.status_code == 200

    def test_request_beyond_limit_returns_429(self) -> None:
        client = TestClient(_make_app(limit="2/minute"), raise_server_exceptions=False)
        client.get("/limited")
        client.get("/limited")
        res = client.get("/limited")
        assert res.status_code == 429

    def test_different_ips_have_independent_buckets(self) -> None:
        """Exceeding the limit from one client results in 429 for that client.

        TestClient always uses 127.0.0.1, so true multi-IP isolation is verified
        through the get_user_key unit tests above.  This test confirms that the
        rate limit is indeed tracked per-key and that 429 is returned once the
        limit is exhausted.
        """
        app = _make_app(limit="1/minute")
        c1 = TestClient(app, raise_server_exceptions=False)
        # c1 exhausts the limit
        c1.get("/limited")
        # Subsequent c1 request should be 429
        r1 = c1.get("/limited")
        assert r1.status_code == 429

    def test_user_key_isolates_per_user(self) -> None:
        """Two users have independent buckets when using get_user_key."""
        app = _make_app(limit="1/minute")
        uid1 = str(uuid.uuid4())
        uid2 = str(uuid.uuid4())
        token1 = _make_access_token(uid1)
        token2 = _make_access_token(uid2)

        client = TestClient(app, raise_server_exceptions=False)
        # user1 exhausts their limit
        client.get("/user-limited", headers={"Authorization": f"Bearer {token1}"})
        r1 = client.get("/user-limited", headers={"Authorization": f"Bearer {token1}"})
        assert r1.status_code == 429

        # user2 still has their own bucket
        r2 = client.get("/user-limited", headers={"Authorization": f"Bearer {token2}"})
        assert r2.status_code == 200


# ---------------------------------------------------------------------------
# limiter export
# ---------------------------------------------------------------------------


class TestLimiterExport:
    def test_limiter_is_limiter_instance(self) -> None:
        assert isinstance(limiter, Limiter)

    def test_limiter_uses_in_memory_storage(self) -> None:
        from limits.storage import MemoryStorage

        assert isinstance(limiter._storage, MemoryStorage)

    def test_limiter_has_headers_enabled(self) -> None:
        assert limiter._headers_enabled is True

    def test_limiter_default_key_is_remote_address(self) -> None:
        assert limiter._key_func is get_remote_address


# ---------------------------------------------------------------------------
# Endpoint limits: the real auth router with a mocked session
# ---------------------------------------------------------------------------
# The module-level ``limiter`` is shared; ``reset_rate_limiter`` (conftest.py)
# gives each test a clean window.


def _auth_app() -> tuple[FastAPI, AsyncMock]:
    result = MagicMock()
    result.scalar_one_or_none.return_value = None
    db_mock = AsyncMock()
    db_mock.execute = AsyncMock(return_value=result)

    app = FastAPI()
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
    app.include_router(auth_router)

    async def override_get_db() -> AsyncGenerator[Any]:
        yield db_mock

    app.dependency_overrides[get_db] = override_get_db
    return app, db_mock


_LOGIN = {"email": "nobody@example.com", "password": "wrong-password"}


@pytest.mark.asyncio
async def test_login_is_limited_to_ten_per_minute() -> None:
    app, _ = _auth_app()
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        for _ in range(10):
            resp = await client.post("/auth/login", json=_LOGIN)
            assert resp.status_code == 401

        resp = await client.post("/auth/login", json=_LOGIN)

    assert resp.status_code == 429
    assert resp.json()["error"]["code"] == "RATE_LIMITED"
    assert "retry-after" in resp.headers


@pytest.mark.asyncio
async def test_register_response_carries_rate_limit_headers() -> None:
    app, db_mock = _auth_app()

    async def fake_refresh(user: Any) -> None:
        user.id = uuid.uuid4()
        user.created_at = datetime.now(UTC)

    db_mock.add = MagicMock()
    db_mock.refresh = AsyncMock(side_effect=fake_refresh)

    payload = {
        "email": "jane@example.com",
        "password": "password123",
        "first_name": "Jane",
        "last_name": "Roe",
    }
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        resp = await client.post("/auth/register", json=payload)

    assert resp.status_code == 201
    assert resp.headers.get("x-ratelimit-limit") == "5"
    assert resp.headers.get("x-ratelimit-remaining") == "4"
