"""Tests for storefront/dependencies.py: get_current_user and the admin gate."""

import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import Depends, FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from storefront.database import get_db
from storefront.dependencies import get_current_user, require_admin
from storefront.models import Role, User
from storefront.services.auth import create_access_token, create_refresh_token

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_user(*, role: Role = Role.CUSTOMER, is_active: bool = True) -> MagicMock:
    """Return a MagicMock shaped like a User ORM instance."""
    user = MagicMock(spec=User)
    user.id = uuid.uuid4()
    user.email = "alice@example.com"
    user.role = role
    user.is_active = is_active
    return user


@asynccontextmanager
async def _make_client(db_mock: Any) -> AsyncGenerator[AsyncClient]:
    """Build an AsyncClient with a minimal test app and get_db overridden."""
    mini_app = FastAPI()

    @mini_app.get("/protected")
    async def protected(current_user: User = Depends(get_current_user)):  # noqa: B008
        return {"id": str(current_user.id), "email": current_user.email}

    @mini_app.get("/admin")
    async def admin_only(current_user: User = Depends(require_admin)):  # noqa: B008
        return {"id": str(current_user.id), "role": current_user.role}

    async def override_get_db() -> AsyncGenerator[Any]:
        yield db_mock

    mini_app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=mini_app), base_url="http://test") as c:
        yield c


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# get_current_user
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_bearer_valid_token_returns_user():
    user = _make_user()
    token = create_access_token(str(user.id), user.email, user.role)

    db_mock = AsyncMock()
    db_mock.get = AsyncMock(return_value=user)

    async with _make_client(db_mock) as client:
        response = await client.get("/protected", headers=_bearer(token))

    assert response.status_code == 200
    assert response.json()["email"] == user.email


@pytest.mark.asyncio
async def test_missing_header_returns_401():
    async with _make_client(AsyncMock()) as client:
        response = await client.get("/protected")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_bearer_invalid_token_returns_401():
    async with _make_client(AsyncMock()) as client:
        response = await client.get("/protected", headers=_bearer("not.a.valid.token"))

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_bearer_refresh_token_returns_401():
    """A refresh token must NOT be accepted on protected routes."""
    user = _make_user()
    db_mock = AsyncMock()
    db_mock.get = AsyncMock(return_value=user)

    async with _make_client(db_mock) as client:
        response = await client.get(
            "/protected", headers=_bearer(create_refresh_token(str(user.id)))
        )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_inactive_user_returns_401():
    user = _make_user(is_active=False)
    db_mock = AsyncMock()
    db_mock.get = AsyncMock(return_value=user)

    async with _make_client(db_mock) as client:
        response = await client.get(
            "/protected",
            headers=_bearer(create_access_token(str(user.id), user.email, user.role)),
        )

    assert response.status_code == 401


# ---------------------------------------------------------------------------
# require_admin
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_admin_gate_allows_admin():
    admin = _make_user(role=Role.ADMIN)
    db_mock = AsyncMock()
    db_mock.get = AsyncMock(return_value=admin)

    async with _make_client(db_mock) as client:
        response = await client.get(
            "/admin",
            headers=_bearer(create_access_token(str(admin.id), admin.email, admin.role)),
        )

    assert response.status_code == 200
    assert response.json()["role"] == "ADMIN"


@pytest.mark.asyncio
async def test_admin_gate_rejects_customer_with_403():
    user = _make_user(role=Role.CUSTOMER)
    db_mock = AsyncMock()
    db_mock.get = AsyncMock(return_value=user)

    async with _make_client(db_mock) as client:
        response = await client.get(
            "/admin",
            headers=_bearer(create_access_token(str(user.id), user.email, user.role)),
        )

    assert response.status_code == 403
    assert response.json()["detail"] == "Access denied. Admin only."


@pytest.mark.asyncio
async def test_admin_gate_reads_role_from_database_not_token():
    """A token claiming ADMIN does not help a user whose stored role is CUSTOMER."""
    user = _make_user(role=Role.CUSTOMER)
    db_mock = AsyncMock()
    db_mock.get = AsyncMock(return_value=user)

    async with _make_client(db_mock) as client:
        response = await client.get(
            "/admin",
            headers=_bearer(create_access_token(str(user.id), user.email, Role.ADMIN)),
        )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_gate_sees_role_demotion_immediately():
    """A token issued while ADMIN stops working once the stored role changes."""
    user = _make_user(role=Role.ADMIN)
    token = create_access_token(str(user.id), user.email, Role.ADMIN)
    db_mock = AsyncMock()
    db_mock.get = AsyncMock(return_value=user)

    async with _make_client(db_mock) as client:
        first = await client.get("/admin", headers=_bearer(token))
        user.role = Role.CUSTOMER
        second = await client.get("/admin", headers=_bearer(token))

    assert first.status_code == 200
    assert second.status_code == 403


@pytest.mark.asyncio
async def test_admin_gate_missing_user_returns_403():
    db_mock = AsyncMock()
    db_mock.get = AsyncMock(return_value=None)

    async with _make_client(db_mock) as client:
        response = await client.get(
            "/admin",
            headers=_bearer(create_access_token(str(uuid.uuid4()), "gone@example.com", Role.ADMIN)),
        )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_gate_lookup_failure_returns_500(caplog):
    db_mock = AsyncMock()
    db_mock.get = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("db down")))

    async with _make_client(db_mock) as client:
        response = await client.get(
            "/admin",
            headers=_bearer(create_access_token(str(uuid.uuid4()), "a@example.com", Role.ADMIN)),
        )

    assert response.status_code == 500
    assert response.json()["detail"] == "Authentication error"
    assert any("Admin role lookup failed" in r.message for r in caplog.records)


@pytest.mark.asyncio
async def test_admin_gate_without_token_returns_401():
    async with _make_client(AsyncMock()) as client:
        response = await client.get("/admin")

    assert response.status_code == 401
