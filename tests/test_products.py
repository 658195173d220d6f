"""Tests for storefront/api/products.py: catalog listing, product pages and reviews."""

import uuid
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from decimal import Decimal
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import IntegrityError

from storefront.api.products import rating_summary
from storefront.api.products import router as products_router
from storefront.database import get_db
from storefront.models import Product, Role, User
from storefront.services.auth import create_access_token

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_NOW = datetime(2026, 1, 10, 8, 0, tzinfo=UTC)


def _make_user() -> MagicMock:
    user = MagicMock(spec=User)
    user.id = uuid.uuid4()
    user.email = "customer@example.com"
    user.first_name = "John"
    user.last_name = "Doe"
    user.role = Role.CUSTOMER
    user.is_active = True
    return user


def _review(rating: int, author: Any) -> SimpleNamespace:
    return SimpleNamespace(
        id=uuid.uuid4(),
        product_id=uuid.uuid4(),
        rating=rating,
        title="Good Product",
        comment="Nice quality and good fit.",
        is_verified=True,
        created_at=_NOW,
        user=author,
    )


def _make_product(*, reviews: list[Any] | None = None, **overrides: Any) -> MagicMock:
    """Return a MagicMock shaped like a fully loaded Product ORM instance."""
    category_id = uuid.uuid4()
    product = MagicMock(spec=Product)
    product.id = uuid.uuid4()
    product.name = "Men's Classic Shirt"
    product.slug = "mens-classic-shirt"
    product.sku = "MSH001"
    product.description = "A comfortable and stylish classic shirt."
    product.short_description = "Premium cotton classic shirt"
    product.brand = "FashionBrand"
    product.category_id = category_id
    product.old_price = Decimal("50.00")
    product.new_price = Decimal("40.00")
    product.cost_price = Decimal("25.00")
    product.stock = 100
    product.min_stock = 5
    product.is_active = True
    product.is_featured = True
    product.is_on_sale = True
    product.created_at = _NOW
    product.category = SimpleNamespace(id=category_id, name="Men", slug="men")
    product.images = [
        SimpleNamespace(
            id=uuid.uuid4(),
            url="/uploads/products/seed/mens-classic-shirt.jpg",
            alt="Men's Classic Shirt",
            order=0,
            is_primary=True,
        )
    ]
    product.videos = []
    product.variants = [
        SimpleNamespace(
            id=uuid.uuid4(),
            name="Size / Color",
            value="M / Blue",
            sku="MSH001-M-Blue",
            stock=12,
            is_active=True,
        )
    ]
    product.reviews = reviews if reviews is not None else []
    for key, value in overrides.items():
        setattr(product, key, value)
    return product


def _make_app(db_mock: Any) -> FastAPI:
    app = FastAPI()
    app.include_router(products_router)

    async def override_get_db() -> AsyncGenerator[Any]:
        yield db_mock

    app.dependency_overrides[get_db] = override_get_db
    return app


def _paged_db(total: int, rows: list[Any]) -> AsyncMock:
    count_result = MagicMock()
    count_result.scalar_one.return_value = total
    rows_result = MagicMock()
    rows_result.scalars.return_value.all.return_value = rows
    db_mock = AsyncMock()
    db_mock.execute = AsyncMock(side_effect=[count_result, rows_result])
    return db_mock


def _single_db(product: Any) -> AsyncMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = product
    db_mock = AsyncMock()
    db_mock.execute = AsyncMock(return_value=result)
    return db_mock


# ---------------------------------------------------------------------------
# rating_summary
# ---------------------------------------------------------------------------


def test_rating_summary_empty():
    assert rating_summary([]) == (0.0, 0)


def test_rating_summary_rounds_to_one_decimal():
    reviews = [SimpleNamespace(rating=r) for r in (5, 4, 4)]
    assert rating_summary(reviews) == (4.3, 3)


# ---------------------------------------------------------------------------
# GET /products
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_products_is_paginated():
    db_mock = _paged_db(13, [_make_product()])

    app = _make_app(db_mock)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/products", params={"page": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"] == {"page": 2, "limit": 12, "total": 13, "pages": 2}
    card = body["data"][0]
    assert card["slug"] == "mens-classic-shirt"
    assert card["category"]["slug"] == "men"
    assert card["images"][0]["is_primary"] is True
    assert "cost_price" not in card


@pytest.mark.asyncio
async def test_list_products_filters_reach_the_query():
    db_mock = _paged_db(0, [])

    app = _make_app(db_mock)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get(
            "/products",
            params={"category": "men", "featured": "true", "search": "shirt", "max_price": "50"},
        )

    assert response.status_code == 200
    page_query = str(db_mock.execute.await_args_list[1].args[0])
    assert "categories.slug" in page_query
    assert "products.is_featured" in page_query
    assert "lower(products.name) LIKE lower(" in page_query
    assert "products.new_price <=" in page_query


@pytest.mark.asyncio
async def test_list_products_rejects_oversized_limit():
    app = _make_app(AsyncMock())
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/products", params={"limit": 500})

    assert response.status_code == 422


# ---------------------------------------------------------------------------
# GET /products/{id_or_slug}
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_product_by_slug_includes_rating_summary():
    author = SimpleNamespace(first_name="John", last_name="Doe")
    product = _make_product(reviews=[_review(5, author), _review(4, author)])
    db_mock = _single_db(product)

    app = _make_app(db_mock)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/products/mens-classic-shirt")

    assert response.status_code == 200
    data = response.json()
    assert data["average_rating"] == 4.5
    assert data["review_count"] == 2
    assert data["reviews"][0]["user"] == {"first_name": "John", "last_name": "Doe"}
    assert data["variants"][0]["value"] == "M / Blue"
    assert "cost_price" not in data
    query = str(db_mock.execute.await_args.args[0])
    assert "products.slug" in query


@pytest.mark.asyncio
async def test_get_product_by_uuid_looks_up_id():
    product = _make_product()
    db_mock = _single_db(product)

    app = _make_app(db_mock)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get(f"/products/{product.id}")

    assert response.status_code == 200
    assert response.json()["average_rating"] == 0
    where = str(db_mock.execute.await_args.args[0].whereclause)
    assert "products.id" in where
    assert "products.slug" not in where


@pytest.mark.asyncio
async def test_get_unknown_product_returns_404():
    app = _make_app(_single_db(None))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/products/no-such-product")

    assert response.status_code == 404


# ---------------------------------------------------------------------------
# POST /products/{product_id}/reviews
# ---------------------------------------------------------------------------


def _review_db(user: Any, product: Any, existing: Any = None) -> AsyncMock:
    async def fake_get(model: Any, key: Any) -> Any:
        return user if model is User else product

    async def fake_refresh(obj: Any) -> None:
        obj.id = uuid.uuid4()
        obj.created_at = _NOW

    existing_result = MagicMock()
    existing_result.scalar_one_or_none.return_value = existing

    db_mock = AsyncMock()
    db_mock.get = AsyncMock(side_effect=fake_get)
    db_mock.execute = AsyncMock(return_value=existing_result)
    db_mock.add = MagicMock()
    db_mock.refresh = AsyncMock(side_effect=fake_refresh)
    return db_mock


def _auth(user: Any) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id), user.email, user.role)}"}


@pytest.mark.asyncio
async def test_create_review():
    user = _make_user()
    product = _make_product()
    db_mock = _review_db(user, product)

    app = _make_app(db_mock)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post(
            f"/products/{product.id}/reviews",
            json={"rating": 5, "title": "Perfect Fit", "comment": "Exactly right."},
            headers=_auth(user),
        )

    assert response.status_code == 201
    data = response.json()
    assert data["rating"] == 5
    assert data["is_verified"] is False
    assert data["user"] == {"first_name": "John", "last_name": "Doe"}
    db_mock.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_review_requires_login():
    product = _make_product()
    app = _make_app(AsyncMock())
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post(f"/products/{product.id}/reviews", json={"rating": 5})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_review_rating_out_of_range_returns_422():
    user = _make_user()
    product = _make_product()
    app = _make_app(_review_db(user, product))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post(
            f"/products/{product.id}/reviews", json={"rating": 6}, headers=_auth(user)
        )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_second_review_returns_409():
    user = _make_user()
    product = _make_product()
    db_mock = _review_db(user, product, existing=uuid.uuid4())

    app = _make_app(db_mock)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post(
            f"/products/{product.id}/reviews", json={"rating": 4}, headers=_auth(user)
        )

    assert response.status_code == 409
    db_mock.add.assert_not_called()


@pytest.mark.asyncio
async def test_concurrent_duplicate_review_returns_409():
    user = _make_user()
    product = _make_product()
    db_mock = _review_db(user, product)
    db_mock.commit = AsyncMock(side_effect=IntegrityError("dup", {}, Exception()))

    app = _make_app(db_mock)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post(
            f"/products/{product.id}/reviews", json={"rating": 4}, headers=_auth(user)
        )

    assert response.status_code == 409
    db_mock.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_review_for_unknown_product_returns_404():
    user = _make_user()
    app = _make_app(_review_db(user, None))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post(
            f"/products/{uuid.uuid4()}/reviews", json={"rating": 4}, headers=_auth(user)
        )

    assert response.status_code == 404
