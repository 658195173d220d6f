"""Tests for storefront/api/categories.py: public category browsing."""

import uuid
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from storefront.api.categories import router as categories_router
from storefront.database import get_db
from storefront.models import Category, Product

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_product(*, name: str = "Men's Jacket", sku: str = "MJK002") -> MagicMock:
    product = MagicMock(spec=Product)
    product.id = uuid.uuid4()
    product.name = name
    product.slug = "mens-jacket"
    product.sku = sku
    product.old_price = Decimal("100.00")
    product.new_price = Decimal("80.00")
    product.is_on_sale = False
    return product


def _make_category(
    *,
    name: str = "Men",
    slug: str = "men",
    products: list[Any] | None = None,
    parent_id: uuid.UUID | None = None,
    children: list[Any] | None = None,
) -> MagicMock:
    """Return a MagicMock shaped like a Category ORM instance."""
    category = MagicMock(spec=Category)
    category.id = uuid.uuid4()
    category.name = name
    category.slug = slug
    category.description = f"Fashion items for {name.lower()}"
    category.is_active = True
    category.created_at = datetime.now(UTC)
    category.parent_id = parent_id
    category.products = products if products is not None else []
    category.children = children if children is not None else []
    return category


def _make_app(db_mock: Any) -> FastAPI:
    app = FastAPI()
    app.include_router(categories_router)

    async def override_get_db() -> AsyncGenerator[Any]:
        yield db_mock

    app.dependency_overrides[get_db] = override_get_db
    return app


# ---------------------------------------------------------------------------
# GET /categories
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_categories_returns_rows_in_order():
    mock_result = MagicMock()
    mock_result.scalars.return_value.all.return_value = [
        _make_category(name="Kids", slug="kids"),
        _make_category(name="Men", slug="men"),
    ]
    db_mock = AsyncMock()
    db_mock.execute = AsyncMock(return_value=mock_result)

    app = _make_app(db_mock)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/categories")

    assert response.status_code == 200
    assert [c["slug"] for c in response.json()] == ["kids", "men"]


@pytest.mark.asyncio
async def test_list_categories_only_queries_active_rows():
    mock_result = MagicMock()
    mock_result.scalars.return_value.all.return_value = []
    db_mock = AsyncMock()
    db_mock.execute = AsyncMock(return_value=mock_result)

    app = _make_app(db_mock)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/categories")

    assert response.json() == []
    query = db_mock.execute.await_args.args[0]
    assert "categories.is_active" in str(query.whereclause)


# ---------------------------------------------------------------------------
# GET /categories/{slug}
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_get_category_includes_products():
    category = _make_category(products=[_make_product()])
    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = category
    db_mock = AsyncMock()
    db_mock.execute = AsyncMock(return_value=mock_result)

    app = _make_app(db_mock)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/categories/men")

    assert response.status_code == 200
    data = response.json()
    assert data["slug"] == "men"
    assert len(data["products"]) == 1
    assert data["products"][0]["sku"] == "MJK002"
    assert data["products"][0]["new_price"] == "80.00"


@pytest.mark.asyncio
async def test_get_unknown_category_returns_404():
    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = None
    db_mock = AsyncMock()
    db_mock.execute = AsyncMock(return_value=mock_result)

    app = _make_app(db_mock)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/categories/unknown")

    assert response.status_code == 404
    assert response.json()["detail"] == "Category not found"


# ---------------------------------------------------------------------------
# GET /categories/hierarchy
# ---------------------------------------------------------------------------


def _hierarchy_db(roots: list[Any], counts: list[tuple[uuid.UUID, int]]) -> AsyncMock:
    roots_result = MagicMock()
    roots_result.scalars.return_value.all.return_value = roots
    counts_result = MagicMock()
    counts_result.all.return_value = counts
    db_mock = AsyncMock()
    db_mock.execute = AsyncMock(side_effect=[roots_result, counts_result])
    return db_mock


@pytest.mark.asyncio
async def test_hierarchy_nests_children_with_product_counts():
    men = _make_category()
    shirts = _make_category(name="Shirts", slug="shirts", parent_id=men.id)
    jackets = _make_category(name="Jackets", slug="jackets", parent_id=men.id)
    men.children = [jackets, shirts]
    women = _make_category(name="Women", slug="women")
    db_mock = _hierarchy_db([men, women], [(men.id, 1), (shirts.id, 3)])

    app = _make_app(db_mock)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/categories/hierarchy")

    assert response.status_code == 200
    data = response.json()
    assert [(c["slug"], c["product_count"]) for c in data] == [("men", 1), ("women", 0)]
    assert [(c["slug"], c["product_count"]) for c in data[0]["children"]] == [
        ("jackets", 0),
        ("shirts", 3),
    ]
    assert data[0]["children"][0]["parent_id"] == str(men.id)
    assert "children" not in data[0]["children"][0]
    assert data[1]["children"] == []


@pytest.mark.asyncio
async def test_hierarchy_only_queries_active_roots():
    db_mock = _hierarchy_db([], [])

    app = _make_app(db_mock)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/categories/hierarchy")

    assert response.json() == []
    where = str(db_mock.execute.await_args_list[0].args[0].whereclause)
    assert "categories.parent_id IS NULL" in where
    assert "categories.is_active" in where
