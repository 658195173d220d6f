"""Tests for storefront/api/orders.py: PayPal create and capture pass-through."""

from collections.abc import AsyncGenerator

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from storefront.api.orders import router as orders_router
from storefront.middleware.error_handler import payment_provider_error_handler
from storefront.services.paypal import PaymentProviderError, PayPalClient, get_paypal_client

ORDER_ID = "5O190127TN364715T"

CAPTURE_BODY = {
    "id": ORDER_ID,
    "status": "COMPLETED",
    "purchase_units": [
        {"payments": {"captures": [{"id": "3C679366HH908993F", "status": "COMPLETED"}]}}
    ],
}


def _make_app(handler) -> FastAPI:
    """Minimal app with the orders router talking to a mocked PayPal."""
    app = FastAPI()
    app.include_router(orders_router)
    app.add_exception_handler(PaymentProviderError, payment_provider_error_handler)  # type: ignore[arg-type]

    async def override_paypal() -> AsyncGenerator[PayPalClient]:
        async with PayPalClient(
            "client-id",
            "client-secret",
            "https://paypal.test",
            transport=httpx.MockTransport(handler),
        ) as client:
            yield client

    app.dependency_overrides[get_paypal_client] = override_paypal
    return app


def _paypal(order_status: int = 201, capture_status: int = 201, seen: list | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.url.path == "/v1/oauth2/token":
            return httpx.Response(200, json={"access_token": "token"})
        if request.url.path == "/v2/checkout/orders":
            return httpx.Response(order_status, json={"id": ORDER_ID, "status": "CREATED"})
        return httpx.Response(capture_status, json=CAPTURE_BODY)

    return handler


_CART = {"cart": [{"id": "cart", "name": "Cart total", "quantity": 1, "price": "91.98"}]}


# ---------------------------------------------------------------------------
# POST /orders
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_order_returns_paypal_order():
    seen: list[httpx.Request] = []
    app = _make_app(_paypal(seen=seen))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/orders", json=_CART)

    assert response.status_code == 201
    assert response.json() == {"id": ORDER_ID, "status": "CREATED"}
    assert b'"value":"91.98"' in seen[-1].content.replace(b" ", b"")


@pytest.mark.asyncio
async def test_create_order_totals_multiple_lines():
    seen: list[httpx.Request] = []
    app = _make_app(_paypal(seen=seen))
    cart = {
        "cart": [
            {"id": "a", "name": "Shirt", "quantity": 2, "price": "40.00"},
            {"id": "b", "name": "Socks", "quantity": 1, "price": "11.98"},
        ]
    }
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/orders", json=cart)

    assert response.status_code == 201
    assert b'"value":"91.98"' in seen[-1].content.replace(b" ", b"")


@pytest.mark.asyncio
async def test_create_order_empty_cart_returns_422():
    app = _make_app(_paypal())
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/orders", json={"cart": []})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_order_provider_failure_returns_generic_500():
    app = _make_app(_paypal(order_status=400))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post("/orders", json=_CART)

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "INTERNAL_ERROR"
    assert "PayPal" not in error["message"]


# ---------------------------------------------------------------------------
# POST /orders/{order_id}/capture
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_capture_order_returns_paypal_json():
    seen: list[httpx.Request] = []
    app = _make_app(_paypal(seen=seen))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post(f"/orders/{ORDER_ID}/capture")

    assert response.status_code == 200
    assert response.json() == CAPTURE_BODY
    assert seen[-1].url.path == f"/v2/checkout/orders/{ORDER_ID}/capture"


@pytest.mark.asyncio
async def test_capture_rejected_by_paypal_returns_500():
    app = _make_app(_paypal(capture_status=422))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.post(f"/orders/{ORDER_ID}/capture")

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "INTERNAL_ERROR"
