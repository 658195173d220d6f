"""PayPal Orders v2 client.

Checkout is delegated entirely to PayPal: the backend creates an order for
the cart total and later captures it, returning PayPal's JSON untouched.
Nothing is reconciled or stored locally.
"""

import logging
from collections.abc import AsyncGenerator, Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Protocol

import httpx

from storefront.config import settings

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


class PaymentProviderError(Exception):
    """Raised when PayPal is unreachable or answers with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class CartLine(Protocol):
    price: Decimal
    quantity: int


def cart_total(cart: Sequence[CartLine]) -> Decimal:
    """Return ``sum(price * quantity)`` rounded to cents."""
    total = sum((Decimal(line.price) * line.quantity for line in cart), Decimal("0"))
    return total.quantize(_CENTS, rounding=ROUND_HALF_UP)


class PayPalClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        base_url: str,
        *,
        currency: str = "USD",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self.currency = currency
        self._http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "PayPalClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _send(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("PayPal request %s %s failed: %s", method, url, exc)
            raise PaymentProviderError(f"PayPal request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = response.text

        if response.is_error:
            logger.error("PayPal %s %s returned %s: %s", method, url, response.status_code, body)
            raise PaymentProviderError(
                f"PayPal returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=body,
            )
        return body

    async def access_token(self) -> str:
        """Exchange the client credentials for a bearer token."""
        if not self._client_id or not self._client_secret:
            raise PaymentProviderError("PayPal credentials are not configured")
        body = await self._send(
            "POST",
            "/v1/oauth2/token",
            auth=(self._client_id, self._client_secret),
            data={"grant_type": "client_credentials"},
        )
        return body["access_token"]

    async def _authorized(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        token = await self.access_token()
        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
        return await self._send(method, url, headers=headers, **kwargs)

    async def create_order(self, cart: Sequence[CartLine]) -> dict[str, Any]:
        """Create a ``CAPTURE`` order for the cart total and return PayPal's response."""
        payload = {
            "intent": "CAPTURE",
            "purchase_units": [
                {
                    "amount": {
                        "currency_code": self.currency,
                        "value": f"{cart_total(cart):.2f}",
                    }
                }
            ],
        }
        order = await self._authorized("POST", "/v2/checkout/orders", json=payload)
        logger.info("Created PayPal order %s", order.get("id"))
        return order

    async def capture_order(self, order_id: str) -> dict[str, Any]:
        """Capture an approved order and return PayPal's response unchanged."""
        result = await self._authorized("POST", f"/v2/checkout/orders/{order_id}/capture")
        logger.info("Captured PayPal order %s: %s", order_id, result.get("status"))
        return result


async def get_paypal_client() -> AsyncGenerator[PayPalClient]:
    """FastAPI dependency: a request-scoped client built from settings."""
    async with PayPalClient(
        settings.paypal_client_id,
        settings.paypal_client_secret,
        settings.paypal_base_url,
        currency=settings.paypal_currency,
        timeout=settings.paypal_timeout_seconds,
    ) as client:
        yield client
