"""Storefront-side checkout flow.

Mirrors what the browser does around the PayPal buttons: ask the backend to
create an order for the cart total, then, once the buyer approves it, ask the
backend to capture it and report the outcome.  After a successful capture the
cart is cleared and the shopper sent home following a short pause so the
confirmation message can be read.

Approving the same order twice is not prevented here; the second capture is
forwarded to PayPal, which refuses it.
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

import httpx

logger = logging.getLogger(__name__)

COMPLETION_DELAY_SECONDS = 4.0
HOME_PATH = "/"


class CheckoutError(Exception):
    """The backend did not hand back a usable order or capture."""


@dataclass
class CartEntry:
    product_id: str
    name: str
    price: Decimal
    quantity: int = 1


@dataclass
class Cart:
    """In-memory shopping cart."""

    entries: list[CartEntry] = field(default_factory=list)

    def add(self, entry: CartEntry) -> None:
        for existing in self.entries:
            if existing.product_id == entry.product_id:
                existing.quantity += entry.quantity
                return
        self.entries.append(entry)

    @property
    def total(self) -> Decimal:
        return sum((e.price * e.quantity for e in self.entries), Decimal("0"))

    @property
    def total_items(self) -> int:
        return sum(e.quantity for e in self.entries)

    def clear(self) -> None:
        self.entries.clear()


class PayPalCheckout:
    """Drive one checkout against the storefront API.

    *on_complete* receives the path to navigate to once the payment has been
    captured and the cart emptied.
    """

    def __init__(
        self,
        total: Decimal,
        cart: Cart,
        on_complete: Callable[[str], None],
        api_base_url: str,
        *,
        completion_delay: float = COMPLETION_DELAY_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.total = Decimal(total)
        self.cart = cart
        self.on_complete = on_complete
        self.completion_delay = completion_delay
        self.message = ""
        self.loading = False
        self._http = httpx.AsyncClient(base_url=api_base_url, transport=transport, timeout=30.0)
        self._completion: asyncio.Task[None] | None = None

    async def aclose(self) -> None:
        await self._http.aclose()

    def cart_lines(self) -> list[dict[str, Any]]:
        """The whole cart is sent as a single line priced at the total."""
        return [
            {
                "id": "cart",
                "name": "Cart total",
                "description": f"{self.cart.total_items} item(s)",
                "quantity": 1,
                "price": str(self.total),
            }
        ]

    async def create_order(self) -> str:
        """Create a PayPal order through the backend and return its id."""
        self.loading = True
        try:
            response = await self._http.post("/api/orders", json={"cart": self.cart_lines()})
            order = response.json()
            order_id = order.get("id") if isinstance(order, dict) else None
            if not order_id:
                raise CheckoutError("Could not create PayPal order.")
            return order_id
        except (httpx.HTTPError, ValueError, CheckoutError) as exc:
            logger.error("Error in create_order: %s", exc)
            self.message = f"Could not initiate PayPal Checkout: {exc}"
            raise
        finally:
            self.loading = False

    async def approve(self, order_id: str) -> dict[str, Any] | None:
        """Capture an approved order.

        On success the confirmation is stored in :attr:`message` and the
        completion step is scheduled; the capture payload is returned.  On
        failure :attr:`message` explains why and ``None`` is returned.
        """
        self.loading = True
        try:
            response = await self._http.post(f"/api/orders/{order_id}/capture")
            data = response.json()
            transaction = data["purchase_units"][0]["payments"]["captures"][0]
            status, transaction_id = transaction["status"], transaction["id"]
        except (httpx.HTTPError, ValueError, LookupError, TypeError) as exc:
            logger.error("Error in approve for order %s: %r", order_id, exc)
            self.message = f"Transaction could not be processed: {exc}"
            return None
        finally:
            self.loading = False

        self.message = f"Transaction {status}.\nWith Transaction id:  {transaction_id}"
        self._completion = asyncio.create_task(self._complete())
        return data

    def on_error(self, error: Exception) -> None:
        """Record an error reported by the payment widget itself."""
        logger.error("PayPal Buttons error: %s", error)
        self.message = f"PayPal encountered an error: {error}"

    async def wait_for_completion(self) -> None:
        if self._completion is not None:
            await self._completion

    async def _complete(self) -> None:
        await asyncio.sleep(self.completion_delay)
        self.cart.clear()
        self.on_complete(HOME_PATH)
