"""Checkout pass-through to PayPal.

The storefront never stores orders or payment state: it asks PayPal to
create an order for the cart and later to capture it, handing PayPal's JSON
back to the caller as-is.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request, Response, status

from storefront.middleware.rate_limit import limiter
from storefront.schemas.checkout import CreateOrderRequest
from storefront.schemas.common import ErrorResponse
from storefront.services.paypal import PayPalClient, get_paypal_client

router = APIRouter(prefix="/orders", tags=["Checkout"])

_PROVIDER_FAILURE = {500: {"model": ErrorResponse, "description": "Payment provider failure"}}


@router.post("", status_code=status.HTTP_201_CREATED, responses=_PROVIDER_FAILURE)
@limiter.limit("20/minute")
async def create_order(
    request: Request,
    response: Response,
    body: CreateOrderRequest,
    paypal: PayPalClient = Depends(get_paypal_client),  # noqa: B008
) -> dict[str, Any]:
    """Create a PayPal order for ``sum(price * quantity)`` of the cart."""
    return await paypal.create_order(body.cart)


@router.post("/{order_id}/capture", responses=_PROVIDER_FAILURE)
async def capture_order(
    order_id: str,
    paypal: PayPalClient = Depends(get_paypal_client),  # noqa: B008
) -> dict[str, Any]:
    """Capture an approved PayPal order.

    Not idempotent: a repeated call is forwarded to PayPal, which rejects
    the second capture.
    """
    return await paypal.capture_order(order_id)
