"""Coupon evaluation: eligibility checks and discount arithmetic."""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models import Coupon, CouponType

_CENTS = Decimal("0.01")


class CouponError(HTTPException):
    """A coupon that cannot be applied to the given amount."""

    def __init__(self, detail: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> None:
        super().__init__(status_code=status_code, detail=detail)


@dataclass(frozen=True)
class CouponQuote:
    coupon: Coupon
    discount: Decimal
    final_amount: Decimal
    is_free_shipping: bool


def _cents(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def _as_aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def evaluate_coupon(coupon: Coupon, amount: Decimal, now: datetime | None = None) -> CouponQuote:
    """Price *amount* with *coupon* applied.

    Raises :class:`CouponError` (404) for an inactive or expired coupon and
    (400) for an exhausted usage limit or an amount below the minimum.
    """
    now = now or datetime.now(UTC)

    if not coupon.is_active or (
        coupon.expires_at is not None and _as_aware(coupon.expires_at) <= now
    ):
        raise CouponError("Invalid or expired coupon code", status.HTTP_404_NOT_FOUND)

    if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
        raise CouponError("Coupon usage limit exceeded")

    if coupon.min_amount is not None and amount < coupon.min_amount:
        raise CouponError(f"Minimum order amount of ${coupon.min_amount} required")

    match coupon.type:
        case CouponType.PERCENTAGE:
            discount = amount * Decimal(coupon.value) / 100
            if coupon.max_discount is not None:
                discount = min(discount, Decimal(coupon.max_discount))
        case CouponType.FIXED_AMOUNT:
            discount = min(Decimal(coupon.value), amount)
        case _:
            discount = Decimal("0")

    discount = _cents(discount)
    return CouponQuote(
        coupon=coupon,
        discount=discount,
        final_amount=_cents(amount - discount),
        is_free_shipping=coupon.type == CouponType.FREE_SHIPPING,
    )


async def quote_coupon(db: AsyncSession, code: str, amount: Decimal) -> CouponQuote:
    """Look up *code* (case-insensitive) and evaluate it against *amount*."""
    result = await db.execute(select(Coupon).where(Coupon.code == code.strip().upper()))
    coupon = result.scalar_one_or_none()
    if coupon is None:
        raise CouponError("Invalid or expired coupon code", status.HTTP_404_NOT_FOUND)
    return evaluate_coupon(coupon, amount)
