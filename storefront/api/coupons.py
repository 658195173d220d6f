"""Public coupon validation."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.dependencies import get_db
from storefront.schemas.common import ErrorResponse
from storefront.schemas.coupon import CouponQuoteResponse, CouponValidateRequest
from storefront.services.coupons import quote_coupon

router = APIRouter(prefix="/coupons", tags=["Coupons"])


@router.post(
    "/validate",
    response_model=CouponQuoteResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Usage limit reached or amount too low"},
        404: {"model": ErrorResponse, "description": "Invalid or expired coupon code"},
    },
)
async def validate_coupon(
    body: CouponValidateRequest,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> CouponQuoteResponse:
    """Price *amount* with the coupon applied without consuming a use."""
    quote = await quote_coupon(db, body.code, body.amount)
    return CouponQuoteResponse.model_validate(quote)
