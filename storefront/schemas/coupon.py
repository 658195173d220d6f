import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from storefront.models import CouponType

# Codes are stored and compared upper-case.  Length is checked after stripping.
CouponCode = Annotated[
    str,
    StringConstraints(strip_whitespace=True, to_upper=True, min_length=1, max_length=50),
]


class CouponCreate(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "code": "SPRING15",
                "type": "PERCENTAGE",
                "value": "15",
                "min_amount": "40",
                "max_discount": "25",
                "usage_limit": 500,
                "expires_at": "2026-06-01T00:00:00Z",
            }
        }
    )

    code: CouponCode
    type: CouponType
    value: Decimal = Field(..., ge=0, decimal_places=2)
    min_amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    max_discount: Decimal | None = Field(None, ge=0, decimal_places=2)
    usage_limit: int | None = Field(None, ge=1)
    is_active: bool = True
    expires_at: datetime | None = None


class CouponUpdate(BaseModel):
    code: CouponCode | None = None
    type: CouponType | None = None
    value: Decimal | None = Field(None, ge=0, decimal_places=2)
    min_amount: Decimal | None = Field(None, ge=0, decimal_places=2)
    max_discount: Decimal | None = Field(None, ge=0, decimal_places=2)
    usage_limit: int | None = Field(None, ge=1)
    is_active: bool | None = None
    expires_at: datetime | None = None

    @field_validator("code", "type", "value", "is_active")
    @classmethod
    def reject_null(cls, v: object) -> object:
        if v is None:
            raise ValueError("Field may be omitted but not null")
        return v


class CouponResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    code: str
    type: CouponType
    value: Decimal
    min_amount: Decimal | None
    max_discount: Decimal | None
    usage_limit: int | None
    used_count: int
    is_active: bool
    expires_at: datetime | None
    created_at: datetime


class CouponValidateRequest(BaseModel):
    code: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0)


class CouponQuoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    coupon: CouponResponse
    discount: Decimal
    final_amount: Decimal
    is_free_shipping: bool
