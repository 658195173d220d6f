"""Server-side cart and wishlist payloads."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from storefront.schemas.product import ProductResponse, ProductVariantResponse


class CartItemCreate(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={"example": {"product_id": "c0a80101-0000-4000-8000-000000000010", "quantity": 2}}
    )

    product_id: uuid.UUID
    quantity: int = Field(1, ge=1)
    variant_id: uuid.UUID | None = None


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=1)


class CartSyncLine(BaseModel):
    product_id: uuid.UUID
    quantity: int = Field(1, ge=1)


class CartSyncRequest(BaseModel):
    """A browser-held cart to replace the stored one."""

    items: list[CartSyncLine]


class CartProduct(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    sku: str
    new_price: Decimal
    stock: int


class CartItemResponse(BaseModel):
    id: uuid.UUID
    product_id: uuid.UUID
    variant_id: uuid.UUID | None
    quantity: int
    image: str | None
    line_total: Decimal
    product: CartProduct
    variant: ProductVariantResponse | None = None


class StockIssue(BaseModel):
    item_id: uuid.UUID
    product_id: uuid.UUID
    name: str
    requested: int
    available: int


class CartResponse(BaseModel):
    items: list[CartItemResponse]
    subtotal: Decimal
    total_items: int


class CartSummaryResponse(CartResponse):
    stock_issues: list[StockIssue] = []


class WishlistItemCreate(BaseModel):
    product_id: uuid.UUID


class MoveToCartRequest(BaseModel):
    quantity: int = Field(1, ge=1)


class WishlistItemResponse(BaseModel):
    id: uuid.UUID
    product_id: uuid.UUID
    created_at: datetime
    average_rating: float = 0
    product: ProductResponse


class WishlistCheckResponse(BaseModel):
    in_wishlist: bool
    wishlist_item_id: uuid.UUID | None = None
