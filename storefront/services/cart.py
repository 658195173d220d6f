"""Server-side cart: line lookup, stock checks, merging and totals."""

import logging
import uuid
from collections.abc import Sequence
from decimal import Decimal

from fastapi import HTTPException, status
from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.models import CartItem, Product, ProductVariant
from storefront.schemas.cart import (
    CartItemResponse,
    CartProduct,
    CartResponse,
    CartSyncLine,
    StockIssue,
)
from storefront.schemas.product import ProductVariantResponse

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")

_ITEM_NOT_FOUND = HTTPException(
    status_code=status.HTTP_404_NOT_FOUND,
    detail="Cart item not found",
)

_PRODUCT_NOT_FOUND = HTTPException(
    status_code=status.HTTP_404_NOT_FOUND,
    detail="Product not found",
)

_VARIANT_NOT_FOUND = HTTPException(
    status_code=status.HTTP_404_NOT_FOUND,
    detail="Product variant not found",
)

_INSUFFICIENT_STOCK = HTTPException(
    status_code=status.HTTP_400_BAD_REQUEST,
    detail="Insufficient stock",
)


def cart_items_query(user_id: uuid.UUID) -> Select[tuple[CartItem]]:
    """Select a user's cart lines, newest first, with product, images and variant loaded."""
    return (
        select(CartItem)
        .where(CartItem.user_id == user_id)
        .options(
            selectinload(CartItem.product).selectinload(Product.images),
            selectinload(CartItem.variant),
        )
        .order_by(CartItem.created_at.desc())
    )


async def list_cart(db: AsyncSession, user_id: uuid.UUID) -> list[CartItem]:
    result = await db.execute(cart_items_query(user_id))
    return list(result.scalars().all())


async def get_cart_item(db: AsyncSession, user_id: uuid.UUID, item_id: uuid.UUID) -> CartItem:
    """Return one of the user's cart lines.  Another user's line is reported as missing."""
    result = await db.execute(cart_items_query(user_id).where(CartItem.id == item_id))
    item = result.scalar_one_or_none()
    if item is None:
        raise _ITEM_NOT_FOUND
    return item


async def get_active_product(db: AsyncSession, product_id: uuid.UUID) -> Product:
    product = await db.get(Product, product_id)
    if product is None or not product.is_active:
        raise _PRODUCT_NOT_FOUND
    return product


def available_stock(item: CartItem) -> int:
    """Stock that backs *item*: the variant's when one is chosen, else the product's."""
    return item.variant.stock if item.variant is not None else item.product.stock


def check_stock(available: int, wanted: int) -> None:
    if available < wanted:
        raise _INSUFFICIENT_STOCK


async def add_to_cart(
    db: AsyncSession,
    user_id: uuid.UUID,
    product: Product,
    quantity: int,
    variant_id: uuid.UUID | None = None,
) -> CartItem:
    """Add *quantity* of *product* to the cart, merging into an existing line.

    The stock check covers the merged quantity, not just the increment.  The
    caller commits.
    """
    variant: ProductVariant | None = None
    if variant_id is not None:
        variant = await db.get(ProductVariant, variant_id)
        if variant is None or variant.product_id != product.id or not variant.is_active:
            raise _VARIANT_NOT_FOUND

    same_variant = (
        CartItem.variant_id.is_(None) if variant_id is None else CartItem.variant_id == variant_id
    )
    result = await db.execute(
        select(CartItem).where(
            CartItem.user_id == user_id,
            CartItem.product_id == product.id,
            same_variant,
        )
    )
    existing = result.scalar_one_or_none()

    wanted = quantity + (existing.quantity if existing is not None else 0)
    check_stock(variant.stock if variant is not None else product.stock, wanted)

    if existing is not None:
        existing.quantity = wanted
        return existing

    item = CartItem(
        id=uuid.uuid4(),
        user_id=user_id,
        product_id=product.id,
        variant_id=variant_id,
        quantity=quantity,
    )
    db.add(item)
    return item


async def replace_cart(db: AsyncSession, user_id: uuid.UUID, lines: Sequence[CartSyncLine]) -> None:
    """Replace the stored cart with *lines* from a browser-held cart.

    Repeated products are merged.  Unknown and inactive products are
    dropped.  Stock is not checked here; the summary reports shortfalls.
    The caller commits.
    """
    merged: dict[uuid.UUID, int] = {}
    for line in lines:
        merged[line.product_id] = merged.get(line.product_id, 0) + line.quantity

    await db.execute(delete(CartItem).where(CartItem.user_id == user_id))
    if not merged:
        return

    result = await db.execute(
        select(Product).where(Product.id.in_(merged), Product.is_active.is_(True))
    )
    kept = 0
    for product in result.scalars().all():
        db.add(CartItem(user_id=user_id, product_id=product.id, quantity=merged[product.id]))
        kept += 1
    if kept < len(merged):
        logger.info("Cart sync for user %s dropped %d unavailable product(s)", user_id, len(merged) - kept)


def cart_line(item: CartItem) -> CartItemResponse:
    primary = next((image for image in item.product.images if image.is_primary), None)
    return CartItemResponse(
        id=item.id,
        product_id=item.product_id,
        variant_id=item.variant_id,
        quantity=item.quantity,
        image=primary.url if primary is not None else None,
        line_total=(item.product.new_price * item.quantity).quantize(_CENT),
        product=CartProduct.model_validate(item.product),
        variant=(
            ProductVariantResponse.model_validate(item.variant) if item.variant is not None else None
        ),
    )


def summarize(items: Sequence[CartItem]) -> CartResponse:
    """Cart lines with the subtotal (product price x quantity) and item count."""
    lines = [cart_line(item) for item in items]
    return CartResponse(
        items=lines,
        subtotal=sum((line.line_total for line in lines), Decimal("0.00")),
        total_items=sum(item.quantity for item in items),
    )


def stock_issues(items: Sequence[CartItem]) -> list[StockIssue]:
    return [
        StockIssue(
            item_id=item.id,
            product_id=item.product_id,
            name=item.product.name,
            requested=item.quantity,
            available=available_stock(item),
        )
        for item in items
        if available_stock(item) < item.quantity
    ]
