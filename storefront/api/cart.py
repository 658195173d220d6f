"""Server-side shopping cart for signed-in customers."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.dependencies import get_current_user, get_db
from storefront.models import CartItem, User
from storefront.schemas.cart import (
    CartItemCreate,
    CartItemResponse,
    CartItemUpdate,
    CartResponse,
    CartSummaryResponse,
    CartSyncRequest,
)
from storefront.schemas.common import MessageResponse
from storefront.services.cart import (
    add_to_cart,
    available_stock,
    cart_line,
    check_stock,
    get_active_product,
    get_cart_item,
    list_cart,
    replace_cart,
    stock_issues,
    summarize,
)

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("", response_model=CartResponse)
async def get_cart(
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> CartResponse:
    return summarize(await list_cart(db, current_user.id))


@router.get("/summary", response_model=CartSummaryResponse)
async def get_cart_summary(
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> CartSummaryResponse:
    """Cart totals plus every line whose quantity exceeds the stock behind it."""
    items = await list_cart(db, current_user.id)
    cart = summarize(items)
    return CartSummaryResponse(
        items=cart.items,
        subtotal=cart.subtotal,
        total_items=cart.total_items,
        stock_issues=stock_issues(items),
    )


@router.post("", response_model=CartItemResponse, status_code=status.HTTP_201_CREATED)
async def add_item(
    body: CartItemCreate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> CartItemResponse:
    """Add a product (optionally a specific variant).  Adding it again raises the quantity."""
    product = await get_active_product(db, body.product_id)
    item = await add_to_cart(db, current_user.id, product, body.quantity, body.variant_id)
    await db.commit()
    return cart_line(await get_cart_item(db, current_user.id, item.id))


@router.post("/sync", response_model=CartResponse)
async def sync_cart(
    body: CartSyncRequest,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> CartResponse:
    """Replace the stored cart with the one the browser kept while signed out."""
    await replace_cart(db, current_user.id, body.items)
    await db.commit()
    return summarize(await list_cart(db, current_user.id))


@router.put("/{item_id}", response_model=CartItemResponse)
async def update_item(
    item_id: uuid.UUID,
    body: CartItemUpdate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> CartItemResponse:
    item = await get_cart_item(db, current_user.id, item_id)
    check_stock(available_stock(item), body.quantity)
    item.quantity = body.quantity
    await db.commit()
    return cart_line(item)


@router.delete("/{item_id}", response_model=MessageResponse)
async def remove_item(
    item_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> MessageResponse:
    item = await get_cart_item(db, current_user.id, item_id)
    await db.delete(item)
    await db.commit()
    return MessageResponse(message="Item removed from cart")


@router.delete("", response_model=MessageResponse)
async def clear_cart(
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> MessageResponse:
    await db.execute(delete(CartItem).where(CartItem.user_id == current_user.id))
    await db.commit()
    return MessageResponse(message="Cart cleared successfully")
