"""Customer wishlists, with a shortcut that moves a saved product into the cart."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload, with_loader_criteria

from storefront.api.products import rating_summary
from storefront.dependencies import get_current_user, get_db
from storefront.models import Product, Review, User, WishlistItem
from storefront.schemas.cart import (
    MoveToCartRequest,
    WishlistCheckResponse,
    WishlistItemCreate,
    WishlistItemResponse,
)
from storefront.schemas.common import MessageResponse
from storefront.schemas.product import ProductResponse
from storefront.services.cart import add_to_cart, get_active_product

router = APIRouter(prefix="/wishlist", tags=["Wishlist"])

_NOT_FOUND = HTTPException(
    status_code=status.HTTP_404_NOT_FOUND,
    detail="Wishlist item not found",
)

_ALREADY_SAVED = HTTPException(
    status_code=status.HTTP_409_CONFLICT,
    detail="Product already in wishlist",
)


def _wishlist_entry(item: WishlistItem) -> WishlistItemResponse:
    average, _ = rating_summary(list(item.product.reviews))
    return WishlistItemResponse(
        id=item.id,
        product_id=item.product_id,
        created_at=item.created_at,
        average_rating=average,
        product=ProductResponse.model_validate(item.product),
    )


async def _own_item(db: AsyncSession, user_id: uuid.UUID, item_id: uuid.UUID) -> WishlistItem:
    item = await db.get(WishlistItem, item_id)
    if item is None or item.user_id != user_id:
        raise _NOT_FOUND
    return item


@router.get("", response_model=list[WishlistItemResponse])
async def get_wishlist(
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> list[WishlistItemResponse]:
    """Saved products, newest first, each with its average rating."""
    result = await db.execute(
        select(WishlistItem)
        .where(WishlistItem.user_id == current_user.id)
        .options(
            selectinload(WishlistItem.product).selectinload(Product.category),
            selectinload(WishlistItem.product).selectinload(Product.images),
            selectinload(WishlistItem.product).selectinload(Product.reviews),
            with_loader_criteria(Review, Review.is_active.is_(True)),
        )
        .order_by(WishlistItem.created_at.desc())
    )
    return [_wishlist_entry(item) for item in result.scalars().all()]


@router.post("", response_model=WishlistCheckResponse, status_code=status.HTTP_201_CREATED)
async def add_to_wishlist(
    body: WishlistItemCreate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> WishlistCheckResponse:
    await get_active_product(db, body.product_id)

    existing = await db.execute(
        select(WishlistItem.id).where(
            WishlistItem.user_id == current_user.id,
            WishlistItem.product_id == body.product_id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise _ALREADY_SAVED

    item = WishlistItem(id=uuid.uuid4(), user_id=current_user.id, product_id=body.product_id)
    db.add(item)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise _ALREADY_SAVED from None
    return WishlistCheckResponse(in_wishlist=True, wishlist_item_id=item.id)


@router.get("/check/{product_id}", response_model=WishlistCheckResponse)
async def check_wishlist(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> WishlistCheckResponse:
    result = await db.execute(
        select(WishlistItem.id).where(
            WishlistItem.user_id == current_user.id,
            WishlistItem.product_id == product_id,
        )
    )
    item_id = result.scalar_one_or_none()
    return WishlistCheckResponse(in_wishlist=item_id is not None, wishlist_item_id=item_id)


@router.post("/{item_id}/move-to-cart", response_model=MessageResponse)
async def move_to_cart(
    item_id: uuid.UUID,
    body: MoveToCartRequest | None = None,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> MessageResponse:
    """Put a saved product into the cart and drop it from the wishlist, in one commit."""
    item = await _own_item(db, current_user.id, item_id)
    product = await get_active_product(db, item.product_id)
    quantity = body.quantity if body is not None else 1

    await add_to_cart(db, current_user.id, product, quantity)
    await db.delete(item)
    await db.commit()
    return MessageResponse(message="Item moved to cart successfully")


@router.delete("/{item_id}", response_model=MessageResponse)
async def remove_from_wishlist(
    item_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> MessageResponse:
    item = await _own_item(db, current_user.id, item_id)
    await db.delete(item)
    await db.commit()
    return MessageResponse(message="Item removed from wishlist")


@router.delete("", response_model=MessageResponse)
async def clear_wishlist(
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> MessageResponse:
    await db.execute(delete(WishlistItem).where(WishlistItem.user_id == current_user.id))
    await db.commit()
    return MessageResponse(message="Wishlist cleared successfully")
