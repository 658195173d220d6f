"""Public catalog: product listing, product pages and customer reviews."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload, with_loader_criteria

from storefront.dependencies import get_current_user, get_db
from storefront.models import Category, Product, ProductVariant, Review, User
from storefront.schemas.common import PaginatedResponse
from storefront.schemas.product import (
    ProductDetailResponse,
    ProductListParams,
    ProductResponse,
    ReviewAuthor,
    ReviewCreate,
    ReviewResponse,
)
from storefront.utils.pagination import paginate

router = APIRouter(prefix="/products", tags=["Products"])

_NOT_FOUND = HTTPException(
    status_code=status.HTTP_404_NOT_FOUND,
    detail="Product not found",
)

_ALREADY_REVIEWED = HTTPException(
    status_code=status.HTTP_409_CONFLICT,
    detail="You have already reviewed this product",
)


def rating_summary(reviews: list[Review]) -> tuple[float, int]:
    """Return ``(average rating rounded to 1 decimal, review count)``."""
    if not reviews:
        return 0.0, 0
    return round(sum(r.rating for r in reviews) / len(reviews), 1), len(reviews)


@router.get("", response_model=PaginatedResponse[ProductResponse])
async def list_products(
    params: Annotated[ProductListParams, Query()],
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> PaginatedResponse[ProductResponse]:
    """Active products, newest first.  All filters are optional and combinable."""
    query = (
        select(Product)
        .where(Product.is_active.is_(True))
        .options(selectinload(Product.category), selectinload(Product.images))
        .order_by(Product.created_at.desc())
    )

    if params.category:
        query = query.join(Product.category).where(Category.slug == params.category)
    if params.featured is not None:
        query = query.where(Product.is_featured.is_(params.featured))
    if params.on_sale is not None:
        query = query.where(Product.is_on_sale.is_(params.on_sale))
    if params.search:
        pattern = f"%{params.search}%"
        query = query.where(
            or_(
                Product.name.ilike(pattern),
                Product.description.ilike(pattern),
                Product.brand.ilike(pattern),
            )
        )
    if params.min_price is not None:
        query = query.where(Product.new_price >= params.min_price)
    if params.max_price is not None:
        query = query.where(Product.new_price <= params.max_price)

    return await paginate(db, query, params.page, params.limit, ProductResponse)


@router.get("/{id_or_slug}", response_model=ProductDetailResponse)
async def get_product(
    id_or_slug: str,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> ProductDetailResponse:
    """Product page by UUID or slug, with media, active variants and active reviews."""
    try:
        lookup = Product.id == uuid.UUID(id_or_slug)
    except ValueError:
        lookup = Product.slug == id_or_slug

    result = await db.execute(
        select(Product)
        .where(lookup, Product.is_active.is_(True))
        .options(
            selectinload(Product.category),
            selectinload(Product.images),
            selectinload(Product.videos),
            selectinload(Product.variants),
            selectinload(Product.reviews).selectinload(Review.user),
            with_loader_criteria(ProductVariant, ProductVariant.is_active.is_(True)),
            with_loader_criteria(Review, Review.is_active.is_(True)),
        )
    )
    product = result.scalar_one_or_none()
    if product is None:
        raise _NOT_FOUND

    average, count = rating_summary(list(product.reviews))
    detail = ProductDetailResponse.model_validate(product)
    return detail.model_copy(update={"average_rating": average, "review_count": count})


@router.post(
    "/{product_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_review(
    product_id: uuid.UUID,
    body: ReviewCreate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> ReviewResponse:
    """Review a product.  One review per customer per product."""
    product = await db.get(Product, product_id)
    if product is None or not product.is_active:
        raise _NOT_FOUND

    existing = await db.execute(
        select(Review.id).where(Review.user_id == current_user.id, Review.product_id == product_id)
    )
    if existing.scalar_one_or_none() is not None:
        raise _ALREADY_REVIEWED

    review = Review(
        user_id=current_user.id,
        product_id=product_id,
        rating=body.rating,
        title=body.title,
        comment=body.comment,
        is_verified=False,
        is_active=True,
    )
    db.add(review)
    try:
        await db.commit()
        await db.refresh(review)
    except IntegrityError:
        await db.rollback()
        raise _ALREADY_REVIEWED from None

    return ReviewResponse(
        id=review.id,
        product_id=review.product_id,
        rating=review.rating,
        title=review.title,
        comment=review.comment,
        is_verified=review.is_verified,
        created_at=review.created_at,
        user=ReviewAuthor.model_validate(current_user),
    )
