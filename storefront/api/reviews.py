"""Product reviews: public listing and statistics, owner edits and deletes.

Reviews are created through ``POST /products/{product_id}/reviews``.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.dependencies import get_current_user, get_db
from storefront.models import Review, User
from storefront.schemas.common import MessageResponse, PaginatedResponse
from storefront.schemas.product import ReviewResponse
from storefront.schemas.review import ReviewListParams, ReviewStatsResponse, ReviewUpdate
from storefront.utils.pagination import paginate

router = APIRouter(prefix="/reviews", tags=["Reviews"])

_NOT_FOUND = HTTPException(
    status_code=status.HTTP_404_NOT_FOUND,
    detail="Review not found",
)


def rating_stats(counts: dict[int, int]) -> ReviewStatsResponse:
    """Summarise ``{rating: count}``; every rating 1..5 appears in the distribution."""
    distribution = {rating: counts.get(rating, 0) for rating in range(1, 6)}
    total = sum(distribution.values())
    average = round(sum(r * n for r, n in distribution.items()) / total, 1) if total else 0.0
    return ReviewStatsResponse(
        total_reviews=total,
        average_rating=average,
        rating_distribution=distribution,
    )


async def _own_review(db: AsyncSession, user_id: uuid.UUID, review_id: uuid.UUID) -> Review:
    result = await db.execute(
        select(Review)
        .where(Review.id == review_id, Review.user_id == user_id)
        .options(selectinload(Review.user))
    )
    review = result.scalar_one_or_none()
    if review is None:
        raise _NOT_FOUND
    return review


@router.get("/product/{product_id}", response_model=PaginatedResponse[ReviewResponse])
async def list_product_reviews(
    product_id: uuid.UUID,
    params: Annotated[ReviewListParams, Query()],
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> PaginatedResponse[ReviewResponse]:
    """Active reviews of a product, newest first, optionally for one star rating."""
    query = (
        select(Review)
        .where(Review.product_id == product_id, Review.is_active.is_(True))
        .options(selectinload(Review.user))
        .order_by(Review.created_at.desc())
    )
    if params.rating is not None:
        query = query.where(Review.rating == params.rating)
    return await paginate(db, query, params.page, params.limit, ReviewResponse)


@router.get("/stats/{product_id}", response_model=ReviewStatsResponse)
async def review_stats(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> ReviewStatsResponse:
    result = await db.execute(
        select(Review.rating, func.count())
        .where(Review.product_id == product_id, Review.is_active.is_(True))
        .group_by(Review.rating)
    )
    return rating_stats({rating: count for rating, count in result.all()})


@router.put("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: uuid.UUID,
    body: ReviewUpdate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> ReviewResponse:
    """Edit your own review.  Someone else's review is reported as missing."""
    review = await _own_review(db, current_user.id, review_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(review, field, value)
    await db.commit()
    return ReviewResponse.model_validate(review)


@router.delete("/{review_id}", response_model=MessageResponse)
async def delete_review(
    review_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> MessageResponse:
    review = await _own_review(db, current_user.id, review_id)
    await db.delete(review)
    await db.commit()
    return MessageResponse(message="Review deleted successfully")
