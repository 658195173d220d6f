"""Public category browsing."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload, with_loader_criteria

from storefront.dependencies import get_db
from storefront.models import Category, Product
from storefront.schemas.category import (
    CategoryDetailResponse,
    CategoryResponse,
    CategoryTreeChild,
    CategoryTreeNode,
)

router = APIRouter(prefix="/categories", tags=["Categories"])

_NOT_FOUND = HTTPException(
    status_code=status.HTTP_404_NOT_FOUND,
    detail="Category not found",
)


@router.get("", response_model=list[CategoryResponse])
async def list_categories(
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> list[CategoryResponse]:
    """Active categories ordered by name."""
    result = await db.execute(
        select(Category).where(Category.is_active.is_(True)).order_by(Category.name)
    )
    return [CategoryResponse.model_validate(c) for c in result.scalars().all()]


@router.get("/hierarchy", response_model=list[CategoryTreeNode])
async def category_hierarchy(
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> list[CategoryTreeNode]:
    """Active root categories by name, each with its active subcategories.

    Every node carries the number of active products filed directly under it.
    """
    roots = (
        await db.execute(
            select(Category)
            .where(Category.parent_id.is_(None), Category.is_active.is_(True))
            .options(
                selectinload(Category.children),
                with_loader_criteria(Category, Category.is_active.is_(True)),
            )
            .order_by(Category.name)
        )
    ).scalars().all()

    counts = await db.execute(
        select(Product.category_id, func.count())
        .where(Product.is_active.is_(True))
        .group_by(Product.category_id)
    )
    product_count: dict[uuid.UUID, int] = dict(counts.all())

    return [
        CategoryTreeNode(
            **CategoryResponse.model_validate(root).model_dump(),
            product_count=product_count.get(root.id, 0),
            children=[
                CategoryTreeChild(
                    **CategoryResponse.model_validate(child).model_dump(),
                    product_count=product_count.get(child.id, 0),
                )
                for child in root.children
            ],
        )
        for root in roots
    ]


@router.get("/{slug}", response_model=CategoryDetailResponse)
async def get_category(
    slug: str,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> CategoryDetailResponse:
    """Active category by slug, with its active products."""
    result = await db.execute(
        select(Category)
        .where(Category.slug == slug, Category.is_active.is_(True))
        .options(
            selectinload(Category.products),
            with_loader_criteria(Product, Product.is_active.is_(True)),
        )
    )
    category = result.scalar_one_or_none()
    if category is None:
        raise _NOT_FOUND
    return CategoryDetailResponse.model_validate(category)
