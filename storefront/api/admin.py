"""Admin back office: categories, coupons, settings and user accounts.

Product management lives in :mod:`storefront.api.admin_products`; both are
mounted under ``/api/admin`` and gated by ``require_admin``.
"""

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.admin_products import router as products_router
from storefront.api.admin_products import slugify, uploads_router
from storefront.dependencies import get_db, require_admin
from storefront.models import Category, Coupon, Product, Setting, User
from storefront.models.setting import parse_setting
from storefront.schemas.auth import UserResponse
from storefront.schemas.category import CategoryCreate, CategoryResponse, CategoryUpdate
from storefront.schemas.common import MessageResponse, PaginatedResponse
from storefront.schemas.coupon import CouponCreate, CouponResponse, CouponUpdate
from storefront.schemas.setting import SettingResponse, SettingUpdate
from storefront.schemas.user import RoleUpdate, StatusUpdate, UserListParams
from storefront.utils.pagination import paginate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])
router.include_router(products_router)
router.include_router(uploads_router)


def _not_found(resource: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{resource} not found")


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


async def _check_parent(
    db: AsyncSession, parent_id: uuid.UUID, category_id: uuid.UUID | None = None
) -> None:
    """Reject a parent that does not exist or would put *category_id* in a cycle."""
    ancestor = await db.get(Category, parent_id)
    if ancestor is None:
        raise _bad_request("Invalid parent_id: referenced category does not exist")
    while ancestor is not None:
        if ancestor.id == category_id:
            raise _bad_request("A category cannot be nested under itself")
        ancestor = await db.get(Category, ancestor.parent_id) if ancestor.parent_id else None


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


@router.get("/categories", response_model=list[CategoryResponse])
async def list_categories(
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> list[CategoryResponse]:
    """Every category, including inactive ones."""
    result = await db.execute(select(Category).order_by(Category.name))
    return [CategoryResponse.model_validate(c) for c in result.scalars().all()]


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CategoryCreate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> CategoryResponse:
    """Create a category; the slug defaults to one derived from the name."""
    if body.parent_id is not None:
        await _check_parent(db, body.parent_id)

    category = Category(
        name=body.name,
        slug=body.slug or slugify(body.name),
        description=body.description,
        is_active=body.is_active,
        parent_id=body.parent_id,
    )
    db.add(category)
    try:
        await db.commit()
        await db.refresh(category)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Category slug already exists",
        ) from None
    return CategoryResponse.model_validate(category)


@router.put("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: uuid.UUID,
    body: CategoryUpdate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> CategoryResponse:
    category = await db.get(Category, category_id)
    if category is None:
        raise _not_found("Category")

    changes = body.model_dump(exclude_unset=True)
    if changes.get("parent_id") is not None:
        await _check_parent(db, changes["parent_id"], category.id)

    for field, value in changes.items():
        setattr(category, field, value)

    try:
        await db.commit()
        await db.refresh(category)
    except IntegrityError:
        await db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Category slug already exists",
        ) from None
    return CategoryResponse.model_validate(category)


@router.delete("/categories/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> MessageResponse:
    """Delete an empty category.

    Returns 400 while any product or subcategory still references it.
    """
    category = await db.get(Category, category_id)
    if category is None:
        raise _not_found("Category")

    product_count: int = (
        await db.execute(
            select(func.count()).select_from(Product).where(Product.category_id == category_id)
        )
    ).scalar_one()
    if product_count > 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot delete category: {product_count} product(s) still assigned",
        )

    child_count: int = (
        await db.execute(
            select(func.count()).select_from(Category).where(Category.parent_id == category_id)
        )
    ).scalar_one()
    if child_count > 0:
        raise _bad_request("Cannot delete category with subcategories")

    await db.delete(category)
    await db.commit()
    return MessageResponse(message="Category deleted successfully")


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------


@router.get("/coupons", response_model=PaginatedResponse[CouponResponse])
async def list_coupons(
    page: int = Query(1, ge=1),  # noqa: B008
    limit: int = Query(20, ge=1, le=100),  # noqa: B008
    is_active: bool | None = None,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> PaginatedResponse[CouponResponse]:
    query = select(Coupon).order_by(Coupon.created_at.desc())
    if is_active is not None:
        query = query.where(Coupon.is_active.is_(is_active))
    return await paginate(db, query, page, limit, CouponResponse)


@router.post("/coupons", response_model=CouponResponse, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    body: CouponCreate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> CouponResponse:
    """Create a coupon.  Codes are stored upper-case; 400 if the code exists."""
    existing = await db.execute(select(Coupon.id).where(Coupon.code == body.code))
    if existing.scalar_one_or_none() is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Coupon code already exists",
        )

    coupon = Coupon(**body.model_dump(), used_count=0)
    db.add(coupon)
    await db.commit()
    await db.refresh(coupon)
    logger.info("Created coupon %s", coupon.code)
    return CouponResponse.model_validate(coupon)


@router.put("/coupons/{coupon_id}", response_model=CouponResponse)
async def update_coupon(
    coupon_id: uuid.UUID,
    body: CouponUpdate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> CouponResponse:
    coupon = await db.get(Coupon, coupon_id)
    if coupon is None:
        raise _not_found("Coupon")

    changes = body.model_dump(exclude_unset=True)
    if "code" in changes and changes["code"] != coupon.code:
        taken = await db.execute(
            select(Coupon.id).where(Coupon.code == changes["code"], Coupon.id != coupon_id)
        )
        if taken.scalar_one_or_none() is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Coupon code already exists",
            )

    for field, value in changes.items():
        setattr(coupon, field, value)
    await db.commit()
    await db.refresh(coupon)
    return CouponResponse.model_validate(coupon)


@router.delete("/coupons/{coupon_id}", response_model=MessageResponse)
async def delete_coupon(
    coupon_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> MessageResponse:
    coupon = await db.get(Coupon, coupon_id)
    if coupon is None:
        raise _not_found("Coupon")
    await db.delete(coupon)
    await db.commit()
    return MessageResponse(message="Coupon deleted successfully")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@router.get("/settings", response_model=list[SettingResponse])
async def list_settings(
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> list[SettingResponse]:
    result = await db.execute(select(Setting).order_by(Setting.key))
    return [SettingResponse.model_validate(s) for s in result.scalars().all()]


@router.put("/settings/{key}", response_model=SettingResponse)
async def update_setting(
    key: str,
    body: SettingUpdate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> SettingResponse:
    """Replace a setting's value.  ``number`` settings must hold a decimal."""
    result = await db.execute(select(Setting).where(Setting.key == key))
    setting = result.scalar_one_or_none()
    if setting is None:
        raise _not_found("Setting")

    try:
        parse_setting(body.value, setting.type)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from None

    setting.value = body.value
    await db.commit()
    await db.refresh(setting)
    return SettingResponse.model_validate(setting)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@router.get("/users", response_model=PaginatedResponse[UserResponse])
async def list_users(
    params: Annotated[UserListParams, Query()],
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> PaginatedResponse[UserResponse]:
    query = select(User).order_by(User.created_at.desc())
    if params.search:
        pattern = f"%{params.search}%"
        query = query.where(
            or_(
                User.first_name.ilike(pattern),
                User.last_name.ilike(pattern),
                User.email.ilike(pattern),
            )
        )
    if params.role is not None:
        query = query.where(User.role == params.role)
    return await paginate(db, query, params.page, params.limit, UserResponse)


@router.patch("/users/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: uuid.UUID,
    body: RoleUpdate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    admin: User = Depends(require_admin),  # noqa: B008
) -> UserResponse:
    """Change a user's role.  Takes effect on that user's next request."""
    user = await db.get(User, user_id)
    if user is None:
        raise _not_found("User")

    user.role = body.role
    await db.commit()
    await db.refresh(user)
    logger.info("Admin %s set role of user %s to %s", admin.id, user_id, body.role)
    return UserResponse.model_validate(user)


@router.patch("/users/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: uuid.UUID,
    body: StatusUpdate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    admin: User = Depends(require_admin),  # noqa: B008
) -> UserResponse:
    user = await db.get(User, user_id)
    if user is None:
        raise _not_found("User")

    user.is_active = body.is_active
    await db.commit()
    await db.refresh(user)
    logger.info("Admin %s set is_active=%s for user %s", admin.id, body.is_active, user_id)
    return UserResponse.model_validate(user)
