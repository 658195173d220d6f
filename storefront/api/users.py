"""The signed-in customer's own account: profile, saved addresses and reviews."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.dependencies import get_current_user, get_db
from storefront.models import Address, AddressType, Review, User
from storefront.schemas.auth import UserResponse
from storefront.schemas.common import MessageResponse, PaginatedResponse
from storefront.schemas.product import ReviewResponse
from storefront.schemas.user import (
    AddressCreate,
    AddressResponse,
    AddressUpdate,
    ProfileResponse,
    ProfileUpdate,
)
from storefront.utils.pagination import paginate

router = APIRouter(prefix="/users", tags=["Users"])

_ADDRESS_NOT_FOUND = HTTPException(
    status_code=status.HTTP_404_NOT_FOUND,
    detail="Address not found",
)


async def _own_address(db: AsyncSession, user_id: uuid.UUID, address_id: uuid.UUID) -> Address:
    address = await db.get(Address, address_id)
    if address is None or address.user_id != user_id:
        raise _ADDRESS_NOT_FOUND
    return address


async def _clear_default(
    db: AsyncSession,
    user_id: uuid.UUID,
    type_: AddressType,
    keep: uuid.UUID | None = None,
) -> None:
    """Unset ``is_default`` on the user's other addresses of the same type."""
    stmt = (
        update(Address)
        .where(Address.user_id == user_id, Address.type == type_, Address.is_default.is_(True))
        .values(is_default=False)
    )
    if keep is not None:
        stmt = stmt.where(Address.id != keep)
    await db.execute(stmt)


# ---------------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------------


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> ProfileResponse:
    """Account details with saved addresses (newest first) and the number of reviews written."""
    result = await db.execute(
        select(User).where(User.id == current_user.id).options(selectinload(User.addresses))
    )
    user = result.scalar_one()
    review_count: int = (
        await db.execute(
            select(func.count()).select_from(Review).where(Review.user_id == current_user.id)
        )
    ).scalar_one()

    profile = ProfileResponse.model_validate(user)
    return profile.model_copy(update={"review_count": review_count})


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> UserResponse:
    """Change name or phone.  Email, password and role are not editable here."""
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)
    await db.commit()
    return UserResponse.model_validate(current_user)


@router.get("/reviews", response_model=PaginatedResponse[ReviewResponse])
async def my_reviews(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> PaginatedResponse[ReviewResponse]:
    query = (
        select(Review)
        .where(Review.user_id == current_user.id)
        .options(selectinload(Review.user))
        .order_by(Review.created_at.desc())
    )
    return await paginate(db, query, page, limit, ReviewResponse)


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------


@router.get("/addresses", response_model=list[AddressResponse])
async def list_addresses(
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> list[AddressResponse]:
    result = await db.execute(
        select(Address)
        .where(Address.user_id == current_user.id)
        .order_by(Address.created_at.desc())
    )
    return [AddressResponse.model_validate(a) for a in result.scalars().all()]


@router.post("/addresses", response_model=AddressResponse, status_code=status.HTTP_201_CREATED)
async def create_address(
    body: AddressCreate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> AddressResponse:
    """Save an address.  A new default replaces the previous default of the same type."""
    if body.is_default:
        await _clear_default(db, current_user.id, body.type)

    address = Address(user_id=current_user.id, **body.model_dump())
    db.add(address)
    await db.commit()
    await db.refresh(address)
    return AddressResponse.model_validate(address)


@router.put("/addresses/{address_id}", response_model=AddressResponse)
async def update_address(
    address_id: uuid.UUID,
    body: AddressUpdate,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> AddressResponse:
    address = await _own_address(db, current_user.id, address_id)

    changes = body.model_dump(exclude_unset=True)
    # A default address that changes type becomes the default of its new type.
    if changes.get("is_default", address.is_default) and changes.keys() & {"is_default", "type"}:
        await _clear_default(db, current_user.id, changes.get("type", address.type), keep=address.id)

    for field, value in changes.items():
        setattr(address, field, value)
    await db.commit()
    await db.refresh(address)
    return AddressResponse.model_validate(address)


@router.delete("/addresses/{address_id}", response_model=MessageResponse)
async def delete_address(
    address_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),  # noqa: B008
    current_user: User = Depends(get_current_user),  # noqa: B008
) -> MessageResponse:
    address = await _own_address(db, current_user.id, address_id)
    await db.delete(address)
    await db.commit()
    return MessageResponse(message="Address deleted successfully")
