"""Admin product management with multipart media uploads.

Every route here sits behind :func:`~storefront.dependencies.require_admin`.
Create and update accept ``multipart/form-data``: the product fields as form
fields plus optional ``images`` (up to 10) and ``videos`` (up to 5) files.
"""

import logging
import re
import uuid
from decimal import Decimal
from typing import Annotated

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Query,
    UploadFile,
    status,
)
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.dependencies import get_db, require_admin
from storefront.models import Category, Product, ProductImage, ProductVideo, Review, User
from storefront.schemas.common import MessageResponse, PaginatedResponse
from storefront.schemas.product import (
    AdminProductListParams,
    AdminProductResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    UploadResponse,
)
from storefront.services.uploads import (
    StoredMedia,
    UploadRejectedError,
    check_media,
    delete_media,
    store_media,
)
from storefront.utils.pagination import paginate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["Admin"], dependencies=[Depends(require_admin)])
uploads_router = APIRouter(tags=["Admin"], dependencies=[Depends(require_admin)])

MAX_IMAGES = 10
MAX_VIDEOS = 5

_NOT_FOUND = HTTPException(
    status_code=status.HTTP_404_NOT_FOUND,
    detail="Product not found",
)

_SKU_TAKEN = HTTPException(
    status_code=status.HTTP_400_BAD_REQUEST,
    detail="SKU already exists",
)


def slugify(name: str) -> str:
    """``"Men's Classic Shirt"`` -> ``"men-s-classic-shirt"``."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def _validated[M: (ProductCreate, ProductUpdate)](schema: type[M], fields: dict) -> M:
    try:
        return schema(**{k: v for k, v in fields.items() if v is not None})
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from None


def product_create_form(
    name: str = Form(...),
    sku: str = Form(...),
    category_id: uuid.UUID = Form(...),  # noqa: B008
    new_price: Decimal = Form(...),  # noqa: B008
    old_price: Decimal | None = Form(None),  # noqa: B008
    cost_price: Decimal | None = Form(None),  # noqa: B008
    description: str | None = Form(None),
    short_description: str | None = Form(None),
    brand: str | None = Form(None),
    stock: int | None = Form(None),
    min_stock: int | None = Form(None),
    is_active: bool | None = Form(None),
    is_featured: bool | None = Form(None),
    is_on_sale: bool | None = Form(None),
) -> ProductCreate:
    return _validated(ProductCreate, locals())


def product_update_form(
    name: str | None = Form(None),
    sku: str | None = Form(None),
    category_id: uuid.UUID | None = Form(None),  # noqa: B008
    new_price: Decimal | None = Form(None),  # noqa: B008
    old_price: Decimal | None = Form(None),  # noqa: B008
    cost_price: Decimal | None = Form(None),  # noqa: B008
    description: str | None = Form(None),
    short_description: str | None = Form(None),
    brand: str | None = Form(None),
    stock: int | None = Form(None),
    min_stock: int | None = Form(None),
    is_active: bool | None = Form(None),
    is_featured: bool | None = Form(None),
    is_on_sale: bool | None = Form(None),
) -> ProductUpdate:
    return _validated(ProductUpdate, locals())


def _check_batch(uploads: list[UploadFile], kind: str, limit: int) -> None:
    """Reject the whole request before anything is written to disk."""
    if len(uploads) > limit:
        raise UploadRejectedError(f"Too many {kind}s: at most {limit} per request")
    for upload in uploads:
        if check_media(upload) != kind:
            raise UploadRejectedError(f"Only {kind} files are allowed in the {kind}s field")


async def _store_batch(uploads: list[UploadFile], field: str) -> list[StoredMedia]:
    stored: list[StoredMedia] = []
    try:
        for upload in uploads:
            stored.append(await store_media(upload, field))
    except BaseException:
        _discard(stored)
        raise
    return stored


def _discard(stored: list[StoredMedia]) -> None:
    for media in stored:
        delete_media(media.url)


async def _require_category(db: AsyncSession, category_id: uuid.UUID) -> None:
    if await db.get(Category, category_id) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid category_id: referenced category does not exist",
        )


async def _sku_taken(db: AsyncSession, sku: str, exclude_id: uuid.UUID | None = None) -> bool:
    query = select(Product.id).where(Product.sku == sku)
    if exclude_id is not None:
        query = query.where(Product.id != exclude_id)
    return (await db.execute(query)).scalar_one_or_none() is not None


async def _load_detail(db: AsyncSession, product_id: uuid.UUID) -> Product | None:
    result = await db.execute(
        select(Product)
        .where(Product.id == product_id)
        .options(
            selectinload(Product.category),
            selectinload(Product.images),
            selectinload(Product.videos),
            selectinload(Product.variants),
            selectinload(Product.reviews).selectinload(Review.user),
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


def _attach_media(
    db: AsyncSession,
    product: Product,
    images: list[StoredMedia],
    videos: list[StoredMedia],
    *,
    first_image_primary: bool,
    image_offset: int = 0,
    video_offset: int = 0,
) -> None:
    for index, media in enumerate(images):
        db.add(
            ProductImage(
                product_id=product.id,
                url=media.url,
                alt=f"{product.name} image {image_offset + index + 1}",
                order=image_offset + index,
                is_primary=first_image_primary and index == 0,
            )
        )
    for index, media in enumerate(videos):
        db.add(
            ProductVideo(
                product_id=product.id,
                url=media.url,
                alt=f"{product.name} video {video_offset + index + 1}",
                order=video_offset + index,
            )
        )


@router.get("", response_model=PaginatedResponse[ProductResponse])
async def list_products(
    params: Annotated[AdminProductListParams, Query()],
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> PaginatedResponse[ProductResponse]:
    """All products, active or not, newest first."""
    query = (
        select(Product)
        .options(selectinload(Product.category), selectinload(Product.images))
        .order_by(Product.created_at.desc())
    )
    if params.search:
        pattern = f"%{params.search}%"
        query = query.where(
            or_(
                Product.name.ilike(pattern),
                Product.description.ilike(pattern),
                Product.sku.ilike(pattern),
            )
        )
    if params.category_id is not None:
        query = query.where(Product.category_id == params.category_id)
    if params.is_active is not None:
        query = query.where(Product.is_active.is_(params.is_active))

    return await paginate(db, query, params.page, params.limit, ProductResponse)


@router.get("/{product_id}", response_model=AdminProductResponse)
async def get_product(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> AdminProductResponse:
    product = await _load_detail(db, product_id)
    if product is None:
        raise _NOT_FOUND
    return AdminProductResponse.model_validate(product)


@router.post("", response_model=AdminProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    body: ProductCreate = Depends(product_create_form),  # noqa: B008
    images: list[UploadFile] | None = File(None),  # noqa: B008
    videos: list[UploadFile] | None = File(None),  # noqa: B008
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> AdminProductResponse:
    """Create a product.  The first uploaded image becomes the primary image.

    Returns 400 if the SKU is already in use or an upload is rejected.
    """
    images, videos = images or [], videos or []
    _check_batch(images, "image", MAX_IMAGES)
    _check_batch(videos, "video", MAX_VIDEOS)

    if await _sku_taken(db, body.sku):
        raise _SKU_TAKEN
    await _require_category(db, body.category_id)

    product = Product(**body.model_dump(), slug=slugify(body.name))
    db.add(product)
    await db.flush()

    stored_images = await _store_batch(images, "images")
    try:
        stored_videos = await _store_batch(videos, "videos")
    except BaseException:
        _discard(stored_images)
        raise

    _attach_media(db, product, stored_images, stored_videos, first_image_primary=True)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        _discard(stored_images + stored_videos)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A product with this SKU or name already exists",
        ) from None

    logger.info(
        "Created product %s (%s) with %d media files",
        product.id,
        product.sku,
        len(stored_images) + len(stored_videos),
    )
    created = await _load_detail(db, product.id)
    return AdminProductResponse.model_validate(created)


@router.put("/{product_id}", response_model=AdminProductResponse)
async def update_product(
    product_id: uuid.UUID,
    body: ProductUpdate = Depends(product_update_form),  # noqa: B008
    images: list[UploadFile] | None = File(None),  # noqa: B008
    videos: list[UploadFile] | None = File(None),  # noqa: B008
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> AdminProductResponse:
    """Update the submitted fields.  New images are appended as non-primary."""
    images, videos = images or [], videos or []
    _check_batch(images, "image", MAX_IMAGES)
    _check_batch(videos, "video", MAX_VIDEOS)

    product = await _load_detail(db, product_id)
    if product is None:
        raise _NOT_FOUND

    changes = body.model_dump(exclude_unset=True)
    if "sku" in changes and changes["sku"] != product.sku:
        if await _sku_taken(db, changes["sku"], exclude_id=product_id):
            raise _SKU_TAKEN
    if "category_id" in changes:
        await _require_category(db, changes["category_id"])

    for field, value in changes.items():
        setattr(product, field, value)
    if "name" in changes:
        product.slug = slugify(changes["name"])

    stored_images = await _store_batch(images, "images")
    try:
        stored_videos = await _store_batch(videos, "videos")
    except BaseException:
        _discard(stored_images)
        raise

    _attach_media(
        db,
        product,
        stored_images,
        stored_videos,
        first_image_primary=False,
        image_offset=len(product.images),
        video_offset=len(product.videos),
    )
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        _discard(stored_images + stored_videos)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A product with this SKU or name already exists",
        ) from None

    updated = await _load_detail(db, product_id)
    return AdminProductResponse.model_validate(updated)


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> MessageResponse:
    """Hard-delete a product, its images, videos, variants and reviews.

    Stored media files are removed only after the delete has been committed.
    """
    result = await db.execute(
        select(Product)
        .where(Product.id == product_id)
        .options(selectinload(Product.images), selectinload(Product.videos))
    )
    product = result.scalar_one_or_none()
    if product is None:
        raise _NOT_FOUND

    urls = [image.url for image in product.images] + [video.url for video in product.videos]
    await db.delete(product)
    await db.commit()

    removed = sum(delete_media(url) for url in urls)
    logger.info("Deleted product %s; removed %d of %d media files", product_id, removed, len(urls))
    return MessageResponse(message="Product deleted successfully")


@uploads_router.post("/uploads", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_media(
    files: list[UploadFile] = File(...),  # noqa: B008
    admin: User = Depends(require_admin),  # noqa: B008
) -> UploadResponse:
    """Store standalone media files and return their public URLs."""
    if len(files) > MAX_IMAGES:
        raise UploadRejectedError(f"Too many files: at most {MAX_IMAGES} per request")
    for upload in files:
        check_media(upload)
    stored = await _store_batch(files, "files")
    logger.info("Admin %s uploaded %d files", admin.id, len(stored))
    return UploadResponse(urls=[media.url for media in stored])
