"""Pydantic schemas for Product resources and their images, variants and reviews."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

_EXAMPLE_PRODUCT_ID = "2a3b4c5d-6e7f-8a9b-0c1d-2e3f4a5b6c7d"
_EXAMPLE_CATEGORY_ID = "7f3e1b2a-8c4d-4e5f-9a6b-1c2d3e4f5a6b"


class ProductCreate(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Men's Classic Shirt",
                "sku": "MSH001",
                "description": "A timeless classic shirt perfect for any occasion.",
                "short_description": "Classic cotton shirt for men",
                "brand": "StyleCo",
                "category_id": _EXAMPLE_CATEGORY_ID,
                "old_price": "59.99",
                "new_price": "45.99",
                "cost_price": "25.00",
                "stock": 50,
                "is_featured": True,
                "is_on_sale": True,
            }
        }
    )

    name: str = Field(..., min_length=1, max_length=200)
    sku: str = Field(..., min_length=1, max_length=50)
    description: str | None = None
    short_description: str | None = Field(None, max_length=255)
    brand: str | None = Field(None, max_length=100)
    category_id: uuid.UUID
    old_price: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    new_price: Decimal = Field(..., ge=0, decimal_places=2)
    cost_price: Decimal = Field(Decimal("0"), ge=0, decimal_places=2)
    stock: int = Field(0, ge=0)
    min_stock: int = Field(5, ge=0)
    is_active: bool = True
    is_featured: bool = False
    is_on_sale: bool = False


class ProductUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    sku: str | None = Field(None, min_length=1, max_length=50)
    description: str | None = None
    short_description: str | None = Field(None, max_length=255)
    brand: str | None = Field(None, max_length=100)
    category_id: uuid.UUID | None = None
    old_price: Decimal | None = Field(None, ge=0, decimal_places=2)
    new_price: Decimal | None = Field(None, ge=0, decimal_places=2)
    cost_price: Decimal | None = Field(None, ge=0, decimal_places=2)
    stock: int | None = Field(None, ge=0)
    min_stock: int | None = Field(None, ge=0)
    is_active: bool | None = None
    is_featured: bool | None = None
    is_on_sale: bool | None = None


class CategorySummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str


class ProductImageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    url: str
    alt: str | None
    order: int
    is_primary: bool


class ProductVideoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    url: str
    alt: str | None
    order: int


class ProductVariantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    value: str
    sku: str
    stock: int
    is_active: bool


class ReviewAuthor(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    first_name: str
    last_name: str


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    title: str | None = Field(None, max_length=200)
    comment: str | None = None


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    rating: int
    title: str | None
    comment: str | None
    is_verified: bool
    created_at: datetime
    user: ReviewAuthor


class ProductResponse(BaseModel):
    """Product card as returned by list endpoints."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": _EXAMPLE_PRODUCT_ID,
                "name": "Men's Classic Shirt",
                "slug": "mens-classic-shirt",
                "sku": "MSH001",
                "short_description": "Classic cotton shirt for men",
                "brand": "StyleCo",
                "category_id": _EXAMPLE_CATEGORY_ID,
                "old_price": "59.99",
                "new_price": "45.99",
                "stock": 50,
                "is_active": True,
                "is_featured": True,
                "is_on_sale": True,
                "created_at": "2026-01-10T08:00:00Z",
                "category": {"id": _EXAMPLE_CATEGORY_ID, "name": "Men", "slug": "men"},
                "images": [],
            }
        },
    )

    id: uuid.UUID
    name: str
    slug: str
    sku: str
    short_description: str | None
    brand: str | None
    category_id: uuid.UUID
    old_price: Decimal
    new_price: Decimal
    stock: int
    is_active: bool
    is_featured: bool
    is_on_sale: bool
    created_at: datetime
    category: CategorySummary
    images: list[ProductImageResponse] = []


class ProductDetailResponse(ProductResponse):
    description: str | None
    min_stock: int
    videos: list[ProductVideoResponse] = []
    variants: list[ProductVariantResponse] = []
    reviews: list[ReviewResponse] = []
    average_rating: float = 0
    review_count: int = 0


class AdminProductResponse(ProductDetailResponse):
    cost_price: Decimal


class ProductListParams(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(12, ge=1, le=100)
    category: str | None = Field(None, description="Category slug")
    featured: bool | None = None
    on_sale: bool | None = None
    search: str | None = None
    min_price: Decimal | None = Field(None, ge=0)
    max_price: Decimal | None = Field(None, ge=0)


class AdminProductListParams(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)
    search: str | None = None
    category_id: uuid.UUID | None = None
    is_active: bool | None = None


class UploadResponse(BaseModel):
    urls: list[str]
