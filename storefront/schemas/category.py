"""Pydantic schemas for Category resources."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CategoryCreate(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Accessories",
                "slug": "accessories",
                "description": "Bags, belts and hats",
            }
        }
    )

    name: str = Field(..., min_length=1, max_length=100)
    slug: str | None = Field(None, max_length=120, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    description: str | None = None
    is_active: bool = True
    parent_id: uuid.UUID | None = None


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    slug: str | None = Field(None, max_length=120, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    description: str | None = None
    is_active: bool | None = None
    parent_id: uuid.UUID | None = None

    @field_validator("name", "slug", "is_active")
    @classmethod
    def reject_null(cls, v: object) -> object:
        if v is None:
            raise ValueError("Field may be omitted but not null")
        return v


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    description: str | None
    is_active: bool
    parent_id: uuid.UUID | None = None
    created_at: datetime


class CategoryProductItem(BaseModel):
    """Product card embedded in a category page."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    sku: str
    old_price: Decimal
    new_price: Decimal
    is_on_sale: bool


class CategoryDetailResponse(CategoryResponse):
    products: list[CategoryProductItem] = []


class CategoryTreeChild(CategoryResponse):
    product_count: int = 0


class CategoryTreeNode(CategoryResponse):
    """Root category with its active subcategories, one level deep."""

    product_count: int = 0
    children: list[CategoryTreeChild] = []
