"""User account payloads: admin user management, profiles and addresses."""

import uuid
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from storefront.models import AddressType, Role
from storefront.schemas.auth import UserResponse

_Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=100)]
_Street = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
_PostalCode = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=20)]


class UserListParams(BaseModel):
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)
    search: str | None = None
    role: Role | None = None


class RoleUpdate(BaseModel):
    role: Role


class StatusUpdate(BaseModel):
    is_active: bool


class ProfileUpdate(BaseModel):
    first_name: _Name | None = None
    last_name: _Name | None = None
    phone: str | None = Field(None, max_length=30)

    @field_validator("first_name", "last_name")
    @classmethod
    def reject_null(cls, v: str | None) -> str:
        if v is None:
            raise ValueError("Field may be omitted but not null")
        return v


class AddressCreate(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "SHIPPING",
                "street": "123 Main St",
                "city": "Springfield",
                "state": "IL",
                "postal_code": "62701",
                "country": "US",
                "is_default": True,
            }
        }
    )

    type: AddressType
    street: _Street
    city: _Name
    state: _Name
    postal_code: _PostalCode
    country: _Name
    is_default: bool = False


class AddressUpdate(BaseModel):
    type: AddressType | None = None
    street: _Street | None = None
    city: _Name | None = None
    state: _Name | None = None
    postal_code: _PostalCode | None = None
    country: _Name | None = None
    is_default: bool | None = None

    @field_validator("type", "street", "city", "state", "postal_code", "country", "is_default")
    @classmethod
    def reject_null(cls, v: object) -> object:
        if v is None:
            raise ValueError("Field may be omitted but not null")
        return v


class AddressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    type: AddressType
    street: str
    city: str
    state: str
    postal_code: str
    country: str
    is_default: bool
    created_at: datetime


class ProfileResponse(UserResponse):
    addresses: list[AddressResponse] = []
    review_count: int = 0
