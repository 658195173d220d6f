import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from storefront.models import SettingType


class SettingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    key: str
    value: str
    type: SettingType
    updated_at: datetime


class SettingUpdate(BaseModel):
    model_config = ConfigDict(json_schema_extra={"example": {"value": "0.08"}})

    value: str


# Public map of key -> typed value, e.g. {"tax_rate": 0.08, "currency": "USD"}
PublicSettings = dict[str, str | float]
