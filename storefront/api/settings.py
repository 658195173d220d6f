"""Public storefront settings."""

from decimal import Decimal

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.dependencies import get_db
from storefront.models import Setting
from storefront.schemas.setting import PublicSettings

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get("", response_model=PublicSettings)
async def public_settings(
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> PublicSettings:
    """Every setting as ``key -> value``, numbers decoded by their type tag."""
    result = await db.execute(select(Setting).order_by(Setting.key))
    values: PublicSettings = {}
    for setting in result.scalars().all():
        value = setting.typed_value()
        values[setting.key] = float(value) if isinstance(value, Decimal) else value
    return values
