"""Offset pagination over async SQLAlchemy selects."""

import math
from typing import Any

from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.schemas.common import PaginatedResponse, Pagination

MAX_LIMIT = 100


async def paginate[T: BaseModel](
    db: AsyncSession,
    query: Select[Any],
    page: int,
    limit: int,
    schema: type[T],
) -> PaginatedResponse[T]:
    """Run *query* for one page and wrap the rows in a :class:`PaginatedResponse`.

    *page* is 1-based and clamped to at least 1; *limit* is clamped to
    ``[1, MAX_LIMIT]``.  The total is counted over *query* as a subquery so an
    ``ORDER BY`` on it is harmless.
    """
    page = max(page, 1)
    limit = max(1, min(limit, MAX_LIMIT))

    total: int = (await db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()
    rows = (await db.execute(query.offset((page - 1) * limit).limit(limit))).scalars().all()

    return PaginatedResponse(
        data=[schema.model_validate(row) for row in rows],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit) if total else 1,
        ),
    )
