"""Liveness endpoint."""

import logging

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from storefront.config import settings
from storefront.database import AsyncSessionLocal
from storefront.schemas.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Run ``SELECT 1``.  Always 200; a dead database only marks the status ``degraded``."""
    try:
        async with AsyncSessionLocal() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Health check could not reach the database: %s", exc)
        return HealthResponse(status="degraded", database="disconnected", version=settings.version)

    return HealthResponse(status="ok", database="connected", version=settings.version)
