"""FastAPI dependencies: DB session, current-user extraction, and the admin gate."""

import logging
import uuid

from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.database import get_db
from storefront.models import Role, User
from storefront.services.auth import ACCESS_TOKEN_TYPE, decode_token

__all__ = ["get_db", "get_current_user_id", "get_current_user", "require_admin"]

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(
    scheme_name="BearerAuth",
    description="JWT access token. Obtain one via **POST /api/auth/login**.",
    auto_error=False,
)

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Not authorized",
    headers={"WWW-Authenticate": "Bearer"},
)

_ADMIN_ONLY = HTTPException(
    status_code=status.HTTP_403_FORBIDDEN,
    detail="Access denied. Admin only.",
)

_LOOKUP_FAILED = HTTPException(
    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    detail="Authentication error",
)


async def get_current_user_id(
    bearer: HTTPAuthorizationCredentials | None = Security(_bearer_scheme),  # noqa: B008
) -> uuid.UUID:
    """Return the user id carried by a valid Bearer access token.  Raises ``HTTP 401``."""
    if bearer is None:
        raise _CREDENTIALS_EXCEPTION

    try:
        payload = decode_token(bearer.credentials)
    except JWTError:
        raise _CREDENTIALS_EXCEPTION from None

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise _CREDENTIALS_EXCEPTION

    try:
        return uuid.UUID(payload.get("sub") or "")
    except ValueError:
        raise _CREDENTIALS_EXCEPTION from None


async def get_current_user(
    user_id: uuid.UUID = Depends(get_current_user_id),  # noqa: B008
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> User:
    """Return the live, active ``User`` behind the access token."""
    user: User | None = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise _CREDENTIALS_EXCEPTION
    return user


async def require_admin(
    user_id: uuid.UUID = Depends(get_current_user_id),  # noqa: B008
    db: AsyncSession = Depends(get_db),  # noqa: B008
) -> User:
    """Allow the request through only if the user's stored role is ``ADMIN``.

    The role is read from the database on every call; the claim embedded in
    the token is ignored.  A missing user is treated the same as a non-admin
    (403).  A failed lookup is logged and reported as a generic 500 without
    saying why.
    """
    try:
        user: User | None = await db.get(User, user_id)
    except SQLAlchemyError:
        logger.exception("Admin role lookup failed for user %s", user_id)
        raise _LOOKUP_FAILED from None

    if user is None or user.role != Role.ADMIN:
        raise _ADMIN_ONLY
    return user
