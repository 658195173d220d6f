"""Per-client rate limiting with slowapi.

Anonymous auth endpoints (register, login, refresh) are keyed by client IP;
authenticated endpoints by the ``sub`` claim of the Bearer token so that
users behind one NAT do not share a bucket.

+---------------------+-----------+-----------+
| Endpoint            | Limit     | Key       |
+=====================+===========+===========+
| POST /auth/register | 5/minute  | IP        |
| POST /auth/login    | 10/minute | IP        |
| POST /auth/refresh  | 30/minute | IP        |
| GET  /auth/me       | 100/min   | user / IP |
| POST /orders        | 20/minute | IP        |
+---------------------+-----------+-----------+

Decorated endpoints must take ``request: Request`` and ``response: Response``
so slowapi can attach the ``X-RateLimit-*`` headers.
"""

import logging

from fastapi import Request
from jose import JWTError, jwt
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import Response

from storefront.config import settings
from storefront.middleware.error_handler import error_response

__all__ = [
    "limiter",
    "get_remote_address",
    "get_user_key",
    "rate_limit_exceeded_handler",
]

logger = logging.getLogger(__name__)


def get_user_key(request: Request) -> str:
    """``user:<sub>`` for a decodable Bearer token, else the client IP.

    Expiry is not checked here; the auth dependencies reject expired tokens.
    """
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        try:
            claims = jwt.decode(
                header.removeprefix("Bearer "),
                settings.jwt_secret_key,
                algorithms=[settings.jwt_algorithm],
                options={"verify_exp": False},
            )
        except JWTError:
            claims = {}
        sub = claims.get("sub")
        if isinstance(sub, str) and sub:
            return f"user:{sub}"
    return get_remote_address(request)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """429 in the standard envelope, with ``Retry-After`` / ``X-RateLimit-*`` headers."""
    logger.warning("Rate limit %s exceeded by %s", exc.detail, get_remote_address(request))
    response: Response = error_response(
        429, "RATE_LIMITED", "Rate limit exceeded. Please try again later."
    )
    view_rate_limit = getattr(request.state, "view_rate_limit", None)
    app_limiter: Limiter | None = getattr(request.app.state, "limiter", None)
    if view_rate_limit is not None and app_limiter is not None:
        response = app_limiter._inject_headers(response, view_rate_limit)
    return response


# In-memory storage: counters are per process and reset on restart.
limiter: Limiter = Limiter(key_func=get_remote_address, headers_enabled=True)
