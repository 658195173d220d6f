"""Per-request correlation ids.

Every request gets a UUID4, kept in :data:`REQUEST_ID_CTX` for the lifetime
of the request and echoed back in the ``X-Request-Id`` response header.  A
well-formed id supplied by the caller is reused so that ids can be traced
across services.

Register this middleware last so it wraps every other layer.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-Id"

REQUEST_ID_CTX: ContextVar[str] = ContextVar("request_id", default="")


def _incoming_id(request: Request) -> str | None:
    raw = request.headers.get(REQUEST_ID_HEADER)
    if not raw:
        return None
    try:
        return str(uuid.UUID(raw))
    except ValueError:
        return None


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = _incoming_id(request) or str(uuid.uuid4())
        token = REQUEST_ID_CTX.set(request_id)
        try:
            response: Response = await call_next(request)
        finally:
            REQUEST_ID_CTX.reset(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
