"""One JSON access-log line per request.

Fields: ``method``, ``path``, ``status``, ``duration_ms``, ``request_id``,
``client``.  Upload and checkout traffic is logged like any other request;
bodies are never logged.
"""

import json
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from storefront.middleware.request_id import REQUEST_ID_CTX

logger = logging.getLogger(__name__)


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response: Response = await call_next(request)
        record = {
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            "request_id": REQUEST_ID_CTX.get(),
            "client": request.client.host if request.client else None,
        }
        logger.info(json.dumps(record))
        return response
