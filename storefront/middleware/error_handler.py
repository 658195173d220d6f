"""Exception handlers that render every failure in the same JSON envelope.

``{"error": {"code": ..., "message": ..., "details": [...] | null}}``

Registered on the application in ``storefront.main``.
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException

from storefront.schemas.common import ErrorCode, ErrorDetail, ErrorResponse
from storefront.services.paypal import PaymentProviderError
from storefront.services.uploads import UploadRejectedError

logger = logging.getLogger(__name__)

_STATUS_TO_CODE: dict[int, str] = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    413: "PAYLOAD_TOO_LARGE",
    422: "UNPROCESSABLE_ENTITY",
    429: "RATE_LIMITED",
    500: "INTERNAL_ERROR",
    502: "BAD_GATEWAY",
    503: "SERVICE_UNAVAILABLE",
}

_INTERNAL_MESSAGE = "An internal server error occurred"


def _code_for_status(status_code: int) -> str:
    return _STATUS_TO_CODE.get(status_code, f"HTTP_{status_code}")


def error_response(
    status_code: int,
    code: str,
    message: str,
    details: list[ErrorDetail] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(error=ErrorCode(code=code, message=message, details=details))
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Map ``HTTPException`` onto the envelope, forwarding any headers it carries."""
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return error_response(
        exc.status_code,
        _code_for_status(exc.status_code),
        detail,
        headers=dict(exc.headers) if exc.headers else None,
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """One ``ErrorDetail`` per failed field, with the location prefix dropped."""
    details: list[ErrorDetail] = []
    for error in exc.errors():
        loc = error.get("loc", ())
        parts = [str(p) for p in loc if p not in ("body", "query", "path", "form")]
        field = ".".join(parts) if parts else (str(loc[-1]) if loc else "unknown")
        details.append(ErrorDetail(field=field, message=error["msg"]))

    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "UNPROCESSABLE_ENTITY",
        "Request validation failed",
        details=details,
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """409; ``ALREADY_EXISTS`` when the driver reports a unique violation."""
    orig = str(exc.orig).lower() if exc.orig is not None else ""
    if "unique" in orig or "duplicate" in orig:
        return error_response(
            status.HTTP_409_CONFLICT,
            "ALREADY_EXISTS",
            "A resource with the given identifier already exists",
        )
    return error_response(
        status.HTTP_409_CONFLICT, "CONFLICT", "Database integrity constraint violation"
    )


async def upload_rejected_handler(request: Request, exc: UploadRejectedError) -> JSONResponse:
    code = (
        "PAYLOAD_TOO_LARGE"
        if exc.status_code == status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
        else "UNSUPPORTED_MEDIA"
    )
    return error_response(exc.status_code, code, exc.message)


async def payment_provider_error_handler(
    request: Request, exc: PaymentProviderError
) -> JSONResponse:
    """Provider failures are surfaced as a generic 500; details stay in the log."""
    logger.error(
        "Payment provider failure on %s %s: %s (status=%s)",
        request.method,
        request.url.path,
        exc,
        exc.status_code,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", _INTERNAL_MESSAGE
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback server-side; the client only sees ``INTERNAL_ERROR``."""
    logger.error(
        "Unhandled %s on %s %s",
        type(exc).__name__,
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", _INTERNAL_MESSAGE
    )
