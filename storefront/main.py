import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException

from storefront.api.router import api_router
from storefront.config import settings
from storefront.database import engine
from storefront.middleware.access_log import AccessLogMiddleware
from storefront.middleware.error_handler import (
    http_exception_handler,
    integrity_error_handler,
    payment_provider_error_handler,
    unhandled_exception_handler,
    upload_rejected_handler,
    validation_exception_handler,
)
from storefront.middleware.rate_limit import limiter, rate_limit_exceeded_handler
from storefront.middleware.request_id import RequestIdMiddleware
from storefront.services.paypal import PaymentProviderError
from storefront.services.uploads import UploadRejectedError

logger = logging.getLogger(__name__)

_OPENAPI_TAGS = [
    {"name": "Health", "description": "Liveness and database connectivity"},
    {"name": "Auth", "description": "Registration, login and tokens"},
    {"name": "Categories", "description": "Public category browsing"},
    {"name": "Products", "description": "Public catalog and reviews"},
    {"name": "Reviews", "description": "Review listings, statistics and owner edits"},
    {"name": "Coupons", "description": "Coupon validation"},
    {"name": "Settings", "description": "Public storefront settings"},
    {"name": "Users", "description": "Own profile, addresses and reviews"},
    {"name": "Cart", "description": "Server-side shopping cart"},
    {"name": "Wishlist", "description": "Saved products"},
    {"name": "Checkout", "description": "PayPal order creation and capture"},
    {"name": "Admin", "description": "Back office, admin role only"},
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    async with engine.connect() as conn:
        await conn.run_sync(lambda _: None)
    logger.info("%s %s started", settings.app_name, settings.version)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Storefront backend: catalog, back office and PayPal checkout",
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=_OPENAPI_TAGS,
)

# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

app.add_exception_handler(HTTPException, http_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
app.add_exception_handler(IntegrityError, integrity_error_handler)  # type: ignore[arg-type]
app.add_exception_handler(UploadRejectedError, upload_rejected_handler)  # type: ignore[arg-type]
app.add_exception_handler(PaymentProviderError, payment_provider_error_handler)  # type: ignore[arg-type]
app.add_exception_handler(Exception, unhandled_exception_handler)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]

# ---------------------------------------------------------------------------
# Middleware (last added runs outermost)
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(AccessLogMiddleware)
app.add_middleware(RequestIdMiddleware)

app.include_router(api_router)

# Uploaded product media is served from disk; the directory may not exist yet.
app.mount(
    settings.upload_url_prefix,
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)
