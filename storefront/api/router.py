"""Main API router: mounts all sub-routers under /api."""

from fastapi import APIRouter

from storefront.api.admin import router as admin_router
from storefront.api.auth import router as auth_router
from storefront.api.cart import router as cart_router
from storefront.api.categories import router as categories_router
from storefront.api.coupons import router as coupons_router
from storefront.api.health import router as health_router
from storefront.api.orders import router as orders_router
from storefront.api.products import router as products_router
from storefront.api.reviews import router as reviews_router
from storefront.api.settings import router as settings_router
from storefront.api.users import router as users_router
from storefront.api.wishlist import router as wishlist_router

api_router = APIRouter(prefix="/api")
api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(categories_router)
api_router.include_router(products_router)
api_router.include_router(reviews_router)
api_router.include_router(coupons_router)
api_router.include_router(settings_router)
api_router.include_router(users_router)
api_router.include_router(cart_router)
api_router.include_router(wishlist_router)
api_router.include_router(orders_router)
api_router.include_router(admin_router)
