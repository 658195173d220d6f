from storefront.models.address import Address, AddressType
from storefront.models.cart import CartItem, WishlistItem
from storefront.models.category import Category
from storefront.models.coupon import Coupon, CouponType
from storefront.models.product import Product, ProductImage, ProductVariant, ProductVideo
from storefront.models.review import Review
from storefront.models.setting import Setting, SettingType
from storefront.models.user import Role, User

__all__ = [
    "Address",
    "AddressType",
    "CartItem",
    "Category",
    "Coupon",
    "CouponType",
    "Product",
    "ProductImage",
    "ProductVariant",
    "ProductVideo",
    "Review",
    "Role",
    "Setting",
    "SettingType",
    "User",
    "WishlistItem",
]
