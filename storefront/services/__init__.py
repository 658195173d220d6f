from storefront.services.auth import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from storefront.services.cart import add_to_cart, replace_cart, stock_issues, summarize
from storefront.services.coupons import CouponError, CouponQuote, evaluate_coupon, quote_coupon
from storefront.services.paypal import PaymentProviderError, PayPalClient, cart_total
from storefront.services.uploads import (
    StoredMedia,
    UploadRejectedError,
    check_media,
    delete_media,
    store_media,
)

__all__ = [
    # auth
    "create_access_token",
    "create_refresh_token",
    "decode_token",
    "hash_password",
    "verify_password",
    # cart
    "add_to_cart",
    "replace_cart",
    "stock_issues",
    "summarize",
    # coupons
    "CouponError",
    "CouponQuote",
    "evaluate_coupon",
    "quote_coupon",
    # paypal
    "PaymentProviderError",
    "PayPalClient",
    "cart_total",
    # uploads
    "StoredMedia",
    "UploadRejectedError",
    "check_media",
    "delete_media",
    "store_media",
]
