from .auth import (
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from .cart import (
    CartItemCreate,
    CartItemResponse,
    CartItemUpdate,
    CartResponse,
    CartSummaryResponse,
    CartSyncRequest,
    MoveToCartRequest,
    StockIssue,
    WishlistCheckResponse,
    WishlistItemCreate,
    WishlistItemResponse,
)
from .category import (
    CategoryCreate,
    CategoryDetailResponse,
    CategoryProductItem,
    CategoryResponse,
    CategoryTreeNode,
    CategoryUpdate,
)
from .checkout import CartItem, CreateOrderRequest
from .common import (
    ErrorCode,
    ErrorDetail,
    ErrorResponse,
    MessageResponse,
    PaginatedResponse,
    Pagination,
)
from .coupon import (
    CouponCreate,
    CouponQuoteResponse,
    CouponResponse,
    CouponUpdate,
    CouponValidateRequest,
)
from .health import HealthResponse
from .product import (
    AdminProductListParams,
    AdminProductResponse,
    ProductCreate,
    ProductDetailResponse,
    ProductImageResponse,
    ProductListParams,
    ProductResponse,
    ProductUpdate,
    ProductVariantResponse,
    ProductVideoResponse,
    ReviewCreate,
    ReviewResponse,
    UploadResponse,
)
from .review import ReviewListParams, ReviewStatsResponse, ReviewUpdate
from .setting import PublicSettings, SettingResponse, SettingUpdate
from .user import (
    AddressCreate,
    AddressResponse,
    AddressUpdate,
    ProfileResponse,
    ProfileUpdate,
    RoleUpdate,
    StatusUpdate,
    UserListParams,
)

__all__ = [
    # auth
    "RegisterRequest",
    "LoginRequest",
    "TokenResponse",
    "RefreshRequest",
    "UserResponse",
    # cart and wishlist
    "CartItemCreate",
    "CartItemUpdate",
    "CartItemResponse",
    "CartResponse",
    "CartSummaryResponse",
    "CartSyncRequest",
    "StockIssue",
    "WishlistItemCreate",
    "WishlistItemResponse",
    "WishlistCheckResponse",
    "MoveToCartRequest",
    # category
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryResponse",
    "CategoryProductItem",
    "CategoryDetailResponse",
    "CategoryTreeNode",
    # checkout
    "CartItem",
    "CreateOrderRequest",
    # common
    "Pagination",
    "PaginatedResponse",
    "MessageResponse",
    "ErrorDetail",
    "ErrorCode",
    "ErrorResponse",
    # coupon
    "CouponCreate",
    "CouponUpdate",
    "CouponResponse",
    "CouponValidateRequest",
    "CouponQuoteResponse",
    # health
    "HealthResponse",
    # product
    "ProductCreate",
    "ProductUpdate",
    "ProductResponse",
    "ProductDetailResponse",
    "AdminProductResponse",
    "ProductImageResponse",
    "ProductVariantResponse",
    "ProductVideoResponse",
    "ProductListParams",
    "AdminProductListParams",
    "ReviewCreate",
    "ReviewResponse",
    "UploadResponse",
    # review
    "ReviewListParams",
    "ReviewUpdate",
    "ReviewStatsResponse",
    # setting
    "PublicSettings",
    "SettingResponse",
    "SettingUpdate",
    # user
    "UserListParams",
    "RoleUpdate",
    "StatusUpdate",
    "ProfileUpdate",
    "ProfileResponse",
    "AddressCreate",
    "AddressUpdate",
    "AddressResponse",
]
