"""Idempotent database bootstrap.

Every row is written with "insert if the natural key is absent, otherwise
leave untouched" semantics (``INSERT ... ON CONFLICT DO NOTHING`` followed by
a lookup by the same key), so the whole routine can be re-run against a
populated database without producing duplicates or overwriting edits.

Steps run sequentially in foreign-key order: users and categories, then
products, then their images and variants, then reviews, then the
independent coupons and settings.
"""

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from storefront.models import (
    Category,
    Coupon,
    CouponType,
    Product,
    ProductImage,
    ProductVariant,
    Review,
    Role,
    Setting,
    SettingType,
    User,
)
from storefront.models.base import Base
from storefront.services.auth import hash_password

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Fixture data
# ---------------------------------------------------------------------------

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"
CUSTOMER_EMAIL = "customer@example.com"
CUSTOMER_PASSWORD = "customer123"

USERS: list[dict[str, Any]] = [
    {
        "email": ADMIN_EMAIL,
        "password": ADMIN_PASSWORD,
        "first_name": "Admin",
        "last_name": "User",
        "role": Role.ADMIN,
        "phone": "+1234567890",
    },
    {
        "email": CUSTOMER_EMAIL,
        "password": CUSTOMER_PASSWORD,
        "first_name": "John",
        "last_name": "Doe",
        "role": Role.CUSTOMER,
        "phone": "+1234567891",
    },
]

CATEGORIES: list[dict[str, str]] = [
    {"slug": "men", "name": "Men", "description": "Fashion items for men"},
    {"slug": "women", "name": "Women", "description": "Fashion items for women"},
    {"slug": "kids", "name": "Kids", "description": "Fashion items for kids"},
]


def _product(
    sku: str,
    slug: str,
    name: str,
    category: str,
    prices: tuple[str, str, str],
    stock: int,
    short_description: str,
    description: str,
    *,
    featured: bool = False,
    on_sale: bool = False,
) -> dict[str, Any]:
    old_price, new_price, cost_price = (Decimal(p) for p in prices)
    return {
        "sku": sku,
        "slug": slug,
        "name": name,
        "category": category,
        "brand": "FashionBrand",
        "old_price": old_price,
        "new_price": new_price,
        "cost_price": cost_price,
        "stock": stock,
        "short_description": short_description,
        "description": description,
        "is_featured": featured,
        "is_on_sale": on_sale,
        "image": {"url": f"/uploads/products/seed/{slug}.jpg", "alt": name},
    }


PRODUCTS: list[dict[str, Any]] = [
    _product(
        "MSH001", "mens-classic-shirt", "Men's Classic Shirt", "men",
        ("50.00", "40.00", "25.00"), 100,
        "Premium cotton classic shirt",
        "A comfortable and stylish classic shirt made from premium cotton with a modern fit.",
        featured=True, on_sale=True,
    ),
    _product(
        "MJK002", "mens-jacket", "Men's Jacket", "men",
        ("100.00", "80.00", "50.00"), 50,
        "Stylish men's jacket",
        "A warm jacket for cooler weather with a modern design and durable construction.",
        featured=True,
    ),
    _product(
        "MTR003", "mens-trousers", "Men's Trousers", "men",
        ("60.00", "50.00", "30.00"), 75,
        "Comfortable men's trousers",
        "Trousers made from high-quality fabric with a fit for any occasion.",
    ),
    _product(
        "WDR004", "womens-dress", "Women's Dress", "women",
        ("90.00", "75.00", "45.00"), 60,
        "Elegant women's dress",
        "An elegant dress with a flattering design, premium fabric and comfortable fit.",
        featured=True, on_sale=True,
    ),
    _product(
        "WTP005", "womens-top", "Women's Top", "women",
        ("40.00", "30.00", "20.00"), 80,
        "Stylish women's top",
        "A comfortable top for everyday wear with a modern design and soft fabric.",
    ),
    _product(
        "WSK006", "womens-skirt", "Women's Skirt", "women",
        ("55.00", "45.00", "25.00"), 45,
        "Elegant women's skirt",
        "A skirt with a flattering design, comfortable fit and premium fabric.",
    ),
    _product(
        "KTS007", "kids-tshirt", "Kids' T-Shirt", "kids",
        ("30.00", "25.00", "15.00"), 120,
        "Comfortable kids t-shirt",
        "A colourful t-shirt made from soft cotton with fun designs.",
        featured=True,
    ),
    _product(
        "KSH008", "kids-shorts", "Kids' Shorts", "kids",
        ("25.00", "20.00", "12.00"), 90,
        "Comfortable kids shorts",
        "Durable shorts for active play with breathable fabric.",
    ),
    _product(
        "KDR009", "kids-dress", "Kids' Dress", "kids",
        ("45.00", "35.00", "22.00"), 70,
        "Beautiful kids dress",
        "A comfortable dress with cute designs and soft fabric.",
        on_sale=True,
    ),
    _product(
        "KSD010", "kids-summer-dress", "Kids' Summer Dress", "kids",
        ("50.00", "40.00", "25.00"), 55,
        "Light summer dress for kids",
        "A light summer dress for warm weather with breathable fabric.",
    ),
    _product(
        "KPD011", "kids-party-dress", "Kids' Party Dress", "kids",
        ("55.00", "45.00", "28.00"), 40,
        "Special party dress for kids",
        "A party dress with an elegant design for special occasions.",
    ),
]

SIZES: tuple[str, ...] = ("XS", "S", "M", "L", "XL", "XXL")
COLORS: tuple[str, ...] = ("Red", "Blue", "Green", "Black", "White")
VARIANT_NAME = "Size / Color"
VARIANT_STOCK_RANGE = (5, 24)

REVIEWS: list[dict[str, Any]] = [
    {"rating": 5, "title": "Excellent Quality", "comment": "Very comfortable and stylish. Highly recommended!"},
    {"rating": 4, "title": "Good Product", "comment": "Nice quality and good fit. Would buy again."},
    {"rating": 5, "title": "Perfect Fit", "comment": "Exactly what I was looking for."},
    {"rating": 4, "title": "Satisfied Customer", "comment": "Good quality for the price."},
    {"rating": 5, "title": "Amazing Product", "comment": "Exceeded my expectations."},
]

COUPONS: list[dict[str, Any]] = [
    {
        "code": "WELCOME10",
        "type": CouponType.PERCENTAGE,
        "value": Decimal("10.00"),
        "min_amount": Decimal("50.00"),
        "usage_limit": 100,
    },
    {
        "code": "SAVE20",
        "type": CouponType.FIXED_AMOUNT,
        "value": Decimal("20.00"),
        "min_amount": Decimal("100.00"),
        "usage_limit": 50,
    },
    {
        "code": "FREESHIP",
        "type": CouponType.FREE_SHIPPING,
        "value": Decimal("0.00"),
        "min_amount": Decimal("75.00"),
        "usage_limit": 200,
    },
]

SETTINGS: list[dict[str, Any]] = [
    {"key": "site_name", "value": "Modern E-Commerce", "type": SettingType.STRING},
    {"key": "site_description", "value": "Your one-stop shop for fashion", "type": SettingType.STRING},
    {"key": "currency", "value": "USD", "type": SettingType.STRING},
    {"key": "tax_rate", "value": "10", "type": SettingType.NUMBER},
    {"key": "free_shipping_threshold", "value": "100", "type": SettingType.NUMBER},
    {"key": "shipping_cost", "value": "10", "type": SettingType.NUMBER},
]


# ---------------------------------------------------------------------------
# Create-if-absent primitive
# ---------------------------------------------------------------------------


@dataclass
class SeedSummary:
    """Per-entity counts of rows inserted vs. found already present."""

    created: Counter[str] = field(default_factory=Counter)
    existing: Counter[str] = field(default_factory=Counter)

    def record(self, entity: str, created: bool) -> None:
        (self.created if created else self.existing)[entity] += 1

    @property
    def total_created(self) -> int:
        return sum(self.created.values())


_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


async def upsert[M: Base](
    session: AsyncSession,
    model: type[M],
    key: dict[str, Any],
    values: dict[str, Any] | None = None,
) -> tuple[M, bool]:
    """Insert a *model* row identified by its natural *key* unless one exists.

    *key* must name exactly the columns of a unique constraint on the table.
    An existing row is never modified.  Returns ``(row, created)``.
    """
    dialect = session.get_bind().dialect.name
    insert = _INSERTS.get(dialect)
    if insert is None:
        raise RuntimeError(f"Seeding is not supported on the {dialect!r} dialect")

    stmt = (
        insert(model)
        .values(**key, **(values or {}))
        .on_conflict_do_nothing(index_elements=list(key))
    )
    result = await session.execute(stmt)
    row = (await session.execute(select(model).filter_by(**key))).scalar_one()
    return row, result.rowcount == 1


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


async def seed_users(session: AsyncSession, summary: SeedSummary) -> dict[str, User]:
    users: dict[str, User] = {}
    for data in USERS:
        values = {k: v for k, v in data.items() if k not in ("email", "password")}
        values["password_hash"] = hash_password(data["password"])
        user, created = await upsert(session, User, {"email": data["email"]}, values)
        summary.record("users", created)
        users[user.email] = user
    return users


async def seed_categories(session: AsyncSession, summary: SeedSummary) -> dict[str, Category]:
    categories: dict[str, Category] = {}
    for data in CATEGORIES:
        category, created = await upsert(
            session,
            Category,
            {"slug": data["slug"]},
            {"name": data["name"], "description": data["description"]},
        )
        summary.record("categories", created)
        categories[category.slug] = category
    return categories


async def seed_products(
    session: AsyncSession,
    categories: dict[str, Category],
    summary: SeedSummary,
) -> list[Product]:
    """Create each product and its primary image, keyed by SKU and (product, url)."""
    products: list[Product] = []
    for data in PRODUCTS:
        values = {
            k: v for k, v in data.items() if k not in ("sku", "category", "image")
        }
        values["category_id"] = categories[data["category"]].id
        product, created = await upsert(session, Product, {"sku": data["sku"]}, values)
        summary.record("products", created)

        image = data["image"]
        _, created = await upsert(
            session,
            ProductImage,
            {"product_id": product.id, "url": image["url"]},
            {"alt": image["alt"], "is_primary": True, "order": 0},
        )
        summary.record("product_images", created)
        products.append(product)
    return products


async def seed_variants(
    session: AsyncSession,
    products: list[Product],
    summary: SeedSummary,
    rng: random.Random,
) -> None:
    """Create one variant per size x colour for every product.

    Stock is random per combination; it is not part of the natural key, so
    re-runs keep whatever stock the first run (or an admin) wrote.
    """
    lo, hi = VARIANT_STOCK_RANGE
    for product in products:
        for size in SIZES:
            for color in COLORS:
                _, created = await upsert(
                    session,
                    ProductVariant,
                    {"product_id": product.id, "name": VARIANT_NAME, "value": f"{size} / {color}"},
                    {"sku": f"{product.sku}-{size}-{color}", "stock": rng.randint(lo, hi)},
                )
                summary.record("product_variants", created)


async def seed_reviews(
    session: AsyncSession,
    reviewer: User,
    products: list[Product],
    summary: SeedSummary,
) -> None:
    for product, data in zip(products, REVIEWS):
        _, created = await upsert(
            session,
            Review,
            {"user_id": reviewer.id, "product_id": product.id},
            {**data, "is_verified": True},
        )
        summary.record("reviews", created)


async def seed_coupons(session: AsyncSession, summary: SeedSummary) -> None:
    for data in COUPONS:
        values = {k: v for k, v in data.items() if k != "code"}
        _, created = await upsert(session, Coupon, {"code": data["code"]}, values)
        summary.record("coupons", created)


async def seed_settings(session: AsyncSession, summary: SeedSummary) -> None:
    for data in SETTINGS:
        _, created = await upsert(
            session,
            Setting,
            {"key": data["key"]},
            {"value": data["value"], "type": data["type"]},
        )
        summary.record("settings", created)


async def seed_all(session: AsyncSession, rng: random.Random | None = None) -> SeedSummary:
    """Populate the fixture set, awaiting each step before the next."""
    rng = rng or random.Random()
    summary = SeedSummary()

    users = await seed_users(session, summary)
    categories = await seed_categories(session, summary)
    products = await seed_products(session, categories, summary)
    await seed_variants(session, products, summary, rng)
    await seed_reviews(session, users[CUSTOMER_EMAIL], products, summary)
    await seed_coupons(session, summary)
    await seed_settings(session, summary)

    logger.info(
        "Seed finished: %d rows created, %d already present",
        summary.total_created,
        sum(summary.existing.values()),
    )
    return summary


async def seed_database(engine: AsyncEngine, rng: random.Random | None = None) -> SeedSummary:
    """Run :func:`seed_all` in one transaction and dispose *engine* on every exit path."""
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_factory() as session, session.begin():
            return await seed_all(session, rng=rng)
    finally:
        await engine.dispose()
