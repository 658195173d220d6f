"""Seed script: populate the database with the storefront fixture set.

Run as:
    python -m seed

Requires DATABASE_URL and JWT_SECRET_KEY environment variables (or a .env file).
Safe to run against a populated database: existing rows are left untouched.
"""

import asyncio
import logging
import os
import sys

from sqlalchemy.ext.asyncio import create_async_engine

from storefront.utils.database_url import asyncpg_url, to_async_driver
from storefront.services.seeding import (
    ADMIN_EMAIL,
    ADMIN_PASSWORD,
    CUSTOMER_EMAIL,
    CUSTOMER_PASSWORD,
    seed_database,
)

logger = logging.getLogger("seed")


async def main(database_url: str | None = None) -> int:
    """Seed the database at *database_url* and return the process exit status."""
    database_url = database_url or os.environ.get("DATABASE_URL")
    if not database_url:
        logger.error("DATABASE_URL environment variable is required")
        return 1

    print("Storefront Seed Script")
    print("=" * 50)

    url, connect_args = asyncpg_url(to_async_driver(database_url))
    engine = create_async_engine(url, pool_pre_ping=True, connect_args=connect_args)

    try:
        summary = await seed_database(engine)
    except Exception:
        logger.exception("Error during seeding")
        return 1

    for entity in sorted(set(summary.created) | set(summary.existing)):
        print(
            f"  ✓ {entity}: {summary.created[entity]} created, "
            f"{summary.existing[entity]} already present"
        )

    print("\n✓ Seed complete!")
    print("\nLogin credentials:")
    print(f"  Admin:    {ADMIN_EMAIL} / {ADMIN_PASSWORD}")
    print(f"  Customer: {CUSTOMER_EMAIL} / {CUSTOMER_PASSWORD}")
    return 0


def run() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    run()
