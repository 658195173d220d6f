import asyncio
import os
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

# Registers every table on Base.metadata for autogenerate.
import storefront.models  # noqa: F401
from storefront.models.base import Base
from storefront.utils.database_url import asyncpg_url, to_async_driver

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url() -> str:
    """Migration URL: ``DATABASE_URL_DIRECT`` when set, else ``DATABASE_URL``.

    DDL has to bypass a transaction-mode connection pooler, so deployments
    behind one must provide the direct URL.
    """
    url = os.environ.get("DATABASE_URL_DIRECT") or os.environ["DATABASE_URL"]
    return to_async_driver(url)


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    context.configure(
        url=get_url().replace("postgresql+asyncpg://", "postgresql://", 1),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    url, connect_args = asyncpg_url(get_url())
    connectable = create_async_engine(url, poolclass=pool.NullPool, connect_args=connect_args)
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


def run_migrations_online() -> None:
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
