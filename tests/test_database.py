import ssl

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from storefront.database import AsyncSessionLocal, engine, get_db
from storefront.utils.database_url import asyncpg_url, to_async_driver


def test_engine_is_async_engine():
    assert isinstance(engine, AsyncEngine)


def test_engine_has_pool_settings():
    pool = engine.pool
    assert pool.size() == 5  # type: ignore[attr-defined]


def test_async_session_factory_is_sessionmaker():
    assert isinstance(AsyncSessionLocal, async_sessionmaker)


def test_sessions_keep_attributes_after_commit():
    assert AsyncSessionLocal.kw["expire_on_commit"] is False


@pytest.mark.asyncio
async def test_get_db_is_async_generator():
    gen = get_db()
    assert hasattr(gen, "__anext__")
    await gen.aclose()


@pytest.mark.parametrize(
    "url",
    [
        "postgresql://u:p@db:5432/shop",
        "postgres://u:p@db:5432/shop",
    ],
)
def test_to_async_driver_rewrites_plain_postgres(url):
    assert to_async_driver(url) == "postgresql+asyncpg://u:p@db:5432/shop"


def test_to_async_driver_leaves_other_urls_alone():
    assert to_async_driver("sqlite+aiosqlite:///seed.db") == "sqlite+aiosqlite:///seed.db"


def test_asyncpg_url_moves_sslmode_into_connect_args():
    url, connect_args = asyncpg_url("postgresql+asyncpg://u:p@db/shop?sslmode=require")
    assert "sslmode" not in url
    assert isinstance(connect_args["ssl"], ssl.SSLContext)


def test_asyncpg_url_disable_drops_sslmode_without_context():
    url, connect_args = asyncpg_url("postgresql+asyncpg://u:p@db/shop?sslmode=disable")
    assert url == "postgresql+asyncpg://u:p@db/shop"
    assert connect_args == {}


def test_asyncpg_url_without_sslmode_is_untouched():
    url, connect_args = asyncpg_url("postgresql+asyncpg://u:p@db/shop")
    assert url == "postgresql+asyncpg://u:p@db/shop"
    assert connect_args == {}
