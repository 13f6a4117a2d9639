"""Pytest configuration and fixtures."""

import os
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from config import Config
from shortlink.database.base import MappingStoreBase
from shortlink.database.memory import InMemoryMappingStore
from shortlink.database.postgres import PostgresMappingStore
from shortlink.database.sqlite import SQLiteMappingStore
from shortlink.service import URLShortenerService
from shortlink.shortcode import ShortCodeGenerator
from shortlink.common.logging_config import setup_logging
from web_app import create_app

POSTGRES_TEST_URL = os.getenv("SHORTLINK_TEST_POSTGRES_URL")

STORE_BACKENDS = [
    "memory",
    "sqlite",
    pytest.param(
        "postgresql",
        marks=pytest.mark.skipif(not POSTGRES_TEST_URL, reason="SHORTLINK_TEST_POSTGRES_URL not set"),
    ),
]


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=6)


@pytest.fixture
def sqlite_path(tmp_path):
    """Path of a fresh SQLite database file."""
    return str(tmp_path / "shortlink.db")


async def _open_store(backend: str, sqlite_path: str, logger) -> MappingStoreBase:
    if backend == "memory":
        store = InMemoryMappingStore(logger=logger)
    elif backend == "sqlite":
        store = SQLiteMappingStore(db_config=sqlite_path, pool_size=4, logger=logger)
    else:
        store = PostgresMappingStore(db_config=POSTGRES_TEST_URL, logger=logger)
    await store.open()
    if backend == "postgresql":
        async with store._get_connection() as conn:
            await conn.execute("TRUNCATE urls")
    return store


@pytest.fixture(params=STORE_BACKENDS)
async def store(request, sqlite_path, logger) -> AsyncGenerator[MappingStoreBase, None]:
    """Opened store, once per available backend."""
    db = await _open_store(request.param, sqlite_path, logger)

    yield db

    await db.close()


@pytest.fixture
async def sqlite_store(sqlite_path, logger) -> AsyncGenerator[SQLiteMappingStore, None]:
    """Opened SQLite store on a temporary file."""
    db = SQLiteMappingStore(db_config=sqlite_path, pool_size=4, logger=logger)
    await db.open()

    yield db

    await db.close()


@pytest.fixture
async def service(sqlite_store, short_code_generator, logger) -> URLShortenerService:
    """Create service instance."""
    return URLShortenerService(
        db=sqlite_store,
        cache=None,  # No cache for tests
        short_code_generator=short_code_generator,
        logger=logger,
    )


@pytest.fixture
def config():
    """Configuration for API tests."""
    return Config(
        database_url="memory://",
        base_url="http://testserver",
        _env_file=None,
    )


@pytest.fixture
def app(service, config):
    """Create test FastAPI app."""
    return create_app(
        db_instance=service.db,
        cache_instance=None,
        service_instance=service,
        config=config,
    )


@pytest.fixture
async def client(app):
    """Create test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
