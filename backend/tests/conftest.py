"""
Resource Catalog — Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets fresh stores; nothing is shared between tests.

Fixture Hierarchy:
    ├── test_settings: Settings for a memory-backed app, fast DB retries
    ├── memory_store:  MemoryStore
    ├── json_store:    connected JsonFileStore in a temp directory
    ├── sql_store:     connected SqlStore on a temp SQLite file (aiosqlite)
    ├── service:       CatalogService on memory_store
    ├── make_resource: helper creating a resource through the service
    └── test_client:   HTTPX AsyncClient on an app using memory_store
"""

import os
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Before any catalog import: the module-level `settings` and `app` read these
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from catalog.config import Settings  # noqa: E402
from catalog.services import CatalogService  # noqa: E402
from catalog.store import JsonFileStore, MemoryStore, SqlStore  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Stores
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        store_backend="memory",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}",
        data_dir=str(tmp_path / "data"),
        db_connect_attempts=2,
        db_connect_delay=0,
        log_level="WARNING",
    )


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest_asyncio.fixture
async def json_store(tmp_path) -> AsyncGenerator[JsonFileStore, None]:
    store = JsonFileStore(str(tmp_path / "data"))
    await store.connect()
    yield store
    await store.close()


@pytest_asyncio.fixture
async def sql_store(test_settings) -> AsyncGenerator[SqlStore, None]:
    """
    SqlStore on a throwaway SQLite file.

    A file (not :memory:) so every pooled connection sees the same tables.
    """
    store = SqlStore(test_settings)
    await store.connect()
    yield store
    await store.close()


# ══════════════════════════════════════════════════════════════════════════
# Service
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def service(memory_store) -> CatalogService:
    return CatalogService(memory_store, precision=2, default_user_id="anonymous")


@pytest.fixture
def make_resource(service):
    """
    Create a resource through the service with sensible defaults.

    Usage:
        resource = await make_resource(title="Intro", level="beginner")
    """

    async def _make(**fields):
        data = {"title": "Python Basics", "type": "video", **fields}
        return await service.create_resource(data)

    return _make


# ══════════════════════════════════════════════════════════════════════════
# HTTP client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(test_settings, memory_store) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to a fresh app over ASGITransport.

    ASGITransport does not run the lifespan, so the app gets its store
    injected up front; MemoryStore needs no connect().
    """
    from catalog.main import create_app

    app = create_app(cfg=test_settings, store=memory_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
