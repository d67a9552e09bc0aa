"""
Resource Catalog — Database Engine & Session Helpers
====================================================

What:  Declarative base plus builders for the async engine and session factory.
How:   Nothing is created at import time. SqlStore calls `build_engine()` and
       `build_session_factory()` when it connects and disposes the engine
       when it closes, so the engine lifetime equals the store lifetime.
Who:   SqlStore, the ORM models and the Alembic environment.

Connection Pooling (PostgreSQL):
    pool_size / max_overflow:  from settings (defaults 10 / 5)
    pool_pre_ping:             validates connections before use
    pool_recycle=3600:         recycles connections every hour

    SQLite (tests) gets the driver's default pool and no pool options.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from catalog.config import Settings


class Base(DeclarativeBase):
    """Base class for all ORM models; its metadata is what Alembic tracks."""
    pass


def build_engine(cfg: Settings) -> AsyncEngine:
    """Create the async engine described by `cfg.database_url`."""
    options = {"echo": cfg.log_level == "DEBUG"}
    if not cfg.is_sqlite:
        options.update(
            pool_size=cfg.db_pool_size,
            max_overflow=cfg.db_max_overflow,
            pool_pre_ping=cfg.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(cfg.database_url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: rows are read after commit when mapped to dicts
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
