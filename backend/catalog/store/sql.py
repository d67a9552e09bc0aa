"""
Resource Catalog — SQL Entity Store
===================================

What:  EntityStore backed by async SQLAlchemy (PostgreSQL/asyncpg in
       production, SQLite/aiosqlite in tests).
How:   One ORM model per collection (see catalog.models). Each public
       method opens its own session and commits before returning, so every
       call is one transaction and nothing spans collections.
       Rows are mapped to plain dicts on the way out; the resource table's
       JSON `attributes` column is flattened into the record so free-form
       client fields round-trip unchanged.
Who:   Selected with STORE_BACKEND=sql (the default).

Startup:
    connect() builds the engine, then probes it with SELECT 1 under a
    tenacity retry loop (fixed delay, bounded attempts). When every attempt
    fails it raises StoreError and the application refuses to start.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple, Type

from sqlalchemy import delete as sa_delete
from sqlalchemy import select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from catalog.config import Settings
from catalog.database import Base, build_engine, build_session_factory
from catalog.exceptions import StoreError
from catalog.models import FeedbackRow, RatingRow, ResourceRow
from catalog.store.base import (
    Collection,
    EntityStore,
    Filters,
    Record,
    active_filters,
    matches,
    new_id,
)

logger = logging.getLogger(__name__)

_MODELS: Dict[Collection, Type[Base]] = {
    Collection.RESOURCES: ResourceRow,
    Collection.RATINGS: RatingRow,
    Collection.FEEDBACK: FeedbackRow,
}

# Stable list order: creation order for each collection
_ORDER_BY = {
    Collection.RESOURCES: ResourceRow.created_at,
    Collection.RATINGS: RatingRow.timestamp,
    Collection.FEEDBACK: FeedbackRow.timestamp,
}

_EXTRA_COLUMN = "attributes"


def _columns(model: Type[Base]) -> List[str]:
    return [c.key for c in model.__table__.columns]


def _as_utc(value: Any) -> Any:
    # SQLite hands back naive datetimes; everything stored is UTC
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlStore(EntityStore):
    """EntityStore on an async SQLAlchemy engine owned by this instance."""

    name = "sql"

    def __init__(self, cfg: Settings) -> None:
        self._cfg = cfg
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def connect(self) -> None:
        if self._engine is not None:
            return
        self._engine = build_engine(self._cfg)
        self._session_factory = build_session_factory(self._engine)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._cfg.db_connect_attempts),
            wait=wait_fixed(self._cfg.db_connect_delay),
            retry=retry_if_exception_type((SQLAlchemyError, OSError)),
            before_sleep=before_sleep_log(logger, logging.WARNING),
        )
        try:
            async for attempt in retrying:
                with attempt:
                    async with self._engine.connect() as conn:
                        await conn.execute(text("SELECT 1"))
        except RetryError as e:
            cause = e.last_attempt.exception() if e.last_attempt else None
            logger.error(
                "Database unreachable after %d attempts: %s",
                self._cfg.db_connect_attempts,
                cause,
            )
            await self.close()
            raise StoreError(
                message="Could not connect to the database",
                context={
                    "attempts": self._cfg.db_connect_attempts,
                    "error_type": type(cause).__name__ if cause else None,
                },
            ) from cause

        if self._cfg.db_create_tables:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        logger.info("SqlStore connected (%s)", self._engine.url.render_as_string(hide_password=True))

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_factory = None

    async def ping(self) -> bool:
        if self._engine is None:
            return False
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Database ping failed: %s", e)
            return False

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        """Session for one store call: commit on success, rollback and wrap on failure."""
        if self._session_factory is None:
            raise StoreError(message="Store is not connected", context={"operation": operation})
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except (SQLAlchemyError, OSError) as e:
                await session.rollback()
                logger.error("Database error during %s: %s", operation, e, exc_info=True)
                raise StoreError(
                    context={"operation": operation, "error_type": type(e).__name__}
                ) from e

    # ── Row mapping ───────────────────────────────────────────────────────

    @staticmethod
    def _to_record(row: Base) -> Record:
        record: Record = {}
        for key in _columns(type(row)):
            if key == _EXTRA_COLUMN:
                continue
            record[key] = _as_utc(getattr(row, key))
        extras = getattr(row, _EXTRA_COLUMN, None) or {}
        for key, value in extras.items():
            record.setdefault(key, value)
        return record

    @staticmethod
    def _split(model: Type[Base], values: Record) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Separate column values from free-form extras."""
        # A free field may itself be named "attributes"; it is stored as an extra
        columns = set(_columns(model)) - {_EXTRA_COLUMN}
        known = {k: v for k, v in values.items() if k in columns}
        extras = {k: v for k, v in values.items() if k not in columns}
        if extras and _EXTRA_COLUMN not in _columns(model):
            raise KeyError(f"Unknown fields for {model.__tablename__}: {sorted(extras)}")
        return known, extras

    # ── EntityStore ───────────────────────────────────────────────────────

    async def get(self, collection: Collection, record_id: str) -> Optional[Record]:
        model = _MODELS[collection]
        async with self._session(f"get {collection.value}") as session:
            row = await session.get(model, str(record_id))
            return self._to_record(row) if row is not None else None

    async def list(
        self, collection: Collection, filters: Optional[Filters] = None
    ) -> List[Record]:
        model = _MODELS[collection]
        wanted = active_filters(filters)
        columns = set(_columns(model)) - {_EXTRA_COLUMN}
        column_filters = {k: v for k, v in wanted.items() if k in columns}
        extra_filters = {k: v for k, v in wanted.items() if k not in columns}

        query = select(model)
        for key, value in column_filters.items():
            query = query.where(getattr(model, key) == value)
        query = query.order_by(_ORDER_BY[collection])

        async with self._session(f"list {collection.value}") as session:
            result = await session.execute(query)
            records = [self._to_record(row) for row in result.scalars().all()]

        if extra_filters:
            records = [r for r in records if matches(r, extra_filters)]
        return records

    async def insert(self, collection: Collection, record: Record) -> Record:
        model = _MODELS[collection]
        values = {**record, "id": str(record.get("id") or new_id())}
        known, extras = self._split(model, values)
        row = model(**known)
        if _EXTRA_COLUMN in _columns(model):
            setattr(row, _EXTRA_COLUMN, extras)

        async with self._session(f"insert {collection.value}") as session:
            session.add(row)
            await session.flush()
            stored = self._to_record(row)
        logger.debug("Inserted %s/%s", collection.value, stored["id"])
        return stored

    async def update(
        self, collection: Collection, record_id: str, partial: Record
    ) -> Optional[Record]:
        model = _MODELS[collection]
        changes = {k: v for k, v in partial.items() if k != "id"}
        known, extras = self._split(model, changes)

        async with self._session(f"update {collection.value}") as session:
            row = await session.get(model, str(record_id))
            if row is None:
                return None
            for key, value in known.items():
                setattr(row, key, value)
            if extras:
                # Reassign so the JSON column is flagged dirty
                setattr(row, _EXTRA_COLUMN, {**(getattr(row, _EXTRA_COLUMN) or {}), **extras})
            await session.flush()
            return self._to_record(row)

    async def delete(self, collection: Collection, record_id: str) -> bool:
        model = _MODELS[collection]
        async with self._session(f"delete {collection.value}") as session:
            result = await session.execute(sa_delete(model).where(model.id == str(record_id)))
            return (result.rowcount or 0) > 0

    async def delete_many(self, collection: Collection, filters: Filters) -> int:
        model = _MODELS[collection]
        wanted = active_filters(filters)
        if not wanted:
            raise ValueError("delete_many requires at least one filter")
        known, extras = self._split(model, wanted)
        if extras:
            raise KeyError(f"delete_many filters must be columns: {sorted(extras)}")

        statement = sa_delete(model)
        for key, value in known.items():
            statement = statement.where(getattr(model, key) == value)

        async with self._session(f"delete_many {collection.value}") as session:
            result = await session.execute(statement)
            return result.rowcount or 0
