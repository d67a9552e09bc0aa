"""
Resource Catalog — In-Memory Entity Store
=========================================

What:  Dict-backed EntityStore. Data lives as long as the process.
Who:   Tests and local experiments (STORE_BACKEND=memory). LockedDictStore
       is also the base class of JsonFileStore.
How:   Each collection is an insertion-ordered dict of id → record. Every
       operation loads the collection, works on it and saves it while
       holding that collection's asyncio.Lock, so a read-modify-write can
       never interleave with another one on the same collection.
       LockedDictStore leaves `_load` / `_save` to subclasses: MemoryStore
       keeps the dicts on the instance, JsonFileStore keeps them on disk.
"""

import asyncio
import copy
import logging
from abc import abstractmethod
from typing import Dict, List, Optional

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

Rows = Dict[str, Record]


class LockedDictStore(EntityStore):
    """
    CRUD over one dict of rows per collection, serialised per collection.

    Records handed out are deep copies; mutating a returned dict never
    changes stored state.
    """

    def __init__(self) -> None:
        self._locks: Dict[Collection, asyncio.Lock] = {c: asyncio.Lock() for c in Collection}

    # ── Storage hooks ─────────────────────────────────────────────────────

    @abstractmethod
    async def _load(self, collection: Collection) -> Rows:
        """Current rows of the collection. Called with its lock held."""

    @abstractmethod
    async def _save(self, collection: Collection, rows: Rows) -> None:
        """Persist the rows of the collection. Called with its lock held."""

    # ── EntityStore ───────────────────────────────────────────────────────

    async def get(self, collection: Collection, record_id: str) -> Optional[Record]:
        async with self._locks[collection]:
            rows = await self._load(collection)
            record = rows.get(str(record_id))
            return copy.deepcopy(record) if record is not None else None

    async def list(
        self, collection: Collection, filters: Optional[Filters] = None
    ) -> List[Record]:
        wanted = active_filters(filters)
        async with self._locks[collection]:
            rows = await self._load(collection)
            return [copy.deepcopy(r) for r in rows.values() if matches(r, wanted)]

    async def insert(self, collection: Collection, record: Record) -> Record:
        stored = copy.deepcopy(record)
        stored["id"] = str(stored.get("id") or new_id())
        async with self._locks[collection]:
            rows = await self._load(collection)
            rows[stored["id"]] = stored
            await self._save(collection, rows)
        logger.debug("Inserted %s/%s", collection.value, stored["id"])
        return copy.deepcopy(stored)

    async def update(
        self, collection: Collection, record_id: str, partial: Record
    ) -> Optional[Record]:
        async with self._locks[collection]:
            rows = await self._load(collection)
            current = rows.get(str(record_id))
            if current is None:
                return None
            merged = {**current, **copy.deepcopy(partial), "id": current["id"]}
            rows[current["id"]] = merged
            await self._save(collection, rows)
            return copy.deepcopy(merged)

    async def delete(self, collection: Collection, record_id: str) -> bool:
        async with self._locks[collection]:
            rows = await self._load(collection)
            if str(record_id) not in rows:
                return False
            del rows[str(record_id)]
            await self._save(collection, rows)
            return True

    async def delete_many(self, collection: Collection, filters: Filters) -> int:
        wanted = active_filters(filters)
        if not wanted:
            raise ValueError("delete_many requires at least one filter")
        async with self._locks[collection]:
            rows = await self._load(collection)
            doomed = [rid for rid, r in rows.items() if matches(r, wanted)]
            if not doomed:
                return 0
            for rid in doomed:
                del rows[rid]
            await self._save(collection, rows)
            return len(doomed)


class MemoryStore(LockedDictStore):
    """Process-local store."""

    name = "memory"

    def __init__(self) -> None:
        super().__init__()
        self._data: Dict[Collection, Rows] = {c: {} for c in Collection}

    async def _load(self, collection: Collection) -> Rows:
        return self._data[collection]

    async def _save(self, collection: Collection, rows: Rows) -> None:
        self._data[collection] = rows
