"""
Resource Catalog — Abstract Entity Store Interface
==================================================

What:  The contract every persistence backend implements.
How:   Records are plain dicts with snake_case keys and a single `id` key.
       Concrete stores (MemoryStore, JsonFileStore, SqlStore) inherit from
       EntityStore and implement the async CRUD methods below.
Who:   Used by the aggregation engine and the catalog service; built by
       `catalog.store.create_store()` at application startup.

Contract:
    - get/update return None for a missing id (never raise for "not found")
    - list/delete_many filter by simple field equality; a filter whose value
      is None is ignored
    - each single call is atomic with respect to other calls on the same
      collection; there is no multi-collection transaction
    - implementation-specific failures are wrapped in StoreError
"""

import uuid
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

Record = Dict[str, Any]
Filters = Mapping[str, Any]


class Collection(str, Enum):
    """The three independent record collections."""

    RESOURCES = "resources"
    RATINGS = "ratings"
    FEEDBACK = "feedback"


def new_id() -> str:
    return str(uuid.uuid4())


def active_filters(filters: Optional[Filters]) -> Dict[str, Any]:
    """Drops filters whose value is None."""
    return {k: v for k, v in (filters or {}).items() if v is not None}


def matches(record: Mapping[str, Any], filters: Mapping[str, Any]) -> bool:
    """Field-equality match, comparing as strings like query parameters do."""
    for key, expected in filters.items():
        if key not in record or str(record[key]) != str(expected):
            return False
    return True


class EntityStore(ABC):
    """
    Abstract interface for the catalog's persistence backend.

    Lifecycle:
        store = create_store(settings)
        await store.connect()     # at process start
        ...                       # shared by all requests
        await store.close()       # at shutdown
    """

    name: str = "abstract"

    async def connect(self) -> None:
        """Open connections / prepare storage. Default: nothing to do."""

    async def close(self) -> None:
        """Release connections. Default: nothing to do."""

    async def ping(self) -> bool:
        """Lightweight availability check used by GET /health."""
        return True

    @abstractmethod
    async def get(self, collection: Collection, record_id: str) -> Optional[Record]:
        """Return the record with this id, or None."""
        ...

    @abstractmethod
    async def list(
        self, collection: Collection, filters: Optional[Filters] = None
    ) -> List[Record]:
        """Return every record matching all filters (all records without filters)."""
        ...

    @abstractmethod
    async def insert(self, collection: Collection, record: Record) -> Record:
        """
        Persist a new record.

        An `id` is assigned when the record does not carry one.
        Returns the stored record as a later `get` would return it.
        """
        ...

    @abstractmethod
    async def update(
        self, collection: Collection, record_id: str, partial: Record
    ) -> Optional[Record]:
        """Shallow-merge `partial` over the record; None if the id is unknown."""
        ...

    @abstractmethod
    async def delete(self, collection: Collection, record_id: str) -> bool:
        """Delete one record. True if it existed."""
        ...

    @abstractmethod
    async def delete_many(self, collection: Collection, filters: Filters) -> int:
        """Delete every record matching the filters. Returns the number deleted."""
        ...
