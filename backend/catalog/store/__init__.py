"""
Resource Catalog — Entity Store Package
=======================================

Store Inventory:
    - EntityStore (abstract): the persistence contract
    - MemoryStore:   process-local dicts
    - JsonFileStore: one JSON file per collection
    - SqlStore:      async SQLAlchemy tables

`create_store()` picks the implementation named by `settings.store_backend`.
"""

from catalog.config import Settings
from catalog.store.base import Collection, EntityStore, Filters, Record
from catalog.store.json_file import JsonFileStore
from catalog.store.memory import MemoryStore
from catalog.store.sql import SqlStore


def create_store(cfg: Settings) -> EntityStore:
    """Build (but do not connect) the store selected by configuration."""
    if cfg.store_backend == "memory":
        return MemoryStore()
    if cfg.store_backend == "json":
        return JsonFileStore(cfg.data_dir)
    return SqlStore(cfg)


__all__ = [
    "Collection",
    "EntityStore",
    "Filters",
    "JsonFileStore",
    "MemoryStore",
    "Record",
    "SqlStore",
    "create_store",
]
