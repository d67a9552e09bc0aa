"""
Resource Catalog — JSON File Entity Store
=========================================

What:  File-backed EntityStore: one JSON array per collection.
How:   Reuses LockedDictStore's locking and CRUD logic; `_load` reads the
       collection file on every call and `_save` rewrites it. Writes go to
       a temporary file first and are swapped in with os.replace, so a
       reader never sees a half-written file.
Who:   Selected with STORE_BACKEND=json; handy for demos and tests.

Layout:
    <data_dir>/
    ├── resources.json
    ├── ratings.json
    └── feedback.json

Failure model:
    - missing file           → empty collection (first run)
    - unreadable file        → StoreError
    - invalid JSON / shape   → StoreError (never silently treated as empty)
"""

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

import aiofiles

from catalog.exceptions import StoreError
from catalog.store.base import Collection, Record
from catalog.store.memory import LockedDictStore, Rows

logger = logging.getLogger(__name__)

# Timestamp fields per collection, stored as ISO 8601 strings on disk
_TIMESTAMP_FIELDS = {
    Collection.RESOURCES: ("created_at", "updated_at"),
    Collection.RATINGS: ("timestamp",),
    Collection.FEEDBACK: ("timestamp",),
}


def _encode(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class JsonFileStore(LockedDictStore):
    """EntityStore persisting each collection to `<data_dir>/<collection>.json`."""

    name = "json"

    def __init__(self, data_dir: str) -> None:
        super().__init__()
        self.data_dir = Path(data_dir).resolve()

    def _path(self, collection: Collection) -> Path:
        return self.data_dir / f"{collection.value}.json"

    async def connect(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreError(
                message="Could not prepare the data directory",
                context={"path": str(self.data_dir), "os_error": str(e)},
            ) from e
        logger.info("JsonFileStore using data directory %s", self.data_dir)

    async def ping(self) -> bool:
        return self.data_dir.is_dir() and os.access(self.data_dir, os.W_OK)

    async def _load(self, collection: Collection) -> Rows:
        path = self._path(collection)
        if not path.exists():
            logger.debug("Data file %s not found, starting empty", path.name)
            return {}

        try:
            async with aiofiles.open(path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except OSError as e:
            logger.error("Failed to read %s: %s", path, e)
            raise StoreError(context={"path": str(path), "os_error": str(e)}) from e

        try:
            items = json.loads(raw) if raw.strip() else []
        except json.JSONDecodeError as e:
            logger.error("Invalid JSON in %s: %s", path, e)
            raise StoreError(context={"path": str(path), "json_error": str(e)}) from e

        if not isinstance(items, list) or not all(
            isinstance(item, dict) and "id" in item for item in items
        ):
            logger.error("Unexpected data shape in %s", path)
            raise StoreError(context={"path": str(path), "reason": "expected a list of records"})

        return {str(item["id"]): self._decode(collection, item) for item in items}

    async def _save(self, collection: Collection, rows: Rows) -> None:
        path = self._path(collection)
        tmp_path = path.with_suffix(".json.tmp")
        payload = json.dumps(list(rows.values()), default=_encode, indent=2, ensure_ascii=False)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error("Failed to write %s: %s", path, e)
            raise StoreError(context={"path": str(path), "os_error": str(e)}) from e

    @staticmethod
    def _decode(collection: Collection, item: Dict[str, Any]) -> Record:
        record = dict(item)
        record["id"] = str(record["id"])
        for field in _TIMESTAMP_FIELDS[collection]:
            value = record.get(field)
            if isinstance(value, str):
                try:
                    record[field] = datetime.fromisoformat(value)
                except ValueError:
                    raise StoreError(
                        context={"collection": collection.value, "field": field, "value": value}
                    )
        return record
