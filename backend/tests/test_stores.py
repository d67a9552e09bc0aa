"""
Resource Catalog — Entity Store Tests
=====================================

What:  The EntityStore contract, run against every backend, plus the
       failure modes specific to the JSON file and SQL stores.

What we test:
    ✅ insert assigns ids, get/list/update/delete/delete_many semantics
    ✅ None-valued filters are ignored
    ✅ Free resource fields round-trip (SQL: through the attributes column),
       including a free field that is itself named "attributes"
    ✅ Long text values are stored whole
    ✅ Timestamps come back as timezone-aware datetimes
    ✅ JSON store: missing file = empty, malformed file = StoreError,
       every read goes to the file
    ✅ SQL store: connect retries then raises StoreError
"""

import json
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import Text

from catalog.exceptions import StoreError
from catalog.models import FeedbackRow, RatingRow, ResourceRow
from catalog.store import Collection, JsonFileStore, SqlStore, create_store
from catalog.store.memory import MemoryStore

NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(params=["memory", "json", "sql"])
def store(request):
    """Each contract test runs once per backend."""
    return request.getfixturevalue(f"{request.param}_store")


def resource(**fields):
    return {"title": "T", "type": "video", "created_at": NOW, "updated_at": NOW, **fields}


# ══════════════════════════════════════════════════════════════════════════
# Contract
# ══════════════════════════════════════════════════════════════════════════

class TestStoreContract:
    @pytest.mark.asyncio
    async def test_insert_assigns_id_and_get_returns_record(self, store):
        stored = await store.insert(Collection.RESOURCES, resource(level="beginner"))

        fetched = await store.get(Collection.RESOURCES, stored["id"])

        assert stored["id"]
        assert fetched["title"] == "T"
        assert fetched["level"] == "beginner"
        assert fetched["created_at"] == NOW
        assert "attributes" not in fetched

    @pytest.mark.asyncio
    async def test_free_field_named_attributes_round_trips(self, store):
        stored = await store.insert(Collection.RESOURCES, resource(attributes={"k": 1}))

        assert stored["attributes"] == {"k": 1}
        assert (await store.get(Collection.RESOURCES, stored["id"]))["attributes"] == {"k": 1}

        await store.update(Collection.RESOURCES, stored["id"], {"attributes": {"k": 2}})
        fetched = await store.get(Collection.RESOURCES, stored["id"])
        found = await store.list(Collection.RESOURCES, {"attributes": {"k": 2}})

        assert fetched["attributes"] == {"k": 2}
        assert [r["id"] for r in found] == [stored["id"]]

    @pytest.mark.asyncio
    async def test_long_text_fields_round_trip(self, store):
        long_title = "t" * 1000
        long_user = "u" * 1000
        stored = await store.insert(
            Collection.RESOURCES, resource(title=long_title, type="x" * 500, author_id=long_user)
        )
        await store.insert(
            Collection.RATINGS,
            {"resource_id": stored["id"], "rating_value": 4, "user_id": long_user, "timestamp": NOW},
        )

        fetched = await store.get(Collection.RESOURCES, stored["id"])
        ratings = await store.list(Collection.RATINGS, {"resource_id": stored["id"]})

        assert fetched["title"] == long_title
        assert fetched["author_id"] == long_user
        assert ratings[0]["user_id"] == long_user

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self, store):
        assert await store.get(Collection.RESOURCES, "nope") is None

    @pytest.mark.asyncio
    async def test_list_filters_and_ignores_none(self, store):
        await store.insert(Collection.RESOURCES, resource(type="video", author_id="a"))
        await store.insert(Collection.RESOURCES, resource(type="article", author_id="a"))

        videos = await store.list(Collection.RESOURCES, {"type": "video", "author_id": None})
        everything = await store.list(Collection.RESOURCES)

        assert [r["type"] for r in videos] == ["video"]
        assert len(everything) == 2

    @pytest.mark.asyncio
    async def test_list_filters_on_free_fields(self, store):
        await store.insert(Collection.RESOURCES, resource(level="beginner"))
        await store.insert(Collection.RESOURCES, resource(level="expert"))

        found = await store.list(Collection.RESOURCES, {"level": "expert"})

        assert [r["level"] for r in found] == ["expert"]

    @pytest.mark.asyncio
    async def test_update_merges_and_keeps_id(self, store):
        stored = await store.insert(Collection.RESOURCES, resource(description="old", level="x"))

        updated = await store.update(
            Collection.RESOURCES, stored["id"], {"description": "new", "id": "hijack", "tag": "t"}
        )

        assert updated["id"] == stored["id"]
        assert updated["description"] == "new"
        assert updated["title"] == "T"
        assert updated["level"] == "x"
        assert updated["tag"] == "t"
        assert (await store.get(Collection.RESOURCES, stored["id"]))["description"] == "new"

    @pytest.mark.asyncio
    async def test_update_missing_returns_none(self, store):
        assert await store.update(Collection.RESOURCES, "nope", {"title": "x"}) is None

    @pytest.mark.asyncio
    async def test_delete(self, store):
        stored = await store.insert(Collection.RESOURCES, resource())

        assert await store.delete(Collection.RESOURCES, stored["id"]) is True
        assert await store.delete(Collection.RESOURCES, stored["id"]) is False
        assert await store.get(Collection.RESOURCES, stored["id"]) is None

    @pytest.mark.asyncio
    async def test_delete_many_by_resource_id(self, store):
        for rid, value in (("r1", 2), ("r1", 4), ("r2", 5)):
            await store.insert(
                Collection.RATINGS,
                {"resource_id": rid, "rating_value": value, "user_id": "u", "timestamp": NOW},
            )

        removed = await store.delete_many(Collection.RATINGS, {"resource_id": "r1"})

        assert removed == 2
        remaining = await store.list(Collection.RATINGS)
        assert [r["resource_id"] for r in remaining] == ["r2"]
        assert remaining[0]["timestamp"] == NOW

    @pytest.mark.asyncio
    async def test_ping(self, store):
        assert await store.ping() is True


# ══════════════════════════════════════════════════════════════════════════
# Memory store
# ══════════════════════════════════════════════════════════════════════════

class TestMemoryStore:
    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, memory_store):
        stored = await memory_store.insert(Collection.RESOURCES, resource(tags=["a"]))
        stored["tags"].append("b")

        fetched = await memory_store.get(Collection.RESOURCES, stored["id"])

        assert fetched["tags"] == ["a"]

    @pytest.mark.asyncio
    async def test_delete_many_requires_filters(self, memory_store):
        with pytest.raises(ValueError):
            await memory_store.delete_many(Collection.RATINGS, {"resource_id": None})


# ══════════════════════════════════════════════════════════════════════════
# JSON file store
# ══════════════════════════════════════════════════════════════════════════

class TestJsonFileStore:
    @pytest.mark.asyncio
    async def test_missing_file_is_empty_collection(self, json_store):
        assert await json_store.list(Collection.FEEDBACK) == []

    @pytest.mark.asyncio
    async def test_writes_one_file_per_collection(self, json_store):
        stored = await json_store.insert(Collection.RESOURCES, resource())

        on_disk = json.loads((json_store.data_dir / "resources.json").read_text(encoding="utf-8"))

        assert [r["id"] for r in on_disk] == [stored["id"]]
        assert on_disk[0]["created_at"] == NOW.isoformat()
        assert not (json_store.data_dir / "resources.json.tmp").exists()

    @pytest.mark.asyncio
    async def test_data_survives_a_new_instance(self, json_store):
        stored = await json_store.insert(Collection.RESOURCES, resource())

        reopened = JsonFileStore(str(json_store.data_dir))
        await reopened.connect()

        assert (await reopened.get(Collection.RESOURCES, stored["id"]))["title"] == "T"

    @pytest.mark.asyncio
    async def test_malformed_file_is_a_store_error(self, json_store):
        (json_store.data_dir / "ratings.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(StoreError):
            await json_store.list(Collection.RATINGS)

    @pytest.mark.asyncio
    async def test_wrong_shape_is_a_store_error(self, json_store):
        (json_store.data_dir / "ratings.json").write_text('{"id": "x"}', encoding="utf-8")

        with pytest.raises(StoreError):
            await json_store.get(Collection.RATINGS, "x")

    @pytest.mark.asyncio
    async def test_reads_come_from_the_file(self, json_store):
        await json_store.get(Collection.RESOURCES, "warm-up")
        (json_store.data_dir / "resources.json").write_text(
            json.dumps([{"id": "ext", "title": "Edited by hand", "type": "book"}]), encoding="utf-8"
        )

        fetched = await json_store.get(Collection.RESOURCES, "ext")

        assert fetched["title"] == "Edited by hand"
        assert not hasattr(json_store, "_data")

    @pytest.mark.asyncio
    async def test_connect_creates_directory(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "nested" / "data"))
        await store.connect()

        assert store.data_dir.is_dir()
        assert await store.ping() is True


# ══════════════════════════════════════════════════════════════════════════
# SQL store
# ══════════════════════════════════════════════════════════════════════════

class TestSqlStore:
    def test_client_text_columns_are_unbounded(self):
        for column in (
            ResourceRow.__table__.c.title,
            ResourceRow.__table__.c.type,
            ResourceRow.__table__.c.author_id,
            RatingRow.__table__.c.user_id,
            FeedbackRow.__table__.c.user_id,
        ):
            assert isinstance(column.type, Text), column.name

    @pytest.mark.asyncio
    async def test_unknown_rating_field_is_rejected(self, sql_store):
        with pytest.raises(KeyError):
            await sql_store.insert(
                Collection.RATINGS,
                {"resource_id": "r1", "rating_value": 3, "user_id": "u", "timestamp": NOW, "x": 1},
            )

    @pytest.mark.asyncio
    async def test_list_keeps_creation_order(self, sql_store):
        first = await sql_store.insert(Collection.RESOURCES, resource(title="first"))
        later = datetime(2024, 2, 1, tzinfo=timezone.utc)
        second = await sql_store.insert(
            Collection.RESOURCES, resource(title="second", created_at=later, updated_at=later)
        )

        listed = await sql_store.list(Collection.RESOURCES)

        assert [r["id"] for r in listed] == [first["id"], second["id"]]

    @pytest.mark.asyncio
    async def test_operations_before_connect_raise(self, test_settings):
        store = SqlStore(test_settings)

        with pytest.raises(StoreError):
            await store.get(Collection.RESOURCES, "x")
        assert await store.ping() is False

    @pytest.mark.asyncio
    async def test_connect_gives_up_with_store_error(self, test_settings):
        cfg = test_settings.model_copy(
            update={"database_url": "sqlite+aiosqlite:////nonexistent-dir/sub/catalog.db"}
        )
        store = SqlStore(cfg)

        with pytest.raises(StoreError, match="Could not connect"):
            await store.connect()
        assert await store.ping() is False

    @pytest.mark.asyncio
    async def test_driver_errors_are_wrapped(self, sql_store):
        from sqlalchemy.exc import OperationalError

        failing = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("gone")))
        with patch("sqlalchemy.ext.asyncio.AsyncSession.execute", failing):
            with pytest.raises(StoreError):
                await sql_store.list(Collection.RESOURCES)


class TestCreateStore:
    def test_selects_backend(self, test_settings):
        assert isinstance(create_store(test_settings), MemoryStore)
        assert isinstance(
            create_store(test_settings.model_copy(update={"store_backend": "json"})), JsonFileStore
        )
        assert isinstance(
            create_store(test_settings.model_copy(update={"store_backend": "sql"})), SqlStore
        )
