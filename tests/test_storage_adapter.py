"""Contract tests shared by both StorageAdapter variants."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from family_logistics.database import DatabaseManager
from family_logistics.logger import StructuredLogger
from family_logistics.repositories.storage_adapter import (
    InMemoryStorageAdapter,
    SQLiteStorageAdapter,
    StorageAdapter,
    create_storage_adapter,
)


@pytest.fixture(params=["memory", "sqlite"])
def adapter(request: pytest.FixtureRequest) -> StorageAdapter:
    if request.param == "memory":
        return request.getfixturevalue("memory_storage")
    return request.getfixturevalue("sqlite_storage")


class TestStorageAdapterContract:
    async def test_get_missing_key_returns_none(self, adapter: StorageAdapter):
        assert await adapter.get("missing") is None

    async def test_set_then_get_round_trips_nested_json(self, adapter: StorageAdapter):
        value = {
            "name": "Weekly groceries",
            "tags": ["food", "weekly"],
            "count": 3,
            "ratio": 0.5,
            "done": False,
            "note": None,
            "nested": {"created_at": "2024-05-01T12:00:00+00:00"},
        }
        await adapter.set("table:lists", value)
        assert await adapter.get("table:lists") == value

    async def test_set_overwrites(self, adapter: StorageAdapter):
        await adapter.set("k", [1])
        await adapter.set("k", [1, 2])
        assert await adapter.get("k") == [1, 2]

    async def test_remove_is_silent_for_absent_key(self, adapter: StorageAdapter):
        await adapter.set("k", 1)
        await adapter.remove("k")
        await adapter.remove("k")
        assert await adapter.get("k") is None

    async def test_keys_and_clear(self, adapter: StorageAdapter):
        await adapter.set("a", 1)
        await adapter.set("b", 2)
        assert sorted(await adapter.keys()) == ["a", "b"]

        await adapter.clear()
        assert await adapter.keys() == []
        assert await adapter.get("a") is None


class TestCorruptValues:
    async def test_memory_adapter_treats_corrupt_json_as_absent(self):
        adapter = InMemoryStorageAdapter()
        adapter._items["broken"] = "{not json"
        assert await adapter.get("broken") is None

    async def test_sqlite_adapter_treats_corrupt_json_as_absent(
        self, db: DatabaseManager, sqlite_storage: SQLiteStorageAdapter
    ):
        db.sqlite.execute(
            "INSERT INTO kv_store (key, value) VALUES (?, ?)", ("test:broken", "{oops")
        )
        db.sqlite.commit()
        assert await sqlite_storage.get("broken") is None

    async def test_only_undecodable_values_are_reported(self, db: DatabaseManager):
        logger = MagicMock(spec=StructuredLogger)
        storage = SQLiteStorageAdapter(db=db, logger=logger, prefix="test")

        await storage.set("empty", None)
        assert await storage.get("empty") is None
        logger.warning.assert_not_called()

        db.sqlite.execute(
            "INSERT INTO kv_store (key, value) VALUES (?, ?)", ("test:broken", "{oops")
        )
        db.sqlite.commit()
        assert await storage.get("broken") is None
        logger.warning.assert_called_once()


class TestPrefixIsolation:
    async def test_keys_are_namespaced_on_disk(
        self, db: DatabaseManager, sqlite_storage: SQLiteStorageAdapter
    ):
        await sqlite_storage.set("table:households", [])
        row = db.sqlite.execute("SELECT key FROM kv_store").fetchone()
        assert row["key"] == "test:table:households"

    async def test_clear_leaves_other_prefixes_alone(
        self, db: DatabaseManager, logger: StructuredLogger
    ):
        mine = SQLiteStorageAdapter(db=db, logger=logger, prefix="app")
        other = SQLiteStorageAdapter(db=db, logger=logger, prefix="app_other")
        await mine.set("k", 1)
        await other.set("k", 2)

        await mine.clear()

        assert await mine.keys() == []
        assert await other.get("k") == 2

    async def test_wildcard_characters_in_prefix_match_literally(
        self, db: DatabaseManager, logger: StructuredLogger
    ):
        underscore = SQLiteStorageAdapter(db=db, logger=logger, prefix="a_b")
        lookalike = SQLiteStorageAdapter(db=db, logger=logger, prefix="axb")
        await lookalike.set("k", 1)
        assert await underscore.keys() == []

    def test_empty_prefix_is_rejected(self, db: DatabaseManager, logger: StructuredLogger):
        with pytest.raises(ValueError):
            SQLiteStorageAdapter(db=db, logger=logger, prefix="")


class TestCreateStorageAdapter:
    def test_in_memory_flag_wins(self, db: DatabaseManager, logger: StructuredLogger):
        adapter = create_storage_adapter(db, logger, prefix="p", in_memory=True)
        assert isinstance(adapter, InMemoryStorageAdapter)

    def test_persistent_when_schema_present(self, db: DatabaseManager, logger: StructuredLogger):
        adapter = create_storage_adapter(db, logger, prefix="p")
        assert isinstance(adapter, SQLiteStorageAdapter)

    def test_falls_back_without_kv_store(self, logger: StructuredLogger):
        bare = DatabaseManager(sqlite_path=":memory:", logger=logger)
        try:
            adapter = create_storage_adapter(bare, logger, prefix="p")
        finally:
            bare.close()
        assert isinstance(adapter, InMemoryStorageAdapter)
