"""Local CRUD engine behaviour over an in-memory adapter."""

from __future__ import annotations

import uuid
from typing import Any, Optional

import pytest

from family_logistics.auth import MockAuthStore
from family_logistics.logger import StructuredLogger
from family_logistics.models.base import Entity
from family_logistics.repositories.errors import AUTH_REQUIRED, NOT_FOUND, RPC_NOT_FOUND
from family_logistics.repositories.mock_repository import (
    MockRepository,
    MockRpcRegistry,
    RpcError,
)
from family_logistics.repositories.storage_adapter import InMemoryStorageAdapter, StorageAdapter

from tests.conftest import FakeClock


class Thing(Entity):
    name: str
    color: Optional[str] = None
    owner_id: Optional[str] = None


class ExplodingStorage(StorageAdapter):
    async def get(self, key: str) -> Any:
        raise OSError("disk unavailable")

    async def set(self, key: str, value: Any) -> None:
        raise OSError("quota exceeded")

    async def remove(self, key: str) -> None:
        raise OSError("disk unavailable")

    async def clear(self) -> None:
        raise OSError("disk unavailable")

    async def keys(self) -> list[str]:
        raise OSError("disk unavailable")


@pytest.fixture
def repo(
    memory_storage: InMemoryStorageAdapter, logger: StructuredLogger, clock: FakeClock
) -> MockRepository[Thing]:
    return MockRepository("things", Thing, memory_storage, logger, clock=clock)


class TestCreateAndRead:
    async def test_create_then_find_all_then_delete_scenario(self, repo: MockRepository[Thing]):
        created = await repo.create({"name": "A"})
        assert created.error is None
        record = created.data
        assert record.name == "A"
        assert record.id
        assert record.created_at == record.updated_at

        listed = await repo.find_all()
        assert [t.name for t in listed.data] == ["A"]

        assert (await repo.delete(record.id)).error is None
        assert (await repo.find_all()).data == []

        again = await repo.delete(record.id)
        assert again.data is None
        assert again.error.code == NOT_FOUND

    async def test_ids_are_unique_uuid4(self, repo: MockRepository[Thing]):
        ids = {(await repo.create({"name": f"t{i}"})).data.id for i in range(20)}
        assert len(ids) == 20
        for value in ids:
            assert uuid.UUID(value).version == 4

    async def test_caller_cannot_choose_id_or_timestamps(self, repo: MockRepository[Thing]):
        created = await repo.create(
            {"name": "A", "id": "mine", "created_at": "1999-01-01T00:00:00+00:00"}
        )
        assert created.data.id != "mine"
        assert created.data.created_at != "1999-01-01T00:00:00+00:00"

    async def test_table_is_json_array_under_table_key(
        self, repo: MockRepository[Thing], memory_storage: InMemoryStorageAdapter
    ):
        await repo.create({"name": "A"})
        stored = await memory_storage.get("table:things")
        assert isinstance(stored, list)
        assert stored[0]["name"] == "A"

    async def test_find_by_id_missing_reports_not_found(self, repo: MockRepository[Thing]):
        result = await repo.find_by_id("nope")
        assert result.data is None
        assert result.error.message == "things record not found"
        assert result.error.code == NOT_FOUND

    async def test_find_by_id_after_delete(self, repo: MockRepository[Thing]):
        record = (await repo.create({"name": "A"})).data
        await repo.delete(record.id)
        result = await repo.find_by_id(record.id)
        assert result.data is None
        assert result.error.code == NOT_FOUND

    async def test_create_many_preserves_order_in_one_write(
        self, repo: MockRepository[Thing], memory_storage: InMemoryStorageAdapter
    ):
        writes = 0
        original_set = memory_storage.set

        async def counting_set(key: str, value: Any) -> None:
            nonlocal writes
            writes += 1
            await original_set(key, value)

        memory_storage.set = counting_set  # type: ignore[method-assign]
        result = await repo.create_many([{"name": "a"}, {"name": "b"}, {"name": "c"}])

        assert [t.name for t in result.data] == ["a", "b", "c"]
        assert len({t.id for t in result.data}) == 3
        assert writes == 1

    async def test_absent_or_corrupt_table_reads_as_empty(
        self, repo: MockRepository[Thing], memory_storage: InMemoryStorageAdapter
    ):
        assert (await repo.find_all()).data == []
        await memory_storage.set("table:things", {"not": "a list"})
        assert (await repo.find_all()).data == []


class TestQueryFilter:
    async def test_filter_callback_is_honoured(self, repo: MockRepository[Thing]):
        await repo.create_many(
            [{"name": "b", "color": "red"}, {"name": "a", "color": "red"}, {"name": "c"}]
        )
        result = await repo.find_all(lambda q: q.eq("color", "red").order("name"))
        assert [t.name for t in result.data] == ["a", "b"]

    async def test_unsupported_builder_method_becomes_error(self, repo: MockRepository[Thing]):
        result = await repo.find_all(lambda q: q.text_search("name", "x"))
        assert result.data is None
        assert result.error is not None


class TestUpdate:
    async def test_update_merges_and_moves_updated_at_forward(
        self, repo: MockRepository[Thing], clock: FakeClock
    ):
        record = (await repo.create({"name": "A", "color": "red"})).data
        clock.advance(5)
        updated = (await repo.update(record.id, {"color": "blue"})).data

        assert updated.name == "A"
        assert updated.color == "blue"
        assert updated.created_at == record.created_at
        assert updated.updated_at > record.updated_at

    async def test_updated_at_strictly_increases_within_one_tick(
        self, repo: MockRepository[Thing]
    ):
        record = (await repo.create({"name": "A"})).data
        first = (await repo.update(record.id, {"name": "B"})).data
        second = (await repo.update(record.id, {"name": "C"})).data
        assert record.updated_at < first.updated_at < second.updated_at

    async def test_update_ignores_id_and_created_at(self, repo: MockRepository[Thing]):
        record = (await repo.create({"name": "A"})).data
        updated = (
            await repo.update(record.id, {"id": "other", "created_at": "x", "name": "B"})
        ).data
        assert updated.id == record.id
        assert updated.created_at == record.created_at

    async def test_update_missing_reports_not_found(self, repo: MockRepository[Thing]):
        result = await repo.update("nope", {"name": "B"})
        assert result.error.code == NOT_FOUND


class TestUpsert:
    async def test_existing_id_updates(self, repo: MockRepository[Thing]):
        record = (await repo.create({"name": "A"})).data
        result = await repo.upsert({"id": record.id, "name": "B"})
        assert result.data.id == record.id
        assert result.data.name == "B"
        assert len((await repo.find_all()).data) == 1

    async def test_unknown_id_creates_with_fresh_id(self, repo: MockRepository[Thing]):
        result = await repo.upsert({"id": "caller-chosen", "name": "A"})
        assert result.error is None
        assert result.data.id != "caller-chosen"
        assert result.data.created_at == result.data.updated_at

    async def test_missing_id_creates(self, repo: MockRepository[Thing]):
        result = await repo.upsert({"name": "A"})
        assert result.data.id


class TestStorageFailures:
    @pytest.mark.parametrize(
        "call",
        [
            lambda r: r.find_all(),
            lambda r: r.find_by_id("x"),
            lambda r: r.create({"name": "A"}),
            lambda r: r.create_many([{"name": "A"}]),
            lambda r: r.update("x", {"name": "B"}),
            lambda r: r.upsert({"id": "x", "name": "B"}),
            lambda r: r.delete("x"),
        ],
    )
    async def test_adapter_exceptions_never_escape(self, call, logger: StructuredLogger):
        repo = MockRepository("things", Thing, ExplodingStorage(), logger)
        result = await call(repo)
        assert result.data is None
        assert result.error.message in {"disk unavailable", "quota exceeded"}
        assert isinstance(result.error.details, OSError)


class TestOwnerStamping:
    async def test_create_requires_session_when_owner_field_set(
        self, memory_storage: InMemoryStorageAdapter, logger: StructuredLogger
    ):
        auth = MockAuthStore(memory_storage, logger)
        repo = MockRepository(
            "things", Thing, memory_storage, logger, auth=auth, owner_field="owner_id"
        )
        denied = await repo.create({"name": "A"})
        assert denied.error.code == AUTH_REQUIRED
        assert await memory_storage.get("table:things") is None

        user = (await auth.sign_up("ana@example.com", "pw")).data
        created = await repo.create({"name": "A"})
        assert created.data.owner_id == user.id

    async def test_no_lookup_without_owner_field(self, repo: MockRepository[Thing]):
        assert (await repo.create({"name": "A"})).error is None

    async def test_authenticated_user_id_without_auth_store(self, repo: MockRepository[Thing]):
        result = await repo.get_authenticated_user_id()
        assert result.error.message == "Authentication required"


class TestRpc:
    async def test_dispatches_to_registered_handler(
        self, memory_storage: InMemoryStorageAdapter, logger: StructuredLogger
    ):
        registry = MockRpcRegistry()

        async def double(params: dict[str, Any]) -> int:
            return params["n"] * 2

        registry.register("double", double)
        repo = MockRepository("things", Thing, memory_storage, logger, rpc=registry)
        assert (await repo.rpc("double", {"n": 21})).data == 42

    async def test_unknown_function(self, repo: MockRepository[Thing]):
        result = await repo.rpc("missing_fn")
        assert result.error.code == RPC_NOT_FOUND

    async def test_handler_error_keeps_code(
        self, memory_storage: InMemoryStorageAdapter, logger: StructuredLogger
    ):
        registry = MockRpcRegistry()

        async def fail(params: dict[str, Any]) -> None:
            raise RpcError("nope", code="P0001")

        registry.register("fail", fail)
        repo = MockRepository("things", Thing, memory_storage, logger, rpc=registry)
        result = await repo.rpc("fail")
        assert (result.error.message, result.error.code) == ("nope", "P0001")
