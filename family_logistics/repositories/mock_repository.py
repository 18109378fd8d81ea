"""
Local CRUD Engine ("mock mode").

Implements the :class:`~family_logistics.repositories.interface.Repository`
contract over one logical table held in a StorageAdapter.  A table is a
single key, ``table:<name>``, whose value is a JSON array of records in
insertion order.

Invariants kept by this engine:

- ``id`` is always a fresh UUID4 minted here; ``upsert`` with an id that
  does not exist yet creates a record under a *new* id.
- ``created_at == updated_at`` at creation; every mutation moves
  ``updated_at`` strictly forward (see :func:`next_timestamp`).
- Not-found is reported as ``ApiError(code="NOT_FOUND")``, never as an
  empty success.
- Nothing raised by the adapter escapes: every public method returns an
  ``ApiResponse``.

There is no locking.  Two interleaved read-modify-write operations on
the same table resolve last-write-wins.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Optional

from family_logistics.logger import StructuredLogger
from family_logistics.models.api import ApiError, ApiResponse
from family_logistics.repositories.errors import (
    RPC_NOT_FOUND,
    auth_required_error,
    not_found_error,
    to_api_error,
)
from family_logistics.repositories.interface import (
    EntityT,
    Payload,
    QueryBuilder,
    Repository,
    dump_payload,
)
from family_logistics.repositories.mock_query import MockQueryBuilder
from family_logistics.repositories.storage_adapter import StorageAdapter
from family_logistics.utils.string_helpers import generate_id
from family_logistics.utils.timestamps import Clock, next_timestamp, utc_now

if TYPE_CHECKING:
    from family_logistics.auth import MockAuthStore

RpcHandler = Callable[[dict[str, Any]], Awaitable[Any]]

_ENGINE_FIELDS: frozenset[str] = frozenset({"id", "created_at", "updated_at"})


class RpcError(Exception):
    """Raised by a local procedure to report a specific ``ApiError``."""

    def __init__(self, message: str, code: Optional[str] = None, details: object = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details

    @classmethod
    def from_api_error(cls, error: ApiError) -> "RpcError":
        return cls(error.message, error.code, error.details)


class MockRpcRegistry:
    """Named async handlers standing in for database functions."""

    def __init__(self) -> None:
        self._handlers: dict[str, RpcHandler] = {}

    def register(self, name: str, handler: RpcHandler) -> None:
        self._handlers[name] = handler

    def __contains__(self, name: object) -> bool:
        return name in self._handlers

    async def call(self, name: str, params: dict[str, Any]) -> Any:
        handler = self._handlers.get(name)
        if handler is None:
            raise RpcError(
                f"Could not find the function {name} in the schema cache",
                code=RPC_NOT_FOUND,
            )
        return await handler(params)


class MockRepository(Repository[EntityT]):
    """Generic CRUD over ``table:<table>`` in a StorageAdapter.

    Parameters
    ----------
    table:
        Logical table name; also used in not-found messages.
    model:
        Entity model every returned record is validated into.
    storage:
        Adapter holding the table.  Engines sharing an adapter share data.
    logger:
        Structured logger.
    auth:
        Local session store answering ``get_authenticated_user_id``.
    rpc:
        Local procedures reachable through :meth:`rpc`.
    owner_field:
        When set, ``create``/``create_many`` require an authenticated
        user and write its id into this column.
    clock:
        Source of "now"; injectable for tests.
    """

    def __init__(
        self,
        table: str,
        model: type[EntityT],
        storage: StorageAdapter,
        logger: StructuredLogger,
        *,
        auth: Optional["MockAuthStore"] = None,
        rpc: Optional[MockRpcRegistry] = None,
        owner_field: Optional[str] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.table = table
        self.model = model
        self._storage = storage
        self._logger = logger
        self._auth = auth
        self._rpc = rpc
        self._owner_field = owner_field
        self._clock: Clock = clock or utc_now

    @property
    def storage(self) -> StorageAdapter:
        return self._storage

    @property
    def table_key(self) -> str:
        return f"table:{self.table}"

    # ------------------------------------------------------------------
    # Table I/O
    # ------------------------------------------------------------------

    async def load_all(self) -> list[dict[str, Any]]:
        """Return the raw table rows; an absent or corrupt table is empty."""
        data = await self._storage.get(self.table_key)
        if not isinstance(data, list):
            return []
        return [row for row in data if isinstance(row, dict)]

    async def save_all(self, rows: list[dict[str, Any]]) -> None:
        await self._storage.set(self.table_key, rows)

    def _to_entity(self, row: Mapping[str, Any]) -> EntityT:
        return self.model.model_validate(dict(row))

    def _failure(self, operation: str, exc: Exception) -> ApiResponse[Any]:
        error = to_api_error(exc)
        self._logger.warning(
            "Local %s on '%s' failed: %s", operation, self.table, error.message
        )
        return ApiResponse.failure(error)

    def _new_record(self, payload: Mapping[str, Any], now: str) -> dict[str, Any]:
        record = {k: v for k, v in payload.items() if k not in _ENGINE_FIELDS}
        record.update(id=generate_id(), created_at=now, updated_at=now)
        return record

    async def _stamp_owner(self, payloads: list[dict[str, Any]]) -> Optional[ApiError]:
        if self._owner_field is None:
            return None
        identity = await self.get_authenticated_user_id()
        if identity.error is not None or not identity.data:
            return identity.error or auth_required_error()
        for payload in payloads:
            if payload.get(self._owner_field) is None:
                payload[self._owner_field] = identity.data
        return None

    # ------------------------------------------------------------------
    # Repository
    # ------------------------------------------------------------------

    async def find_all(
        self, query: Optional[QueryBuilder] = None
    ) -> ApiResponse[list[EntityT]]:
        try:
            rows = await self.load_all()
            if query is not None:
                builder = MockQueryBuilder()
                narrowed = query(builder)
                rows = (narrowed if isinstance(narrowed, MockQueryBuilder) else builder).apply(rows)
            return ApiResponse.success([self._to_entity(row) for row in rows])
        except Exception as exc:
            return self._failure("find_all", exc)

    async def find_by_id(self, record_id: str) -> ApiResponse[EntityT]:
        try:
            rows = await self.load_all()
            row = next((row for row in rows if row.get("id") == record_id), None)
            if row is None:
                return ApiResponse.failure(not_found_error(self.table))
            return ApiResponse.success(self._to_entity(row))
        except Exception as exc:
            return self._failure("find_by_id", exc)

    async def create(self, dto: Payload) -> ApiResponse[EntityT]:
        try:
            payload = dump_payload(dto)
            auth_error = await self._stamp_owner([payload])
            if auth_error is not None:
                return ApiResponse.failure(auth_error)

            rows = await self.load_all()
            now = next_timestamp(self._clock)
            record = self._new_record(payload, now)
            entity = self._to_entity(record)
            rows.append(record)
            await self.save_all(rows)
        except Exception as exc:
            return self._failure("create", exc)

        self._logger.debug("Created %s/%s", self.table, entity.id)
        return ApiResponse.success(entity)

    async def create_many(self, dtos: Sequence[Payload]) -> ApiResponse[list[EntityT]]:
        try:
            payloads = [dump_payload(dto) for dto in dtos]
            auth_error = await self._stamp_owner(payloads)
            if auth_error is not None:
                return ApiResponse.failure(auth_error)

            rows = await self.load_all()
            now = next_timestamp(self._clock)
            records = [self._new_record(payload, now) for payload in payloads]
            entities = [self._to_entity(record) for record in records]
            rows.extend(records)
            await self.save_all(rows)
        except Exception as exc:
            return self._failure("create_many", exc)

        self._logger.debug("Created %d rows in %s", len(entities), self.table)
        return ApiResponse.success(entities)

    async def update(self, record_id: str, dto: Payload) -> ApiResponse[EntityT]:
        try:
            changes = {
                k: v for k, v in dump_payload(dto, partial=True).items()
                if k not in _ENGINE_FIELDS
            }
            rows = await self.load_all()
            index = next(
                (i for i, row in enumerate(rows) if row.get("id") == record_id), None
            )
            if index is None:
                return ApiResponse.failure(not_found_error(self.table))

            current = rows[index]
            updated = {
                **current,
                **changes,
                "updated_at": next_timestamp(self._clock, current.get("updated_at")),
            }
            entity = self._to_entity(updated)
            rows[index] = updated
            await self.save_all(rows)
        except Exception as exc:
            return self._failure("update", exc)

        return ApiResponse.success(entity)

    async def upsert(self, dto: Payload) -> ApiResponse[EntityT]:
        try:
            payload = dump_payload(dto, partial=True)
            record_id = payload.get("id")
            if record_id:
                rows = await self.load_all()
                if any(row.get("id") == record_id for row in rows):
                    return await self.update(record_id, payload)
            # Unknown or missing id: a fresh id is minted by create().
            return await self.create(payload)
        except Exception as exc:
            return self._failure("upsert", exc)

    async def delete(self, record_id: str) -> ApiResponse[None]:
        try:
            rows = await self.load_all()
            remaining = [row for row in rows if row.get("id") != record_id]
            if len(remaining) == len(rows):
                return ApiResponse.failure(not_found_error(self.table))
            await self.save_all(remaining)
        except Exception as exc:
            return self._failure("delete", exc)

        self._logger.debug("Deleted %s/%s", self.table, record_id)
        return ApiResponse.success(None)

    async def rpc(
        self, function: str, params: Optional[Mapping[str, Any]] = None
    ) -> ApiResponse[Any]:
        try:
            if self._rpc is None:
                raise RpcError(
                    f"Could not find the function {function} in the schema cache",
                    code=RPC_NOT_FOUND,
                )
            return ApiResponse.success(await self._rpc.call(function, dict(params or {})))
        except Exception as exc:
            return self._failure(f"rpc {function}", exc)

    async def get_authenticated_user_id(self) -> ApiResponse[str]:
        if self._auth is None:
            return ApiResponse.failure(auth_required_error())
        try:
            current = await self._auth.get_current_user()
        except Exception as exc:
            return ApiResponse.failure(to_api_error(exc))
        if current.error is not None or current.data is None or not current.data.id:
            return ApiResponse.failure(auth_required_error(details=current.error))
        return ApiResponse.success(current.data.id)
