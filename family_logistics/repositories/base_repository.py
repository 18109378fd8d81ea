"""
Live CRUD Engine.

Implements the :class:`~family_logistics.repositories.interface.Repository`
contract against one Supabase (PostgREST) table through an async
``supabase.AsyncClient``.

Every call goes through :meth:`BaseRepository.execute`, which awaits the
request, catches whatever it raises (``postgrest.exceptions.APIError``,
``httpx`` transport errors, ...) and hands it to :func:`to_api_error`.
New domain queries built on ``execute`` inherit the same normalization.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any, Optional

from supabase import AsyncClient

from family_logistics.logger import StructuredLogger
from family_logistics.models.api import ApiError, ApiResponse
from family_logistics.repositories.errors import (
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

Operation = Callable[[], Awaitable[Any]]


class BaseRepository(Repository[EntityT]):
    """Generic CRUD over a live table.

    Parameters
    ----------
    client:
        Initialised ``AsyncClient`` (see
        :func:`family_logistics.database.create_supabase_client`).
    table:
        Table name, e.g. ``"households"``.
    model:
        Entity model every returned row is validated into.
    logger:
        Structured logger.
    owner_field:
        When set, ``create``/``create_many`` resolve the signed-in user
        first and write its id into this column.
    """

    def __init__(
        self,
        client: AsyncClient,
        table: str,
        model: type[EntityT],
        logger: StructuredLogger,
        *,
        owner_field: Optional[str] = None,
    ) -> None:
        self.table = table
        self.model = model
        self._client = client
        self._logger = logger
        self._owner_field = owner_field

    @property
    def client(self) -> AsyncClient:
        return self._client

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    async def execute(self, operation: Operation) -> ApiResponse[Any]:
        """Await *operation* and wrap its ``data`` in an ``ApiResponse``.

        *operation* is a zero-argument coroutine function, typically
        ``lambda: builder.execute()``.  Nothing it raises escapes.
        """
        try:
            response = await operation()
        except Exception as exc:
            error = to_api_error(exc)
            self._logger.warning(
                "Supabase request on '%s' failed: %s (code=%s)",
                self.table,
                error.message,
                error.code,
            )
            return ApiResponse.failure(error)
        return ApiResponse.success(getattr(response, "data", None))

    def _to_entity(self, row: Mapping[str, Any]) -> EntityT:
        return self.model.model_validate(dict(row))

    def _one(self, response: ApiResponse[Any]) -> ApiResponse[EntityT]:
        if response.error is not None:
            return response
        data = response.data
        if isinstance(data, list):
            data = data[0] if data else None
        if not data:
            return ApiResponse.failure(not_found_error(self.table))
        try:
            return ApiResponse.success(self._to_entity(data))
        except Exception as exc:
            return ApiResponse.failure(to_api_error(exc))

    def _many(self, response: ApiResponse[Any]) -> ApiResponse[list[EntityT]]:
        if response.error is not None:
            return response
        try:
            return ApiResponse.success([self._to_entity(row) for row in response.data or []])
        except Exception as exc:
            return ApiResponse.failure(to_api_error(exc))

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
            builder = self._client.table(self.table).select("*")
            if query is not None:
                builder = query(builder)
        except Exception as exc:
            return ApiResponse.failure(to_api_error(exc))
        return self._many(await self.execute(lambda: builder.execute()))

    async def find_by_id(self, record_id: str) -> ApiResponse[EntityT]:
        return self._one(
            await self.execute(
                lambda: self._client.table(self.table)
                .select("*")
                .eq("id", record_id)
                .maybe_single()
                .execute()
            )
        )

    async def create(self, dto: Payload) -> ApiResponse[EntityT]:
        payload = dump_payload(dto)
        auth_error = await self._stamp_owner([payload])
        if auth_error is not None:
            return ApiResponse.failure(auth_error)

        result = self._one(
            await self.execute(
                lambda: self._client.table(self.table).insert(payload).execute()
            )
        )
        if result.data is not None:
            self._logger.debug("Created %s/%s", self.table, result.data.id)
        return result

    async def create_many(self, dtos: Sequence[Payload]) -> ApiResponse[list[EntityT]]:
        payloads = [dump_payload(dto) for dto in dtos]
        if not payloads:
            return ApiResponse.success([])
        auth_error = await self._stamp_owner(payloads)
        if auth_error is not None:
            return ApiResponse.failure(auth_error)

        return self._many(
            await self.execute(
                lambda: self._client.table(self.table).insert(payloads).execute()
            )
        )

    async def update(self, record_id: str, dto: Payload) -> ApiResponse[EntityT]:
        changes = dump_payload(dto, partial=True)
        changes.pop("id", None)
        return self._one(
            await self.execute(
                lambda: self._client.table(self.table)
                .update(changes)
                .eq("id", record_id)
                .execute()
            )
        )

    async def upsert(self, dto: Payload) -> ApiResponse[EntityT]:
        payload = dump_payload(dto, partial=True)
        return self._one(
            await self.execute(
                lambda: self._client.table(self.table).upsert(payload).execute()
            )
        )

    async def delete(self, record_id: str) -> ApiResponse[None]:
        response = await self.execute(
            lambda: self._client.table(self.table).delete().eq("id", record_id).execute()
        )
        if response.error is not None:
            return response
        self._logger.debug("Deleted %s/%s", self.table, record_id)
        return ApiResponse.success(None)

    async def rpc(
        self, function: str, params: Optional[Mapping[str, Any]] = None
    ) -> ApiResponse[Any]:
        return await self.execute(
            lambda: self._client.rpc(function, dict(params or {})).execute()
        )

    async def get_authenticated_user_id(self) -> ApiResponse[str]:
        """Return the id of the user on the current Supabase session."""
        try:
            response = await self._client.auth.get_user()
        except Exception as exc:
            error = to_api_error(exc)
            self._logger.warning("Auth lookup failed: %s", error.message)
            return ApiResponse.failure(error)

        user = getattr(response, "user", None)
        user_id = getattr(user, "id", None)
        if not user_id:
            return ApiResponse.failure(auth_required_error())
        return ApiResponse.success(str(user_id))
