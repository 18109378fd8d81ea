"""
Table Repository.

Shared base for the domain repositories.  A domain repository does not
know which backend it runs on: it wraps a generic engine (live
:class:`BaseRepository` or local :class:`MockRepository`) and adds
domain queries expressed through ``find_all`` query callbacks and
``rpc``.  The plain CRUD surface is delegated to the engine unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Generic, Optional

from family_logistics.logger import StructuredLogger
from family_logistics.models.api import ApiResponse
from family_logistics.repositories.interface import (
    EntityT,
    Payload,
    QueryBuilder,
    Repository,
)


class TableRepository(Generic[EntityT]):
    """Base class for all domain repositories. Receives its engine via __init__."""

    TABLE: str = ""

    def __init__(self, engine: Repository[EntityT], logger: StructuredLogger) -> None:
        self._engine = engine
        self._logger = logger

    @property
    def engine(self) -> Repository[EntityT]:
        return self._engine

    async def find_all(
        self, query: Optional[QueryBuilder] = None
    ) -> ApiResponse[list[EntityT]]:
        return await self._engine.find_all(query)

    async def find_by_id(self, record_id: str) -> ApiResponse[EntityT]:
        return await self._engine.find_by_id(record_id)

    async def create(self, dto: Payload) -> ApiResponse[EntityT]:
        return await self._engine.create(dto)

    async def create_many(self, dtos: Sequence[Payload]) -> ApiResponse[list[EntityT]]:
        return await self._engine.create_many(dtos)

    async def update(self, record_id: str, dto: Payload) -> ApiResponse[EntityT]:
        return await self._engine.update(record_id, dto)

    async def upsert(self, dto: Payload) -> ApiResponse[EntityT]:
        return await self._engine.upsert(dto)

    async def delete(self, record_id: str) -> ApiResponse[None]:
        return await self._engine.delete(record_id)

    async def rpc(
        self, function: str, params: Optional[Mapping[str, Any]] = None
    ) -> ApiResponse[Any]:
        return await self._engine.rpc(function, params)

    async def get_authenticated_user_id(self) -> ApiResponse[str]:
        return await self._engine.get_authenticated_user_id()
