"""
Repository Contract.

The capability set shared by both generic CRUD engines:
:class:`~family_logistics.repositories.base_repository.BaseRepository`
(live Supabase tables) and
:class:`~family_logistics.repositories.mock_repository.MockRepository`
(local StorageAdapter tables).  Domain repositories are written against
this contract only, so the same domain code runs on either backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from typing import Any, Generic, Optional, TypeVar, Union

from pydantic import BaseModel

from family_logistics.models.api import ApiResponse
from family_logistics.models.base import Entity

EntityT = TypeVar("EntityT", bound=Entity)

QueryBuilder = Callable[[Any], Any]
"""Narrows a ``find_all`` query, e.g. ``lambda q: q.eq("list_id", x).order("title")``."""

Payload = Union[BaseModel, Mapping[str, Any]]


def dump_payload(dto: Payload, *, partial: bool = False) -> dict[str, Any]:
    """Return a plain JSON-safe dict for *dto*.

    ``partial=True`` keeps only the fields the caller explicitly set, so
    an update never overwrites columns it did not mention.
    """
    if isinstance(dto, BaseModel):
        if partial:
            return dto.model_dump(mode="json", exclude_unset=True)
        return dto.model_dump(mode="json", exclude_none=True)
    return dict(dto)


class Repository(ABC, Generic[EntityT]):
    """CRUD over one logical table; every method returns an ``ApiResponse``."""

    table: str
    model: type[EntityT]

    @abstractmethod
    async def find_all(
        self, query: Optional[QueryBuilder] = None
    ) -> ApiResponse[list[EntityT]]: ...

    @abstractmethod
    async def find_by_id(self, record_id: str) -> ApiResponse[EntityT]: ...

    @abstractmethod
    async def create(self, dto: Payload) -> ApiResponse[EntityT]: ...

    @abstractmethod
    async def create_many(self, dtos: Sequence[Payload]) -> ApiResponse[list[EntityT]]: ...

    @abstractmethod
    async def update(self, record_id: str, dto: Payload) -> ApiResponse[EntityT]: ...

    @abstractmethod
    async def upsert(self, dto: Payload) -> ApiResponse[EntityT]: ...

    @abstractmethod
    async def delete(self, record_id: str) -> ApiResponse[None]: ...

    @abstractmethod
    async def rpc(
        self, function: str, params: Optional[Mapping[str, Any]] = None
    ) -> ApiResponse[Any]: ...

    @abstractmethod
    async def get_authenticated_user_id(self) -> ApiResponse[str]: ...
