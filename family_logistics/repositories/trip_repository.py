"""
Trip Repositories.

A trip is visible to its creator and to every user listed in
``trip_members``.  Packing items, budget entries, timeline events and
documents all hang off a ``trip_id``.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from family_logistics.logger import StructuredLogger
from family_logistics.models.api import ApiError, ApiResponse
from family_logistics.models.enums import TripMemberRole, TripStatus
from family_logistics.models.trip import (
    BudgetEntry,
    CreateTripDto,
    CreateTripMemberDto,
    PackingItem,
    TimelineEvent,
    Trip,
    TripDocument,
    TripMember,
    UpdatePackingItemDto,
)
from family_logistics.repositories.interface import Repository
from family_logistics.repositories.table_repository import TableRepository


class TripRepository(TableRepository[Trip]):
    """Data access layer for trips."""

    TABLE = "trips"
    OWNER_FIELD = "created_by"

    def __init__(
        self,
        engine: Repository[Trip],
        trip_members: Repository[TripMember],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(engine, logger)
        self._trip_members = trip_members

    async def find_by_user_id(self, user_id: str) -> ApiResponse[list[Trip]]:
        """Trips the user created, then trips shared with them, each by ``start_date``."""
        own = await self.find_all(
            lambda q: q.eq("created_by", user_id).order("start_date")
        )
        if own.error is not None:
            return own
        own_trips = own.data or []
        own_ids = {trip.id for trip in own_trips}

        memberships = await self._trip_members.find_all(lambda q: q.eq("user_id", user_id))
        if memberships.error is not None:
            self._logger.warning(
                "Trip membership lookup failed for user %s: %s",
                user_id,
                memberships.error.message,
            )
            return ApiResponse.success(own_trips)

        shared_ids: list[str] = []
        for membership in memberships.data or []:
            if membership.trip_id not in own_ids and membership.trip_id not in shared_ids:
                shared_ids.append(membership.trip_id)

        shared_trips: list[Trip] = []
        if shared_ids:
            shared = await self.find_all(
                lambda q: q.in_("id", shared_ids).order("start_date")
            )
            if shared.error is None:
                shared_trips = shared.data or []

        return ApiResponse.success([*own_trips, *shared_trips])

    async def duplicate(self, trip: Trip) -> ApiResponse[Trip]:
        """Create "Copy of <name>" with the same dates, back in planning."""
        return await self.create(
            CreateTripDto(
                name=f"Copy of {trip.name}",
                start_date=trip.start_date,
                end_date=trip.end_date,
                status=TripStatus.PLANNING,
                created_by=trip.created_by,
            )
        )


class TripMemberRepository(TableRepository[TripMember]):
    """Users a trip is shared with."""

    TABLE = "trip_members"

    async def _populate_email(self, member: TripMember) -> TripMember:
        lookup = await self.rpc("get_email_by_user_id", {"lookup_user_id": member.user_id})
        return member.model_copy(update={"email": lookup.data or None})

    async def find_by_trip_id(self, trip_id: str) -> ApiResponse[list[TripMember]]:
        members = await self.find_all(
            lambda q: q.eq("trip_id", trip_id).order("created_at")
        )
        if members.error is not None or not members.data:
            return members
        populated = await asyncio.gather(
            *(self._populate_email(member) for member in members.data)
        )
        return ApiResponse.success(list(populated))

    async def invite(
        self, trip_id: str, user_id: str, role: TripMemberRole = TripMemberRole.VIEWER
    ) -> ApiResponse[TripMember]:
        return await self.create(CreateTripMemberDto(trip_id=trip_id, user_id=user_id, role=role))

    async def invite_by_email(
        self,
        trip_id: str,
        email: str,
        role: TripMemberRole = TripMemberRole.VIEWER,
        current_user_id: Optional[str] = None,
    ) -> ApiResponse[TripMember]:
        lookup = await self.rpc("get_user_id_by_email", {"lookup_email": email})
        if lookup.error is not None:
            return ApiResponse.failure(
                ApiError(message="User not found with that email", details=lookup.error)
            )
        if not lookup.data:
            return ApiResponse.failure(ApiError(message="User not found with that email"))

        user_id = str(lookup.data)
        if current_user_id and user_id == current_user_id:
            return ApiResponse.failure(ApiError(message="Cannot add yourself as a member"))

        created = await self.invite(trip_id, user_id, role)
        if created.error is not None or created.data is None:
            return created
        return ApiResponse.success(created.data.model_copy(update={"email": email}))


class PackingItemRepository(TableRepository[PackingItem]):
    TABLE = "packing_items"

    async def find_by_trip_id(self, trip_id: str) -> ApiResponse[list[PackingItem]]:
        return await self.find_all(lambda q: q.eq("trip_id", trip_id).order("title"))

    async def toggle_packed(self, item_id: str, is_packed: bool) -> ApiResponse[PackingItem]:
        return await self.update(item_id, UpdatePackingItemDto(is_packed=is_packed))


class BudgetEntryRepository(TableRepository[BudgetEntry]):
    TABLE = "budget_entries"

    async def find_by_trip_id(self, trip_id: str) -> ApiResponse[list[BudgetEntry]]:
        return await self.find_all(
            lambda q: q.eq("trip_id", trip_id).order("created_at", desc=True)
        )


class TimelineEventRepository(TableRepository[TimelineEvent]):
    TABLE = "timeline_events"

    async def find_by_trip_id(self, trip_id: str) -> ApiResponse[list[TimelineEvent]]:
        return await self.find_all(lambda q: q.eq("trip_id", trip_id).order("date_time"))


class TripDocumentRepository(TableRepository[TripDocument]):
    TABLE = "documents"

    async def find_by_trip_id(self, trip_id: str) -> ApiResponse[list[TripDocument]]:
        return await self.find_all(
            lambda q: q.eq("trip_id", trip_id).order("created_at", desc=True)
        )
