"""
Trip Service.

Trips and everything planned under them.  Duplicating a trip writes the
copy and then its packing list; if the packing list cannot be copied,
the new trip is deleted again.
"""

from __future__ import annotations

from typing import Optional, TypedDict

from family_logistics.logger import StructuredLogger
from family_logistics.models.api import ApiResponse
from family_logistics.models.enums import TripMemberRole
from family_logistics.models.trip import (
    BudgetEntry,
    CreateBudgetEntryDto,
    CreatePackingItemDto,
    CreateTimelineEventDto,
    CreateTripDocumentDto,
    CreateTripDto,
    PackingItem,
    TimelineEvent,
    Trip,
    TripDocument,
    TripMember,
    UpdateTripDto,
)
from family_logistics.repositories.compensation import run_with_compensation
from family_logistics.repositories.template_repository import TemplateRepository
from family_logistics.repositories.trip_repository import (
    BudgetEntryRepository,
    PackingItemRepository,
    TimelineEventRepository,
    TripDocumentRepository,
    TripMemberRepository,
    TripRepository,
)
from family_logistics.services.base_service import BaseService


class BudgetSummary(TypedDict):
    total: float
    by_category: dict[str, float]


class TripService(BaseService):
    """Service layer for trips, packing, budget, timeline and documents."""

    def __init__(
        self,
        trips: TripRepository,
        trip_members: TripMemberRepository,
        packing_items: PackingItemRepository,
        budget_entries: BudgetEntryRepository,
        timeline_events: TimelineEventRepository,
        documents: TripDocumentRepository,
        templates: TemplateRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._trips = trips
        self._trip_members = trip_members
        self._packing_items = packing_items
        self._budget_entries = budget_entries
        self._timeline_events = timeline_events
        self._documents = documents
        self._templates = templates

    # -- trips --------------------------------------------------------------

    async def get_user_trips(self, user_id: str) -> ApiResponse[list[Trip]]:
        return await self._trips.find_by_user_id(user_id)

    async def get_trip(self, trip_id: str) -> ApiResponse[Trip]:
        return await self._trips.find_by_id(trip_id)

    async def create_trip(self, dto: CreateTripDto) -> ApiResponse[Trip]:
        return await self._trips.create(dto)

    async def update_trip(self, trip_id: str, dto: UpdateTripDto) -> ApiResponse[Trip]:
        return await self._trips.update(trip_id, dto)

    async def delete_trip(self, trip_id: str) -> ApiResponse[None]:
        return await self._trips.delete(trip_id)

    async def duplicate_trip(self, trip_id: str) -> ApiResponse[Trip]:
        """Copy a trip and its packing list (all items unpacked)."""
        original = await self._trips.find_by_id(trip_id)
        if original.error is not None or original.data is None:
            return original
        source = original.data

        async def copy_packing(clone: Trip) -> ApiResponse[list[PackingItem]]:
            items = await self._packing_items.find_by_trip_id(source.id)
            if items.error is not None or not items.data:
                return items
            return await self._packing_items.create_many(
                [
                    CreatePackingItemDto(
                        trip_id=clone.id, title=item.title, category=item.category
                    )
                    for item in items.data
                ]
            )

        return await run_with_compensation(
            step=lambda: self._trips.duplicate(source),
            follow_up=copy_packing,
            rollback=lambda clone: self._trips.delete(clone.id),
            logger=self._logger,
            label="duplicate_trip",
        )

    # -- sharing ------------------------------------------------------------

    async def get_trip_members(self, trip_id: str) -> ApiResponse[list[TripMember]]:
        return await self._trip_members.find_by_trip_id(trip_id)

    async def share_trip(
        self,
        trip_id: str,
        email: str,
        role: TripMemberRole = TripMemberRole.VIEWER,
        current_user_id: Optional[str] = None,
    ) -> ApiResponse[TripMember]:
        return await self._trip_members.invite_by_email(trip_id, email, role, current_user_id)

    async def remove_trip_member(self, trip_member_id: str) -> ApiResponse[None]:
        return await self._trip_members.delete(trip_member_id)

    # -- packing ------------------------------------------------------------

    async def get_packing_items(self, trip_id: str) -> ApiResponse[list[PackingItem]]:
        return await self._packing_items.find_by_trip_id(trip_id)

    async def add_packing_item(self, dto: CreatePackingItemDto) -> ApiResponse[PackingItem]:
        return await self._packing_items.create(dto)

    async def toggle_packed(self, item_id: str, is_packed: bool) -> ApiResponse[PackingItem]:
        return await self._packing_items.toggle_packed(item_id, is_packed)

    async def delete_packing_item(self, item_id: str) -> ApiResponse[None]:
        return await self._packing_items.delete(item_id)

    async def apply_template(
        self, template_id: str, trip_id: str
    ) -> ApiResponse[list[PackingItem]]:
        return await self._templates.apply_to_trip(template_id, trip_id, self._packing_items)

    # -- budget -------------------------------------------------------------

    async def get_budget_entries(self, trip_id: str) -> ApiResponse[list[BudgetEntry]]:
        return await self._budget_entries.find_by_trip_id(trip_id)

    async def add_budget_entry(self, dto: CreateBudgetEntryDto) -> ApiResponse[BudgetEntry]:
        return await self._budget_entries.create(dto)

    async def delete_budget_entry(self, entry_id: str) -> ApiResponse[None]:
        return await self._budget_entries.delete(entry_id)

    async def get_budget_summary(self, trip_id: str) -> ApiResponse[BudgetSummary]:
        """Total spend and per-category sums for a trip."""
        entries = await self._budget_entries.find_by_trip_id(trip_id)
        if entries.error is not None:
            return ApiResponse.failure(entries.error)

        by_category: dict[str, float] = {}
        for entry in entries.data or []:
            by_category[entry.category] = by_category.get(entry.category, 0.0) + entry.amount
        return ApiResponse.success(
            BudgetSummary(total=sum(by_category.values()), by_category=by_category)
        )

    # -- timeline & documents -----------------------------------------------

    async def get_timeline(self, trip_id: str) -> ApiResponse[list[TimelineEvent]]:
        return await self._timeline_events.find_by_trip_id(trip_id)

    async def add_timeline_event(
        self, dto: CreateTimelineEventDto
    ) -> ApiResponse[TimelineEvent]:
        return await self._timeline_events.create(dto)

    async def delete_timeline_event(self, event_id: str) -> ApiResponse[None]:
        return await self._timeline_events.delete(event_id)

    async def get_documents(self, trip_id: str) -> ApiResponse[list[TripDocument]]:
        return await self._documents.find_by_trip_id(trip_id)

    async def add_document(self, dto: CreateTripDocumentDto) -> ApiResponse[TripDocument]:
        return await self._documents.create(dto)

    async def delete_document(self, document_id: str) -> ApiResponse[None]:
        return await self._documents.delete(document_id)
