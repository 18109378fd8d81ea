"""Trip planning models: trips, trip members, packing, budget, timeline, documents."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from family_logistics.models.base import Entity
from family_logistics.models.enums import TripMemberRole, TripStatus


class Trip(Entity):
    name: str
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    status: TripStatus = TripStatus.PLANNING
    created_by: Optional[str] = None


class CreateTripDto(BaseModel):
    name: str = Field(min_length=1)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    status: TripStatus = TripStatus.PLANNING
    created_by: Optional[str] = None


class UpdateTripDto(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    status: Optional[TripStatus] = None


class TripMember(Entity):
    trip_id: str
    user_id: str
    role: TripMemberRole = TripMemberRole.VIEWER
    email: Optional[str] = None


class CreateTripMemberDto(BaseModel):
    trip_id: str
    user_id: str
    role: TripMemberRole = TripMemberRole.VIEWER


class PackingItem(Entity):
    trip_id: str
    title: str
    category: str = "custom"
    is_packed: bool = False


class CreatePackingItemDto(BaseModel):
    trip_id: str
    title: str = Field(min_length=1)
    category: str = "custom"
    is_packed: bool = False


class UpdatePackingItemDto(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    is_packed: Optional[bool] = None


class BudgetEntry(Entity):
    trip_id: str
    category: str
    amount: float
    currency: str = "EUR"


class CreateBudgetEntryDto(BaseModel):
    trip_id: str
    category: str = Field(min_length=1)
    amount: float
    currency: str = "EUR"


class TimelineEvent(Entity):
    trip_id: str
    title: str
    date_time: str
    notes: Optional[str] = None


class CreateTimelineEventDto(BaseModel):
    trip_id: str
    title: str = Field(min_length=1)
    date_time: str
    notes: Optional[str] = None


class TripDocument(Entity):
    trip_id: str
    title: str
    description: Optional[str] = None
    file_url: str


class CreateTripDocumentDto(BaseModel):
    trip_id: str
    title: str = Field(min_length=1)
    description: Optional[str] = None
    file_url: str
