"""
Data Models Package.

Re-exports the envelope and entity models for short imports:
    from family_logistics.models import ApiResponse, ApiError, Household, Member
"""

from family_logistics.models.api import ApiError, ApiResponse
from family_logistics.models.base import Entity
from family_logistics.models.enums import (
    InvitationStatus,
    ItemPriority,
    MemberRole,
    ShoppingListStatus,
    TripMemberRole,
    TripStatus,
    WishlistVisibility,
)
from family_logistics.models.household import Household, Invitation, Member
from family_logistics.models.shopping import ShoppingItem, ShoppingList
from family_logistics.models.template import PackingTemplate, PackingTemplateItem
from family_logistics.models.trip import (
    BudgetEntry,
    PackingItem,
    TimelineEvent,
    Trip,
    TripDocument,
    TripMember,
)
from family_logistics.models.wishlist import Wishlist, WishlistItem

__all__ = [
    "ApiError",
    "ApiResponse",
    "BudgetEntry",
    "Entity",
    "Household",
    "Invitation",
    "InvitationStatus",
    "ItemPriority",
    "Member",
    "MemberRole",
    "PackingItem",
    "PackingTemplate",
    "PackingTemplateItem",
    "ShoppingItem",
    "ShoppingList",
    "ShoppingListStatus",
    "TimelineEvent",
    "Trip",
    "TripDocument",
    "TripMember",
    "TripMemberRole",
    "TripStatus",
    "Wishlist",
    "WishlistItem",
    "WishlistVisibility",
]
