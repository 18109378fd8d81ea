"""
Shared Enumerations for Family Logistics Models.

StrEnum values compare equal to their string equivalents, so rows read
back from either backend (plain strings) match these members directly.
"""

from __future__ import annotations
from enum import StrEnum


class MemberRole(StrEnum):
    """Role of a member inside a household.

    ``CHILD`` members have no user account (``user_id`` is ``None``).
    """

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    CHILD = "child"
    VIEWER = "viewer"


class InvitationStatus(StrEnum):
    """Lifecycle of a household invitation."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


class ShoppingListStatus(StrEnum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class ItemPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class WishlistVisibility(StrEnum):
    """Who may see a wishlist.

    ``PUBLIC`` wishlists are reachable through their share slug without
    authentication.
    """

    PRIVATE = "private"
    HOUSEHOLD = "household"
    PUBLIC = "public"


class TripStatus(StrEnum):
    PLANNING = "planning"
    BOOKED = "booked"
    READY = "ready"
    TRAVELING = "traveling"
    COMPLETED = "completed"


class TripMemberRole(StrEnum):
    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"
