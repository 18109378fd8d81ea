"""
Household Repositories.

Households, their members and pending invitations.  A user's households
are the ones they created plus the ones they hold a membership in.
Creating a household together with its owner membership is a single
database function (``create_household_with_owner``) on both backends.
"""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Optional

from family_logistics.logger import StructuredLogger
from family_logistics.models.api import ApiError, ApiResponse
from family_logistics.models.enums import InvitationStatus, MemberRole
from family_logistics.models.household import (
    CreateInvitationDto,
    CreateMemberDto,
    Household,
    Invitation,
    Member,
    UpdateInvitationDto,
    UpdateMemberDto,
)
from family_logistics.repositories.interface import Repository
from family_logistics.repositories.table_repository import TableRepository
from family_logistics.utils.string_helpers import generate_token
from family_logistics.utils.timestamps import utc_now, utc_now_iso

INVITATION_TTL: timedelta = timedelta(days=7)


class HouseholdRepository(TableRepository[Household]):
    """Data access layer for Household entities."""

    TABLE = "households"

    def __init__(
        self,
        engine: Repository[Household],
        members: Repository[Member],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(engine, logger)
        self._members = members

    async def find_by_user_id(self, user_id: str) -> ApiResponse[list[Household]]:
        """Households created by *user_id*, then those they are a member of.

        Each group is ordered by ``created_at``.  If the membership lookup
        fails, the user's own households are still returned.
        """
        own = await self.find_all(
            lambda q: q.eq("created_by", user_id).order("created_at")
        )
        if own.error is not None:
            return own
        own_households = own.data or []
        own_ids = {household.id for household in own_households}

        memberships = await self._members.find_all(lambda q: q.eq("user_id", user_id))
        if memberships.error is not None:
            self._logger.warning(
                "Membership lookup failed for user %s: %s",
                user_id,
                memberships.error.message,
            )
            return ApiResponse.success(own_households)

        member_ids: list[str] = []
        for membership in memberships.data or []:
            if membership.household_id not in own_ids and membership.household_id not in member_ids:
                member_ids.append(membership.household_id)

        member_households: list[Household] = []
        if member_ids:
            shared = await self.find_all(
                lambda q: q.in_("id", member_ids).order("created_at")
            )
            if shared.error is None:
                member_households = shared.data or []

        return ApiResponse.success([*own_households, *member_households])

    async def create_with_owner(
        self, name: str, display_name: Optional[str] = None
    ) -> ApiResponse[Household]:
        """Create a household and the caller's owner membership together."""
        created = await self.rpc(
            "create_household_with_owner",
            {"p_name": name, "p_creator_display_name": display_name},
        )
        if created.error is not None:
            return created
        if not isinstance(created.data, dict) or not created.data.get("household_id"):
            return ApiResponse.failure(
                ApiError(message="Failed to create household: RPC returned no data")
            )
        return await self.find_by_id(created.data["household_id"])


class MemberRepository(TableRepository[Member]):
    """Data access layer for household members (including children)."""

    TABLE = "members"

    async def _populate_email(self, member: Member) -> Member:
        if not member.user_id:
            return member
        lookup = await self.rpc("get_email_by_user_id", {"lookup_user_id": member.user_id})
        return member.model_copy(update={"email": lookup.data or None})

    async def find_by_household_id(self, household_id: str) -> ApiResponse[list[Member]]:
        """Members of *household_id* ordered by ``joined_at``, emails populated."""
        members = await self.find_all(
            lambda q: q.eq("household_id", household_id).order("joined_at")
        )
        if members.error is not None or not members.data:
            return members
        populated = await asyncio.gather(
            *(self._populate_email(member) for member in members.data)
        )
        return ApiResponse.success(list(populated))

    async def find_active_by_household_id(
        self, household_id: str
    ) -> ApiResponse[list[Member]]:
        return await self.find_all(
            lambda q: q.eq("household_id", household_id)
            .eq("is_active", True)
            .order("joined_at")
        )

    async def create_child(
        self,
        household_id: str,
        name: str,
        date_of_birth: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> ApiResponse[str]:
        """Add a member without an account; returns the new member id."""
        created = await self.create(
            CreateMemberDto(
                household_id=household_id,
                user_id=None,
                role=MemberRole.CHILD,
                display_name=name,
                date_of_birth=date_of_birth,
                avatar_url=avatar_url,
                joined_at=utc_now_iso(),
            )
        )
        if created.error is not None or created.data is None:
            return ApiResponse.failure(created.error)
        return ApiResponse.success(created.data.id)

    async def invite_by_email(
        self,
        household_id: str,
        email: str,
        current_user_id: Optional[str] = None,
    ) -> ApiResponse[Member]:
        """Add the registered user behind *email* as a regular member."""
        lookup = await self.rpc("get_user_id_by_email", {"lookup_email": email})
        if lookup.error is not None:
            message = lookup.error.message or "Failed to look up user by email"
            if "authentication required" in message.lower():
                message = "Authentication required. Please sign in again."
            return ApiResponse.failure(
                ApiError(message=message, code=lookup.error.code, details=lookup.error)
            )
        if not lookup.data:
            return ApiResponse.failure(ApiError(message="User not found with that email"))

        user_id = str(lookup.data)
        if current_user_id and user_id == current_user_id:
            return ApiResponse.failure(ApiError(message="Cannot add yourself as a member"))

        created = await self.create(
            CreateMemberDto(
                household_id=household_id,
                user_id=user_id,
                role=MemberRole.MEMBER,
                display_name=email.split("@")[0],
                joined_at=utc_now_iso(),
                invited_by=current_user_id,
            )
        )
        if created.error is not None or created.data is None:
            return created
        return ApiResponse.success(created.data.model_copy(update={"email": email}))

    async def soft_delete(self, member_id: str) -> ApiResponse[None]:
        """Deactivate a member; the row is kept."""
        result = await self.update(member_id, UpdateMemberDto(is_active=False))
        if result.error is not None:
            return ApiResponse.failure(result.error)
        return ApiResponse.success(None)


class InvitationRepository(TableRepository[Invitation]):
    """Data access layer for household invitations."""

    TABLE = "invitations"

    async def find_pending_by_email(self, email: str) -> ApiResponse[list[Invitation]]:
        """Unexpired pending invitations addressed to *email*, newest first."""
        now = utc_now_iso()
        return await self.find_all(
            lambda q: q.eq("email", email.strip().lower())
            .eq("status", InvitationStatus.PENDING.value)
            .gt("expires_at", now)
            .order("created_at", desc=True)
        )

    async def find_by_household_id(self, household_id: str) -> ApiResponse[list[Invitation]]:
        return await self.find_all(
            lambda q: q.eq("household_id", household_id).order("created_at", desc=True)
        )

    async def send(
        self,
        household_id: str,
        email: str,
        role: MemberRole = MemberRole.MEMBER,
        invited_by: Optional[str] = None,
    ) -> ApiResponse[Invitation]:
        """Create a pending invitation valid for seven days."""
        return await self.create(
            CreateInvitationDto(
                household_id=household_id,
                email=email.strip().lower(),
                role=role,
                invited_by=invited_by,
                token=generate_token(),
                expires_at=(utc_now() + INVITATION_TTL).isoformat(),
            )
        )

    async def accept(self, invitation_id: str) -> ApiResponse[Invitation]:
        return await self.update(
            invitation_id,
            UpdateInvitationDto(status=InvitationStatus.ACCEPTED, accepted_at=utc_now_iso()),
        )

    async def decline(self, invitation_id: str) -> ApiResponse[Invitation]:
        return await self.update(
            invitation_id, UpdateInvitationDto(status=InvitationStatus.DECLINED)
        )
