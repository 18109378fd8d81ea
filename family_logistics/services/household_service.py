"""
Household Service.

Orchestrates household, member and invitation repositories.  Creating a
household writes two rows (the household and the owner's membership);
when the membership insert fails the household is deleted again so no
orphan is left behind.
"""

from __future__ import annotations

from typing import Optional

from family_logistics.logger import StructuredLogger
from family_logistics.models.api import ApiResponse
from family_logistics.models.enums import InvitationStatus, MemberRole
from family_logistics.models.household import (
    CreateHouseholdDto,
    CreateMemberDto,
    Household,
    Invitation,
    Member,
    UpdateHouseholdDto,
)
from family_logistics.repositories.compensation import run_with_compensation
from family_logistics.repositories.household_repository import (
    HouseholdRepository,
    InvitationRepository,
    MemberRepository,
)
from family_logistics.services.base_service import BaseService
from family_logistics.utils.string_helpers import generate_share_slug, slugify
from family_logistics.utils.timestamps import utc_now_iso


class HouseholdService(BaseService):
    """Service layer for households and their members."""

    def __init__(
        self,
        households: HouseholdRepository,
        members: MemberRepository,
        invitations: InvitationRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._households = households
        self._members = members
        self._invitations = invitations

    async def get_user_households(self, user_id: str) -> ApiResponse[list[Household]]:
        return await self._households.find_by_user_id(user_id)

    async def get_household(self, household_id: str) -> ApiResponse[Household]:
        return await self._households.find_by_id(household_id)

    async def create_household(
        self,
        name: str,
        user_id: str,
        display_name: Optional[str] = None,
    ) -> ApiResponse[Household]:
        """Create a household and make *user_id* its owner.

        Returns the owner-membership error (after deleting the household)
        if the second write fails.
        """
        dto = CreateHouseholdDto(
            name=name,
            slug=f"{slugify(name) or 'household'}-{generate_share_slug(6)}",
            created_by=user_id,
        )

        async def add_owner(household: Household) -> ApiResponse[Member]:
            return await self._members.create(
                CreateMemberDto(
                    household_id=household.id,
                    user_id=user_id,
                    role=MemberRole.OWNER,
                    display_name=display_name or name,
                    joined_at=utc_now_iso(),
                )
            )

        result = await run_with_compensation(
            step=lambda: self._households.create(dto),
            follow_up=add_owner,
            rollback=lambda household: self._households.delete(household.id),
            logger=self._logger,
            label="create_household",
        )
        if result.data is not None:
            self._logger.info("Household %s created by %s", result.data.id, user_id)
        return result

    async def update_household(
        self, household_id: str, dto: UpdateHouseholdDto
    ) -> ApiResponse[Household]:
        return await self._households.update(household_id, dto)

    async def delete_household(self, household_id: str) -> ApiResponse[None]:
        return await self._households.delete(household_id)

    async def get_members(self, household_id: str) -> ApiResponse[list[Member]]:
        return await self._members.find_by_household_id(household_id)

    async def add_child(
        self,
        household_id: str,
        name: str,
        date_of_birth: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> ApiResponse[Member]:
        created = await self._members.create_child(
            household_id, name, date_of_birth, avatar_url
        )
        if created.error is not None or created.data is None:
            return ApiResponse.failure(created.error)
        return await self._members.find_by_id(created.data)

    async def invite_member_by_email(
        self,
        household_id: str,
        email: str,
        current_user_id: Optional[str] = None,
    ) -> ApiResponse[Member]:
        return await self._members.invite_by_email(household_id, email, current_user_id)

    async def remove_member(self, member_id: str) -> ApiResponse[None]:
        return await self._members.soft_delete(member_id)

    async def send_invitation(
        self,
        household_id: str,
        email: str,
        role: MemberRole = MemberRole.MEMBER,
        invited_by: Optional[str] = None,
    ) -> ApiResponse[Invitation]:
        return await self._invitations.send(household_id, email, role, invited_by)

    async def get_pending_invitations(self, email: str) -> ApiResponse[list[Invitation]]:
        return await self._invitations.find_pending_by_email(email)

    async def accept_invitation(
        self, invitation_id: str, user_id: str, display_name: Optional[str] = None
    ) -> ApiResponse[Invitation]:
        """Mark the invitation accepted and add *user_id* to its household.

        If the membership cannot be created the invitation goes back to
        pending.
        """

        async def join(invitation: Invitation) -> ApiResponse[Member]:
            return await self._members.create(
                CreateMemberDto(
                    household_id=invitation.household_id,
                    user_id=user_id,
                    role=invitation.role,
                    display_name=display_name or invitation.email.split("@")[0],
                    joined_at=utc_now_iso(),
                    invited_by=invitation.invited_by,
                )
            )

        return await run_with_compensation(
            step=lambda: self._invitations.accept(invitation_id),
            follow_up=join,
            rollback=lambda invitation: self._invitations.update(
                invitation.id, {"status": InvitationStatus.PENDING.value, "accepted_at": None}
            ),
            logger=self._logger,
            label="accept_invitation",
        )

    async def decline_invitation(self, invitation_id: str) -> ApiResponse[Invitation]:
        return await self._invitations.decline(invitation_id)
