"""
Household Models.

A household is the multi-tenant root: members, shopping lists and
wishlists all hang off a ``household_id``.  Members without an account
(children) have ``user_id = None``.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from family_logistics.models.base import Entity
from family_logistics.models.enums import InvitationStatus, MemberRole


class Household(Entity):
    name: str
    slug: str = ""
    created_by: Optional[str] = None
    is_active: bool = True
    settings: dict[str, Any] = Field(default_factory=dict)


class CreateHouseholdDto(BaseModel):
    name: str = Field(min_length=1)
    slug: Optional[str] = None
    created_by: Optional[str] = None


class UpdateHouseholdDto(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    settings: Optional[dict[str, Any]] = None
    is_active: Optional[bool] = None


class Member(Entity):
    household_id: str
    user_id: Optional[str] = None
    role: MemberRole = MemberRole.MEMBER
    display_name: str = ""
    date_of_birth: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool = True
    joined_at: Optional[str] = None
    invited_by: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    # Populated on read, not a column.
    email: Optional[str] = None


class CreateMemberDto(BaseModel):
    household_id: str
    role: MemberRole
    display_name: str = ""
    user_id: Optional[str] = None
    date_of_birth: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool = True
    joined_at: Optional[str] = None
    invited_by: Optional[str] = None


class UpdateMemberDto(BaseModel):
    role: Optional[MemberRole] = None
    display_name: Optional[str] = None
    date_of_birth: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: Optional[bool] = None
    metadata: Optional[dict[str, Any]] = None


class Invitation(Entity):
    household_id: str
    email: str
    role: MemberRole = MemberRole.MEMBER
    invited_by: Optional[str] = None
    status: InvitationStatus = InvitationStatus.PENDING
    token: str = ""
    expires_at: Optional[str] = None
    accepted_at: Optional[str] = None


class CreateInvitationDto(BaseModel):
    household_id: str
    email: str
    role: MemberRole = MemberRole.MEMBER
    invited_by: Optional[str] = None
    status: InvitationStatus = InvitationStatus.PENDING
    token: str
    expires_at: str


class UpdateInvitationDto(BaseModel):
    status: Optional[InvitationStatus] = None
    accepted_at: Optional[str] = None
