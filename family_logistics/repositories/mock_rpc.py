"""
Local Procedures.

Python stand-ins for the database functions the live backend exposes
through ``rpc``.  They run against the same local engines the domain
repositories use, so a repository calling ``rpc`` behaves the same in
mock mode.  A procedure reports failure by raising :class:`RpcError`;
the engine converts it to an ``ApiError``.
"""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING, Any, Optional

from family_logistics.logger import StructuredLogger
from family_logistics.models.enums import MemberRole
from family_logistics.models.household import Household, Member
from family_logistics.models.wishlist import WishlistItem
from family_logistics.repositories.compensation import run_with_compensation
from family_logistics.repositories.errors import AUTH_REQUIRED
from family_logistics.repositories.mock_repository import (
    MockRepository,
    MockRpcRegistry,
    RpcError,
)
from family_logistics.utils.string_helpers import generate_share_slug, slugify
from family_logistics.utils.timestamps import utc_now_iso

if TYPE_CHECKING:
    from family_logistics.auth import AuthUser, MockAuthStore


async def _require_user(auth: "MockAuthStore") -> "AuthUser":
    current = await auth.get_current_user()
    if current.error is not None or current.data is None:
        raise RpcError("Authentication required", code=AUTH_REQUIRED)
    return current.data


def register_mock_procedures(
    registry: MockRpcRegistry,
    *,
    auth: "MockAuthStore",
    households: MockRepository[Household],
    members: MockRepository[Member],
    wishlist_items: MockRepository[WishlistItem],
    logger: StructuredLogger,
) -> MockRpcRegistry:
    """Register every local procedure on *registry* and return it."""

    async def get_user_id_by_email(params: dict[str, Any]) -> Optional[str]:
        await _require_user(auth)
        return await auth.find_user_id_by_email(str(params.get("lookup_email") or ""))

    async def get_email_by_user_id(params: dict[str, Any]) -> Optional[str]:
        return await auth.find_email_by_user_id(str(params.get("lookup_user_id") or ""))

    async def create_household_with_owner(params: dict[str, Any]) -> dict[str, Any]:
        user = await _require_user(auth)
        name = str(params.get("p_name") or "").strip()
        if not name:
            raise RpcError("Household name is required", code="22023")
        display_name = params.get("p_creator_display_name") or user.email.split("@")[0]
        slug = f"{slugify(name) or 'household'}-{generate_share_slug(6)}"

        async def add_owner(household: Household):
            return await members.create(
                {
                    "household_id": household.id,
                    "user_id": user.id,
                    "role": MemberRole.OWNER.value,
                    "display_name": display_name,
                    "is_active": True,
                    "joined_at": utc_now_iso(),
                }
            )

        created = await run_with_compensation(
            step=lambda: households.create(
                {"name": name, "slug": slug, "created_by": user.id}
            ),
            follow_up=add_owner,
            rollback=lambda household: households.delete(household.id),
            logger=logger,
            label="create_household_with_owner",
        )
        if created.error is not None:
            raise RpcError.from_api_error(created.error)
        if created.data is None:
            raise RpcError("Failed to create household")

        owner = await members.find_all(
            lambda q: q.eq("household_id", created.data.id).eq("user_id", user.id).limit(1)
        )
        member_id = owner.data[0].id if owner.data else None
        return {
            "household_id": created.data.id,
            "member_id": member_id,
            "household_name": created.data.name,
            "slug": created.data.slug,
        }

    async def reserve_wishlist_item(params: dict[str, Any]) -> dict[str, Any]:
        item_id = str(params.get("p_item_id") or "")
        current = await wishlist_items.find_by_id(item_id)
        if current.error is not None:
            raise RpcError.from_api_error(current.error)

        existing_code = current.data.reservation_code if current.data else None
        if params.get("p_reserved"):
            code = params.get("p_code") or f"{secrets.randbelow(10_000):04d}"
            changes: dict[str, Any] = {
                "is_reserved": True,
                "reserved_by_email": params.get("p_email"),
                "reserved_by_name": params.get("p_name"),
                "reserved_at": utc_now_iso(),
                "reservation_code": code,
            }
        else:
            if existing_code and params.get("p_code") != existing_code:
                raise RpcError("Invalid reservation code", code="P0001")
            code = None
            changes = {
                "is_reserved": False,
                "reserved_by_email": None,
                "reserved_by_name": None,
                "reserved_at": None,
                "reservation_code": None,
            }

        updated = await wishlist_items.update(item_id, changes)
        if updated.error is not None:
            raise RpcError.from_api_error(updated.error)
        return {"reservation_code": code}

    registry.register("get_user_id_by_email", get_user_id_by_email)
    registry.register("get_email_by_user_id", get_email_by_user_id)
    registry.register("create_household_with_owner", create_household_with_owner)
    registry.register("reserve_wishlist_item", reserve_wishlist_item)
    return registry
