"""
Wishlist Repositories.

Wishlists are owned by a user and scoped to the household of that
user's first active membership.  Public wishlists are reachable by
their share slug without signing in, and anyone holding the link may
reserve an item through ``reserve_wishlist_item``.
"""

from __future__ import annotations

from typing import Optional

from family_logistics.logger import StructuredLogger
from family_logistics.models.api import ApiError, ApiResponse
from family_logistics.models.enums import WishlistVisibility
from family_logistics.models.household import Member
from family_logistics.models.wishlist import (
    CreateWishlistDto,
    ReserveWishlistItemDto,
    Wishlist,
    WishlistItem,
)
from family_logistics.repositories.errors import NOT_FOUND, auth_required_error
from family_logistics.repositories.interface import Payload, Repository
from family_logistics.repositories.table_repository import TableRepository
from family_logistics.utils.string_helpers import generate_share_slug


def _with_is_public(wishlist: Wishlist) -> Wishlist:
    return wishlist.model_copy(
        update={"is_public": wishlist.visibility == WishlistVisibility.PUBLIC}
    )


def _one_with_is_public(response: ApiResponse[Wishlist]) -> ApiResponse[Wishlist]:
    if response.data is None:
        return response
    return ApiResponse.success(_with_is_public(response.data))


def _list_with_is_public(
    response: ApiResponse[list[Wishlist]],
) -> ApiResponse[list[Wishlist]]:
    if response.error is not None or response.data is None:
        return response
    return ApiResponse.success([_with_is_public(w) for w in response.data])


class WishlistRepository(TableRepository[Wishlist]):
    """Data access layer for wishlists."""

    TABLE = "wishlists"

    def __init__(
        self,
        engine: Repository[Wishlist],
        members: Repository[Member],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(engine, logger)
        self._members = members

    async def find_by_id(self, record_id: str) -> ApiResponse[Wishlist]:
        return _one_with_is_public(await super().find_by_id(record_id))

    async def update(self, record_id: str, dto: Payload) -> ApiResponse[Wishlist]:
        return _one_with_is_public(await super().update(record_id, dto))

    async def upsert(self, dto: Payload) -> ApiResponse[Wishlist]:
        return _one_with_is_public(await super().upsert(dto))

    async def find_by_user_id(self, user_id: str) -> ApiResponse[list[Wishlist]]:
        """The user's wishlists, newest first."""
        return _list_with_is_public(
            await self.find_all(
                lambda q: q.eq("user_id", user_id).order("created_at", desc=True)
            )
        )

    async def find_by_household_id(
        self, household_id: str, exclude_user_id: str
    ) -> ApiResponse[list[Wishlist]]:
        """Wishlists other household members share with the household."""
        visible = [WishlistVisibility.HOUSEHOLD.value, WishlistVisibility.PUBLIC.value]
        return _list_with_is_public(
            await self.find_all(
                lambda q: q.eq("household_id", household_id)
                .neq("user_id", exclude_user_id)
                .in_("visibility", visible)
                .order("created_at", desc=True)
            )
        )

    async def find_by_slug(self, slug: str) -> ApiResponse[Wishlist]:
        """Public wishlist behind a share link."""
        found = await self.find_all(
            lambda q: q.eq("share_slug", slug)
            .eq("visibility", WishlistVisibility.PUBLIC.value)
            .limit(1)
        )
        if found.error is not None:
            return ApiResponse.failure(found.error)
        if not found.data:
            return ApiResponse.failure(ApiError(message="Wishlist not found", code=NOT_FOUND))
        return ApiResponse.success(_with_is_public(found.data[0]))

    async def _first_membership(self, user_id: str) -> ApiResponse[list[Member]]:
        return await self._members.find_all(
            lambda q: q.eq("user_id", user_id)
            .eq("is_active", True)
            .order("joined_at")
            .limit(1)
        )

    async def create(self, dto: Payload) -> ApiResponse[Wishlist]:
        """Create a wishlist owned by the signed-in user.

        ``member_id``/``household_id`` default to the user's first active
        membership; a user without one cannot create wishlists.  The
        legacy ``is_public`` flag only matters when ``visibility`` is
        not given.
        """
        if not isinstance(dto, CreateWishlistDto):
            dto = CreateWishlistDto.model_validate(dto)
        identity = await self.get_authenticated_user_id()
        if identity.error is not None or not identity.data:
            return ApiResponse.failure(identity.error or auth_required_error())
        user_id = identity.data

        member_id: Optional[str] = dto.member_id
        household_id: Optional[str] = dto.household_id
        if not member_id or not household_id:
            membership = await self._first_membership(user_id)
            if membership.error is not None or not membership.data:
                error = membership.error
                return ApiResponse.failure(
                    ApiError(
                        message="User must belong to a household to create wishlists",
                        code=error.code if error else None,
                        details=error.details if error else None,
                    )
                )
            member_id = membership.data[0].id
            household_id = membership.data[0].household_id

        visibility = dto.visibility or (
            WishlistVisibility.PUBLIC if dto.is_public else WishlistVisibility.PRIVATE
        )
        payload = dto.model_dump(mode="json", exclude_none=True, exclude={"is_public"})
        payload.update(
            user_id=user_id,
            member_id=member_id,
            household_id=household_id,
            visibility=visibility.value,
            share_slug=dto.share_slug or generate_share_slug(),
        )

        return _one_with_is_public(await super().create(payload))


class WishlistItemRepository(TableRepository[WishlistItem]):
    """Data access layer for wishlist items."""

    TABLE = "wishlist_items"

    async def find_by_wishlist_id(self, wishlist_id: str) -> ApiResponse[list[WishlistItem]]:
        return await self.find_all(
            lambda q: q.eq("wishlist_id", wishlist_id).order("created_at")
        )

    async def reserve_item(
        self, item_id: str, dto: ReserveWishlistItemDto
    ) -> ApiResponse[WishlistItem]:
        """Reserve or release an item; no sign-in required.

        Releasing a reserved item needs its reservation code.  The
        returned item carries the code handed out when reserving.
        """
        reserved = await self.rpc(
            "reserve_wishlist_item",
            {
                "p_item_id": item_id,
                "p_reserved": dto.is_reserved,
                "p_email": dto.reserved_by_email or None,
                "p_name": dto.reserved_by_name or None,
                "p_code": dto.reservation_code or None,
            },
        )
        if reserved.error is not None:
            return ApiResponse.failure(reserved.error)

        item = await self.find_by_id(item_id)
        if item.error is not None or item.data is None:
            return item

        code = None
        if isinstance(reserved.data, dict) and reserved.data.get("reservation_code"):
            code = str(reserved.data["reservation_code"])
        return ApiResponse.success(
            item.data.model_copy(
                update={"reservation_code": code or item.data.reservation_code}
            )
        )
