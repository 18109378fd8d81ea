"""Wishlist Service: personal wishlists, household sharing and public reservations."""

from __future__ import annotations

from family_logistics.logger import StructuredLogger
from family_logistics.models.api import ApiResponse
from family_logistics.models.wishlist import (
    CreateWishlistDto,
    CreateWishlistItemDto,
    ReserveWishlistItemDto,
    UpdateWishlistDto,
    UpdateWishlistItemDto,
    Wishlist,
    WishlistItem,
)
from family_logistics.repositories.wishlist_repository import (
    WishlistItemRepository,
    WishlistRepository,
)
from family_logistics.services.base_service import BaseService


class WishlistService(BaseService):
    def __init__(
        self,
        wishlists: WishlistRepository,
        items: WishlistItemRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._wishlists = wishlists
        self._items = items

    async def get_user_wishlists(self, user_id: str) -> ApiResponse[list[Wishlist]]:
        return await self._wishlists.find_by_user_id(user_id)

    async def get_household_wishlists(
        self, household_id: str, current_user_id: str
    ) -> ApiResponse[list[Wishlist]]:
        return await self._wishlists.find_by_household_id(household_id, current_user_id)

    async def get_wishlist(self, wishlist_id: str) -> ApiResponse[Wishlist]:
        return await self._wishlists.find_by_id(wishlist_id)

    async def get_public_wishlist(self, slug: str) -> ApiResponse[Wishlist]:
        return await self._wishlists.find_by_slug(slug)

    async def create_wishlist(self, dto: CreateWishlistDto) -> ApiResponse[Wishlist]:
        return await self._wishlists.create(dto)

    async def update_wishlist(
        self, wishlist_id: str, dto: UpdateWishlistDto
    ) -> ApiResponse[Wishlist]:
        return await self._wishlists.update(wishlist_id, dto)

    async def delete_wishlist(self, wishlist_id: str) -> ApiResponse[None]:
        return await self._wishlists.delete(wishlist_id)

    async def get_items(self, wishlist_id: str) -> ApiResponse[list[WishlistItem]]:
        return await self._items.find_by_wishlist_id(wishlist_id)

    async def add_item(self, dto: CreateWishlistItemDto) -> ApiResponse[WishlistItem]:
        return await self._items.create(dto)

    async def update_item(
        self, item_id: str, dto: UpdateWishlistItemDto
    ) -> ApiResponse[WishlistItem]:
        return await self._items.update(item_id, dto)

    async def delete_item(self, item_id: str) -> ApiResponse[None]:
        return await self._items.delete(item_id)

    async def reserve_item(
        self, item_id: str, dto: ReserveWishlistItemDto
    ) -> ApiResponse[WishlistItem]:
        result = await self._items.reserve_item(item_id, dto)
        if result.error is None:
            self._logger.info(
                "Wishlist item %s %s", item_id, "reserved" if dto.is_reserved else "released"
            )
        return result
