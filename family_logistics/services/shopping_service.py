"""
Shopping Service.

Shopping lists and their items for a household.  ``get_household_summary``
feeds the dashboard tile: how many lists are active and how many of
their items are still to buy.
"""

from __future__ import annotations

from typing import Optional, TypedDict

from family_logistics.logger import StructuredLogger
from family_logistics.models.api import ApiResponse
from family_logistics.models.enums import ShoppingListStatus
from family_logistics.models.shopping import (
    CreateShoppingItemDto,
    CreateShoppingListDto,
    ShoppingItem,
    ShoppingList,
    UpdateShoppingItemDto,
    UpdateShoppingListDto,
)
from family_logistics.repositories.shopping_repository import (
    ShoppingItemRepository,
    ShoppingListRepository,
)
from family_logistics.services.base_service import BaseService


class ShoppingSummary(TypedDict):
    active_lists: int
    items_to_buy: int


class ShoppingService(BaseService):
    """Service layer for shopping lists and items."""

    def __init__(
        self,
        lists: ShoppingListRepository,
        items: ShoppingItemRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._lists = lists
        self._items = items

    # -- lists --------------------------------------------------------------

    async def get_lists(self, household_id: str) -> ApiResponse[list[ShoppingList]]:
        return await self._lists.find_by_household_id(household_id)

    async def get_list(self, list_id: str) -> ApiResponse[ShoppingList]:
        return await self._lists.find_by_id(list_id)

    async def create_list(self, dto: CreateShoppingListDto) -> ApiResponse[ShoppingList]:
        return await self._lists.create(dto)

    async def update_list(
        self, list_id: str, dto: UpdateShoppingListDto
    ) -> ApiResponse[ShoppingList]:
        return await self._lists.update(list_id, dto)

    async def archive_list(self, list_id: str) -> ApiResponse[ShoppingList]:
        return await self._lists.update(
            list_id, UpdateShoppingListDto(status=ShoppingListStatus.ARCHIVED)
        )

    async def delete_list(self, list_id: str) -> ApiResponse[None]:
        return await self._lists.delete(list_id)

    # -- items --------------------------------------------------------------

    async def get_items(self, list_id: str) -> ApiResponse[list[ShoppingItem]]:
        return await self._items.find_by_list_id(list_id)

    async def add_item(self, dto: CreateShoppingItemDto) -> ApiResponse[ShoppingItem]:
        return await self._items.create(dto)

    async def update_item(
        self, item_id: str, dto: UpdateShoppingItemDto
    ) -> ApiResponse[ShoppingItem]:
        return await self._items.update(item_id, dto)

    async def toggle_item_purchased(
        self, item_id: str, is_purchased: bool, user_id: Optional[str] = None
    ) -> ApiResponse[ShoppingItem]:
        return await self._items.toggle_purchased(item_id, is_purchased, user_id)

    async def delete_item(self, item_id: str) -> ApiResponse[None]:
        return await self._items.delete(item_id)

    async def get_household_summary(self, household_id: str) -> ApiResponse[ShoppingSummary]:
        """Count active lists and their unpurchased items."""
        lists = await self._lists.find_all(
            lambda q: q.eq("household_id", household_id).eq(
                "status", ShoppingListStatus.ACTIVE.value
            )
        )
        if lists.error is not None:
            return ApiResponse.failure(lists.error)

        active = lists.data or []
        items_to_buy = 0
        if active:
            list_ids = [shopping_list.id for shopping_list in active]
            items = await self._items.find_all(
                lambda q: q.in_("list_id", list_ids).eq("is_purchased", False)
            )
            if items.error is not None:
                return ApiResponse.failure(items.error)
            items_to_buy = len(items.data or [])

        return ApiResponse.success(
            ShoppingSummary(active_lists=len(active), items_to_buy=items_to_buy)
        )
