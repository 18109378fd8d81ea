"""
Shopping Repositories.

Lists belong to a household; items belong to a list.  The engines for
both tables are built with an owner column (``created_by`` and
``added_by``), so ``create`` needs a signed-in user and fails with the
auth error before anything is written when there is none.
"""

from __future__ import annotations

from typing import Optional

from family_logistics.models.api import ApiResponse
from family_logistics.models.shopping import (
    ShoppingItem,
    ShoppingList,
    UpdateShoppingItemDto,
)
from family_logistics.repositories.table_repository import TableRepository
from family_logistics.utils.timestamps import utc_now_iso


class ShoppingListRepository(TableRepository[ShoppingList]):
    """Data access layer for shopping lists."""

    TABLE = "shopping_lists"
    OWNER_FIELD = "created_by"

    async def find_by_household_id(
        self, household_id: str
    ) -> ApiResponse[list[ShoppingList]]:
        """Lists of a household, newest first."""
        return await self.find_all(
            lambda q: q.eq("household_id", household_id).order("created_at", desc=True)
        )


class ShoppingItemRepository(TableRepository[ShoppingItem]):
    """Data access layer for shopping items."""

    TABLE = "shopping_items"
    OWNER_FIELD = "added_by"

    async def find_by_list_id(self, list_id: str) -> ApiResponse[list[ShoppingItem]]:
        """Items of a list, oldest first."""
        return await self.find_all(
            lambda q: q.eq("list_id", list_id).order("created_at")
        )

    async def toggle_purchased(
        self, item_id: str, is_purchased: bool, user_id: Optional[str] = None
    ) -> ApiResponse[ShoppingItem]:
        """Mark an item bought (recording who and when) or back to open."""
        if is_purchased:
            changes = UpdateShoppingItemDto(
                is_purchased=True, purchased_by=user_id, purchased_at=utc_now_iso()
            )
        else:
            changes = UpdateShoppingItemDto(
                is_purchased=False, purchased_by=None, purchased_at=None
            )
        return await self.update(item_id, changes)
