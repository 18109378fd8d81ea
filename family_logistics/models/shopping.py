"""Shopping list and shopping item models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from family_logistics.models.base import Entity
from family_logistics.models.enums import ShoppingListStatus


class ShoppingList(Entity):
    household_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    created_by: Optional[str] = None
    status: ShoppingListStatus = ShoppingListStatus.ACTIVE


class CreateShoppingListDto(BaseModel):
    household_id: str
    title: str = Field(min_length=1)
    description: Optional[str] = None
    status: ShoppingListStatus = ShoppingListStatus.ACTIVE


class UpdateShoppingListDto(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    status: Optional[ShoppingListStatus] = None


class ShoppingItem(Entity):
    list_id: str
    title: str
    quantity: int = 1
    category: str = "other"
    is_purchased: bool = False
    added_by: Optional[str] = None
    purchased_by: Optional[str] = None
    purchased_at: Optional[str] = None


class CreateShoppingItemDto(BaseModel):
    list_id: str
    title: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)
    category: str = "other"
    is_purchased: bool = False


class UpdateShoppingItemDto(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    quantity: Optional[int] = Field(default=None, ge=1)
    category: Optional[str] = None
    is_purchased: Optional[bool] = None
    purchased_by: Optional[str] = None
    purchased_at: Optional[str] = None
