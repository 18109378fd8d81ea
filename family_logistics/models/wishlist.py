"""
Wishlist Models.

``is_public`` is the legacy visibility flag.  It is still accepted on
create and is computed on read from ``visibility``.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from family_logistics.models.base import Entity
from family_logistics.models.enums import ItemPriority, WishlistVisibility


class Wishlist(Entity):
    user_id: Optional[str] = None
    member_id: Optional[str] = None
    household_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    visibility: WishlistVisibility = WishlistVisibility.PRIVATE
    is_public: bool = False
    share_slug: str = ""


class CreateWishlistDto(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    is_public: Optional[bool] = None
    visibility: Optional[WishlistVisibility] = None
    member_id: Optional[str] = None
    household_id: Optional[str] = None
    share_slug: Optional[str] = None


class UpdateWishlistDto(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    visibility: Optional[WishlistVisibility] = None


class WishlistItem(Entity):
    wishlist_id: str
    title: str
    description: Optional[str] = None
    link: Optional[str] = None
    price: Optional[float] = None
    currency: str = "EUR"
    image_url: Optional[str] = None
    priority: ItemPriority = ItemPriority.MEDIUM
    is_reserved: bool = False
    reserved_by_email: Optional[str] = None
    reserved_by_name: Optional[str] = None
    reserved_at: Optional[str] = None
    reservation_code: Optional[str] = None


class CreateWishlistItemDto(BaseModel):
    wishlist_id: str
    title: str = Field(min_length=1)
    description: Optional[str] = None
    link: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    currency: str = "EUR"
    image_url: Optional[str] = None
    priority: ItemPriority = ItemPriority.MEDIUM


class UpdateWishlistItemDto(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    link: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    currency: Optional[str] = None
    image_url: Optional[str] = None
    priority: Optional[ItemPriority] = None


class ReserveWishlistItemDto(BaseModel):
    is_reserved: bool
    reserved_by_email: Optional[str] = None
    reserved_by_name: Optional[str] = None
    reservation_code: Optional[str] = None
