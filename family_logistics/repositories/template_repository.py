"""Packing template repositories."""

from __future__ import annotations

from family_logistics.logger import StructuredLogger
from family_logistics.models.api import ApiResponse
from family_logistics.models.template import PackingTemplate, PackingTemplateItem
from family_logistics.models.trip import CreatePackingItemDto, PackingItem
from family_logistics.repositories.interface import Repository
from family_logistics.repositories.table_repository import TableRepository
from family_logistics.repositories.trip_repository import PackingItemRepository


class TemplateItemRepository(TableRepository[PackingTemplateItem]):
    TABLE = "packing_template_items"

    async def find_by_template_id(
        self, template_id: str
    ) -> ApiResponse[list[PackingTemplateItem]]:
        return await self.find_all(
            lambda q: q.eq("template_id", template_id).order("title")
        )

    async def delete_by_template_id(self, template_id: str) -> ApiResponse[None]:
        """Remove every item of a template, stopping at the first failure."""
        items = await self.find_by_template_id(template_id)
        if items.error is not None:
            return ApiResponse.failure(items.error)
        for item in items.data or []:
            deleted = await self.delete(item.id)
            if deleted.error is not None:
                return deleted
        return ApiResponse.success(None)


class TemplateRepository(TableRepository[PackingTemplate]):
    """Reusable packing lists owned by a user."""

    TABLE = "packing_templates"
    OWNER_FIELD = "created_by"

    def __init__(
        self,
        engine: Repository[PackingTemplate],
        items: TemplateItemRepository,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(engine, logger)
        self._items = items

    @property
    def items(self) -> TemplateItemRepository:
        return self._items

    async def find_by_user_id(self, user_id: str) -> ApiResponse[list[PackingTemplate]]:
        return await self.find_all(lambda q: q.eq("created_by", user_id).order("name"))

    async def apply_to_trip(
        self,
        template_id: str,
        trip_id: str,
        packing_items: PackingItemRepository,
    ) -> ApiResponse[list[PackingItem]]:
        """Copy a template's items onto a trip's packing list in one write."""
        items = await self._items.find_by_template_id(template_id)
        if items.error is not None:
            return ApiResponse.failure(items.error)
        if not items.data:
            return ApiResponse.success([])
        return await packing_items.create_many(
            [
                CreatePackingItemDto(trip_id=trip_id, title=item.title, category=item.category)
                for item in items.data
            ]
        )

    async def delete(self, record_id: str) -> ApiResponse[None]:
        """Delete a template together with its items."""
        cleared = await self._items.delete_by_template_id(record_id)
        if cleared.error is not None:
            return cleared
        return await super().delete(record_id)
