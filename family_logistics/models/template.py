"""Reusable packing templates."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from family_logistics.models.base import Entity


class PackingTemplate(Entity):
    name: str
    description: Optional[str] = None
    created_by: Optional[str] = None


class CreatePackingTemplateDto(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None


class PackingTemplateItem(Entity):
    template_id: str
    title: str
    category: str = "custom"


class CreatePackingTemplateItemDto(BaseModel):
    template_id: str
    title: str = Field(min_length=1)
    category: str = "custom"
