"""Pydantic schemas for the template registry API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from ..geometry import LayoutType, slot_config_payload
from .templates_models import Template


class SlotPayload(BaseModel):
    x: int | float
    y: int | float
    width: int | float
    height: int | float


class SlotConfigPayload(BaseModel):
    slots: list[SlotPayload] = Field(default_factory=list)


class TemplateResponse(BaseModel):
    id: int
    name: str
    image_path: str
    layout_type: LayoutType
    config_json: SlotConfigPayload
    created_at: datetime | None
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, template: Template) -> "TemplateResponse":
        return cls(
            id=template.id,
            name=template.name,
            image_path=template.image_path,
            layout_type=template.layout_type,
            config_json=SlotConfigPayload.model_validate(slot_config_payload(template.config)),
            created_at=template.created_at,
            updated_at=template.updated_at,
        )


class TemplateCreatedResponse(BaseModel):
    message: str
    id: int
    image_path: str


class MessageResponse(BaseModel):
    message: str
