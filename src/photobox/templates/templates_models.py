"""Template domain dataclass and registry failure reasons."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from ..geometry import LayoutType, SlotConfig


class FailureReason(StrEnum):
    """Failure reasons returned in registry error payloads."""

    INVALID_REQUEST = "invalid_request"
    INVALID_CONFIG = "invalid_config"
    FILE_REQUIRED = "file_required"
    TEMPLATE_NOT_FOUND = "template_not_found"
    TEMPLATE_IMAGE_NOT_FOUND = "template_image_not_found"
    SLOT_MISSING = "slot_missing"
    COMPOSITE_FAILED = "composite_failed"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"
    INTERNAL_ERROR = "internal_error"


@dataclass(slots=True)
class Template:
    id: int
    name: str
    image_path: str
    layout_type: LayoutType = LayoutType.SINGLE
    config: SlotConfig = field(default_factory=SlotConfig)
    created_at: datetime | None = None
    updated_at: datetime | None = None
