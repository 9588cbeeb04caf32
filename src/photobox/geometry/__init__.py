"""Slot geometry: the photo rectangle in template pixel space."""

from .slot_config import clamp_slot, dump_slot_config, parse_slot_config, slot_config_payload
from .slot_models import LayoutType, Slot, SlotConfig

__all__ = [
    "LayoutType",
    "Slot",
    "SlotConfig",
    "clamp_slot",
    "dump_slot_config",
    "parse_slot_config",
    "slot_config_payload",
]
