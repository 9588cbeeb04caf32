"""(De)serialization of ``config_json`` and slot bounds handling.

``parse_slot_config`` is the only place raw configuration (JSON text or an
already decoded mapping) becomes a :class:`SlotConfig`. Everything past that
boundary works with typed slots.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any

from ..exceptions import InvalidSlotConfigError
from .slot_models import Slot, SlotConfig

_SLOT_KEYS = ("x", "y", "width", "height")


def _coerce_number(value: Any, *, key: str, index: int) -> float:
    # bool is an int subclass; true/false in a slot is always a client bug
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidSlotConfigError(f"slots[{index}].{key} must be a number")
    if not math.isfinite(value):
        raise InvalidSlotConfigError(f"slots[{index}].{key} must be finite")
    return value


def _parse_slot(raw: Any, index: int) -> Slot:
    if not isinstance(raw, Mapping):
        raise InvalidSlotConfigError(f"slots[{index}] must be an object")
    missing = [key for key in _SLOT_KEYS if key not in raw]
    if missing:
        raise InvalidSlotConfigError(f"slots[{index}] is missing {', '.join(missing)}")
    return Slot(**{key: _coerce_number(raw[key], key=key, index=index) for key in _SLOT_KEYS})


def parse_slot_config(raw: str | bytes | Mapping[str, Any] | SlotConfig) -> SlotConfig:
    """Build a :class:`SlotConfig` from JSON text or a decoded mapping."""
    if isinstance(raw, SlotConfig):
        return raw
    if isinstance(raw, (str, bytes)):
        try:
            payload = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise InvalidSlotConfigError("config_json is not valid JSON") from exc
    else:
        payload = raw

    if not isinstance(payload, Mapping):
        raise InvalidSlotConfigError("config_json must be a JSON object")
    slots = payload.get("slots", [])
    if not isinstance(slots, list):
        raise InvalidSlotConfigError("config_json.slots must be an array")
    return SlotConfig(slots=[_parse_slot(item, index) for index, item in enumerate(slots)])


def _compact(value: float) -> int | float:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def slot_config_payload(config: SlotConfig) -> dict[str, list[dict[str, int | float]]]:
    """Return the JSON-ready mapping for ``config`` with integral values as ints."""
    return {
        "slots": [
            {key: _compact(value) for key, value in slot.as_dict().items()}
            for slot in config.slots
        ]
    }


def dump_slot_config(config: SlotConfig) -> str:
    """Serialize ``config`` into canonical JSON text.

    Integral floats are written as integers, so a configuration that is parsed
    and dumped again without edits produces the same bytes.
    """
    return json.dumps(slot_config_payload(config))


def clamp_slot(slot: Slot, image_size: tuple[int, int]) -> Slot | None:
    """Intersect ``slot`` with the image rectangle.

    Negative sizes are flipped into a regular rectangle first. Returns ``None``
    when the intersection has no area.
    """
    image_w, image_h = image_size
    left = min(slot.x, slot.x + slot.width)
    right = max(slot.x, slot.x + slot.width)
    top = min(slot.y, slot.y + slot.height)
    bottom = max(slot.y, slot.y + slot.height)

    left = max(0, left)
    top = max(0, top)
    right = min(image_w, right)
    bottom = min(image_h, bottom)
    if right <= left or bottom <= top:
        return None

    clamped = Slot(x=left, y=top, width=right - left, height=bottom - top)
    if clamped == slot:
        return slot
    return clamped
