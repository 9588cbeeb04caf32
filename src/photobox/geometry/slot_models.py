"""Slot domain dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class LayoutType(StrEnum):
    """Layouts a template can declare. Only the first slot is ever used."""

    SINGLE = "single"
    STRIP_3 = "strip_3"
    GRID_4 = "grid_4"


@dataclass(slots=True, frozen=True)
class Slot:
    """Rectangle in the pixel space of the full-resolution template image."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def validate_within(self, image_size: tuple[int, int]) -> bool:
        """Return ``True`` when the slot has area and lies fully inside the image."""
        image_w, image_h = image_size
        return (
            self.width > 0
            and self.height > 0
            and self.x >= 0
            and self.y >= 0
            and self.right <= image_w
            and self.bottom <= image_h
        )

    def as_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(slots=True)
class SlotConfig:
    slots: list[Slot] = field(default_factory=list)

    @property
    def primary(self) -> Slot | None:
        """The slot used by capture and compositing; the rest are inert."""
        return self.slots[0] if self.slots else None

    @classmethod
    def single(cls, slot: Slot) -> "SlotConfig":
        return cls(slots=[slot])
