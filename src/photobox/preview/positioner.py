"""Live preview positioner.

The preview is laid out in percentages of the rendered template box so it
tracks the slot whatever size the template is displayed at. The compositor
never reads these values; capture always works in raw pixel space.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..geometry import Slot


@dataclass(slots=True, frozen=True)
class PreviewBox:
    left: float
    top: float
    width: float
    height: float

    def as_css(self) -> dict[str, str]:
        return {
            "left": f"{self.left:g}%",
            "top": f"{self.top:g}%",
            "width": f"{self.width:g}%",
            "height": f"{self.height:g}%",
        }

    def to_pixels(self, rendered_size: tuple[float, float]) -> tuple[float, float, float, float]:
        """Resolve the box against a rendered template size (left, top, width, height)."""
        rendered_w, rendered_h = rendered_size
        return (
            self.left * rendered_w / 100,
            self.top * rendered_h / 100,
            self.width * rendered_w / 100,
            self.height * rendered_h / 100,
        )


FULL_BLEED = PreviewBox(left=0, top=0, width=100, height=100)


def compute_preview_box(slot: Slot | None, natural_size: tuple[int, int]) -> PreviewBox:
    """Map ``slot`` (template pixels) to percentages of the template's natural size."""
    image_w, image_h = natural_size
    if image_w <= 0 or image_h <= 0:
        raise ValueError(f"template natural size must be positive, got {image_w}x{image_h}")
    if slot is None:
        return FULL_BLEED
    return PreviewBox(
        left=slot.x / image_w * 100,
        top=slot.y / image_h * 100,
        width=slot.width / image_w * 100,
        height=slot.height / image_h * 100,
    )
