"""Editable rectangle model.

The rectangle keeps its unscaled size and its scale factors apart, the way
canvas libraries do for objects with resize handles: handles change
``scale_x``/``scale_y`` and the origin, never ``width``/``height``. The slot
size is only materialised in :meth:`EditorRect.to_slot`.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum

from ..geometry import Slot

MIN_SCALED_SIZE = 1.0


class Handle(StrEnum):
    TOP_LEFT = "tl"
    TOP_RIGHT = "tr"
    BOTTOM_LEFT = "bl"
    BOTTOM_RIGHT = "br"
    MIDDLE_LEFT = "ml"
    MIDDLE_RIGHT = "mr"
    MIDDLE_TOP = "mt"
    MIDDLE_BOTTOM = "mb"

    @property
    def is_corner(self) -> bool:
        return self in _CORNERS


_CORNERS = {Handle.TOP_LEFT, Handle.TOP_RIGHT, Handle.BOTTOM_LEFT, Handle.BOTTOM_RIGHT}
_LEFT_EDGE = {Handle.TOP_LEFT, Handle.MIDDLE_LEFT, Handle.BOTTOM_LEFT}
_RIGHT_EDGE = {Handle.TOP_RIGHT, Handle.MIDDLE_RIGHT, Handle.BOTTOM_RIGHT}
_TOP_EDGE = {Handle.TOP_LEFT, Handle.MIDDLE_TOP, Handle.TOP_RIGHT}
_BOTTOM_EDGE = {Handle.BOTTOM_LEFT, Handle.MIDDLE_BOTTOM, Handle.BOTTOM_RIGHT}


@dataclass(slots=True)
class EditorRect:
    left: float
    top: float
    width: float
    height: float
    scale_x: float = 1.0
    scale_y: float = 1.0

    @classmethod
    def from_slot(cls, slot: Slot) -> "EditorRect":
        return cls(left=slot.x, top=slot.y, width=slot.width, height=slot.height)

    @property
    def scaled_width(self) -> float:
        return self.width * self.scale_x

    @property
    def scaled_height(self) -> float:
        return self.height * self.scale_y

    def to_slot(self) -> Slot:
        return Slot(
            x=self.left,
            y=self.top,
            width=self.width * self.scale_x,
            height=self.height * self.scale_y,
        )

    def copy(self) -> "EditorRect":
        return replace(self)

    def move_to(self, left: float, top: float) -> None:
        self.left = left
        self.top = top

    def move_by(self, dx: float, dy: float) -> None:
        self.left += dx
        self.top += dy

    def drag_handle(self, handle: Handle, dx: float, dy: float, *, uniform: bool | None = None) -> None:
        """Drag ``handle`` by ``(dx, dy)``; the opposite edge stays where it is.

        Corner handles scale both axes by the same factor unless ``uniform`` is
        ``False``. Side handles only ever scale their own axis.
        """
        handle = Handle(handle)
        if uniform is None:
            uniform = handle.is_corner

        old_w, old_h = self.scaled_width, self.scaled_height
        new_w, new_h = old_w, old_h
        if handle in _RIGHT_EDGE:
            new_w = old_w + dx
        elif handle in _LEFT_EDGE:
            new_w = old_w - dx
        if handle in _BOTTOM_EDGE:
            new_h = old_h + dy
        elif handle in _TOP_EDGE:
            new_h = old_h - dy

        if uniform and handle.is_corner:
            factor_w = new_w / old_w
            factor_h = new_h / old_h
            factor = factor_w if abs(factor_w - 1) >= abs(factor_h - 1) else factor_h
            factor = max(factor, MIN_SCALED_SIZE / old_w, MIN_SCALED_SIZE / old_h)
            new_w, new_h = old_w * factor, old_h * factor
        else:
            new_w = max(new_w, MIN_SCALED_SIZE)
            new_h = max(new_h, MIN_SCALED_SIZE)

        if handle in _LEFT_EDGE:
            self.left += old_w - new_w
        if handle in _TOP_EDGE:
            self.top += old_h - new_h
        self.scale_x = new_w / self.width
        self.scale_y = new_h / self.height


# Placed on a fresh image when the operator adds a slot
DEFAULT_RECT = EditorRect(left=50, top=50, width=200, height=200)
