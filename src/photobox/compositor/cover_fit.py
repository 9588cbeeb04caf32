"""Center-crop "cover" fit of a video frame onto a target rectangle."""

from __future__ import annotations

from dataclasses import dataclass

from ..exceptions import CompositeError


@dataclass(slots=True, frozen=True)
class CropBox:
    """Source crop in video pixels: origin ``(sx, sy)`` and size ``(sw, sh)``."""

    sx: float
    sy: float
    sw: float
    sh: float

    @property
    def box(self) -> tuple[float, float, float, float]:
        """Pillow style ``(left, upper, right, lower)``."""
        return (self.sx, self.sy, self.sx + self.sw, self.sy + self.sh)

    @property
    def ratio(self) -> float:
        return self.sw / self.sh


def cover_fit_crop(video_w: float, video_h: float, rect_w: float, rect_h: float) -> CropBox:
    """Return the largest centered crop of the video with the rectangle's aspect ratio.

    When the rectangle is wider than the video the full width is kept and the
    height is trimmed evenly top and bottom, otherwise the full height is kept
    and the sides are trimmed.
    """
    if video_w <= 0 or video_h <= 0:
        raise CompositeError(f"video size must be positive, got {video_w}x{video_h}")
    if rect_w <= 0 or rect_h <= 0:
        raise CompositeError(f"slot size must be positive, got {rect_w}x{rect_h}")

    video_ratio = video_w / video_h
    rect_ratio = rect_w / rect_h

    if rect_ratio > video_ratio:
        sw = video_w
        sh = sw / rect_ratio
        sx = 0
        sy = (video_h - sh) / 2
    else:
        sh = video_h
        sw = sh * rect_ratio
        sy = 0
        sx = (video_w - sw) / 2
    return CropBox(sx=sx, sy=sy, sw=sw, sh=sh)
