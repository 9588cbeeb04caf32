"""Percentage placement of the live camera preview over a rendered template."""

from .positioner import FULL_BLEED, PreviewBox, compute_preview_box

__all__ = ["FULL_BLEED", "PreviewBox", "compute_preview_box"]
