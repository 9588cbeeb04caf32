"""Cover-fit compositing of a camera frame into a template slot."""

from .compositor import composite_frame, composite_when_ready, export_png
from .cover_fit import CropBox, cover_fit_crop
from .images import decode_image, load_image_async

__all__ = [
    "CropBox",
    "composite_frame",
    "composite_when_ready",
    "cover_fit_crop",
    "decode_image",
    "export_png",
    "load_image_async",
]
