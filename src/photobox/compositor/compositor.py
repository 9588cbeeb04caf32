"""Compose the final booth picture.

The output canvas has the template's natural size. The camera frame is
cover-cropped into the slot, mirrored to match the mirrored live preview, and
the template is laid over it so only its transparent areas show the photo.
"""

from __future__ import annotations

import asyncio
import io
from collections.abc import Awaitable
from concurrent.futures import Executor

import structlog
from PIL import Image, ImageOps

from ..exceptions import CompositeError
from ..geometry import Slot, clamp_slot
from .cover_fit import cover_fit_crop

logger = structlog.get_logger(__name__)


def composite_frame(
    template: Image.Image | None,
    frame: Image.Image | None,
    slot: Slot | None,
) -> Image.Image:
    """Return an RGBA composite of ``frame`` in ``slot`` under ``template``."""
    if template is None:
        raise CompositeError("template image is not loaded")
    if frame is None:
        raise CompositeError("camera frame is not available")
    if slot is None:
        raise CompositeError("template has no slot defined")

    size = template.size
    target = clamp_slot(slot, size)
    if target is None:
        raise CompositeError("slot does not overlap the template image")
    if target != slot:
        logger.warning(
            "compositor.slot_clamped",
            slot=slot.as_dict(),
            clamped=target.as_dict(),
            template_size=size,
        )

    left, top = round(target.x), round(target.y)
    dest_w = round(target.right) - left
    dest_h = round(target.bottom) - top
    if dest_w <= 0 or dest_h <= 0:
        raise CompositeError("slot is smaller than one pixel")

    crop = cover_fit_crop(frame.width, frame.height, target.width, target.height)
    photo = frame.convert("RGB").resize(
        (dest_w, dest_h), Image.Resampling.LANCZOS, box=crop.box
    )
    photo = ImageOps.mirror(photo)

    canvas = Image.new("RGBA", size, (0, 0, 0, 0))
    canvas.paste(photo, (left, top))
    canvas.alpha_composite(template.convert("RGBA"))
    return canvas


def export_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def _render_png(template: Image.Image, frame: Image.Image, slot: Slot | None) -> bytes:
    return export_png(composite_frame(template, frame, slot))


async def composite_when_ready(
    template_ready: Awaitable[Image.Image],
    frame_ready: Awaitable[Image.Image],
    slot: Slot | None,
    *,
    executor: Executor | None = None,
) -> bytes:
    """Wait until both images are fully decoded, then composite off the event loop."""
    template, frame = await asyncio.gather(template_ready, frame_ready)
    loop = asyncio.get_running_loop()
    png = await loop.run_in_executor(executor, _render_png, template, frame, slot)
    logger.info("compositor.rendered", template_size=template.size, frame_size=frame.size, bytes=len(png))
    return png
