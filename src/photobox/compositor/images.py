"""Image decoding helpers.

Decoding always reads the full raster (``Image.load``) so callers never see a
lazily opened, partially decoded image.
"""

from __future__ import annotations

import asyncio
import io
from concurrent.futures import Executor

from PIL import Image, UnidentifiedImageError

from ..exceptions import CompositeError


def decode_image(data: bytes) -> Image.Image:
    """Decode ``data`` and force the pixel data into memory."""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise CompositeError(f"image could not be decoded: {exc}") from exc
    return image


async def load_image_async(data: bytes, executor: Executor | None = None) -> Image.Image:
    """Decode ``data`` in a worker thread and return the fully loaded image."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor, decode_image, data)
