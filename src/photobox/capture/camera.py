"""Camera access.

``CameraSource.open`` is the permission/acquisition step and may take a while;
the returned ``CameraStream`` owns the device until ``stop`` is called. Frames
are raw sensor orientation; mirroring is the compositor's job.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

import cv2
import structlog
from PIL import Image

from ..exceptions import CameraUnavailableError

logger = structlog.get_logger(__name__)


class CameraStream(Protocol):
    @property
    def natural_size(self) -> tuple[int, int]: ...

    @property
    def active(self) -> bool: ...

    async def read_frame(self) -> Image.Image: ...

    def stop(self) -> None: ...


class CameraSource(Protocol):
    async def open(self) -> CameraStream: ...


class OpenCVCameraStream:
    """Stream backed by an opened ``cv2.VideoCapture``."""

    def __init__(self, capture: cv2.VideoCapture) -> None:
        self._capture = capture
        self._active = True

    @property
    def natural_size(self) -> tuple[int, int]:
        return (
            int(self._capture.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(self._capture.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )

    @property
    def active(self) -> bool:
        return self._active

    async def read_frame(self) -> Image.Image:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._read)

    def _read(self) -> Image.Image:
        if not self._active:
            raise CameraUnavailableError("camera stream has been stopped")
        ok, frame = self._capture.read()
        if not ok or frame is None:
            raise CameraUnavailableError("camera returned no frame")
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        return Image.fromarray(rgb)

    def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        self._capture.release()
        logger.info("camera.released")


class OpenCVCamera:
    """Local webcam via OpenCV."""

    def __init__(self, index: int = 0, *, width: int = 1280, height: int = 720) -> None:
        self.index = index
        self.width = width
        self.height = height

    async def open(self) -> OpenCVCameraStream:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._open_device)

    def _open_device(self) -> OpenCVCameraStream:
        capture = cv2.VideoCapture(self.index)
        if not capture.isOpened():
            capture.release()
            logger.warning("camera.open_failed", index=self.index)
            raise CameraUnavailableError(f"could not open camera {self.index}")
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.height)
        if hasattr(cv2, "CAP_PROP_BUFFERSIZE"):
            capture.set(cv2.CAP_PROP_BUFFERSIZE, 1)
        stream = OpenCVCameraStream(capture)
        logger.info("camera.opened", index=self.index, size=stream.natural_size)
        return stream
