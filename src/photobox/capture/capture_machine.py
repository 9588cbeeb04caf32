"""Capture state machine.

    BROWSING -> PREVIEWING -> CAPTURED -> DOWNLOADED
                    ^            |  |         |
                    +-- retake --+  +-- back -+--> BROWSING

Only one camera stream is held at a time and every move out of PREVIEWING or
CAPTURED stops it first. Acquisition is tracked by a generation counter: a
stream that arrives after the user navigated away is stopped, never attached.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from enum import StrEnum
from pathlib import Path

import structlog
from PIL import Image

from ..compositor import composite_when_ready
from ..exceptions import CameraUnavailableError, CompositeError, InvalidTransitionError
from ..preview import PreviewBox, compute_preview_box
from ..templates.templates_models import Template
from .camera import CameraSource, CameraStream

logger = structlog.get_logger(__name__)

ImageLoader = Callable[[Template], Awaitable[Image.Image]]


class CaptureState(StrEnum):
    BROWSING = "browsing"
    PREVIEWING = "previewing"
    CAPTURED = "captured"
    DOWNLOADED = "downloaded"


_HAS_RESULT = {CaptureState.CAPTURED, CaptureState.DOWNLOADED}


class CaptureSession:
    """Drive one booth screen: pick a frame, preview, capture, download."""

    def __init__(
        self,
        camera: CameraSource,
        image_loader: ImageLoader,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._camera = camera
        self._image_loader = image_loader
        self._clock = clock
        self.state = CaptureState.BROWSING
        self.template: Template | None = None
        self.result: bytes | None = None
        self.last_error: Exception | None = None
        self._stream: CameraStream | None = None
        self._generation = 0
        self._acquiring = False

    @property
    def stream(self) -> CameraStream | None:
        return self._stream

    @property
    def acquiring(self) -> bool:
        return self._acquiring

    async def select_template(self, template: Template) -> bool:
        """Start the camera for ``template``.

        Returns ``False`` when the user navigated away before the camera was
        granted. Raises :class:`CameraUnavailableError` (state stays BROWSING)
        when the camera cannot be acquired.
        """
        self._require(CaptureState.BROWSING)
        if self._acquiring:
            raise InvalidTransitionError("a camera request is already pending")
        self.template = template
        self.last_error = None
        logger.info("capture.template_selected", template_id=template.id)
        attached = await self._start_camera()
        if attached:
            self.state = CaptureState.PREVIEWING
        return attached

    def preview_box(self, natural_size: tuple[int, int]) -> PreviewBox:
        """Where the live video goes over the rendered template, in percent."""
        slot = self.template.config.primary if self.template is not None else None
        return compute_preview_box(slot, natural_size)

    async def capture(self) -> bytes:
        """Composite the current camera frame into the slot and stop the camera."""
        self._require(CaptureState.PREVIEWING)
        template = self.template
        stream = self._stream
        slot = template.config.primary if template is not None else None
        if template is None or stream is None:
            raise CompositeError("no template or camera stream to capture from")
        if slot is None:
            raise CompositeError(f"template {template.id} has no slot defined")

        generation = self._generation
        png = await composite_when_ready(self._image_loader(template), stream.read_frame(), slot)
        if generation != self._generation:
            logger.info("capture.result_discarded", template_id=template.id)
            raise InvalidTransitionError("capture was cancelled")

        self._stop_camera()
        self.result = png
        self.state = CaptureState.CAPTURED
        logger.info("capture.captured", template_id=template.id, bytes=len(png))
        return png

    async def retake(self) -> bool:
        self._require(*_HAS_RESULT)
        self.result = None
        attached = await self._start_camera()
        if attached:
            self.state = CaptureState.PREVIEWING
        return attached

    def download(self, directory: Path) -> Path:
        """Write the composite as ``photobox-<epoch-ms>.png`` under ``directory``."""
        self._require(*_HAS_RESULT)
        if self.result is None:
            raise InvalidTransitionError("no composite to download")
        directory.mkdir(parents=True, exist_ok=True)
        target = directory / f"photobox-{int(self._clock() * 1000)}.png"
        target.write_bytes(self.result)
        self.state = CaptureState.DOWNLOADED
        logger.info("capture.downloaded", path=str(target))
        return target

    def back(self) -> None:
        """Leave to the gallery from any state, releasing the camera."""
        self._generation += 1
        self._acquiring = False
        self._stop_camera()
        self._reset()

    async def _start_camera(self) -> bool:
        self._stop_camera()
        self._generation += 1
        generation = self._generation
        self._acquiring = True
        try:
            stream = await self._camera.open()
        except CameraUnavailableError as exc:
            if generation == self._generation:
                self._acquiring = False
                self._reset()
                self.last_error = exc
                logger.warning("capture.camera_denied", error=str(exc))
            raise

        if generation != self._generation:
            stream.stop()
            logger.info("capture.late_stream_stopped")
            return False

        self._acquiring = False
        self._stream = stream
        return True

    def _stop_camera(self) -> None:
        if self._stream is not None:
            self._stream.stop()
            self._stream = None

    def _reset(self) -> None:
        self.state = CaptureState.BROWSING
        self.template = None
        self.result = None

    def _require(self, *states: CaptureState) -> None:
        if self.state not in states:
            allowed = ", ".join(state.value for state in states)
            raise InvalidTransitionError(f"cannot do that while {self.state.value} (needs {allowed})")
