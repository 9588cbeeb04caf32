"""Slot editor: one editing surface, one photo slot.

The surface is the template image at its natural pixel size, so rectangle
coordinates are template pixels with no display scaling to undo. The editor is
a scoped resource; use :func:`editor_session` so it is always disposed.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import structlog
from PIL import Image

from ..client import RegistryClient, TemplateSubmission
from ..compositor import decode_image, load_image_async
from ..exceptions import EditorDisposedError, EditorValidationError
from ..geometry import LayoutType, Slot, SlotConfig, clamp_slot
from ..templates.templates_models import Template
from .editor_models import DEFAULT_RECT, EditorRect, Handle

logger = structlog.get_logger(__name__)


class SlotEditor:
    """Hold the surface image, template name and the in-progress slot rectangle."""

    def __init__(self, *, template_id: int | None = None) -> None:
        self.template_id = template_id
        self.name = ""
        self._image: Image.Image | None = None
        self._file: bytes | None = None
        self._filename = "template.png"
        self._rect: EditorRect | None = None
        self._disposed = False

    @property
    def is_edit(self) -> bool:
        return self.template_id is not None

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def surface_size(self) -> tuple[int, int] | None:
        self._ensure_open()
        return self._image.size if self._image is not None else None

    @property
    def rect(self) -> EditorRect | None:
        self._ensure_open()
        return self._rect

    @property
    def has_new_file(self) -> bool:
        return self._file is not None

    def load_image(self, data: bytes, *, filename: str = "template.png") -> tuple[int, int]:
        """Use a newly chosen file as the surface.

        An existing slot is kept; a new template gets the default slot.
        """
        self._ensure_open()
        image = decode_image(data)
        self._replace_image(image)
        self._file = data
        self._filename = filename
        if not self.is_edit and self._rect is None:
            self._rect = DEFAULT_RECT.copy()
        logger.info("editor.image_loaded", size=image.size, filename=filename)
        return image.size

    def load_template(self, template: Template, image: Image.Image) -> None:
        """Pre-populate the editor from a stored template and its decoded artwork."""
        self._ensure_open()
        self.template_id = template.id
        self.name = template.name
        self._replace_image(image)
        self._file = None
        self._rect = None
        slot = template.config.primary
        if slot is not None:
            usable = clamp_slot(slot, image.size) if slot.width <= 0 or slot.height <= 0 else slot
            if usable is not None:
                self._rect = EditorRect.from_slot(usable)
        logger.info("editor.template_loaded", template_id=template.id, has_slot=self._rect is not None)

    async def open_template(self, client: RegistryClient, template_id: int) -> None:
        """Fetch a template and its artwork, waiting for a full decode before editing."""
        template = await client.get_template(template_id)
        image = await load_image_async(await client.fetch_image_bytes(template))
        self.load_template(template, image)

    def add_default_slot(self) -> EditorRect:
        self._ensure_open()
        if self._rect is None:
            self._rect = DEFAULT_RECT.copy()
        return self._rect

    def move_to(self, left: float, top: float) -> None:
        self._require_rect().move_to(left, top)

    def move_by(self, dx: float, dy: float) -> None:
        self._require_rect().move_by(dx, dy)

    def drag_handle(self, handle: Handle | str, dx: float, dy: float, *, uniform: bool | None = None) -> None:
        self._require_rect().drag_handle(Handle(handle), dx, dy, uniform=uniform)

    def current_slot(self) -> Slot | None:
        self._ensure_open()
        return self._rect.to_slot() if self._rect is not None else None

    def build_submission(self) -> TemplateSubmission:
        """Validate the editor state and produce the form sent to the registry."""
        self._ensure_open()
        if not self.name or not self.name.strip() or self._rect is None:
            raise EditorValidationError("Please fill name and define a slot.")
        if not self.is_edit and not self.has_new_file:
            raise EditorValidationError("Please choose a template image.")

        slot = self._rect.to_slot()
        if self._image is not None:
            clamped = clamp_slot(slot, self._image.size)
            if clamped is None:
                raise EditorValidationError("The slot lies outside the template image.")
            slot = clamped

        return TemplateSubmission(
            name=self.name,
            config=SlotConfig.single(slot),
            layout_type=LayoutType.SINGLE,
            image=self._file,
            filename=self._filename,
        )

    async def save(self, client: RegistryClient) -> int:
        """Submit to the registry; returns the template id."""
        submission = self.build_submission()
        if self.is_edit:
            await client.update_template(self.template_id, submission)
            return self.template_id
        self.template_id = await client.create_template(submission)
        self._file = None
        return self.template_id

    def dispose(self) -> None:
        if self._disposed:
            return
        if self._image is not None:
            self._image.close()
        self._image = None
        self._file = None
        self._rect = None
        self._disposed = True

    def _replace_image(self, image: Image.Image) -> None:
        if self._image is not None and self._image is not image:
            self._image.close()
        self._image = image

    def _require_rect(self) -> EditorRect:
        self._ensure_open()
        if self._rect is None:
            raise EditorValidationError("no slot defined yet")
        return self._rect

    def _ensure_open(self) -> None:
        if self._disposed:
            raise EditorDisposedError("editor surface has been disposed")


@contextmanager
def editor_session(*, template_id: int | None = None) -> Iterator[SlotEditor]:
    """Create an editor for one view and dispose it on exit, whatever happens."""
    editor = SlotEditor(template_id=template_id)
    try:
        yield editor
    finally:
        editor.dispose()
