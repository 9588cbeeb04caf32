from __future__ import annotations

import pytest

from conftest import SLOT_JSON, build_frame_template, encode_image
from src.photobox.editor import Handle, SlotEditor, editor_session
from src.photobox.exceptions import EditorDisposedError, EditorValidationError
from src.photobox.geometry import LayoutType, Slot, dump_slot_config, parse_slot_config
from src.photobox.templates.templates_models import Template


class FakeRegistry:
    def __init__(self, template: Template | None = None, image: bytes | None = None) -> None:
        self.template = template
        self.image = image
        self.created: list = []
        self.updated: list = []

    async def create_template(self, submission) -> int:
        self.created.append(submission)
        return 7

    async def update_template(self, template_id: int, submission) -> None:
        self.updated.append((template_id, submission))

    async def get_template(self, template_id: int) -> Template:
        assert self.template is not None and template_id == self.template.id
        return self.template

    async def fetch_image_bytes(self, template: Template) -> bytes:
        return self.image


def _stored_template() -> Template:
    return Template(id=3, name="Stored", image_path="uploads/a.png", config=parse_slot_config(SLOT_JSON))


def test_save_requires_name() -> None:
    editor = SlotEditor()
    editor.load_image(encode_image(build_frame_template()))

    with pytest.raises(EditorValidationError, match="Please fill name and define a slot."):
        editor.build_submission()

    editor.name = "   "
    with pytest.raises(EditorValidationError, match="Please fill name and define a slot."):
        editor.build_submission()


def test_save_requires_slot() -> None:
    editor = SlotEditor()
    editor.name = "No slot"

    with pytest.raises(EditorValidationError, match="Please fill name and define a slot."):
        editor.build_submission()


def test_loading_image_places_default_slot() -> None:
    editor = SlotEditor()

    editor.load_image(encode_image(build_frame_template()))

    assert editor.has_new_file
    assert editor.current_slot() == Slot(x=50, y=50, width=200, height=200)


def test_pick_name_and_save_without_touching_slot() -> None:
    editor = SlotEditor()
    editor.load_image(encode_image(build_frame_template()))
    editor.name = "Quick"

    assert editor.build_submission().config.primary == Slot(x=50, y=50, width=200, height=200)


def test_loading_image_in_edit_mode_adds_no_slot() -> None:
    editor = SlotEditor(template_id=9)

    editor.load_image(encode_image(build_frame_template()))

    assert editor.current_slot() is None


def test_new_template_requires_image() -> None:
    editor = SlotEditor()
    editor.name = "No image"
    editor.add_default_slot()

    with pytest.raises(EditorValidationError, match="Please choose a template image."):
        editor.build_submission()


def test_default_slot_submission() -> None:
    data = encode_image(build_frame_template())
    editor = SlotEditor()
    editor.name = "Party"
    editor.load_image(data, filename="party.png")
    editor.add_default_slot()

    submission = editor.build_submission()

    assert submission.name == "Party"
    assert submission.layout_type is LayoutType.SINGLE
    assert submission.config.slots == [Slot(x=50, y=50, width=200, height=200)]
    assert submission.image == data
    assert submission.filename == "party.png"


def test_submission_slot_is_clamped_to_image() -> None:
    editor = SlotEditor()
    editor.name = "Small"
    editor.load_image(encode_image(build_frame_template(size=(100, 100), hole=None)))
    editor.add_default_slot()

    assert editor.build_submission().config.primary == Slot(x=50, y=50, width=50, height=50)


def test_resize_is_folded_into_saved_slot() -> None:
    editor = SlotEditor()
    editor.name = "Resized"
    editor.load_image(encode_image(build_frame_template()))
    editor.add_default_slot()

    editor.drag_handle("br", 100, 100)
    editor.move_by(10, 0)

    assert editor.rect.width == 200
    assert editor.current_slot() == Slot(x=60, y=50, width=300, height=300)


def test_new_file_keeps_existing_slot() -> None:
    editor = SlotEditor()
    editor.load_image(encode_image(build_frame_template()))
    editor.add_default_slot()
    editor.move_to(120, 80)

    editor.load_image(encode_image(build_frame_template(size=(1024, 768))))

    assert editor.surface_size == (1024, 768)
    assert editor.current_slot() == Slot(x=120, y=80, width=200, height=200)


def test_load_then_save_without_edits_is_identical() -> None:
    editor = SlotEditor()
    editor.load_template(_stored_template(), build_frame_template())

    submission = editor.build_submission()

    assert editor.is_edit
    assert submission.image is None
    assert dump_slot_config(submission.config) == SLOT_JSON


@pytest.mark.asyncio
async def test_open_template_waits_for_image_then_populates() -> None:
    registry = FakeRegistry(_stored_template(), encode_image(build_frame_template()))
    editor = SlotEditor()

    await editor.open_template(registry, 3)

    assert editor.name == "Stored"
    assert editor.surface_size == (800, 600)
    assert editor.current_slot() == Slot(x=100, y=50, width=200, height=300)


@pytest.mark.asyncio
async def test_first_save_creates_then_updates() -> None:
    registry = FakeRegistry()
    editor = SlotEditor()
    editor.name = "Fresh"
    editor.load_image(encode_image(build_frame_template()))
    editor.add_default_slot()

    assert await editor.save(registry) == 7
    assert await editor.save(registry) == 7

    assert len(registry.created) == 1
    assert registry.updated[0][0] == 7
    assert registry.updated[0][1].image is None


def test_session_disposes_surface() -> None:
    with editor_session() as editor:
        editor.load_image(encode_image(build_frame_template()))
        editor.add_default_slot()

    assert editor.disposed
    with pytest.raises(EditorDisposedError):
        editor.drag_handle(Handle.BOTTOM_RIGHT, 1, 1)


def test_session_disposes_on_error() -> None:
    with pytest.raises(RuntimeError):
        with editor_session(template_id=4) as editor:
            raise RuntimeError("boom")

    assert editor.disposed
    with pytest.raises(EditorDisposedError):
        editor.build_submission()
