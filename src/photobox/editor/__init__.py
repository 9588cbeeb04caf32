"""Interactive slot editor over a template image."""

from .editor_models import DEFAULT_RECT, EditorRect, Handle
from .slot_editor import SlotEditor, editor_session

__all__ = ["DEFAULT_RECT", "EditorRect", "Handle", "SlotEditor", "editor_session"]
