from __future__ import annotations

import html
from typing import Callable, Optional, Protocol


class EditorWidget(Protocol):
    note_id: str

    def render(self, content: str) -> str: ...

    def on_change(self, content: Optional[str]) -> None: ...


class TextAreaEditor:
    """Editing surface for one note, rendered as a form textarea.

    The markup string is shown verbatim (escaped) and handed back untouched on
    change, so the stored content format stays whatever the browser sends.
    """

    field_name = "content"

    def __init__(self, note_id: str, changed: Callable[[str], object]):
        self.note_id = note_id
        self._changed = changed
        self.last_value: Optional[str] = None

    def render(self, content: str) -> str:
        self.last_value = content or ""
        return (
            f'<textarea name="{self.field_name}" class="editor" '
            f'data-note-id="{html.escape(self.note_id)}" '
            f'placeholder="Start writing...">{html.escape(self.last_value)}</textarea>'
        )

    def on_change(self, content: Optional[str]) -> None:
        value = content or ""
        if value == self.last_value:
            return
        self.last_value = value
        self._changed(value)


class EditorHost:
    """Keeps one widget per selected note and swaps it when the selection changes."""

    def __init__(self, factory: Callable[[str], EditorWidget]):
        self._factory = factory
        self.widget: Optional[EditorWidget] = None

    def widget_for(self, note_id: str) -> EditorWidget:
        if self.widget is None or self.widget.note_id != note_id:
            self.widget = self._factory(note_id)
        return self.widget

    def reset(self) -> None:
        self.widget = None
