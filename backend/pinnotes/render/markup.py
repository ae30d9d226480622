from __future__ import annotations

import html
from datetime import datetime
from typing import Optional, Sequence

from pinnotes.editor.widget import EditorWidget
from pinnotes.notes.notifications import Notification
from pinnotes.storage.notes_store import Note

PLACEHOLDER = "Select a note or create a new one"

STYLE = r"""<style>
  body { margin: 0; font-family: system-ui, sans-serif; color: #111827; background: #fff; }
  .lock { min-height: 100vh; display: flex; align-items: center; justify-content: center; background: #f9fafb; }
  .lock form { width: 24rem; padding: 2rem; background: #fff; border: 1px solid #e5e7eb; border-radius: .5rem; }
  .lock input { width: 100%; padding: .5rem; box-sizing: border-box; }
  .error { color: #ef4444; text-align: center; font-size: .875rem; }
  .screen { display: flex; height: 100vh; }
  .sidebar { width: 16rem; background: #f9fafb; border-right: 1px solid #e5e7eb; overflow-y: auto; }
  .sidebar .actions { padding: 1rem; display: grid; gap: .5rem; }
  .note-item { display: block; width: 100%; text-align: left; padding: 1rem; border: 0; background: none; cursor: pointer; }
  .note-item.selected { background: #f3f4f6; }
  .note-item small { color: #6b7280; }
  .pane { flex: 1; display: flex; flex-direction: column; }
  .pane .title { font-size: 1.5rem; font-weight: bold; padding: 1rem; border: 0; border-bottom: 1px solid #e5e7eb; }
  .pane .editor { flex: 1; padding: 1rem; border: 0; resize: none; }
  .placeholder { height: 100%; display: flex; align-items: center; justify-content: center; color: #6b7280; }
  .toasts { position: fixed; top: 1rem; right: 1rem; }
  .toast { padding: .5rem 1rem; margin-bottom: .5rem; border-radius: .375rem; background: #111827; color: #fff; }
  .toast.error { background: #b91c1c; }
  .toast.success { background: #15803d; }
  .default-action { position: absolute; left: -9999px; }
</style>"""


def format_date(value: Optional[datetime]) -> str:
    if value is None:
        return "No date"
    return f"{value:%b} {value.day}, {value.year}"


def _page(title: str, body: str, head: str = "") -> str:
    return (
        "<!DOCTYPE html>\n<html lang=\"en\">\n<head>\n"
        "<meta charset=\"utf-8\">\n"
        f"{head}"
        f"<title>{html.escape(title)}</title>\n{STYLE}\n</head>\n"
        f"<body>\n{body}\n</body>\n</html>\n"
    )


def render_toasts(items: Sequence[Notification]) -> str:
    if not items:
        return ""
    rows = "".join(
        f'<div class="toast {html.escape(n.kind)}" role="status">{html.escape(n.message)}</div>'
        for n in items
    )
    return f'<div class="toasts">{rows}</div>'


def render_pin_page(error: Optional[str] = None) -> str:
    err = f'<p class="error">{html.escape(error)}</p>' if error else ""
    body = f"""<div class="lock">
  <form method="post" action="/">
    <h2>Enter PIN</h2>
    <input type="password" name="pin" maxlength="6" placeholder="Enter your PIN" autofocus>
    {err}
    <button type="submit">Unlock</button>
  </form>
</div>"""
    return _page("Enter PIN", body)


def render_loading_page() -> str:
    body = '<div class="placeholder loading"><p>Loading notes...</p></div>'
    return _page("Notes", body, head='<meta http-equiv="refresh" content="1">\n')


def _note_item(note: Note, selected: bool) -> str:
    cls = "note-item selected" if selected else "note-item"
    return (
        f'<button type="submit" class="{cls}" formaction="/notes/{html.escape(note.id)}/select">'
        f"<strong>{html.escape(note.title)}</strong><br>"
        f"<small>{format_date(note.updated_at)}</small>"
        "</button>"
    )


def render_notes_page(
    notes: Sequence[Note],
    selected: Optional[Note],
    editor: Optional[EditorWidget],
    is_syncing: bool,
    toasts: Sequence[Notification] = (),
) -> str:
    """Two-pane screen.

    The whole screen is one form: every button posts the open note's id,
    title and editor content along with its own action, so typed text is
    applied before New, Sync or a selection change.
    """
    disabled = " disabled" if is_syncing else ""
    sync_label = "Syncing..." if is_syncing else "Sync Notes"
    items = "\n".join(_note_item(n, selected is not None and n.id == selected.id) for n in notes)

    if selected is not None and editor is not None:
        pane = f"""<div class="pane">
    <input type="hidden" name="open_note_id" value="{html.escape(selected.id)}">
    <input class="title" type="text" name="title" value="{html.escape(selected.title)}" placeholder="Enter note title">
    {editor.render(selected.content)}
    <button type="submit">Save locally</button>
  </div>"""
    else:
        pane = f'<div class="pane"><div class="placeholder">{PLACEHOLDER}</div></div>'

    body = f"""{render_toasts(toasts)}
<form class="screen" method="post" action="/notes/edit">
  <button type="submit" class="default-action" tabindex="-1" aria-hidden="true">Save</button>
  <div class="sidebar">
    <div class="actions">
      <button type="submit" formaction="/notes/new"{disabled}>New Note</button>
      <button type="submit" formaction="/notes/sync"{disabled}>{sync_label}</button>
      <button type="submit" formaction="/logout">Lock</button>
    </div>
    {items}
  </div>
  {pane}
</form>"""
    return _page("Notes", body)
