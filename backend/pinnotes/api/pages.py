from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import APIRouter, Depends, Form, status
from fastapi.responses import HTMLResponse, RedirectResponse

from pinnotes.api import deps
from pinnotes.api.auth import set_session_cookie, unlock
from pinnotes.render.markup import render_loading_page, render_notes_page, render_pin_page
from pinnotes.sessions import Session
from pinnotes.utils.jwt_auth import SESSION_COOKIE

router = APIRouter(tags=["pages"])
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingEdit:
    """Title and editor content posted with any button on the notes screen."""

    note_id: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None


def pending_edit(
    open_note_id: Optional[str] = Form(default=None),
    title: Optional[str] = Form(default=None),
    content: Optional[str] = Form(default=None),
) -> PendingEdit:
    return PendingEdit(note_id=open_note_id, title=title, content=content)


def apply_pending(session: Session, edit: PendingEdit) -> bool:
    """Apply posted fields to the note they were rendered for.

    Fields rendered for another note (stale tab, back navigation) are dropped
    so they never overwrite the note selected now.
    """
    cache = session.cache
    selected = cache.selected
    if edit.note_id is None or selected is None:
        return False
    if edit.note_id != selected.id:
        logger.info("Dropping edit for note %s; note %s is selected", edit.note_id, selected.id)
        return False

    if edit.title is not None and edit.title != selected.title:
        cache.edit_title(edit.title)
    if edit.content is not None:
        session.editor.widget_for(selected.id).on_change(edit.content)
    return True


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/", response_class=HTMLResponse)
def pin_form(session: Optional[Session] = Depends(deps.optional_session)):
    if session is not None:
        return _redirect("/notes")
    return HTMLResponse(render_pin_page())


@router.post("/", response_class=HTMLResponse)
async def pin_submit(pin: str = Form(default=""), current: Optional[Session] = Depends(deps.optional_session)):
    session, error = await unlock(pin, current)
    if session is None:
        return HTMLResponse(render_pin_page(error=error), status_code=status.HTTP_401_UNAUTHORIZED)

    response = _redirect("/notes")
    set_session_cookie(response, session)
    return response


@router.post("/logout")
def logout(session: Optional[Session] = Depends(deps.optional_session)):
    if session is not None:
        deps.sessions.discard(session.session_id)
    response = _redirect("/")
    response.delete_cookie(SESSION_COOKIE)
    return response


@router.get("/notes", response_class=HTMLResponse)
async def notes_page(session: Optional[Session] = Depends(deps.optional_session)):
    if session is None:
        return _redirect("/")

    cache = session.cache
    await cache.load()
    # another request is still fetching
    if cache.is_loading:
        return HTMLResponse(render_loading_page())

    selected = cache.selected
    editor = session.editor.widget_for(selected.id) if selected is not None else None
    return HTMLResponse(render_notes_page(
        notes=cache.notes,
        selected=selected,
        editor=editor,
        is_syncing=cache.is_syncing,
        toasts=session.notifier.drain(),
    ))


@router.post("/notes/new")
async def new_note(
    edit: PendingEdit = Depends(pending_edit),
    session: Optional[Session] = Depends(deps.optional_session),
):
    if session is None:
        return _redirect("/")
    apply_pending(session, edit)
    await session.cache.create_note()
    return _redirect("/notes")


@router.post("/notes/sync")
async def sync_notes(
    edit: PendingEdit = Depends(pending_edit),
    session: Optional[Session] = Depends(deps.optional_session),
):
    if session is None:
        return _redirect("/")
    apply_pending(session, edit)
    await session.cache.sync()
    return _redirect("/notes")


@router.post("/notes/edit")
def edit_note(
    edit: PendingEdit = Depends(pending_edit),
    session: Optional[Session] = Depends(deps.optional_session),
):
    if session is None:
        return _redirect("/")
    apply_pending(session, edit)
    return _redirect("/notes")


@router.post("/notes/{note_id}/select")
def select_note(
    note_id: str,
    edit: PendingEdit = Depends(pending_edit),
    session: Optional[Session] = Depends(deps.optional_session),
):
    if session is None:
        return _redirect("/")
    apply_pending(session, edit)
    session.cache.select(note_id)
    return _redirect("/notes")
