from fastapi import APIRouter, Depends, HTTPException

from pinnotes.api import deps
from pinnotes.models.notes import ContentUpdate, NoteOut, NotesState, NotificationOut, SyncResult, TitleUpdate
from pinnotes.sessions import Session

router = APIRouter(prefix="/api", tags=["notes"])


def _state(session: Session) -> NotesState:
    cache = session.cache
    return NotesState(
        notes=[NoteOut(**n.to_dict()) for n in cache.notes],
        selected_id=cache.selected_id,
        is_loading=cache.is_loading,
        is_syncing=cache.is_syncing,
    )


def _refuse_while_syncing(session: Session) -> None:
    # New and Sync are disabled until the running sync resolves
    if session.cache.is_syncing:
        raise HTTPException(status_code=409, detail="Sync in progress")


@router.get("/notes", response_model=NotesState)
async def list_notes(session: Session = Depends(deps.require_session)) -> NotesState:
    # first visit of the session fills the cache; later calls read it
    await session.cache.load()
    return _state(session)


@router.post("/notes", response_model=NoteOut, status_code=201)
async def create_note(session: Session = Depends(deps.require_session)) -> NoteOut:
    _refuse_while_syncing(session)
    note = await session.cache.create_note()
    if note is None:
        raise HTTPException(status_code=502, detail="Failed to create note")
    return NoteOut(**note.to_dict())


@router.post("/notes/sync", response_model=SyncResult)
async def sync_notes(session: Session = Depends(deps.require_session)) -> SyncResult:
    _refuse_while_syncing(session)
    count = len(session.cache.notes)
    if not await session.cache.sync():
        raise HTTPException(status_code=502, detail="Failed to sync notes")
    return SyncResult(synced=count)


# Local-only operations: nothing below touches the store.
@router.post("/notes/{note_id}/select", response_model=NotesState)
def select_note(note_id: str, session: Session = Depends(deps.require_session)) -> NotesState:
    session.cache.select(note_id)
    return _state(session)


@router.put("/notes/selected/title", response_model=NotesState)
def edit_title(payload: TitleUpdate, session: Session = Depends(deps.require_session)) -> NotesState:
    session.cache.edit_title(payload.title)
    return _state(session)


@router.put("/notes/selected/content", response_model=NotesState)
def edit_content(payload: ContentUpdate, session: Session = Depends(deps.require_session)) -> NotesState:
    selected = session.cache.selected_id
    if selected is not None:
        session.editor.widget_for(selected).on_change(payload.content)
    return _state(session)


@router.get("/notifications", response_model=list[NotificationOut])
def notifications(session: Session = Depends(deps.require_session)) -> list[NotificationOut]:
    return [NotificationOut(**n.to_dict()) for n in session.notifier.drain()]
