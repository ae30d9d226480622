from typing import Optional

from pydantic import BaseModel, Field


class TitleUpdate(BaseModel):
    title: str = Field(max_length=200)


class ContentUpdate(BaseModel):
    content: Optional[str] = Field(default="", max_length=500_000)


class NoteOut(BaseModel):
    id: str
    title: str
    content: str
    created_at: str
    updated_at: str


class NotesState(BaseModel):
    notes: list[NoteOut]
    selected_id: Optional[str] = None
    is_loading: bool = False
    is_syncing: bool = False


class SyncResult(BaseModel):
    synced: int


class NotificationOut(BaseModel):
    id: int
    kind: str
    message: str
