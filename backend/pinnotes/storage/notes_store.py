from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable

from pinnotes.storage.document_store import SERVER_TIMESTAMP, DocumentSnapshot, DocumentStore, StoreError

NOTES_COLLECTION = "notes"
DEFAULT_TITLE = "Untitled Note"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_datetime(value: Any) -> datetime:
    # documents written without a timestamp still get a usable date
    if isinstance(value, datetime):
        return value
    return _utc_now()


@dataclass(frozen=True)
class Note:
    id: str
    title: str
    content: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_snapshot(cls, snap: DocumentSnapshot) -> "Note":
        return cls(
            id=snap.id,
            title=snap.get("title", ""),
            content=snap.get("content") or "",
            created_at=_as_datetime(snap.get("createdAt")),
            updated_at=_as_datetime(snap.get("updatedAt")),
        )


class NotesStore:
    def __init__(self, db: DocumentStore):
        self.db = db

    async def list_notes(self) -> list[Note]:
        snaps = await self.db.query(NOTES_COLLECTION, order_by="updatedAt", descending=True)
        return [Note.from_snapshot(s) for s in snaps]

    async def create_note(self, title: str = DEFAULT_TITLE, content: str = "") -> Note:
        ref = await self.db.add(NOTES_COLLECTION, {
            "title": title,
            "content": content,
            "createdAt": SERVER_TIMESTAMP,
            "updatedAt": SERVER_TIMESTAMP,
        })
        snap = await self.db.get(ref)
        if not snap.exists:
            raise StoreError(f"Created note {ref.id} could not be read back")
        return Note.from_snapshot(snap)

    async def sync_notes(self, notes: Iterable[Note]) -> int:
        """Write title/content of every note with a fresh updatedAt in one batch.

        Returns the number of staged updates. Nothing is written if any of the
        notes is missing from the store.
        """
        now = _utc_now()
        batch = self.db.batch()
        for note in notes:
            batch.update(self.db.doc(NOTES_COLLECTION, note.id), {
                "title": note.title,
                "content": note.content or "",
                "updatedAt": now,
            })
        await batch.commit()
        return len(batch)
