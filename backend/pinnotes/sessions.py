from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from pinnotes.editor.widget import EditorHost, TextAreaEditor
from pinnotes.notes.cache import LoadGuard, NoteCache
from pinnotes.notes.notifications import Notifier
from pinnotes.storage.notes_store import NotesStore

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Session:
    """Per-client context: the authenticated flag plus everything the note screen owns."""

    session_id: str
    cache: NoteCache
    notifier: Notifier
    editor: EditorHost
    authenticated: bool = False
    load_guard: LoadGuard = field(default_factory=LoadGuard)
    expires_at: Optional[datetime] = None

    def login(self) -> None:
        self.authenticated = True

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class SessionRegistry:
    """Live sessions by id. Expired ones are dropped on the next create() or get()."""

    def __init__(self, notes_store: NotesStore):
        self.notes_store = notes_store
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def _prune(self) -> None:
        now = _utc_now()
        for sid in [sid for sid, s in self._sessions.items() if s.is_expired(now)]:
            del self._sessions[sid]
            logger.info("Session %s expired", sid)

    def create(self, ttl: Optional[timedelta] = None) -> Session:
        self._prune()
        notifier = Notifier()
        load_guard = LoadGuard()
        cache = NoteCache(self.notes_store, notifier, load_guard)
        session = Session(
            session_id=uuid.uuid4().hex,
            cache=cache,
            notifier=notifier,
            editor=EditorHost(lambda note_id: TextAreaEditor(note_id, cache.edit_content)),
            load_guard=load_guard,
            expires_at=_utc_now() + ttl if ttl else None,
        )
        self._sessions[session.session_id] = session
        logger.info("Session %s created", session.session_id)
        return session

    def get(self, session_id: str) -> Optional[Session]:
        self._prune()
        return self._sessions.get(session_id)

    def discard(self, session_id: str) -> bool:
        removed = self._sessions.pop(session_id, None)
        if removed is not None:
            logger.info("Session %s closed", session_id)
        return removed is not None
