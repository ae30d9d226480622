"""In-memory mirror of the notes collection for one session.

Reads and edits happen against the local list; the store is only touched by
load() (once per session), create_note() (written immediately) and sync()
(every local note in one batch).

Ordering is fixed at load time. New notes are prepended and edited notes do
not move; updated_at is not refreshed locally after a sync.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Optional

from pinnotes.notes.notifications import Notifier
from pinnotes.storage.document_store import StoreError
from pinnotes.storage.notes_store import DEFAULT_TITLE, Note, NotesStore

logger = logging.getLogger(__name__)


class LoadGuard:
    """One-shot token: the first claim() wins, later ones return False.

    A failed load hands the token back with release(), so only a successful
    fetch counts as the session's one load.
    """

    def __init__(self) -> None:
        self._claimed = False

    @property
    def claimed(self) -> bool:
        return self._claimed

    def claim(self) -> bool:
        if self._claimed:
            return False
        self._claimed = True
        return True

    def release(self) -> None:
        self._claimed = False


class NoteCache:
    def __init__(self, store: NotesStore, notifier: Notifier, load_guard: Optional[LoadGuard] = None):
        self.store = store
        self.notifier = notifier
        self.load_guard = load_guard or LoadGuard()
        self.notes: list[Note] = []
        self.selected_id: Optional[str] = None
        self.is_loading = False
        self.is_syncing = False

    @property
    def selected(self) -> Optional[Note]:
        if self.selected_id is None:
            return None
        for note in self.notes:
            if note.id == self.selected_id:
                return note
        return None

    def get(self, note_id: str) -> Optional[Note]:
        for note in self.notes:
            if note.id == note_id:
                return note
        return None

    async def load(self) -> bool:
        """Fetch all notes, newest first.

        Succeeds at most once per cache. A failed fetch is not retried here;
        the next call (a page reload) tries again.
        """
        if not self.load_guard.claim():
            return False

        self.is_loading = True
        try:
            notes = await self.store.list_notes()
        except StoreError:
            logger.exception("Error loading notes")
            self.notes = []
            self.selected_id = None
            self.notifier.error("Failed to load notes")
            self.load_guard.release()
            return False
        finally:
            self.is_loading = False

        self.notes = notes
        self.selected_id = notes[0].id if notes else None
        self.notifier.success("Notes loaded successfully")
        logger.info("Loaded %d notes", len(notes))
        return True

    def select(self, note_id: str) -> bool:
        if self.get(note_id) is None:
            return False
        self.selected_id = note_id
        return True

    def _replace_selected(self, **changes) -> Optional[Note]:
        current = self.selected
        if current is None:
            return None
        updated = dataclasses.replace(current, **changes)
        self.notes = [updated if n.id == current.id else n for n in self.notes]
        return updated

    def edit_title(self, title: str) -> Optional[Note]:
        return self._replace_selected(title=title)

    def edit_content(self, content: Optional[str]) -> Optional[Note]:
        return self._replace_selected(content=content or "")

    async def create_note(self) -> Optional[Note]:
        if self.is_syncing:
            return None

        toast = self.notifier.loading("Creating new note...")
        try:
            note = await self.store.create_note(title=DEFAULT_TITLE, content="")
        except StoreError:
            logger.exception("Error creating note")
            self.notifier.error("Failed to create note", replace=toast)
            return None

        self.notes = [note, *self.notes]
        self.selected_id = note.id
        self.notifier.success("Note created successfully", replace=toast)
        return note

    async def sync(self) -> bool:
        if self.is_syncing:
            return False

        self.is_syncing = True
        toast = self.notifier.loading("Syncing notes...")
        try:
            count = await self.store.sync_notes(list(self.notes))
        except StoreError:
            logger.exception("Error syncing notes")
            self.notifier.error("Failed to sync notes", replace=toast)
            return False
        finally:
            self.is_syncing = False

        logger.info("Synced %d notes", count)
        self.notifier.success("Notes synced successfully", replace=toast)
        return True
