from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from fastapi import Depends, HTTPException, status

from pinnotes.sessions import Session, SessionRegistry
from pinnotes.storage.document_store import DocumentStore
from pinnotes.storage.notes_store import NotesStore
from pinnotes.storage.pin_store import PinStore
from pinnotes.utils.jwt_auth import get_session_id
from pinnotes.utils.pin_auth import PinGate

# Base data dir: repository_root/data (we are in backend/pinnotes/api)
DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"
DATA_DIR = Path(os.getenv("APP_DATA_DIR", str(DEFAULT_DATA_DIR)))

db = DocumentStore(DATA_DIR)
notes_store = NotesStore(db)
pin_store = PinStore(db)
gate = PinGate(pin_store)
sessions = SessionRegistry(notes_store)


def optional_session(session_id: Optional[str] = Depends(get_session_id)) -> Optional[Session]:
    if session_id is None:
        return None
    session = sessions.get(session_id)
    if session is None or not session.authenticated:
        return None
    return session


def require_session(session: Optional[Session] = Depends(optional_session)) -> Session:
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return session
