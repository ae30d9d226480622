from __future__ import annotations

from typing import Optional

from pinnotes.storage.document_store import SERVER_TIMESTAMP, DocumentStore

PIN_COLLECTION = "pin"
PIN_DOC_ID = "default"


class PinStore:
    def __init__(self, db: DocumentStore):
        self.db = db

    async def get_pin(self) -> Optional[str]:
        snap = await self.db.get(self.db.doc(PIN_COLLECTION, PIN_DOC_ID))
        if not snap.exists:
            return None
        value = snap.get("value")
        return value if isinstance(value, str) else None

    async def set_pin(self, value: str) -> None:
        existing = await self.db.get(self.db.doc(PIN_COLLECTION, PIN_DOC_ID))
        await self.db.set(self.db.doc(PIN_COLLECTION, PIN_DOC_ID), {
            "value": value,
            "createdAt": existing.get("createdAt", SERVER_TIMESTAMP),
            "updatedAt": SERVER_TIMESTAMP,
        })
