import asyncio
import importlib
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from pinnotes.storage.document_store import DocumentStore, StoreError
from pinnotes.utils.jwt_auth import SESSION_COOKIE, session_id_from_token

PIN = "123456"


class FailingStore(DocumentStore):
    """Document store whose selected operations raise like an unreachable backend."""

    def __init__(self, base_dir, fail=("get", "query", "add", "commit")):
        super().__init__(base_dir)
        self.fail = set(fail)

    async def get(self, ref):
        if "get" in self.fail:
            raise StoreError("backend unavailable")
        return await super().get(ref)

    async def query(self, collection, order_by=None, descending=False):
        if "query" in self.fail:
            raise StoreError("backend unavailable")
        return await super().query(collection, order_by, descending)

    async def add(self, collection, fields):
        if "add" in self.fail:
            raise StoreError("backend unavailable")
        return await super().add(collection, fields)

    async def _commit(self, updates):
        if "commit" in self.fail:
            raise StoreError("backend unavailable")
        return await super()._commit(updates)


def ts(day: int) -> datetime:
    return datetime(2024, 1, day, 12, 0, tzinfo=timezone.utc)


async def put_note(db: DocumentStore, doc_id: str, title: str, content: str, updated: datetime) -> None:
    await db.set(db.doc("notes", doc_id), {
        "title": title,
        "content": content,
        "createdAt": updated,
        "updatedAt": updated,
    })


def seed_note(db: DocumentStore, doc_id: str, title: str, content: str, updated: datetime) -> None:
    asyncio.run(put_note(db, doc_id, title, content, updated))


@pytest.fixture()
def deps(tmp_path, monkeypatch):
    # isolate data dir per test
    monkeypatch.setenv("APP_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("JWT_SECRET", "dev-secret-for-tests")
    monkeypatch.delenv("SESSION_EXP_MINUTES", raising=False)

    # reload so module-level stores pick up the new data dir
    import pinnotes.api.deps
    importlib.reload(pinnotes.api.deps)

    asyncio.run(pinnotes.api.deps.pin_store.set_pin(PIN))
    return pinnotes.api.deps


@pytest.fixture()
def client(deps):
    import pinnotes.main
    importlib.reload(pinnotes.main)
    return TestClient(pinnotes.main.app)


@pytest.fixture()
def authed(client):
    r = client.post("/api/auth/pin", json={"pin": PIN})
    assert r.status_code == 200
    return client


def current_session(client, deps):
    return deps.sessions.get(session_id_from_token(client.cookies.get(SESSION_COOKIE)))
