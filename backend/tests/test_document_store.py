import json
from datetime import datetime

import pytest

from pinnotes.storage.document_store import SERVER_TIMESTAMP, DocumentNotFound, DocumentStore

from conftest import ts


@pytest.mark.asyncio
async def test_add_assigns_id_and_resolves_server_timestamps(tmp_path):
    db = DocumentStore(tmp_path)
    ref = await db.add("notes", {"title": "t", "createdAt": SERVER_TIMESTAMP})

    snap = await db.get(ref)
    assert snap.exists
    assert snap.id == ref.id
    assert snap.get("title") == "t"
    assert isinstance(snap.get("createdAt"), datetime)
    assert snap.get("createdAt").tzinfo is not None


@pytest.mark.asyncio
async def test_get_missing_document(tmp_path):
    db = DocumentStore(tmp_path)
    snap = await db.get(db.doc("pin", "default"))
    assert not snap.exists
    assert snap.get("value") is None


@pytest.mark.asyncio
async def test_query_orders_descending(tmp_path):
    db = DocumentStore(tmp_path)
    await db.set(db.doc("notes", "b"), {"updatedAt": ts(1)})
    await db.set(db.doc("notes", "a"), {"updatedAt": ts(2)})
    await db.set(db.doc("notes", "c"), {"updatedAt": ts(3)})

    snaps = await db.query("notes", order_by="updatedAt", descending=True)
    assert [s.id for s in snaps] == ["c", "a", "b"]


@pytest.mark.asyncio
async def test_batch_applies_all_updates(tmp_path):
    db = DocumentStore(tmp_path)
    await db.set(db.doc("notes", "a"), {"title": "A", "content": "x"})
    await db.set(db.doc("notes", "b"), {"title": "B", "content": "y"})

    batch = db.batch()
    batch.update(db.doc("notes", "a"), {"title": "A2"})
    batch.update(db.doc("notes", "b"), {"title": "B2"})
    await batch.commit()

    assert (await db.get(db.doc("notes", "a"))).data == {"title": "A2", "content": "x"}
    assert (await db.get(db.doc("notes", "b"))).data == {"title": "B2", "content": "y"}


@pytest.mark.asyncio
async def test_batch_with_missing_document_writes_nothing(tmp_path):
    db = DocumentStore(tmp_path)
    await db.set(db.doc("notes", "a"), {"title": "A"})

    batch = db.batch()
    batch.update(db.doc("notes", "a"), {"title": "changed"})
    batch.update(db.doc("notes", "ghost"), {"title": "boo"})
    with pytest.raises(DocumentNotFound):
        await batch.commit()

    assert (await db.get(db.doc("notes", "a"))).get("title") == "A"


@pytest.mark.asyncio
async def test_batch_cannot_be_committed_twice(tmp_path):
    db = DocumentStore(tmp_path)
    batch = db.batch()
    await batch.commit()
    with pytest.raises(ValueError):
        await batch.commit()


def test_doc_rejects_path_segments(tmp_path):
    db = DocumentStore(tmp_path)
    with pytest.raises(ValueError):
        db.doc("notes", "../pin")


@pytest.mark.asyncio
async def test_timestamps_persist_as_tagged_objects(tmp_path):
    db = DocumentStore(tmp_path)
    await db.set(db.doc("notes", "a"), {"updatedAt": ts(5)})

    raw = json.loads((tmp_path / "notes.json").read_text(encoding="utf-8"))
    assert raw["a"]["updatedAt"]["__ts__"].startswith("2024-01-05")


@pytest.mark.asyncio
async def test_strings_that_look_like_timestamps_stay_strings(tmp_path):
    db = DocumentStore(tmp_path)
    await db.set(db.doc("notes", "a"), {
        "title": "ts:2024-01-01",
        "content": "ts:hello",
        "updatedAt": ts(1),
    })

    snap = await db.get(db.doc("notes", "a"))
    assert snap.get("title") == "ts:2024-01-01"
    assert snap.get("content") == "ts:hello"

    snaps = await db.query("notes", order_by="updatedAt", descending=True)
    assert [s.get("title") for s in snaps] == ["ts:2024-01-01"]


@pytest.mark.asyncio
async def test_object_shaped_user_data_is_not_a_timestamp(tmp_path):
    db = DocumentStore(tmp_path)
    await db.set(db.doc("notes", "a"), {"meta": {"__ts__": "x", "other": 1}})

    snap = await db.get(db.doc("notes", "a"))
    assert snap.get("meta") == {"__ts__": "x", "other": 1}
