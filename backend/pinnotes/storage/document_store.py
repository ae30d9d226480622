from __future__ import annotations

import json
import os
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import anyio


class StoreError(Exception):
    """Raised when the document store cannot complete an operation."""


class DocumentNotFound(StoreError):
    pass


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


# placeholder resolved to the store's clock when the write is applied
SERVER_TIMESTAMP = _ServerTimestamp()

_TS_KEY = "__ts__"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _safe_name(name: str) -> str:
    if not name or any(ch in name for ch in ["/", "\\"]) or ".." in name:
        raise ValueError(f"Invalid document path segment: {name!r}")
    return name


def _atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
        f.flush()
        os.fsync(f.fileno())
    tmp_path.replace(path)


def _encode_value(value: Any, now: datetime) -> Any:
    if value is SERVER_TIMESTAMP:
        value = now
    if isinstance(value, datetime):
        return {_TS_KEY: value.astimezone(timezone.utc).isoformat()}
    return value


def _decode_value(value: Any) -> Any:
    # only the tagged object is a timestamp; plain strings are user text
    if isinstance(value, dict) and set(value) == {_TS_KEY}:
        return datetime.fromisoformat(value[_TS_KEY])
    return value


@dataclass(frozen=True)
class DocumentRef:
    collection: str
    id: str


@dataclass(frozen=True)
class DocumentSnapshot:
    ref: DocumentRef
    data: dict[str, Any] | None

    @property
    def id(self) -> str:
        return self.ref.id

    @property
    def exists(self) -> bool:
        return self.data is not None

    def get(self, key: str, default: Any = None) -> Any:
        if self.data is None:
            return default
        return self.data.get(key, default)


@dataclass
class WriteBatch:
    """Field updates staged against existing documents, applied together by commit()."""

    store: "DocumentStore"
    _updates: list[tuple[DocumentRef, dict[str, Any]]] = field(default_factory=list)
    _committed: bool = False

    def __len__(self) -> int:
        return len(self._updates)

    def update(self, ref: DocumentRef, fields: dict[str, Any]) -> "WriteBatch":
        if self._committed:
            raise ValueError("Batch already committed")
        self._updates.append((ref, dict(fields)))
        return self

    async def commit(self) -> None:
        if self._committed:
            raise ValueError("Batch already committed")
        await self.store._commit(list(self._updates))
        self._committed = True


class DocumentStore:
    """File-backed document database.

    Each collection lives in ``<base_dir>/<collection>.json`` as a mapping of
    document id to fields. Every write rewrites the collection file through an
    atomic replace, so a batch touching one collection either lands entirely
    or not at all. Batches spanning several collections are rejected.

    Timestamps are stored as ``{"__ts__": "<iso8601>"}`` objects and come
    back as aware ``datetime`` objects; plain strings are never reinterpreted.
    """

    def __init__(self, base_dir: Path):
        self.base_dir = base_dir
        self._lock = threading.Lock()

    def doc(self, collection: str, doc_id: str) -> DocumentRef:
        return DocumentRef(collection=_safe_name(collection), id=_safe_name(doc_id))

    def batch(self) -> WriteBatch:
        return WriteBatch(store=self)

    def _collection_path(self, collection: str) -> Path:
        return self.base_dir / f"{_safe_name(collection)}.json"

    def _read_collection(self, collection: str) -> dict[str, dict[str, Any]]:
        path = self._collection_path(collection)
        if not path.exists():
            return {}
        raw = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"Corrupted collection file: {path}")
        return raw

    def _write_collection(self, collection: str, docs: dict[str, dict[str, Any]]) -> None:
        _atomic_write_json(self._collection_path(collection), docs)

    async def _run(self, func, *args):
        try:
            return await anyio.to_thread.run_sync(func, *args)
        except (OSError, ValueError) as exc:
            raise StoreError(str(exc)) from exc

    # -- reads --

    def _get_sync(self, ref: DocumentRef) -> DocumentSnapshot:
        with self._lock:
            docs = self._read_collection(ref.collection)
        raw = docs.get(ref.id)
        if raw is None:
            return DocumentSnapshot(ref=ref, data=None)
        return DocumentSnapshot(ref=ref, data={k: _decode_value(v) for k, v in raw.items()})

    async def get(self, ref: DocumentRef) -> DocumentSnapshot:
        return await self._run(self._get_sync, ref)

    def _query_sync(self, collection: str, order_by: str | None, descending: bool) -> list[DocumentSnapshot]:
        with self._lock:
            docs = self._read_collection(collection)
        out = [
            DocumentSnapshot(
                ref=DocumentRef(collection=collection, id=doc_id),
                data={k: _decode_value(v) for k, v in raw.items()},
            )
            for doc_id, raw in docs.items()
        ]
        if order_by is not None:
            # documents without the field are left out, like an indexed query would
            out = [s for s in out if s.get(order_by) is not None]
            out.sort(key=lambda s: s.get(order_by), reverse=descending)
        return out

    async def query(
        self, collection: str, order_by: str | None = None, descending: bool = False
    ) -> list[DocumentSnapshot]:
        return await self._run(self._query_sync, _safe_name(collection), order_by, descending)

    # -- writes --

    def _add_sync(self, collection: str, fields: dict[str, Any]) -> DocumentRef:
        doc_id = uuid.uuid4().hex
        now = _utc_now()
        with self._lock:
            docs = self._read_collection(collection)
            docs[doc_id] = {k: _encode_value(v, now) for k, v in fields.items()}
            self._write_collection(collection, docs)
        return DocumentRef(collection=collection, id=doc_id)

    async def add(self, collection: str, fields: dict[str, Any]) -> DocumentRef:
        return await self._run(self._add_sync, _safe_name(collection), fields)

    def _set_sync(self, ref: DocumentRef, fields: dict[str, Any]) -> None:
        now = _utc_now()
        with self._lock:
            docs = self._read_collection(ref.collection)
            docs[ref.id] = {k: _encode_value(v, now) for k, v in fields.items()}
            self._write_collection(ref.collection, docs)

    async def set(self, ref: DocumentRef, fields: dict[str, Any]) -> None:
        await self._run(self._set_sync, ref, fields)

    def _commit_sync(self, updates: list[tuple[DocumentRef, dict[str, Any]]]) -> None:
        if not updates:
            return
        collections = {ref.collection for ref, _ in updates}
        if len(collections) != 1:
            raise ValueError("A batch may only touch one collection")
        (collection,) = collections

        now = _utc_now()
        with self._lock:
            docs = self._read_collection(collection)
            for ref, _ in updates:
                if ref.id not in docs:
                    raise DocumentNotFound(f"No document to update: {ref.collection}/{ref.id}")
            for ref, fields in updates:
                docs[ref.id].update({k: _encode_value(v, now) for k, v in fields.items()})
            self._write_collection(collection, docs)

    async def _commit(self, updates: list[tuple[DocumentRef, dict[str, Any]]]) -> None:
        await self._run(self._commit_sync, updates)
