"""
In-process document store.

Documents are plain dicts grouped in named collections and keyed either by a
caller-chosen id (user id) or an auto-generated one. The store owns the
``createdAt`` / ``updatedAt`` timestamps; values supplied by callers for
those fields are ignored. Writes are serialised with a lock because FastAPI
runs sync endpoints in a threadpool; concurrent writers to the same document
resolve as last-write-wins.
"""
from __future__ import annotations

import itertools
import logging
import threading
import time
import uuid
from typing import Any, Callable, Iterable

from ..exceptions import NotFoundError

logger = logging.getLogger(__name__)

_SERVER_FIELDS = ("createdAt", "updatedAt")

_collections: dict[str, dict[str, tuple[int, dict[str, Any]]]] = {}
_listeners: dict[str, list[Callable[[dict[str, Any]], None]]] = {}
_lock = threading.RLock()
_seq = itertools.count()

Where = tuple[str, str, Any]


def _strip_server_fields(data: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in _SERVER_FIELDS and k != "id"}


def _out(doc_id: str, data: dict[str, Any]) -> dict[str, Any]:
    return {"id": doc_id, **data}


def _notify(collection: str, doc_id: str, kind: str, data: dict[str, Any]) -> None:
    change = {"collection": collection, "id": doc_id, "kind": kind, "data": data}
    for callback in list(_listeners.get(collection, [])):
        try:
            callback(change)
        except Exception:
            logger.warning("Listener on %s failed", collection, exc_info=True)


# ── Writes ───────────────────────────────────────────────────────────────


def add(collection: str, data: dict[str, Any]) -> dict[str, Any]:
    """Insert a document under a generated id and return it."""
    doc_id = uuid.uuid4().hex[:20]
    now = time.time()
    doc = {**_strip_server_fields(data), "createdAt": now, "updatedAt": now}
    with _lock:
        _collections.setdefault(collection, {})[doc_id] = (next(_seq), doc)
        result = _out(doc_id, dict(doc))
    _notify(collection, doc_id, "added", result)
    return result


def set(collection: str, doc_id: str, data: dict[str, Any]) -> dict[str, Any]:
    """Create or fully replace the document at ``collection/doc_id``."""
    now = time.time()
    with _lock:
        docs = _collections.setdefault(collection, {})
        existing = docs.get(doc_id)
        created_at = existing[1]["createdAt"] if existing else now
        seq = existing[0] if existing else next(_seq)
        doc = {**_strip_server_fields(data), "createdAt": created_at, "updatedAt": now}
        docs[doc_id] = (seq, doc)
        result = _out(doc_id, dict(doc))
    _notify(collection, doc_id, "modified" if existing else "added", result)
    return result


def batch_set(writes: Iterable[tuple[str, str, dict[str, Any]]]) -> None:
    """Apply several ``set`` writes atomically with respect to other writers."""
    written = []
    now = time.time()
    with _lock:
        for collection, doc_id, data in writes:
            docs = _collections.setdefault(collection, {})
            existing = docs.get(doc_id)
            created_at = existing[1]["createdAt"] if existing else now
            seq = existing[0] if existing else next(_seq)
            doc = {**_strip_server_fields(data), "createdAt": created_at, "updatedAt": now}
            docs[doc_id] = (seq, doc)
            written.append((collection, doc_id, "modified" if existing else "added", _out(doc_id, dict(doc))))
    for collection, doc_id, kind, result in written:
        _notify(collection, doc_id, kind, result)


def update(collection: str, doc_id: str, updates: dict[str, Any]) -> dict[str, Any]:
    """Merge ``updates`` into an existing document.

    Raises ``NotFoundError`` when the document does not exist.
    """
    with _lock:
        entry = _collections.get(collection, {}).get(doc_id)
        if entry is None:
            raise NotFoundError(f"{collection}/{doc_id} does not exist")
        seq, doc = entry
        doc = {**doc, **_strip_server_fields(updates), "updatedAt": time.time()}
        _collections[collection][doc_id] = (seq, doc)
        result = _out(doc_id, dict(doc))
    _notify(collection, doc_id, "modified", result)
    return result


def increment(collection: str, doc_id: str, field: str, delta: int, floor: int | None = 0) -> int:
    """Atomically add ``delta`` to a numeric field, clamping at ``floor``."""
    with _lock:
        entry = _collections.get(collection, {}).get(doc_id)
        if entry is None:
            raise NotFoundError(f"{collection}/{doc_id} does not exist")
        seq, doc = entry
        value = (doc.get(field) or 0) + delta
        if floor is not None:
            value = max(floor, value)
        doc = {**doc, field: value, "updatedAt": time.time()}
        _collections[collection][doc_id] = (seq, doc)
        result = _out(doc_id, dict(doc))
    _notify(collection, doc_id, "modified", result)
    return value


def delete(collection: str, doc_id: str) -> bool:
    """Remove a document. Returns ``False`` when it was already gone."""
    with _lock:
        removed = _collections.get(collection, {}).pop(doc_id, None)
    if removed is not None:
        _notify(collection, doc_id, "removed", _out(doc_id, dict(removed[1])))
    return removed is not None


# ── Reads ────────────────────────────────────────────────────────────────


def get(collection: str, doc_id: str) -> dict[str, Any] | None:
    with _lock:
        entry = _collections.get(collection, {}).get(doc_id)
        return _out(doc_id, dict(entry[1])) if entry else None


def exists(collection: str, doc_id: str) -> bool:
    with _lock:
        return doc_id in _collections.get(collection, {})


def _matches(doc: dict[str, Any], clause: Where) -> bool:
    field, op, value = clause
    actual = doc.get(field)
    if op == "==":
        return actual == value
    if op == "!=":
        return actual != value
    if op == "in":
        return actual in value
    if op == "array-contains":
        return isinstance(actual, list) and value in actual
    if actual is None:
        return False
    if op == ">=":
        return actual >= value
    if op == "<=":
        return actual <= value
    if op == ">":
        return actual > value
    if op == "<":
        return actual < value
    raise ValueError(f"Unsupported operator: {op}")


def query(
    collection: str,
    where: Iterable[Where] = (),
    order_by: str | None = None,
    descending: bool = False,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """Filter, sort and cap a collection.

    Documents tied on ``order_by`` keep insertion order (reversed when
    ``descending``), so newest-first listings stay stable.
    """
    clauses = list(where)
    with _lock:
        rows = [
            (seq, doc_id, dict(doc))
            for doc_id, (seq, doc) in _collections.get(collection, {}).items()
            if all(_matches(doc, c) for c in clauses)
        ]

    if order_by:
        rows.sort(
            key=lambda r: (r[2].get(order_by) is not None, r[2].get(order_by), r[0]),
            reverse=descending,
        )
    else:
        rows.sort(key=lambda r: r[0], reverse=descending)

    if limit is not None:
        rows = rows[:limit]
    return [_out(doc_id, doc) for _, doc_id, doc in rows]


# ── Listeners ────────────────────────────────────────────────────────────


def subscribe(collection: str, callback: Callable[[dict[str, Any]], None]) -> Callable[[], None]:
    """Call ``callback(change)`` after every write to ``collection``.

    ``change`` is ``{"collection", "id", "kind", "data"}`` with kind one of
    ``added`` / ``modified`` / ``removed``; ``data`` is the document after the
    write, or as it was before removal. Returns an unsubscribe function.
    """
    with _lock:
        _listeners.setdefault(collection, []).append(callback)

    def unsubscribe() -> None:
        with _lock:
            callbacks = _listeners.get(collection, [])
            if callback in callbacks:
                callbacks.remove(callback)

    return unsubscribe


def clear(collection: str | None = None) -> None:
    """Drop one collection, or every collection when ``collection`` is None."""
    with _lock:
        if collection is None:
            _collections.clear()
        else:
            _collections.pop(collection, None)
