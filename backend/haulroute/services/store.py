from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from threading import Lock
from typing import Any, Callable, Generator
from uuid import uuid4

from haulroute.core.logging import get_logger


Listener = Callable[[Any], None]

_logger = get_logger(__name__)


def _normalize(path: str) -> str:
    cleaned = "/".join(part for part in path.strip().split("/") if part)
    if not cleaned:
        raise ValueError("Document path must not be empty")
    return cleaned


def _related(changed: str, watched: str) -> bool:
    return (
        changed == watched
        or changed.startswith(watched + "/")
        or watched.startswith(changed + "/")
    )


class DocumentStore:
    """SQLite-backed JSON document store with change notification.

    Documents live at slash-separated paths such as ``deliveries/<id>`` or
    ``users/<id>``. Reading a collection path returns a mapping of child id
    to record. Subscribers receive the full snapshot of the watched path
    after every write that touches it, never a delta.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = Lock()
        self._listeners: dict[int, tuple[str, Listener]] = {}
        self._next_token = 0
        self._ensure_schema()

    @contextmanager
    def _connect(self) -> Generator[sqlite3.Connection, None, None]:
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    path TEXT PRIMARY KEY,
                    parent TEXT NOT NULL,
                    body TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS documents_parent ON documents (parent)"
            )
            conn.commit()

    def get(self, path: str) -> Any:
        """Return the document at ``path``, the children of a collection, or None."""

        path = _normalize(path)
        with self._lock, self._connect() as conn:
            return self._read(conn, path)

    def children(self, collection: str) -> dict[str, Any]:
        collection = _normalize(collection)
        with self._lock, self._connect() as conn:
            return self._read_children(conn, collection)

    def set(self, path: str, value: Any) -> None:
        """Write ``value`` at ``path``, replacing any previous document."""

        path = _normalize(path)
        self._write(path, value)
        self._notify(path)

    def update(self, path: str, fields: dict[str, Any]) -> Any:
        """Merge ``fields`` into the document at ``path`` and return the result."""

        path = _normalize(path)
        with self._lock, self._connect() as conn:
            current = self._read_document(conn, path)
            merged = dict(current) if isinstance(current, dict) else {}
            merged.update(fields)
            self._upsert(conn, path, merged)
            conn.commit()
        self._notify(path)
        return merged

    def push(self, collection: str, value: Any) -> str:
        """Store ``value`` under a freshly generated id and return that id."""

        collection = _normalize(collection)
        key = uuid4().hex
        self.set(f"{collection}/{key}", value)
        return key

    def subscribe(self, path: str, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the current snapshot now and after each change.

        Returns a callable that removes the subscription.
        """

        path = _normalize(path)
        with self._lock:
            token = self._next_token
            self._next_token += 1
            self._listeners[token] = (path, listener)

        _logger.info("Store subscription added", path=path, token=token)
        self._deliver(path, listener)

        def unsubscribe() -> None:
            with self._lock:
                removed = self._listeners.pop(token, None)
            if removed is not None:
                _logger.info("Store subscription removed", path=path, token=token)

        return unsubscribe

    def _write(self, path: str, value: Any) -> None:
        with self._lock, self._connect() as conn:
            self._upsert(conn, path, value)
            conn.commit()

    @staticmethod
    def _upsert(conn: sqlite3.Connection, path: str, value: Any) -> None:
        parent = path.rsplit("/", 1)[0] if "/" in path else ""
        now = datetime.now(timezone.utc).isoformat()
        conn.execute(
            """
            INSERT INTO documents (path, parent, body, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(path) DO UPDATE SET
                body=excluded.body,
                updated_at=excluded.updated_at
            """,
            (path, parent, json.dumps(value, ensure_ascii=False), now, now),
        )

    def _read(self, conn: sqlite3.Connection, path: str) -> Any:
        document = self._read_document(conn, path)
        if document is not None:
            return document
        children = self._read_children(conn, path)
        return children or None

    @staticmethod
    def _read_document(conn: sqlite3.Connection, path: str) -> Any:
        row = conn.execute(
            "SELECT body FROM documents WHERE path = ?", (path,)
        ).fetchone()
        if row is None:
            return None
        return json.loads(row["body"])

    @staticmethod
    def _read_children(conn: sqlite3.Connection, path: str) -> dict[str, Any]:
        rows = conn.execute(
            "SELECT path, body FROM documents WHERE parent = ? ORDER BY rowid",
            (path,),
        ).fetchall()
        return {row["path"].rsplit("/", 1)[-1]: json.loads(row["body"]) for row in rows}

    def _notify(self, changed: str) -> None:
        with self._lock:
            targets = [
                (path, listener)
                for path, listener in self._listeners.values()
                if _related(changed, path)
            ]
        for path, listener in targets:
            self._deliver(path, listener)

    def _deliver(self, path: str, listener: Listener) -> None:
        snapshot = self.get(path)
        try:
            listener(snapshot)
        except Exception as exc:  # pylint: disable=broad-except
            _logger.error(
                "Store listener failed", path=path, error=str(exc), exc_info=True
            )
