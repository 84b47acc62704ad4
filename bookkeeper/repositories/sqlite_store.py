"""SQLite-backed document store with optimistic atomic units."""

import json
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from typing import Any, Callable

from bookkeeper.models.exceptions import ConcurrentModificationError, StoreError
from bookkeeper.repositories.document_store import (
    DELETE,
    SERVER_TIMESTAMP,
    SET,
    UPDATE,
    AtomicUnit,
    Document,
    DocumentStore,
    T,
    WriteOp,
)

logger = logging.getLogger(__name__)


def _resolve(data: dict[str, Any], now: str) -> dict[str, Any]:
    return {key: now if value is SERVER_TIMESTAMP else value for key, value in data.items()}


class SQLiteDocumentStore(DocumentStore):
    """Document store keeping JSON documents and their versions in SQLite."""

    def __init__(self, conn: sqlite3.Connection):
        """
        Initialize the store with a database connection.

        The connection is switched to autocommit mode so that commits can be
        framed explicitly with BEGIN IMMEDIATE. Pass a connection opened with
        check_same_thread=False to share the store between threads.

        Args:
            conn: SQLite database connection
        """
        self._conn = conn
        self._conn.isolation_level = None
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()

    @classmethod
    def open(cls, db_path: str) -> "SQLiteDocumentStore":
        """Open (and if needed create) a store at db_path."""
        store = cls(sqlite3.connect(db_path, check_same_thread=False))
        store.create_table()
        return store

    def create_table(self) -> None:
        """Create the Documents table if it doesn't exist."""
        with self._lock:
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS Documents (
                    Collection TEXT NOT NULL,
                    Id TEXT NOT NULL,
                    Data TEXT NOT NULL,
                    Version INTEGER NOT NULL,
                    PRIMARY KEY (Collection, Id)
                )
            """
            )

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def _read(self, collection: str, doc_id: str) -> tuple[dict[str, Any], int] | None:
        with self._lock:
            try:
                row = self._conn.execute(
                    "SELECT Data, Version FROM Documents WHERE Collection = ? AND Id = ?",
                    (collection, doc_id),
                ).fetchone()
            except sqlite3.Error as err:
                raise StoreError(f"Failed to read {collection}/{doc_id}: {err}") from err
        if row is None:
            return None
        return json.loads(row["Data"]), row["Version"]

    def read_document(self, collection: str, doc_id: str) -> Document | None:
        found = self._read(collection, doc_id)
        if found is None:
            return None
        return Document(id=doc_id, data=found[0])

    def query(self, collection: str, filters: dict[str, Any] | None = None) -> list[Document]:
        with self._lock:
            try:
                rows = self._conn.execute(
                    "SELECT Id, Data FROM Documents WHERE Collection = ? ORDER BY rowid",
                    (collection,),
                ).fetchall()
            except sqlite3.Error as err:
                raise StoreError(f"Failed to query {collection}: {err}") from err

        documents = [Document(id=row["Id"], data=json.loads(row["Data"])) for row in rows]
        if not filters:
            return documents
        return [
            doc
            for doc in documents
            if all(doc.data.get(key) == value for key, value in filters.items())
        ]

    def run_atomic_unit(self, body: Callable[[AtomicUnit], T]) -> T:
        unit = AtomicUnit(self._read)
        result = body(unit)
        self._commit(unit)
        return result

    def batch_write(self, ops: list[WriteOp]) -> None:
        def apply_all(now: str) -> None:
            for op in ops:
                self._apply(op, now)

        with self._lock:
            self._in_transaction(apply_all)

    def _commit(self, unit: AtomicUnit) -> None:
        """Validate the versions a unit read and apply its writes in one transaction."""

        def validate_and_apply(now: str) -> None:
            for (collection, doc_id), seen in unit.read_versions.items():
                if self._version(collection, doc_id) != seen:
                    raise ConcurrentModificationError(
                        f"{collection}/{doc_id} changed since it was read"
                    )
            for op in unit.writes:
                self._apply(op, now)

        with self._lock:
            self._in_transaction(validate_and_apply)

    def _in_transaction(self, work: Callable[[str], Any]) -> None:
        now = datetime.now(timezone.utc).isoformat()
        try:
            self._conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as err:
            raise StoreError(f"Failed to begin transaction: {err}") from err
        try:
            work(now)
        except sqlite3.Error as err:
            self._rollback()
            raise StoreError(f"Write failed: {err}") from err
        except Exception:
            self._rollback()
            raise
        try:
            self._conn.execute("COMMIT")
        except sqlite3.Error as err:
            self._rollback()
            raise StoreError(f"Commit failed: {err}") from err

    def _rollback(self) -> None:
        if self._conn.in_transaction:
            self._conn.execute("ROLLBACK")

    def _version(self, collection: str, doc_id: str) -> int | None:
        row = self._conn.execute(
            "SELECT Version FROM Documents WHERE Collection = ? AND Id = ?",
            (collection, doc_id),
        ).fetchone()
        return None if row is None else row["Version"]

    def _apply(self, op: WriteOp, now: str) -> None:
        if op.kind == SET:
            self._conn.execute(
                """
                INSERT INTO Documents (Collection, Id, Data, Version) VALUES (?, ?, ?, 1)
                ON CONFLICT (Collection, Id)
                DO UPDATE SET Data = excluded.Data, Version = Version + 1
            """,
                (op.collection, op.doc_id, json.dumps(_resolve(op.data, now))),
            )
        elif op.kind == UPDATE:
            found = self._read(op.collection, op.doc_id)
            if found is None:
                raise StoreError(f"No document {op.collection}/{op.doc_id} to update")
            merged = {**found[0], **_resolve(op.data, now)}
            self._conn.execute(
                "UPDATE Documents SET Data = ?, Version = Version + 1 WHERE Collection = ? AND Id = ?",
                (json.dumps(merged), op.collection, op.doc_id),
            )
        elif op.kind == DELETE:
            self._conn.execute(
                "DELETE FROM Documents WHERE Collection = ? AND Id = ?",
                (op.collection, op.doc_id),
            )
        else:
            raise StoreError(f"Unknown write kind: {op.kind}")
        logger.debug("Applied %s to %s/%s", op.kind, op.collection, op.doc_id)
