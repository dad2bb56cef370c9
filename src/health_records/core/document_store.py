# ============================================================================
# src/health_records/core/document_store.py
# ============================================================================
"""
Document Store

Collection-per-entity JSON document storage on SQLite. Raw sqlite3, one
table, the full document as a JSON column, a connection per operation.

Queries filter on a single field only. Callers that need ordering sort the
returned documents in Python.
"""

import json
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    SQLite-backed document store.

    Every write is keyed by (collection, id). Partial updates merge the given
    fields into the stored document; updating a document that no longer
    exists is a no-op that returns None.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._init_database()

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------
    def _init_database(self):
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS documents (
                    collection  TEXT NOT NULL,
                    id          TEXT NOT NULL,
                    created_at  TEXT NOT NULL,
                    data        TEXT NOT NULL,
                    PRIMARY KEY (collection, id)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_documents_collection
                ON documents (collection)
            """)
        logger.info(f"Document store initialized: {self.db_path}")

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        # Autocommit mode; multi-statement writes open their own transaction
        conn = sqlite3.connect(str(self.db_path), isolation_level=None, timeout=30)
        try:
            yield conn
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------
    def insert(self, collection: str, document: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a new document. The document must carry an 'id'."""
        doc_id = self._require_id(document)
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO documents (collection, id, created_at, data) VALUES (?, ?, ?, ?)",
                (collection, doc_id, _now(), json.dumps(document, default=str)),
            )
        logger.debug(f"Inserted {collection}/{doc_id}")
        return document

    def insert_if_absent(
        self,
        collection: str,
        document: Dict[str, Any]
    ) -> Tuple[Dict[str, Any], bool]:
        """
        Conditional create keyed by the document id.

        Returns:
            (stored_document, created). When another writer got there first,
            the already-stored document is returned with created=False.
        """
        doc_id = self._require_id(document)
        with self._connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                cur = conn.execute(
                    "INSERT OR IGNORE INTO documents (collection, id, created_at, data) "
                    "VALUES (?, ?, ?, ?)",
                    (collection, doc_id, _now(), json.dumps(document, default=str)),
                )
                created = cur.rowcount == 1
                row = conn.execute(
                    "SELECT data FROM documents WHERE collection = ? AND id = ?",
                    (collection, doc_id),
                ).fetchone()
                conn.execute("COMMIT")
            except Exception:
                conn.execute("ROLLBACK")
                raise

        if not created:
            logger.info(f"{collection}/{doc_id} already exists, returning stored document")
        return json.loads(row[0]), created

    def update(
        self,
        collection: str,
        doc_id: str,
        fields: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """
        Merge fields into an existing document.

        Returns:
            The updated document, or None if it does not exist.
        """
        with self._connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                row = conn.execute(
                    "SELECT data FROM documents WHERE collection = ? AND id = ?",
                    (collection, doc_id),
                ).fetchone()
                if row is None:
                    conn.execute("ROLLBACK")
                    logger.warning(f"Update skipped, {collection}/{doc_id} no longer exists")
                    return None

                document = json.loads(row[0])
                document.update(fields)
                conn.execute(
                    "UPDATE documents SET data = ? WHERE collection = ? AND id = ?",
                    (json.dumps(document, default=str), collection, doc_id),
                )
                conn.execute("COMMIT")
            except Exception:
                conn.execute("ROLLBACK")
                raise
        return document

    def delete(self, collection: str, doc_id: str) -> bool:
        with self._connect() as conn:
            cur = conn.execute(
                "DELETE FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            )
        return cur.rowcount > 0

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------
    def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Retrieve a single document by id."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT data FROM documents WHERE collection = ? AND id = ?",
                (collection, doc_id),
            ).fetchone()
        if row:
            return json.loads(row[0])
        return None

    def find_by(self, collection: str, field: str, value: Any) -> List[Dict[str, Any]]:
        """All documents in a collection whose top-level field equals value."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT data FROM documents "
                "WHERE collection = ? AND json_extract(data, ?) = ? "
                "ORDER BY created_at, rowid",
                (collection, f"$.{field}", value),
            ).fetchall()
        return [json.loads(r[0]) for r in rows]

    def list_collection(self, collection: str) -> List[Dict[str, Any]]:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT data FROM documents WHERE collection = ? ORDER BY created_at, rowid",
                (collection,),
            ).fetchall()
        return [json.loads(r[0]) for r in rows]

    def count(self, collection: str) -> int:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM documents WHERE collection = ?",
                (collection,),
            ).fetchone()
        return row[0]

    @staticmethod
    def _require_id(document: Dict[str, Any]) -> str:
        doc_id = document.get("id")
        if not doc_id:
            raise ValueError("Document must have an 'id'")
        return doc_id


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
