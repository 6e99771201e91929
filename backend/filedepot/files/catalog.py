"""DuckDB-backed metadata catalog.

One table records every stored original. The catalog assigns ids from a
sequence (never reused) and stamps ``uploaded_at`` at insertion; rows are
never updated afterwards.

Database Schema:
    files table:
        - id: sequence-assigned primary key
        - original_name: user-supplied filename
        - stored_name: server-generated name on disk
        - path: absolute location of the original blob
        - type: lowercase extension without dot
        - size: byte length reported at upload time
        - uploaded_at: insertion time (UTC)

Thread Safety:
    The DuckDB connection is NOT thread-safe, so every statement runs under
    a lock. This gives the single-writer-at-a-time semantics the upload
    pipeline relies on.

Usage:
    catalog = MetadataCatalog("file_catalog.duckdb", recreate=True)
    file_id = catalog.insert(record)
    rows = catalog.list_all()
"""
import logging
import threading
from datetime import datetime, timezone
from typing import List, Optional

import duckdb

from .errors import CatalogError
from .schemas import FileRecord, FileRecordCreate

logger = logging.getLogger(__name__)

_CREATE_SEQUENCE = "CREATE SEQUENCE IF NOT EXISTS files_id_seq START 1"

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS files (
    id            INTEGER DEFAULT nextval('files_id_seq') PRIMARY KEY,
    original_name VARCHAR NOT NULL,
    stored_name   VARCHAR NOT NULL,
    path          VARCHAR NOT NULL,
    type          VARCHAR NOT NULL,
    size          BIGINT NOT NULL,
    uploaded_at   TIMESTAMP NOT NULL
)
"""

_COLUMNS = ["id", "original_name", "stored_name", "path", "type", "size", "uploaded_at"]
_SELECT = f"SELECT {', '.join(_COLUMNS)} FROM files"


class MetadataCatalog:
    """Catalog of stored files in DuckDB."""

    _default_db_path: str = "file_catalog.duckdb"

    def __init__(self, db_path: Optional[str] = None, recreate: bool = False) -> None:
        """Open (or create) the catalog database.

        Args:
            db_path: Path to the DuckDB file, or ``":memory:"``.
            recreate: Drop any existing table first, starting empty.
        """
        self._db_path = db_path or self._default_db_path
        self._lock = threading.Lock()
        self._connection: Optional[duckdb.DuckDBPyConnection] = None
        if recreate:
            self.recreate()
        else:
            self._initialize_db()
        logger.info("[catalog] Initialized with db=%s (recreate=%s)", self._db_path, recreate)

    def _get_connection(self) -> duckdb.DuckDBPyConnection:
        if self._connection is None:
            self._connection = duckdb.connect(self._db_path)
        return self._connection

    def _initialize_db(self) -> None:
        with self._lock:
            conn = self._get_connection()
            conn.execute(_CREATE_SEQUENCE)
            conn.execute(_CREATE_TABLE)

    def recreate(self) -> None:
        """Drop the files table and its id sequence, then create them empty."""
        with self._lock:
            conn = self._get_connection()
            conn.execute("DROP TABLE IF EXISTS files")
            conn.execute("DROP SEQUENCE IF EXISTS files_id_seq")
            conn.execute(_CREATE_SEQUENCE)
            conn.execute(_CREATE_TABLE)

    # -----------------------------------------------------------------------
    # Operations
    # -----------------------------------------------------------------------

    def insert(self, record: FileRecordCreate) -> int:
        """Insert a row and return its freshly assigned id.

        Raises:
            CatalogError: On constraint or I/O failure.
        """
        uploaded_at = datetime.now(timezone.utc).replace(tzinfo=None)
        try:
            with self._lock:
                row = self._get_connection().execute(
                    """
                    INSERT INTO files (original_name, stored_name, path, type, size, uploaded_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    RETURNING id
                    """,
                    [
                        record.original_name,
                        record.stored_name,
                        record.path,
                        record.type,
                        record.size,
                        uploaded_at,
                    ],
                ).fetchone()
        except duckdb.Error as exc:
            raise CatalogError(f"Failed to record file metadata: {exc}") from exc
        return row[0]

    def list_all(self) -> List[FileRecord]:
        """All records, newest first; rows with equal timestamps keep insertion order."""
        try:
            with self._lock:
                rows = self._get_connection().execute(
                    f"{_SELECT} ORDER BY uploaded_at DESC, id ASC"
                ).fetchall()
        except duckdb.Error as exc:
            raise CatalogError(f"Failed to list files: {exc}") from exc
        return [self._row_to_record(r) for r in rows]

    def get_by_id(self, file_id: int) -> Optional[FileRecord]:
        """Return the record for *file_id*, or None."""
        try:
            with self._lock:
                row = self._get_connection().execute(
                    f"{_SELECT} WHERE id = ?", [file_id]
                ).fetchone()
        except duckdb.Error as exc:
            raise CatalogError(f"Failed to look up file {file_id}: {exc}") from exc
        return self._row_to_record(row) if row else None

    def delete_by_id(self, file_id: int) -> bool:
        """Delete the row for *file_id*. Returns False if there was none."""
        try:
            with self._lock:
                row = self._get_connection().execute(
                    "DELETE FROM files WHERE id = ? RETURNING id", [file_id]
                ).fetchone()
        except duckdb.Error as exc:
            raise CatalogError(f"Failed to delete file {file_id}: {exc}") from exc
        return row is not None

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._connection is not None:
                self._connection.close()
                self._connection = None

    # -----------------------------------------------------------------------
    # Internal
    # -----------------------------------------------------------------------

    @staticmethod
    def _row_to_record(row) -> FileRecord:
        return FileRecord(**dict(zip(_COLUMNS, row)))
