"""
SQLite fault store for Loadout.

This module persists terminal fault markers recorded by the process
supervisor. Each marker is committed before persist() returns, with
synchronous=FULL, so it survives the process ending right afterwards.

Tables:
    - schema_version: Migration tracking
    - faults: One row per recorded fault marker
"""

import sqlite3
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from loadout.errors import StorageConnectionError, StorageReadError, StorageWriteError
from loadout.schema import FaultMarker

# Schema version for migrations
SCHEMA_VERSION = 1

CREATE_TABLES_SQL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL
);

-- Faults table: terminal fault markers
CREATE TABLE IF NOT EXISTS faults (
    fault_id TEXT PRIMARY KEY,
    source TEXT NOT NULL,
    message TEXT NOT NULL,
    error_type TEXT NOT NULL,
    traceback TEXT NOT NULL DEFAULT '',
    occurred_at TEXT NOT NULL,
    pid INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_faults_occurred_at ON faults(occurred_at);
"""


def generate_id() -> str:
    """Generate a unique ID for fault markers."""
    return str(uuid.uuid4())[:8]


def now_iso() -> str:
    """Get current UTC time in ISO format."""
    return datetime.now(UTC).isoformat()


def _row_to_marker(row: sqlite3.Row) -> FaultMarker:
    return FaultMarker(
        fault_id=row["fault_id"],
        source=row["source"],
        message=row["message"],
        error_type=row["error_type"],
        traceback=row["traceback"],
        occurred_at=datetime.fromisoformat(row["occurred_at"]),
        pid=row["pid"],
    )


class FaultStore:
    """
    SQLite store for fault markers.

    Implements the FaultRecorder interface used by the Supervisor.

    Usage:
        with FaultStore("loadout.db") as store:
            store.persist(marker)
            recent = store.list_faults(limit=10)
    """

    def __init__(self, db_path: str | Path) -> None:
        """
        Initialize the database connection.

        Args:
            db_path: Path to the SQLite database file.
                     Will be created if it doesn't exist.
        """
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self._connect()
        self._init_schema()

    def _connect(self) -> None:
        """Establish database connection."""
        try:
            self._conn = sqlite3.connect(
                str(self.db_path),
                check_same_thread=False,
            )
            self._conn.row_factory = sqlite3.Row
            # Markers must reach disk before the process exits
            self._conn.execute("PRAGMA synchronous = FULL")
        except sqlite3.Error as e:
            raise StorageConnectionError(
                db_path=str(self.db_path),
                operation="connect",
                message=f"Failed to connect to database: {e}",
            ) from e

    def _init_schema(self) -> None:
        """Initialize database schema if needed."""
        try:
            cursor = self._conn.executescript(CREATE_TABLES_SQL)
            cursor.close()

            cursor = self._conn.execute(
                "SELECT version FROM schema_version ORDER BY version DESC LIMIT 1"
            )
            row = cursor.fetchone()
            if row is None:
                self._conn.execute(
                    "INSERT INTO schema_version (version, applied_at) VALUES (?, ?)",
                    (SCHEMA_VERSION, now_iso()),
                )
            self._conn.commit()
        except sqlite3.Error as e:
            raise StorageWriteError(
                operation="init_schema",
                underlying_error=str(e),
            ) from e

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "FaultStore":
        """Enter context manager."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit context manager."""
        self.close()

    # =========================================================================
    # Fault Operations
    # =========================================================================

    def persist(self, marker: FaultMarker) -> str:
        """
        Write a fault marker and commit immediately.

        Returns:
            The fault_id the marker was stored under

        Raises:
            StorageWriteError: If the marker cannot be written
        """
        fault_id = marker.fault_id or generate_id()
        if self._conn is None:
            raise StorageWriteError(operation="persist", underlying_error="store is closed")

        try:
            self._conn.execute(
                """
                INSERT INTO faults (
                    fault_id, source, message, error_type,
                    traceback, occurred_at, pid
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    fault_id,
                    marker.source,
                    marker.message,
                    marker.error_type,
                    marker.traceback,
                    marker.occurred_at.isoformat(),
                    marker.pid,
                ),
            )
            self._conn.commit()
            return fault_id
        except sqlite3.Error as e:
            self._conn.rollback()
            raise StorageWriteError(
                operation="persist",
                underlying_error=str(e),
            ) from e

    def get_fault(self, fault_id: str) -> FaultMarker | None:
        """
        Get a fault marker by ID.

        Returns:
            FaultMarker or None if not found
        """
        try:
            cursor = self._conn.execute(
                "SELECT * FROM faults WHERE fault_id = ?",
                (fault_id,),
            )
            row = cursor.fetchone()
            return _row_to_marker(row) if row is not None else None
        except sqlite3.Error as e:
            raise StorageReadError(
                operation="get_fault",
                underlying_error=str(e),
            ) from e

    def list_faults(self, limit: int = 20) -> list[FaultMarker]:
        """
        List recent fault markers, newest first.

        Args:
            limit: Maximum number of markers to return
        """
        try:
            cursor = self._conn.execute(
                "SELECT * FROM faults ORDER BY occurred_at DESC LIMIT ?",
                (limit,),
            )
            return [_row_to_marker(row) for row in cursor.fetchall()]
        except sqlite3.Error as e:
            raise StorageReadError(
                operation="list_faults",
                underlying_error=str(e),
            ) from e

    def count_faults(self) -> int:
        """Number of stored fault markers."""
        try:
            cursor = self._conn.execute("SELECT COUNT(*) FROM faults")
            return cursor.fetchone()[0]
        except sqlite3.Error as e:
            raise StorageReadError(
                operation="count_faults",
                underlying_error=str(e),
            ) from e


class FaultLog:
    """
    Fault recorder that opens the database only when a fault is recorded.

    Used by the process entrypoint so a clean run never touches disk.
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)

    def persist(self, marker: FaultMarker) -> str:
        with FaultStore(self.db_path) as store:
            return store.persist(marker)
