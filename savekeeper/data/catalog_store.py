"""Catalog store — SQLite index of backup records, one row per copied file."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Iterable

from loguru import logger

from savekeeper.errors import NotFoundError, PersistenceError
from savekeeper.models.backup_record import BackupRecord

CATALOG_FILENAME = "backups.db"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS backups (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    path TEXT NOT NULL,
    created_at TEXT NOT NULL
)
"""


def _record_from_row(row: sqlite3.Row) -> BackupRecord:
    return BackupRecord(
        id=row["id"],
        name=row["name"],
        path=row["path"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class CatalogStore:
    """
    Backup catalog — reads/writes <backup_dir>/backups.db.

    Single writer only. Rows are removed inside one transaction per call;
    backing files are removed best-effort and never restored on rollback.
    """

    def __init__(self, backup_dir: Path) -> None:
        self._backup_dir = backup_dir
        self._path = backup_dir / CATALOG_FILENAME
        self._conn: sqlite3.Connection | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def open(self) -> None:
        """Open (creating if needed) the catalog database."""
        if self._conn is not None:
            return
        try:
            self._backup_dir.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self._path)
            conn.row_factory = sqlite3.Row
            with conn:
                conn.execute(_SCHEMA)
        except (OSError, sqlite3.Error) as e:
            raise PersistenceError(f"Failed to open catalog at {self._path}: {e}") from e
        self._conn = conn
        logger.debug(f"Opened catalog: {self._path}")

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise PersistenceError("Catalog is not open")
        return self._conn

    def insert(self, name: str, path: str, created_at: datetime) -> int:
        """Append a record and return its new id."""
        conn = self._connection()
        try:
            with conn:
                cursor = conn.execute(
                    "INSERT INTO backups (name, path, created_at) VALUES (?, ?, ?)",
                    (name, path, created_at.isoformat(timespec="microseconds")),
                )
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to register backup '{name}': {e}") from e
        return int(cursor.lastrowid)

    def list_all(self) -> list[BackupRecord]:
        """All records, newest first. Each call returns a fresh snapshot."""
        conn = self._connection()
        try:
            rows = conn.execute(
                "SELECT id, name, path, created_at FROM backups "
                "ORDER BY created_at DESC, id DESC"
            ).fetchall()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read catalog: {e}") from e
        return [_record_from_row(row) for row in rows]

    def delete_many(self, records: Iterable[BackupRecord]) -> int:
        """
        Remove backup files and their rows.

        A file that cannot be removed is skipped (it may already be gone) and
        its row is still deleted. All row deletions commit together or not at
        all; files removed before a rollback stay removed.
        """
        records = list(records)
        if not records:
            return 0

        conn = self._connection()
        removed = 0
        try:
            with conn:
                for record in records:
                    self._remove_file(record)
                    cursor = conn.execute("DELETE FROM backups WHERE id = ?", (record.id,))
                    removed += cursor.rowcount
        except sqlite3.Error as e:
            logger.error(f"Catalog delete rolled back after {removed} row(s): {e}")
            raise PersistenceError(f"Failed to delete backups: {e}") from e

        logger.info(f"Deleted {removed} backup record(s)")
        return removed

    def delete_one(self, record: BackupRecord) -> None:
        """Remove a single backup; a missing row is reported as NotFoundError."""
        if self.delete_many([record]) == 0:
            raise NotFoundError(f"Backup not in catalog: {record.name} (id={record.id})")

    @staticmethod
    def _remove_file(record: BackupRecord) -> None:
        try:
            Path(record.path).unlink()
        except FileNotFoundError:
            logger.debug(f"Backup file already gone: {record.path}")
        except OSError as e:
            logger.warning(f"Failed to remove backup file {record.path}: {e}")
