"""Backup manager — full-copy .sav backups of the configured save file."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Sequence

from loguru import logger

from savekeeper.data.catalog_store import CatalogStore
from savekeeper.errors import (
    ConfigurationError,
    DestWriteError,
    PersistenceError,
    SourceNotFoundError,
    SourceReadError,
)
from savekeeper.models.backup_record import BackupRecord
from savekeeper.utils import sanitize_filename

if TYPE_CHECKING:
    from savekeeper.config import Config

BACKUP_SUFFIX = ".sav"
TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


def auto_backup_name(now: datetime) -> str:
    """Sortable default name, e.g. Backup_2024-01-01_10-00-00."""
    return f"Backup_{now.strftime(TIMESTAMP_FORMAT)}"


def resolve_backup_path(backup_dir: Path, name: str) -> tuple[str, Path]:
    """
    Find the first unused ``<name>.sav`` in *backup_dir*.

    Collisions are suffixed ``_1``, ``_2``, ... on the base name. Returns the
    resolved name together with its path so the catalog and the file agree.
    """
    resolved = name
    path = backup_dir / f"{resolved}{BACKUP_SUFFIX}"
    counter = 1
    while path.exists():
        resolved = f"{name}_{counter}"
        path = backup_dir / f"{resolved}{BACKUP_SUFFIX}"
        counter += 1
    return resolved, path


class BackupManager:
    """Create, restore, list and delete backups of the configured save file."""

    def __init__(
        self,
        config: Config,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._config = config
        self._clock = clock
        self._store: CatalogStore | None = None

    @property
    def store(self) -> CatalogStore:
        if self._store is None or not self._store.is_open:
            raise PersistenceError("Catalog is not open")
        return self._store

    def open(self) -> None:
        """(Re)open the catalog in the configured backup directory."""
        backup_dir = self._config.backup_dir
        if not backup_dir:
            raise ConfigurationError("Backup directory is not configured")
        self.close()
        store = CatalogStore(backup_dir)
        store.open()
        self._store = store
        logger.info(f"Catalog ready in {backup_dir}")

    def close(self) -> None:
        if self._store is not None:
            self._store.close()
            self._store = None

    def _require_paths(self) -> tuple[Path, Path]:
        save_path = self._config.save_path
        backup_dir = self._config.backup_dir
        if not save_path:
            raise ConfigurationError("Save path is not configured")
        if not backup_dir:
            raise ConfigurationError("Backup directory is not configured")
        return save_path, backup_dir

    def create_backup(self, name: str = "") -> BackupRecord:
        """Copy the save file into a new uniquely named backup and register it."""
        save_path, backup_dir = self._require_paths()
        store = self.store
        if not save_path.exists():
            raise SourceNotFoundError(f"Save file not found: {save_path}")

        now = self._clock()
        name = sanitize_filename(name) if name else ""
        if not name:
            name = auto_backup_name(now)

        try:
            data = save_path.read_bytes()
        except OSError as e:
            raise SourceReadError(f"Cannot read save file {save_path}: {e}") from e

        resolved, target = resolve_backup_path(backup_dir, name)
        try:
            backup_dir.mkdir(parents=True, exist_ok=True)
            with open(target, "xb") as f:
                f.write(data)
        except OSError as e:
            raise DestWriteError(f"Cannot write backup {target}: {e}") from e

        # A failed insert leaves the copied file orphaned on disk
        record_id = store.insert(resolved, str(target), now)
        logger.info(f"Created backup: {target.name} ({len(data)} bytes)")
        return BackupRecord(id=record_id, name=resolved, path=str(target), created_at=now)

    def restore_backup(self, record: BackupRecord) -> None:
        """Overwrite the save file with the backup's content, unconditionally."""
        save_path, _ = self._require_paths()
        source = Path(record.path)
        try:
            data = source.read_bytes()
        except OSError as e:
            raise SourceReadError(f"Cannot read backup {source}: {e}") from e

        # Written in place so a symlinked save path updates its target
        try:
            with open(save_path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise DestWriteError(f"Cannot write save file {save_path}: {e}") from e

        logger.info(f"Restored {record.name} over {save_path}")

    def delete_backups(self, records: Sequence[BackupRecord]) -> int:
        """Delete backups and their rows; returns the number of rows removed."""
        if not records:
            return 0
        return self.store.delete_many(records)

    def list_backups(self) -> list[BackupRecord]:
        """All backups, newest first."""
        return self.store.list_all()
