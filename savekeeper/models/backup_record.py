"""Backup record model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class BackupRecord:
    """One catalog row: a full copy of the save file plus its metadata."""

    id: int
    name: str
    path: str  # Absolute location of the copied content
    created_at: datetime

    @property
    def size(self) -> int:
        try:
            return Path(self.path).stat().st_size
        except OSError:
            return 0
