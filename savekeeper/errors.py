"""Domain exceptions — every expected catalog/config failure maps to one of these."""

from __future__ import annotations


class SaveKeeperError(RuntimeError):
    """Base exception for all SaveKeeper failures."""


class ConfigurationError(SaveKeeperError):
    """Save path or backup directory missing/invalid when an operation needs it."""


class SourceNotFoundError(SaveKeeperError):
    """Configured save file does not exist at backup-creation time."""


class SourceReadError(SaveKeeperError):
    """The file being copied from is missing or unreadable."""


class DestWriteError(SaveKeeperError):
    """The file being copied to cannot be written."""


class PersistenceError(SaveKeeperError):
    """Catalog metadata read/write/transaction failure."""


class NotFoundError(PersistenceError):
    """A catalog row expected to exist was not there."""
