"""Application configuration — JSON-based, with batch update support."""

from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from loguru import logger

from savekeeper.errors import ConfigurationError

_instance: "Config | None" = None

# Default config directory
_DEFAULT_CONFIG_DIR = Path.home() / "Documents" / "SaveKeeper"


def get_config(config_dir: Path | None = None) -> Config:
    """Module-level factory — single global Config instance."""
    global _instance
    if _instance is None:
        _instance = Config(config_dir)
    return _instance


def _absolute(value: Path | str) -> str:
    # Symlinks are kept so writes still follow them
    return str(Path(value).expanduser().absolute())


def reset_config() -> None:
    """Reset the global config instance (for testing)."""
    global _instance
    _instance = None


class Config:
    """JSON-based application configuration stored in config.json."""

    _DEFAULTS: dict[str, Any] = {
        "save_path": "",
        "backup_dir": "",
        "auto_backup": True,
        "language": "en_US",
    }

    def __init__(self, config_dir: Path | None = None) -> None:
        self._data: dict[str, Any] = {}
        self._dir = config_dir or _DEFAULT_CONFIG_DIR
        self._path = self._dir / "config.json"
        self._defer_save = False
        self._is_first_run = not self._path.exists()
        self._load()

    def _load(self) -> None:
        """Load config from disk, merging with defaults."""
        self._data = dict(self._DEFAULTS)
        if self._is_first_run:
            return
        try:
            with open(self._path, encoding="utf-8") as f:
                user_data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to load config, using defaults: {e}")
            return
        if isinstance(user_data, dict):
            self._data.update(user_data)

    def save(self) -> None:
        """Persist config to disk (atomic replace)."""
        if self._defer_save:
            return
        tmp_path = self._path.with_suffix(".tmp")
        try:
            self._dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2)
            tmp_path.replace(self._path)
        except OSError as e:
            logger.error(f"Failed to save config: {e}")
            if tmp_path.exists():
                tmp_path.unlink(missing_ok=True)
            raise ConfigurationError(f"Failed to save configuration: {e}") from e
        self._is_first_run = False

    @contextmanager
    def batch_update(self) -> Iterator[None]:
        """Context manager for batching multiple config changes into a single write."""
        self._defer_save = True
        try:
            yield
        finally:
            self._defer_save = False
        self.save()

    # ── Generic access ──

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value
        self.save()

    # ── Typed properties ──

    @property
    def config_dir(self) -> Path:
        return self._dir

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_first_run(self) -> bool:
        """True until a config.json has been written."""
        return self._is_first_run

    @property
    def save_path(self) -> Path | None:
        raw = self._data.get("save_path", "")
        return Path(raw).expanduser() if raw else None

    @save_path.setter
    def save_path(self, value: Path | str | None) -> None:
        self.set("save_path", _absolute(value) if value else "")

    @property
    def backup_dir(self) -> Path | None:
        raw = self._data.get("backup_dir", "")
        return Path(raw).expanduser() if raw else None

    @backup_dir.setter
    def backup_dir(self, value: Path | str | None) -> None:
        self.set("backup_dir", _absolute(value) if value else "")

    @property
    def auto_backup(self) -> bool:
        return bool(self._data.get("auto_backup", True))

    @auto_backup.setter
    def auto_backup(self, value: bool) -> None:
        self.set("auto_backup", bool(value))

    @property
    def language(self) -> str:
        return self._data.get("language", "en_US")

    @language.setter
    def language(self, value: str) -> None:
        self.set("language", value)
