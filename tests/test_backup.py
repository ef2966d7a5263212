"""Tests for the BackupManager."""

from __future__ import annotations

from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from savekeeper.core.backup import BackupManager, auto_backup_name, resolve_backup_path
from savekeeper.errors import (
    ConfigurationError,
    DestWriteError,
    PersistenceError,
    SourceNotFoundError,
    SourceReadError,
)


class FakeClock:
    """Returns a fixed start time, advancing one second per call."""

    def __init__(self, start: datetime) -> None:
        self._now = start

    def __call__(self) -> datetime:
        now = self._now
        self._now += timedelta(seconds=1)
        return now


@pytest.fixture
def tmp_config(tmp_path: Path):
    """Create a mock Config pointing to a temp directory."""
    config = MagicMock()
    config.save_path = tmp_path / "game" / "slot1.sav"
    config.backup_dir = tmp_path / "backups"
    config.auto_backup = True
    config.save_path.parent.mkdir()
    config.save_path.write_bytes(b"save-v1")
    return config


@pytest.fixture
def manager(tmp_config):
    m = BackupManager(tmp_config, clock=FakeClock(datetime(2024, 1, 1, 10, 0, 0)))
    m.open()
    yield m
    m.close()


class TestNaming:
    def test_auto_backup_name_format(self) -> None:
        assert auto_backup_name(datetime(2024, 1, 1, 10, 0, 0)) == "Backup_2024-01-01_10-00-00"

    def test_resolve_unused_name(self, tmp_path: Path) -> None:
        name, path = resolve_backup_path(tmp_path, "slot")
        assert name == "slot"
        assert path == tmp_path / "slot.sav"

    def test_resolve_skips_taken_names(self, tmp_path: Path) -> None:
        (tmp_path / "slot.sav").write_bytes(b"")
        (tmp_path / "slot_1.sav").write_bytes(b"")
        name, path = resolve_backup_path(tmp_path, "slot")
        assert name == "slot_2"
        assert path == tmp_path / "slot_2.sav"


class TestBackupCreation:
    def test_auto_named_backup(self, manager: BackupManager, tmp_config) -> None:
        record = manager.create_backup("")
        assert record.name == "Backup_2024-01-01_10-00-00"
        expected = tmp_config.backup_dir / "Backup_2024-01-01_10-00-00.sav"
        assert Path(record.path) == expected
        assert expected.read_bytes() == b"save-v1"
        assert [r.name for r in manager.list_backups()] == [record.name]

    def test_repeated_name_gets_suffixes(self, manager: BackupManager) -> None:
        records = [manager.create_backup("slot") for _ in range(4)]
        assert [r.name for r in records] == ["slot", "slot_1", "slot_2", "slot_3"]
        assert len({r.path for r in records}) == 4
        assert Path(records[3].path).name == "slot_3.sav"

    def test_catalog_name_matches_file(self, manager: BackupManager) -> None:
        manager.create_backup("slot")
        manager.create_backup("slot")
        for record in manager.list_backups():
            assert Path(record.path).stem == record.name

    def test_illegal_characters_sanitized(self, manager: BackupManager) -> None:
        record = manager.create_backup("boss/fight?")
        assert record.name == "boss_fight_"
        assert Path(record.path).exists()

    def test_name_of_only_dots_falls_back_to_auto(self, manager: BackupManager) -> None:
        record = manager.create_backup("...")
        assert record.name.startswith("Backup_")

    def test_missing_source(self, manager: BackupManager, tmp_config) -> None:
        tmp_config.save_path.unlink()
        with pytest.raises(SourceNotFoundError):
            manager.create_backup("slot")
        assert manager.list_backups() == []

    def test_unconfigured_paths(self, manager: BackupManager, tmp_config) -> None:
        tmp_config.save_path = None
        with pytest.raises(ConfigurationError):
            manager.create_backup("slot")

    def test_catalog_must_be_open(self, tmp_config) -> None:
        with pytest.raises(PersistenceError):
            BackupManager(tmp_config).create_backup("slot")

    def test_failed_insert_leaves_orphan_file(self, manager: BackupManager, tmp_config, monkeypatch) -> None:
        def fail_insert(*args, **kwargs):
            raise PersistenceError("disk full")

        monkeypatch.setattr(manager.store, "insert", fail_insert)
        with pytest.raises(PersistenceError):
            manager.create_backup("slot")
        assert (tmp_config.backup_dir / "slot.sav").exists()
        monkeypatch.undo()
        assert manager.list_backups() == []


class TestRestore:
    def test_round_trip(self, manager: BackupManager, tmp_config) -> None:
        record = manager.create_backup("slot")
        tmp_config.save_path.write_bytes(b"save-v2")
        manager.restore_backup(record)
        assert tmp_config.save_path.read_bytes() == b"save-v1"

    def test_restore_recreates_missing_save(self, manager: BackupManager, tmp_config) -> None:
        record = manager.create_backup("slot")
        tmp_config.save_path.unlink()
        manager.restore_backup(record)
        assert tmp_config.save_path.read_bytes() == b"save-v1"

    def test_missing_backup_file(self, manager: BackupManager) -> None:
        record = manager.create_backup("slot")
        Path(record.path).unlink()
        with pytest.raises(SourceReadError):
            manager.restore_backup(record)

    def test_unwritable_target(self, manager: BackupManager, tmp_config) -> None:
        record = manager.create_backup("slot")
        tmp_config.save_path.unlink()
        tmp_config.save_path.mkdir()
        with pytest.raises(DestWriteError):
            manager.restore_backup(record)

    def test_symlinked_save_path_restores_target(self, manager: BackupManager, tmp_config, tmp_path: Path) -> None:
        real = tmp_config.save_path
        link = tmp_path / "link.sav"
        link.symlink_to(real)
        tmp_config.save_path = link

        record = manager.create_backup("slot")
        real.write_bytes(b"save-v2")
        manager.restore_backup(record)

        assert link.is_symlink()
        assert real.read_bytes() == b"save-v1"

    def test_read_only_save_file(self, manager: BackupManager, tmp_config, monkeypatch) -> None:
        record = manager.create_backup("slot")
        real_open = open

        def guarded_open(file, mode="r", *args, **kwargs):
            if Path(file) == tmp_config.save_path and "w" in mode:
                raise PermissionError(f"read-only: {file}")
            return real_open(file, mode, *args, **kwargs)

        monkeypatch.setattr("builtins.open", guarded_open)
        with pytest.raises(DestWriteError):
            manager.restore_backup(record)
        monkeypatch.undo()
        assert tmp_config.save_path.read_bytes() == b"save-v1"


class TestDelete:
    def test_empty_delete_is_noop(self, manager: BackupManager) -> None:
        manager.create_backup("slot")
        assert manager.delete_backups([]) == 0
        assert len(manager.list_backups()) == 1

    def test_delete_selected(self, manager: BackupManager) -> None:
        a = manager.create_backup("a")
        b = manager.create_backup("b")
        assert manager.delete_backups([a]) == 1
        assert [r.id for r in manager.list_backups()] == [b.id]
        assert not Path(a.path).exists()


class TestOpen:
    def test_requires_backup_dir(self, tmp_config) -> None:
        tmp_config.backup_dir = None
        with pytest.raises(ConfigurationError):
            BackupManager(tmp_config).open()

    def test_reopen_follows_new_directory(self, manager: BackupManager, tmp_config, tmp_path: Path) -> None:
        manager.create_backup("slot")
        tmp_config.backup_dir = tmp_path / "elsewhere"
        manager.open()
        assert manager.list_backups() == []
        assert manager.store.path.parent == tmp_path / "elsewhere"
