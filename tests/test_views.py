"""Tests for i18n lookups and per-state view rendering."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from savekeeper.core.selection import SelectionSet
from savekeeper.core.state_machine import AppState, ListPurpose, ListStyle, Notifier, Session
from savekeeper.i18n import current_language, set_language, t
from savekeeper.models.backup_record import BackupRecord
from savekeeper.ui.views import help_text, render_body, render_notification, render_rows


@pytest.fixture(autouse=True)
def _english():
    set_language("en_US")
    yield
    set_language("en_US")


@pytest.fixture
def records(tmp_path: Path) -> list[BackupRecord]:
    result = []
    for i, name in enumerate(["newest", "oldest"]):
        path = tmp_path / f"{name}.sav"
        path.write_bytes(b"x" * 2048)
        result.append(BackupRecord(id=i + 1, name=name, path=str(path), created_at=datetime(2024, 1, 2 - i, 10)))
    return result


def _machine(state: AppState, session: Session | None = None, style: ListStyle | None = None):
    machine = MagicMock()
    machine.state = state
    machine.session = session or Session()
    machine.list_style.return_value = style
    machine.highlighted = machine.session.records[0] if machine.session.records else None
    machine.notifier = Notifier()
    return machine


class TestI18n:
    def test_formats_placeholders(self) -> None:
        assert t("notify.deleted", count=3) == "Deleted 3 backup(s)"

    def test_missing_parameter_leaves_template(self) -> None:
        assert t("notify.deleted", name="x") == "Deleted {count} backup(s)"

    def test_unknown_key_returns_key(self) -> None:
        assert t("no.such.key") == "no.such.key"

    def test_unsupported_language_falls_back(self) -> None:
        set_language("xx_XX")
        assert current_language() == "en_US"

    def test_chinese_table(self) -> None:
        set_language("zh_CN")
        assert t("notify.deleted", count=2) == "已删除 2 个备份"


class TestRows:
    def test_plain_rows(self, records: list[BackupRecord]) -> None:
        text = render_rows(records, 0, ListStyle.PLAIN, SelectionSet()).plain
        assert "> newest" in text
        assert "  oldest" in text
        assert "[ ]" not in text
        assert "2.0 KB" in text
        assert "2024-01-02 10:00:00" in text

    def test_checkbox_rows(self, records: list[BackupRecord]) -> None:
        selection = SelectionSet()
        selection.toggle(1)
        text = render_rows(records, 0, ListStyle.CHECKBOX, selection).plain
        assert "> [ ] newest" in text
        assert "  [x] oldest" in text

    def test_empty_listing(self) -> None:
        assert render_rows([], 0, ListStyle.PLAIN, SelectionSet()).plain == "No backups yet."


class TestBody:
    def test_main_menu(self) -> None:
        text = render_body(_machine(AppState.MAIN_MENU), MagicMock()).plain
        assert "1. Create Backup" in text
        assert "5. Settings" in text

    def test_error_shows_message(self) -> None:
        session = Session(error="Save file not found: /x")
        text = render_body(_machine(AppState.ERROR, session), MagicMock()).plain
        assert "A critical error occurred" in text
        assert "Save file not found: /x" in text

    def test_deleting_shows_checkboxes_and_count(self, records: list[BackupRecord]) -> None:
        session = Session(records=records)
        session.selection.select_all(2)
        machine = _machine(AppState.DELETING, session, ListStyle.CHECKBOX)
        text = render_body(machine, MagicMock()).plain
        assert "Select backups to delete" in text
        assert "[x] newest" in text
        assert "2 selected" in text

    def test_restore_confirmation_mentions_auto_backup(self, records: list[BackupRecord]) -> None:
        config = MagicMock()
        config.auto_backup = False
        machine = _machine(AppState.RESTORE_CONFIRMATION, Session(records=records))
        text = render_body(machine, config).plain
        assert "Restore 'newest'" in text
        assert "Auto-backup is OFF" in text

    def test_first_run_backup_dir_error(self) -> None:
        session = Session(input_error="error.not_writable")
        text = render_body(_machine(AppState.FIRST_RUN_BACKUP_DIR, session), MagicMock()).plain
        assert "not writable" in text

    def test_settings_shows_current_values(self) -> None:
        config = MagicMock()
        config.auto_backup = True
        config.save_path = Path("/games/slot1.sav")
        config.backup_dir = None
        text = render_body(_machine(AppState.SETTINGS), config).plain
        assert "Auto-Backup Before Restore: ON" in text
        assert "/games/slot1.sav" in text
        assert "Backup directory: -" in text


class TestHelp:
    def test_list_help_depends_on_purpose(self) -> None:
        session = Session(list_purpose=ListPurpose.RESTORE)
        assert "restore backup" in help_text(_machine(AppState.BACKUP_LIST, session))
        session = Session(list_purpose=ListPurpose.VIEW)
        assert "restore" not in help_text(_machine(AppState.BACKUP_LIST, session))

    def test_every_state_has_help(self) -> None:
        for state in AppState:
            if state is AppState.BACKUP_LIST:
                continue
            help_text(_machine(state))

    def test_notification(self) -> None:
        notifier = Notifier()
        note = notifier.show("notify.created", name="boss")
        assert render_notification(note).plain == "Backup created successfully: boss"
        assert render_notification(None).plain == ""
