"""Per-state view rendering — pure functions from machine state to rich Text."""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from rich.text import Text

from savekeeper.core.state_machine import AppState, ListPurpose, ListStyle
from savekeeper.i18n import t
from savekeeper.utils import format_size

if TYPE_CHECKING:
    from savekeeper.config import Config
    from savekeeper.core.selection import SelectionSet
    from savekeeper.core.state_machine import Notification, StateMachine
    from savekeeper.models.backup_record import BackupRecord


def _plain_marker(index: int, selection: SelectionSet) -> str:
    return ""


def _checkbox_marker(index: int, selection: SelectionSet) -> str:
    return "[x] " if index in selection else "[ ] "


_ROW_MARKERS: dict[ListStyle, Callable[[int, "SelectionSet"], str]] = {
    ListStyle.PLAIN: _plain_marker,
    ListStyle.CHECKBOX: _checkbox_marker,
}


def render_rows(
    records: list[BackupRecord],
    cursor: int,
    style: ListStyle,
    selection: SelectionSet,
) -> Text:
    """Draw the backup listing; *style* decides whether rows carry checkboxes."""
    if not records:
        return Text(t("list.empty"), style="dim")

    marker = _ROW_MARKERS[style]
    text = Text()
    for i, record in enumerate(records):
        focused = i == cursor
        text.append("> " if focused else "  ", style="bold cyan")
        text.append(marker(i, selection), style="yellow")
        text.append(record.name, style="bold cyan" if focused else "bold")
        text.append("\n")
        text.append(
            f"    {record.created_at:%Y-%m-%d %H:%M:%S} · {format_size(record.size)}",
            style="dim",
        )
        if i < len(records) - 1:
            text.append("\n")
    return text


def _lines(*keys: str) -> Text:
    return Text("\n".join(t(k) for k in keys))


def _with_error(text: Text, error_key: str) -> Text:
    if error_key:
        text.append("\n\n")
        text.append(t(error_key), style="bold red")
    return text


def render_body(machine: StateMachine, config: Config) -> Text:
    """Main content for the current state."""
    state = machine.state
    session = machine.session

    if state is AppState.INITIALIZING:
        return Text(t("app.initializing"))

    if state is AppState.ERROR:
        text = Text(t("error.title"), style="bold red")
        text.append(f"\n\n{session.error}\n\n", style="red")
        text.append(t("error.exit_hint"))
        return text

    if state is AppState.FIRST_RUN_SAVE_PATH:
        text = Text(t("first_run.welcome"), style="bold")
        text.append("\n\n")
        text.append(_lines("first_run.intro", "first_run.save_path_prompt"))
        return text

    if state is AppState.FIRST_RUN_BACKUP_DIR:
        text = Text(t("first_run.step2_title"), style="bold")
        text.append("\n\n")
        text.append(_lines("first_run.backup_dir_prompt", "first_run.backup_dir_hint"))
        return _with_error(text, session.input_error)

    if state is AppState.MAIN_MENU:
        text = Text(t("menu.prompt"))
        text.append("\n\n")
        text.append(
            _lines("menu.create", "menu.restore", "menu.view", "menu.delete", "menu.settings")
        )
        return text

    if state is AppState.CREATE_BACKUP:
        text = Text(t("create.title"), style="bold")
        text.append("\n\n" + t("create.prompt"))
        return text

    if state is AppState.CHANGE_SAVE_PATH:
        text = Text(t("change_save_path.title"), style="bold")
        text.append("\n\n" + t("change_save_path.prompt"))
        return text

    if state is AppState.CHANGE_BACKUP_DIR:
        text = Text(t("change_backup_dir.title"), style="bold")
        text.append("\n\n" + t("change_backup_dir.prompt"))
        return _with_error(text, session.input_error)

    if state in (AppState.BACKUP_LIST, AppState.DELETING):
        if state is AppState.DELETING:
            title = t("list.title_delete")
        elif session.list_purpose is ListPurpose.RESTORE:
            title = t("list.title_restore")
        else:
            title = t("list.title_view")
        text = Text(title, style="bold")
        text.append("\n\n")
        text.append(
            render_rows(session.records, session.cursor, machine.list_style(), session.selection)
        )
        if state is AppState.DELETING:
            text.append("\n\n")
            text.append(t("list.selected", count=len(session.selection)), style="yellow")
        return text

    if state is AppState.RESTORE_CONFIRMATION:
        record = machine.highlighted
        text = Text(t("restore.confirm_title"), style="bold")
        text.append("\n\n" + t("restore.confirm_msg", name=record.name if record else ""))
        text.append("\n")
        if config.auto_backup:
            text.append(t("restore.auto_backup_on"), style="green")
        else:
            text.append(t("restore.auto_backup_off"), style="bold yellow")
        return text

    if state is AppState.DELETE_CONFIRMATION:
        text = Text(t("delete.confirm_title"), style="bold")
        text.append("\n\n" + t("delete.confirm_msg", count=len(session.selection)))
        text.append("\n")
        text.append(t("delete.cannot_undo"), style="bold red")
        return text

    # Settings
    status = t("settings.on") if config.auto_backup else t("settings.off")
    text = Text(t("settings.title"), style="bold")
    text.append("\n\n")
    text.append(_lines("settings.change_save_path", "settings.change_backup_dir"))
    text.append("\n" + t("settings.auto_backup", status=status))
    text.append("\n\n")
    text.append(t("settings.current_save_path", path=config.save_path or "-"), style="dim")
    text.append("\n")
    text.append(t("settings.current_backup_dir", path=config.backup_dir or "-"), style="dim")
    return text


_HELP_KEYS: dict[AppState, str] = {
    AppState.FIRST_RUN_SAVE_PATH: "help.first_run",
    AppState.FIRST_RUN_BACKUP_DIR: "help.first_run_backup_dir",
    AppState.MAIN_MENU: "help.main_menu",
    AppState.DELETING: "help.deleting",
    AppState.DELETE_CONFIRMATION: "help.delete_confirmation",
    AppState.RESTORE_CONFIRMATION: "help.restore_confirmation",
    AppState.SETTINGS: "help.settings",
    AppState.CREATE_BACKUP: "help.create_backup",
    AppState.CHANGE_SAVE_PATH: "help.text_input",
    AppState.CHANGE_BACKUP_DIR: "help.text_input",
    AppState.ERROR: "help.error",
}


def help_text(machine: StateMachine) -> str:
    state = machine.state
    if state is AppState.INITIALIZING:
        return ""
    if state is AppState.BACKUP_LIST:
        if machine.session.list_purpose is ListPurpose.RESTORE:
            return t("help.backup_list_restore")
        return t("help.backup_list_view")
    return t(_HELP_KEYS[state])


def render_notification(notification: Notification | None) -> Text:
    if notification is None:
        return Text()
    return Text(t(notification.key, **notification.params), style="bold green")
