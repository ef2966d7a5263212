"""
Interaction state machine — turns user actions into catalog operations.

The machine owns the current/previous state and a per-session context. It is
UI-agnostic: a front end maps keys to :class:`Action` values, calls
:meth:`StateMachine.dispatch`, then renders ``state`` and ``session``.
Catalog calls run synchronously inside ``dispatch``; a long copy blocks the
caller until it finishes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Callable

from loguru import logger

from savekeeper.core.selection import SelectionSet
from savekeeper.errors import SaveKeeperError
from savekeeper.utils import check_writable

if TYPE_CHECKING:
    from pathlib import Path

    from savekeeper.config import Config
    from savekeeper.core.backup import BackupManager
    from savekeeper.models.backup_record import BackupRecord


class AppState(StrEnum):
    INITIALIZING = "initializing"
    MAIN_MENU = "main_menu"
    BACKUP_LIST = "backup_list"
    CREATE_BACKUP = "create_backup"
    RESTORE_CONFIRMATION = "restore_confirmation"
    DELETING = "deleting"
    DELETE_CONFIRMATION = "delete_confirmation"
    SETTINGS = "settings"
    CHANGE_SAVE_PATH = "change_save_path"
    CHANGE_BACKUP_DIR = "change_backup_dir"
    FIRST_RUN_SAVE_PATH = "first_run_save_path"
    FIRST_RUN_BACKUP_DIR = "first_run_backup_dir"
    ERROR = "error"


class ListPurpose(StrEnum):
    RESTORE = "restore"
    VIEW = "view"


class ListStyle(StrEnum):
    """How backup rows are drawn."""

    PLAIN = "plain"
    CHECKBOX = "checkbox"


class Action(StrEnum):
    CREATE = "create"
    RESTORE = "restore"
    VIEW = "view"
    DELETE = "delete"
    SETTINGS = "settings"
    UP = "up"
    DOWN = "down"
    TOGGLE = "toggle"
    SELECT_ALL = "select_all"
    DESELECT_ALL = "deselect_all"
    SUBMIT = "submit"
    CONFIRM = "confirm"
    DECLINE = "decline"
    BACK = "back"
    CHANGE_SAVE_PATH = "change_save_path"
    CHANGE_BACKUP_DIR = "change_backup_dir"
    TOGGLE_AUTO_BACKUP = "toggle_auto_backup"
    QUIT = "quit"


INPUT_STATES = frozenset(
    {
        AppState.CREATE_BACKUP,
        AppState.CHANGE_SAVE_PATH,
        AppState.CHANGE_BACKUP_DIR,
        AppState.FIRST_RUN_SAVE_PATH,
        AppState.FIRST_RUN_BACKUP_DIR,
    }
)


@dataclass(frozen=True)
class Notification:
    """Transient message; ``key``/``params`` are an i18n key and its arguments."""

    token: int
    key: str
    params: dict[str, Any] = field(default_factory=dict)


class Notifier:
    """Holds at most one notification; clears carrying an old token are ignored."""

    def __init__(self) -> None:
        self._current: Notification | None = None
        self._counter = 0

    @property
    def current(self) -> Notification | None:
        return self._current

    def show(self, key: str, **params: Any) -> Notification:
        self._counter += 1
        self._current = Notification(self._counter, key, params)
        return self._current

    def clear(self, token: int | None = None) -> bool:
        """Clear the notification; with *token*, only if it is still the shown one."""
        if self._current is None:
            return False
        if token is not None and token != self._current.token:
            return False
        self._current = None
        return True


@dataclass
class Session:
    """Per-run interaction context owned by the state machine."""

    records: list[BackupRecord] = field(default_factory=list)
    cursor: int = 0
    list_purpose: ListPurpose = ListPurpose.VIEW
    selection: SelectionSet = field(default_factory=SelectionSet)
    # Save path entered in the first setup step, awaiting the backup directory
    pending_save_path: str | None = None
    input_error: str = ""  # i18n key
    error: str = ""


@dataclass
class Outcome:
    handled: bool = True
    notification: Notification | None = None
    quit: bool = False


Handler = Callable[[str], "Notification | None"]


class StateMachine:
    """Sequences user intent into BackupManager calls."""

    def __init__(
        self,
        config: Config,
        manager: BackupManager,
        probe: Callable[[str | Path], None] = check_writable,
    ) -> None:
        self._config = config
        self._manager = manager
        self._probe = probe
        initial = AppState.FIRST_RUN_SAVE_PATH if config.is_first_run else AppState.INITIALIZING
        self._current = initial
        self._previous = initial
        self.session = Session()
        self.notifier = Notifier()

        list_nav: dict[Action, Handler] = {
            Action.UP: lambda _: self._move_cursor(-1),
            Action.DOWN: lambda _: self._move_cursor(1),
            Action.BACK: self._back_to_menu,
        }
        self._handlers: dict[AppState, dict[Action, Handler]] = {
            AppState.MAIN_MENU: {
                Action.CREATE: lambda _: self._enter_input(AppState.CREATE_BACKUP),
                Action.RESTORE: lambda _: self._enter_list(ListPurpose.RESTORE),
                Action.VIEW: lambda _: self._enter_list(ListPurpose.VIEW),
                Action.DELETE: self._enter_deleting,
                Action.SETTINGS: lambda _: self._transition(AppState.SETTINGS),
            },
            AppState.CREATE_BACKUP: {
                Action.SUBMIT: self._submit_create,
                Action.BACK: self._cancel_input,
            },
            AppState.BACKUP_LIST: {
                **list_nav,
                Action.SUBMIT: self._submit_list,
            },
            AppState.RESTORE_CONFIRMATION: {
                Action.CONFIRM: self._confirm_restore,
                Action.DECLINE: self._back_to_menu,
                Action.BACK: self._back_to_menu,
            },
            AppState.DELETING: {
                **list_nav,
                Action.TOGGLE: self._toggle_selection,
                Action.SELECT_ALL: lambda _: self.session.selection.select_all(len(self.session.records)),
                Action.DESELECT_ALL: lambda _: self.session.selection.clear(),
                Action.SUBMIT: self._submit_deleting,
            },
            AppState.DELETE_CONFIRMATION: {
                Action.CONFIRM: self._confirm_delete,
                Action.DECLINE: lambda _: self._transition(AppState.DELETING),
                Action.BACK: lambda _: self._transition(AppState.DELETING),
            },
            AppState.SETTINGS: {
                Action.CHANGE_SAVE_PATH: lambda _: self._enter_input(AppState.CHANGE_SAVE_PATH),
                Action.CHANGE_BACKUP_DIR: lambda _: self._enter_input(AppState.CHANGE_BACKUP_DIR),
                Action.TOGGLE_AUTO_BACKUP: self._toggle_auto_backup,
                Action.BACK: self._back_to_menu,
            },
            AppState.CHANGE_SAVE_PATH: {
                Action.SUBMIT: self._submit_save_path,
                Action.BACK: self._cancel_input,
            },
            AppState.CHANGE_BACKUP_DIR: {
                Action.SUBMIT: self._submit_backup_dir,
                Action.BACK: self._cancel_input,
            },
            AppState.FIRST_RUN_SAVE_PATH: {
                Action.SUBMIT: self._submit_first_run_save_path,
            },
            AppState.FIRST_RUN_BACKUP_DIR: {
                Action.SUBMIT: self._submit_first_run_backup_dir,
                Action.BACK: self._cancel_input,
            },
        }

    # ── State access ──

    @property
    def state(self) -> AppState:
        return self._current

    @property
    def previous(self) -> AppState:
        return self._previous

    @property
    def highlighted(self) -> BackupRecord | None:
        records = self.session.records
        if 0 <= self.session.cursor < len(records):
            return records[self.session.cursor]
        return None

    def list_style(self) -> ListStyle | None:
        """Row style for the current state, or None when no list is shown."""
        if self._current is AppState.DELETING:
            return ListStyle.CHECKBOX
        if self._current is AppState.BACKUP_LIST:
            return ListStyle.PLAIN
        return None

    def valid_actions(self) -> frozenset[Action]:
        return frozenset(self._handlers.get(self._current, {})) | {Action.QUIT}

    def _transition(self, new_state: AppState) -> None:
        logger.debug(f"State {self._current} -> {new_state}")
        self._previous = self._current
        self._current = new_state

    # ── Event entry points ──

    def start(self) -> Outcome:
        """Open the catalog when starting with an existing configuration."""
        if self._current is AppState.INITIALIZING:
            try:
                self._initialize()
            except SaveKeeperError as e:
                self._fail(e)
        return Outcome()

    def dispatch(self, action: Action, text: str = "") -> Outcome:
        """Process one user action to completion."""
        if action is Action.QUIT:
            return Outcome(quit=True)

        handler = self._handlers.get(self._current, {}).get(action)
        if handler is None:
            return Outcome(handled=False)

        try:
            notification = handler(text)
        except SaveKeeperError as e:
            self._fail(e)
            return Outcome()
        return Outcome(notification=notification)

    def clear_notification(self, token: int) -> bool:
        """Timer callback; stale tokens are discarded."""
        return self.notifier.clear(token)

    def _fail(self, error: SaveKeeperError) -> None:
        logger.error(f"{type(error).__name__} in {self._current}: {error}")
        self.session.error = str(error)
        self.notifier.clear()
        self._transition(AppState.ERROR)

    # ── Navigation ──

    def _initialize(self) -> None:
        self._manager.open()
        self._transition(AppState.MAIN_MENU)

    def _back_to_menu(self, _: str = "") -> None:
        self.session.selection.clear()
        self.notifier.clear()
        self._transition(AppState.MAIN_MENU)

    def _enter_input(self, state: AppState) -> None:
        self.session.input_error = ""
        self._transition(state)

    def _cancel_input(self, _: str) -> None:
        self.session.input_error = ""
        if self._current is AppState.FIRST_RUN_BACKUP_DIR:
            self.session.pending_save_path = None
            self._transition(AppState.FIRST_RUN_SAVE_PATH)
        elif self._current is AppState.CREATE_BACKUP:
            self._transition(AppState.MAIN_MENU)
        else:
            self._transition(AppState.SETTINGS)

    def _load_listing(self) -> None:
        # A fresh listing invalidates any marks made on the old one
        self.session.selection.clear()
        self.session.records = self._manager.list_backups()
        self.session.cursor = 0

    def _enter_list(self, purpose: ListPurpose) -> None:
        self._load_listing()
        self.session.list_purpose = purpose
        self._transition(AppState.BACKUP_LIST)

    def _enter_deleting(self, _: str) -> None:
        self._load_listing()
        self._transition(AppState.DELETING)

    def _move_cursor(self, step: int) -> None:
        count = len(self.session.records)
        if count:
            self.session.cursor = max(0, min(count - 1, self.session.cursor + step))

    # ── Create ──

    def _submit_create(self, text: str) -> Notification:
        record = self._manager.create_backup(text.strip())
        self._transition(AppState.MAIN_MENU)
        return self.notifier.show("notify.created", name=record.name)

    # ── Restore ──

    def _submit_list(self, _: str) -> None:
        if self.session.list_purpose is ListPurpose.RESTORE and self.highlighted is not None:
            self._transition(AppState.RESTORE_CONFIRMATION)

    def _confirm_restore(self, _: str) -> Notification | None:
        record = self.highlighted
        if record is None:
            self._back_to_menu()
            return None
        if self._config.auto_backup:
            auto = self._manager.create_backup("")
            logger.info(f"Auto-backup before restore: {auto.name}")
        self._manager.restore_backup(record)
        self._transition(AppState.MAIN_MENU)
        return self.notifier.show("notify.restored", name=record.name)

    # ── Delete ──

    def _toggle_selection(self, _: str) -> None:
        if self.highlighted is not None:
            self.session.selection.toggle(self.session.cursor)

    def _submit_deleting(self, _: str) -> None:
        if len(self.session.selection):
            self._transition(AppState.DELETE_CONFIRMATION)

    def _confirm_delete(self, _: str) -> Notification:
        targets = self.session.selection.pick(self.session.records)
        try:
            count = self._manager.delete_backups(targets)
        finally:
            self.session.selection.clear()
        self._transition(AppState.MAIN_MENU)
        return self.notifier.show("notify.deleted", count=count)

    # ── Settings ──

    def _toggle_auto_backup(self, _: str) -> Notification:
        self._config.auto_backup = not self._config.auto_backup
        key = "notify.auto_backup_on" if self._config.auto_backup else "notify.auto_backup_off"
        return self.notifier.show(key)

    def _submit_save_path(self, text: str) -> Notification | None:
        value = text.strip()
        if not value:
            return None
        self._config.save_path = value
        self._transition(AppState.SETTINGS)
        return self.notifier.show("notify.save_path", path=self._config.save_path)

    def _writable(self, value: str) -> bool:
        try:
            self._probe(value)
        except OSError as e:
            logger.warning(f"Backup directory not writable: {value}: {e}")
            self.session.input_error = "error.not_writable"
            return False
        self.session.input_error = ""
        return True

    def _submit_backup_dir(self, text: str) -> Notification | None:
        value = text.strip()
        if not value or not self._writable(value):
            return None
        self._config.backup_dir = value
        self._manager.open()
        self._transition(AppState.SETTINGS)
        return self.notifier.show("notify.backup_dir", path=self._config.backup_dir)

    # ── First run ──

    def _submit_first_run_save_path(self, text: str) -> None:
        value = text.strip()
        if not value:
            return
        self.session.pending_save_path = value
        self._enter_input(AppState.FIRST_RUN_BACKUP_DIR)

    def _submit_first_run_backup_dir(self, text: str) -> None:
        value = text.strip()
        if not value or not self._writable(value):
            return
        with self._config.batch_update():
            self._config.save_path = self.session.pending_save_path
            self._config.backup_dir = value
        self.session.pending_save_path = None
        self._transition(AppState.INITIALIZING)
        self._initialize()
