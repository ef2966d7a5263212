"""UI constants — key bindings per state, prompts, timings."""

from __future__ import annotations

from savekeeper.core.state_machine import Action, AppState

# Seconds a notification stays on screen
NOTIFICATION_SECONDS = 2.0

_LIST_KEYS: dict[str, Action] = {
    "up": Action.UP,
    "k": Action.UP,
    "down": Action.DOWN,
    "j": Action.DOWN,
    "enter": Action.SUBMIT,
    "q": Action.BACK,
    "escape": Action.BACK,
}

_CONFIRM_KEYS: dict[str, Action] = {
    "y": Action.CONFIRM,
    "Y": Action.CONFIRM,
    "n": Action.DECLINE,
    "N": Action.DECLINE,
    "q": Action.BACK,
    "escape": Action.BACK,
}

# Keys outside text-input states; input states only map escape → BACK
KEY_ACTIONS: dict[AppState, dict[str, Action]] = {
    AppState.MAIN_MENU: {
        "1": Action.CREATE,
        "2": Action.RESTORE,
        "3": Action.VIEW,
        "4": Action.DELETE,
        "5": Action.SETTINGS,
    },
    AppState.BACKUP_LIST: _LIST_KEYS,
    AppState.DELETING: {
        **_LIST_KEYS,
        "space": Action.TOGGLE,
        "right": Action.SELECT_ALL,
        "left": Action.DESELECT_ALL,
    },
    AppState.RESTORE_CONFIRMATION: _CONFIRM_KEYS,
    AppState.DELETE_CONFIRMATION: _CONFIRM_KEYS,
    AppState.SETTINGS: {
        "1": Action.CHANGE_SAVE_PATH,
        "2": Action.CHANGE_BACKUP_DIR,
        "3": Action.TOGGLE_AUTO_BACKUP,
        "q": Action.BACK,
        "escape": Action.BACK,
    },
}

# i18n keys for the text input placeholder
PLACEHOLDERS: dict[AppState, str] = {
    AppState.CREATE_BACKUP: "create.placeholder",
    AppState.CHANGE_SAVE_PATH: "change_save_path.placeholder",
    AppState.CHANGE_BACKUP_DIR: "change_backup_dir.placeholder",
    AppState.FIRST_RUN_SAVE_PATH: "first_run.save_path_placeholder",
    AppState.FIRST_RUN_BACKUP_DIR: "first_run.backup_dir_placeholder",
}

# Character limit for backup names
NAME_MAX_LENGTH = 156
