"""Application context — service container for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from savekeeper.config import Config
    from savekeeper.core.backup import BackupManager
    from savekeeper.core.state_machine import StateMachine


@dataclass
class AppContext:
    """
    Central service container.

    The terminal app receives this at construction time and talks to the
    catalog only through ``machine``.
    """

    config: Config
    backup_manager: BackupManager
    machine: StateMachine
