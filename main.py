"""Application entry point — wires services and launches the terminal UI."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from savekeeper.config import get_config
from savekeeper.context import AppContext
from savekeeper.core.backup import BackupManager
from savekeeper.core.state_machine import StateMachine
from savekeeper.i18n import set_language
from savekeeper.logger import setup_logger
from savekeeper.ui.app import SaveKeeperApp


def create_context(config_dir: Path | None = None) -> AppContext:
    """Wire all services and return an AppContext."""
    config = get_config(config_dir)

    # Logger
    setup_logger(config.config_dir / "logs")

    # Core services
    backup_manager = BackupManager(config)
    machine = StateMachine(config, backup_manager)

    return AppContext(config=config, backup_manager=backup_manager, machine=machine)


def main() -> int:
    """Application entry point."""
    parser = argparse.ArgumentParser(description="Back up and restore a game save file.")
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=None,
        help="Directory holding config.json and logs (default: ~/Documents/SaveKeeper)",
    )
    args = parser.parse_args()

    # Wire services
    ctx = create_context(args.config_dir)

    # Initialize i18n from config
    set_language(ctx.config.language)

    try:
        SaveKeeperApp(ctx).run()
    finally:
        ctx.backup_manager.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
