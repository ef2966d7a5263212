"""Shared utility functions."""

from __future__ import annotations

from pathlib import Path

ILLEGAL_FILENAME_CHARS = '<>:"/\\|?*'
WRITE_PROBE_NAME = ".tmp_write_test"


def format_size(size_bytes: int) -> str:
    """Format byte count to human-readable string."""
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.2f} GB"


def sanitize_filename(name: str) -> str:
    """Remove or replace illegal filename characters."""
    for ch in ILLEGAL_FILENAME_CHARS:
        name = name.replace(ch, "_")
    name = name.replace("\n", " ").replace("\r", "").strip()
    # Collapse runs of spaces
    while "  " in name:
        name = name.replace("  ", " ")
    return name.strip(". ")


def check_writable(directory: str | Path) -> None:
    """
    Create *directory* if absent and prove it accepts writes.

    Raises OSError when the directory cannot be created or written.
    """
    directory = Path(directory).expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    probe = directory / WRITE_PROBE_NAME
    probe.write_bytes(b"test")
    probe.unlink()


def is_writable(directory: str | Path) -> bool:
    try:
        check_writable(directory)
    except OSError:
        return False
    return True
