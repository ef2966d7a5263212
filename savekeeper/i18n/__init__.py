"""Key-based UI strings; one JSON table per language in this directory."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from loguru import logger

DEFAULT_LANGUAGE = "en_US"
_TABLE_DIR = Path(__file__).parent
_SUPPORTED = frozenset(p.stem for p in _TABLE_DIR.glob("*.json"))

_language = DEFAULT_LANGUAGE
_tables: dict[str, dict[str, str]] = {}


def _table(language: str) -> dict[str, str]:
    table = _tables.get(language)
    if table is None:
        try:
            with open(_TABLE_DIR / f"{language}.json", "r", encoding="utf-8") as f:
                table = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"String table {language} unavailable: {e}")
            table = {}
        _tables[language] = table
    return table


def set_language(language: str) -> None:
    """Switch the active table; unknown codes fall back to en_US."""
    global _language
    if language not in _SUPPORTED:
        logger.info(f"Unsupported language {language!r}, using {DEFAULT_LANGUAGE}")
        language = DEFAULT_LANGUAGE
    _language = language


def current_language() -> str:
    return _language


def t(key: str, **params: Any) -> str:
    """
    Look up *key* in the active table, then in en_US, then return the key.

    ``{name}`` placeholders are filled from *params*; a template missing a
    parameter is returned unformatted.
    """
    text = _table(_language).get(key) or _table(DEFAULT_LANGUAGE).get(key, key)
    if not params:
        return text
    try:
        return text.format(**params)
    except (KeyError, IndexError) as e:
        logger.debug(f"String {key!r} missing parameter {e}")
        return text
