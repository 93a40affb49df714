"""Persistent JSON config helpers.

Stores command-line defaults: timestamp preservation, copy buffer size,
error skipping during walks, and hidden/gitignored visibility.
All access is defensive: malformed or missing config falls back safely.
Library functions never read this file; only ``treewalk.cli`` does.
"""

from __future__ import annotations

import json
from pathlib import Path

from platformdirs import user_config_dir

from .copying import DEFAULT_COPY_BUFFER_SIZE

APP_NAME = "treewalk"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> None:
    """Persist config data as pretty-printed JSON.

    Filesystem errors are ignored so an unwritable config never breaks a
    command.
    """
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError:
        pass


def _load_bool(key: str, default: bool) -> bool:
    """Only explicit booleans are accepted; anything else yields ``default``."""
    value = load_config().get(key)
    return value if isinstance(value, bool) else default


def _save_bool(key: str, value: bool) -> None:
    config = load_config()
    config[key] = bool(value)
    save_config(config)


def load_preserve_timestamps() -> bool:
    """Whether copies and fallback moves keep source modification times."""
    return _load_bool("preserve_timestamps", True)


def save_preserve_timestamps(preserve: bool) -> None:
    _save_bool("preserve_timestamps", preserve)


def load_skip_errors() -> bool:
    """Whether walks skip unreadable directories instead of aborting."""
    return _load_bool("skip_errors", False)


def save_skip_errors(skip_errors: bool) -> None:
    _save_bool("skip_errors", skip_errors)


def load_show_hidden() -> bool:
    """Whether listings include dotfiles."""
    return _load_bool("show_hidden", True)


def save_show_hidden(show_hidden: bool) -> None:
    _save_bool("show_hidden", show_hidden)


def load_skip_gitignored() -> bool:
    """Whether listings hide paths git reports as ignored."""
    return _load_bool("skip_gitignored", False)


def save_skip_gitignored(skip_gitignored: bool) -> None:
    _save_bool("skip_gitignored", skip_gitignored)


def load_copy_buffer_size() -> int:
    """Copy chunk size in bytes.

    Booleans, non-integers and values below one fall back to the default.
    """
    value = load_config().get("copy_buffer_size")
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return DEFAULT_COPY_BUFFER_SIZE
    return value


def save_copy_buffer_size(buffer_size: int) -> None:
    if buffer_size < 1:
        return
    config = load_config()
    config["copy_buffer_size"] = int(buffer_size)
    save_config(config)
