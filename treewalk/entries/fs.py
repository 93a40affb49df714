"""Filesystem enumeration primitives producing ``Entry`` values."""

from __future__ import annotations

import os
import stat as stat_module
from pathlib import Path

from .types import Entry, EntryKind


def _kind_from_mode(mode: int) -> EntryKind:
    if stat_module.S_ISLNK(mode):
        return EntryKind.SYMLINK
    if stat_module.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    return EntryKind.FILE


def _entry_from_stat(path: Path, result: os.stat_result) -> Entry:
    kind = _kind_from_mode(result.st_mode)
    size = 0 if kind is EntryKind.DIRECTORY else int(result.st_size)
    return Entry(path=path, kind=kind, size=size, mtime_ns=int(result.st_mtime_ns))


def _entry_without_stat(path: Path, child: os.DirEntry[str]) -> Entry:
    """Entry for a child whose ``lstat`` failed, typed from the listing alone.

    Size and mtime are unknown and reported as ``0``.
    """
    try:
        if child.is_symlink():
            kind = EntryKind.SYMLINK
        elif child.is_dir(follow_symlinks=False):
            kind = EntryKind.DIRECTORY
        else:
            kind = EntryKind.FILE
    except OSError:
        kind = EntryKind.FILE
    return Entry(path=path, kind=kind)


def stat_entry(path: Path, follow_symlinks: bool = False) -> Entry | None:
    """Return an ``Entry`` for ``path`` or ``None`` when it does not exist.

    Without ``follow_symlinks`` a symlink is reported as ``SYMLINK`` even
    when it points at a directory. A dangling symlink followed with
    ``follow_symlinks=True`` counts as missing.
    """
    path = Path(path)
    try:
        result = os.stat(path, follow_symlinks=follow_symlinks)
    except (FileNotFoundError, NotADirectoryError):
        return None
    return _entry_from_stat(path, result)


def list_directory_entries(directory: Path) -> tuple[list[Entry], OSError | None]:
    """List immediate children of ``directory`` sorted by name.

    Returns ``(entries, scan_error)``. ``scan_error`` is set when the
    directory cannot be scanned; callers decide whether that is fatal.
    Children that vanish between listing and stat are dropped; children that
    cannot be stat'ed are kept with size and mtime 0.
    """
    directory = Path(directory)
    entries: list[Entry] = []
    try:
        with os.scandir(directory) as children:
            for child in children:
                try:
                    result = child.stat(follow_symlinks=False)
                except FileNotFoundError:
                    continue
                except OSError:
                    entries.append(_entry_without_stat(directory / child.name, child))
                    continue
                entries.append(_entry_from_stat(directory / child.name, result))
    except OSError as exc:
        return [], exc

    entries.sort(key=lambda item: item.name)
    return entries, None


__all__ = [
    "stat_entry",
    "list_directory_entries",
]
