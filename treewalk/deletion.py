"""Recursive deletion built on post-order traversal.

Directories are reported after their contents, so each directory is already
empty when it is removed. Symlinks are unlinked, never followed.
``delete_quietly`` is the only variant that suppresses failures.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .entries import Entry, EntryKind, stat_entry
from .errors import NotADirectory, NotFound, io_failure
from .walker import TraversalOrder, TreeVisitor, walk_tree

logger = logging.getLogger(__name__)


def _remove_entry(entry: Entry) -> None:
    with io_failure("delete", entry.path):
        if entry.kind is EntryKind.DIRECTORY:
            os.rmdir(entry.path)
        else:
            os.unlink(entry.path)


def clean_directory(directory: Path) -> None:
    """Delete everything inside ``directory`` but keep the directory."""
    directory = Path(directory)
    entry = stat_entry(directory, follow_symlinks=True)
    if entry is None:
        raise NotFound(f"Directory '{directory}' does not exist")
    if entry.kind is not EntryKind.DIRECTORY:
        raise NotADirectory(f"'{directory}' is not a directory")

    def remove(child: Entry, depth: int) -> None:
        _remove_entry(child)

    walk_tree(directory, None, TreeVisitor(on_entry=remove), order=TraversalOrder.POST_ORDER)


def delete_directory(directory: Path) -> None:
    """Recursively delete ``directory``; a missing directory is a no-op.

    A symlink to a directory is removed as a link, its target is untouched.
    """
    directory = Path(directory)
    entry = stat_entry(directory)
    if entry is None:
        return
    if entry.kind is EntryKind.SYMLINK:
        _remove_entry(entry)
        return
    if entry.kind is not EntryKind.DIRECTORY:
        raise NotADirectory(f"'{directory}' is not a directory")
    logger.debug("deleting directory %s", directory)
    clean_directory(directory)
    _remove_entry(entry)


def force_delete(path: Path) -> None:
    """Delete a file, symlink, or directory tree; missing paths are an error."""
    path = Path(path)
    entry = stat_entry(path)
    if entry is None:
        raise NotFound(f"File does not exist: '{path}'")
    if entry.kind is EntryKind.DIRECTORY:
        delete_directory(path)
    else:
        logger.debug("deleting %s", path)
        _remove_entry(entry)


def delete_quietly(path: Path | None) -> bool:
    """Delete ``path`` if possible, never raising.

    Returns whether the path is gone afterwards because of this call.
    Failures are logged at debug level and otherwise discarded.
    """
    if path is None:
        return False
    path = Path(path)
    entry = stat_entry(path)
    if entry is None:
        return False
    if entry.kind is EntryKind.DIRECTORY:
        try:
            clean_directory(path)
        except OSError as exc:
            logger.debug("quiet clean of %s failed: %s", path, exc)
    try:
        _remove_entry(entry)
    except OSError as exc:
        logger.debug("quiet delete of %s failed: %s", path, exc)
        return False
    return True


__all__ = [
    "clean_directory",
    "delete_directory",
    "force_delete",
    "delete_quietly",
]
