"""Move engine: rename first, copy-then-delete fallback with rollback.

Each move runs ``Start -> TryRename -> Success`` when the filesystem can
rename in place. Otherwise it falls back to ``Copy -> DeleteSource``. If the
source cannot be deleted while still intact, the freshly copied destination
is removed so the move is observably either complete or not done at all.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .containment import check_containment
from .copying import PathArg, copy_directory, copy_file, copy_symlink, ensure_directory
from .deletion import delete_directory, delete_quietly, force_delete
from .entries import Entry, EntryKind, stat_entry
from .errors import (
    AlreadyExists,
    FileOpsError,
    IsADirectory,
    NotADirectory,
    NotFound,
    PermissionOrIOFailure,
)
from .walker import list_entries

logger = logging.getLogger(__name__)


def try_rename(source: Path, destination: Path) -> bool:
    """Attempt an atomic rename, returning ``False`` when the filesystem refuses."""
    try:
        os.rename(source, destination)
    except OSError as exc:
        logger.debug("rename %s -> %s failed, falling back to copy: %s", source, destination, exc)
        return False
    return True


def _existing_source(source: Path) -> Entry:
    entry = stat_entry(source)
    if entry is None:
        raise NotFound(f"Source '{source}' does not exist")
    return entry


def _require_absent(destination: Path) -> None:
    if stat_entry(destination) is not None:
        raise AlreadyExists(f"Destination '{destination}' already exists")


def _prepare_target_directory(target_directory: Path, create_parents: bool) -> None:
    entry = stat_entry(target_directory, follow_symlinks=True)
    if entry is None:
        if not create_parents:
            raise NotFound(f"Destination directory '{target_directory}' does not exist [create_parents=False]")
        ensure_directory(target_directory)
    elif entry.kind is not EntryKind.DIRECTORY:
        raise NotADirectory(f"Destination '{target_directory}' is not a directory")


def _inventory(directory: Path) -> list[tuple[Path, EntryKind, int]] | None:
    """Snapshot of a tree used to tell an intact source from a half-deleted one."""
    try:
        entries = list_entries(directory, include_dirs=True)
    except FileOpsError:
        return None
    return [(entry.path, entry.kind, entry.size) for entry in entries]


def move_file(source: PathArg, destination: PathArg, preserve_timestamps: bool = True) -> None:
    """Move a file or symlink to ``destination``.

    Parent directories of ``destination`` are created. An existing
    destination is a conflict. A symlink source is moved as a link.
    """
    source = Path(source)
    destination = Path(destination)
    entry = _existing_source(source)
    if entry.kind is EntryKind.DIRECTORY:
        raise IsADirectory(f"Source '{source}' is a directory")
    _require_absent(destination)
    ensure_directory(destination.parent)

    if try_rename(source, destination):
        logger.debug("renamed %s -> %s", source, destination)
        return

    try:
        if entry.kind is EntryKind.SYMLINK:
            copy_symlink(source, destination)
        else:
            copy_file(source, destination, preserve_timestamps)
    except FileOpsError:
        delete_quietly(destination)
        raise

    try:
        force_delete(source)
    except OSError as exc:
        if stat_entry(source) is not None:
            logger.warning("could not delete %s after copy, removing %s", source, destination)
            delete_quietly(destination)
            raise PermissionOrIOFailure(
                f"Failed to delete original file '{source}' after copy to '{destination}'"
            ) from exc
        raise PermissionOrIOFailure(
            f"Deleting original file '{source}' failed after it was removed; "
            f"'{destination}' holds the only copy"
        ) from exc
    logger.debug("moved %s -> %s by copy and delete", source, destination)


def move_directory(
    source: PathArg,
    destination: PathArg,
    create_parents: bool = True,
    preserve_timestamps: bool = True,
) -> None:
    """Move directory ``source`` to the exact path ``destination``.

    An existing destination, even an empty directory, is a conflict and is
    never merged into. With ``create_parents`` false a missing destination
    parent fails instead of being created.

    When the copy fallback has to delete the source and that fails, an intact
    source means the destination is rolled back. A source that was already
    partly deleted keeps the complete destination and the failure is
    reported; the caller then owns the leftover pieces of the source.
    """
    source = Path(source)
    destination = Path(destination)
    entry = _existing_source(source)
    if entry.kind is not EntryKind.DIRECTORY:
        raise NotADirectory(f"Source '{source}' is not a directory")
    _require_absent(destination)
    check_containment(source, destination)

    parent = destination.parent
    parent_entry = stat_entry(parent, follow_symlinks=True)
    if parent_entry is None:
        if not create_parents:
            raise NotFound(f"Destination parent directory '{parent}' does not exist")
        ensure_directory(parent)
    elif parent_entry.kind is not EntryKind.DIRECTORY:
        raise NotADirectory(f"Destination parent '{parent}' is not a directory")

    if try_rename(source, destination):
        logger.debug("renamed directory %s -> %s", source, destination)
        return

    snapshot = _inventory(source)
    try:
        copy_directory(source, destination, None, preserve_timestamps)
    except FileOpsError:
        delete_quietly(destination)
        raise

    try:
        delete_directory(source)
    except OSError as exc:
        if snapshot is not None and _inventory(source) == snapshot:
            logger.warning("could not delete %s after copy, removing %s", source, destination)
            delete_quietly(destination)
            raise PermissionOrIOFailure(
                f"Failed to delete original directory '{source}' after copy to '{destination}'"
            ) from exc
        raise PermissionOrIOFailure(
            f"Original directory '{source}' was only partly deleted after copy to "
            f"'{destination}'; the destination holds the complete copy"
        ) from exc
    logger.debug("moved directory %s -> %s by copy and delete", source, destination)


def move_file_to_directory(
    source: PathArg,
    target_directory: PathArg,
    create_parents: bool = True,
) -> Path:
    """Move a file into ``target_directory`` under its own name."""
    source = Path(source)
    target_directory = Path(target_directory)
    entry = _existing_source(source)
    if entry.kind is EntryKind.DIRECTORY:
        raise IsADirectory(f"Source '{source}' is a directory")
    destination = target_directory / source.name
    _prepare_target_directory(target_directory, create_parents)
    move_file(source, destination)
    return destination


def move_directory_to_directory(
    source: PathArg,
    target_directory: PathArg,
    create_parents: bool = True,
) -> Path:
    """Move a directory into ``target_directory`` under its own name."""
    source = Path(source)
    target_directory = Path(target_directory)
    entry = _existing_source(source)
    if entry.kind is not EntryKind.DIRECTORY:
        raise NotADirectory(f"Source '{source}' is not a directory")
    destination = target_directory / source.name
    check_containment(source, destination)
    _prepare_target_directory(target_directory, create_parents)
    move_directory(source, destination)
    return destination


def move_to_directory(
    source: PathArg,
    target_directory: PathArg,
    create_parents: bool = True,
) -> Path:
    """Move a file or directory into ``target_directory``, dispatching on kind."""
    source = Path(source)
    entry = _existing_source(source)
    if entry.kind is EntryKind.DIRECTORY:
        return move_directory_to_directory(source, target_directory, create_parents)
    return move_file_to_directory(source, target_directory, create_parents)


__all__ = [
    "try_rename",
    "move_file",
    "move_directory",
    "move_file_to_directory",
    "move_directory_to_directory",
    "move_to_directory",
]
