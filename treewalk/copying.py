"""Copy engine: verified single-file copies and filtered directory mirroring.

Directory copies run in two passes. The first walks the source and mirrors
directories, files, and symlinks. The second applies directory modification
times deepest first, because populating a directory updates its own mtime.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterable
from pathlib import Path

from .containment import check_containment, check_same_path
from .entries import Entry, EntryKind, stat_entry
from .errors import (
    IncompleteTransfer,
    IsADirectory,
    NotADirectory,
    NotFound,
    PermissionOrIOFailure,
    io_failure,
)
from .filters import FilterPair, PathFilter
from .walker import TreeVisitor, walk_tree

logger = logging.getLogger(__name__)

DEFAULT_COPY_BUFFER_SIZE = 1024 * 1024

PathArg = str | os.PathLike[str]


def file_length(path: Path) -> int:
    """Reported byte length of ``path`` used by the post-copy check."""
    with io_failure("stat", path):
        return os.stat(path).st_size


def set_mtime(path: Path, mtime_ns: int) -> None:
    """Set the modification time of ``path``, keeping its access time."""
    with io_failure("set modification time of", path):
        atime_ns = os.stat(path).st_atime_ns
        os.utime(path, ns=(atime_ns, mtime_ns))


def ensure_directory(path: Path) -> None:
    """Create ``path`` and its parents, accepting an existing directory."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except FileExistsError as exc:
        raise NotADirectory(f"Destination '{path}' exists but is not a directory") from exc
    except OSError as exc:
        raise PermissionOrIOFailure(f"Failed to create directory '{path}': {exc}") from exc


def _existing_file(source: Path) -> Entry:
    entry = stat_entry(source, follow_symlinks=True)
    if entry is None:
        raise NotFound(f"Source '{source}' does not exist")
    if entry.kind is EntryKind.DIRECTORY:
        raise IsADirectory(f"Source '{source}' exists but is a directory")
    return entry


def _existing_directory(source: Path) -> Entry:
    entry = stat_entry(source, follow_symlinks=True)
    if entry is None:
        raise NotFound(f"Source '{source}' does not exist")
    if entry.kind is not EntryKind.DIRECTORY:
        raise NotADirectory(f"Source '{source}' exists but is not a directory")
    return entry


def _directory_or_absent(directory: Path) -> None:
    entry = stat_entry(directory, follow_symlinks=True)
    if entry is not None and entry.kind is not EntryKind.DIRECTORY:
        raise NotADirectory(f"Destination '{directory}' is not a directory")


def copy_file(
    source: PathArg,
    destination: PathArg,
    preserve_timestamps: bool = True,
    *,
    buffer_size: int = DEFAULT_COPY_BUFFER_SIZE,
) -> None:
    """Copy one file, creating parent directories of ``destination``.

    An existing destination file is overwritten. After streaming, the
    destination length must equal the source length; on mismatch
    ``IncompleteTransfer`` is raised and the destination is left in place
    for inspection. The source mtime is applied only after that check.
    """
    source = Path(source)
    destination = Path(destination)
    source_entry = _existing_file(source)
    destination_entry = stat_entry(destination, follow_symlinks=True)
    if destination_entry is not None and destination_entry.kind is EntryKind.DIRECTORY:
        raise IsADirectory(f"Destination '{destination}' exists but is a directory")
    check_same_path(source, destination)

    ensure_directory(destination.parent)
    logger.debug("copying file %s -> %s", source, destination)
    with io_failure("copy to", destination):
        with source.open("rb") as reader, destination.open("wb") as writer:
            shutil.copyfileobj(reader, writer, buffer_size)

    source_length = file_length(source)
    destination_length = file_length(destination)
    if source_length != destination_length:
        raise IncompleteTransfer(
            f"Failed to copy full contents from '{source}' to '{destination}' "
            f"Expected length: {source_length} Actual: {destination_length}"
        )
    if preserve_timestamps:
        set_mtime(destination, source_entry.mtime_ns)


def copy_file_to_directory(
    source: PathArg,
    directory: PathArg,
    preserve_timestamps: bool = True,
    *,
    buffer_size: int = DEFAULT_COPY_BUFFER_SIZE,
) -> Path:
    """Copy ``source`` into ``directory`` under its own name."""
    source = Path(source)
    directory = Path(directory)
    _directory_or_absent(directory)
    destination = directory / source.name
    copy_file(source, destination, preserve_timestamps, buffer_size=buffer_size)
    return destination


def copy_symlink(source: Path, destination: Path) -> None:
    """Recreate symlink ``source`` at ``destination`` without following it."""
    existing = stat_entry(destination)
    if existing is not None:
        if existing.kind is EntryKind.DIRECTORY:
            raise IsADirectory(f"Destination '{destination}' exists but is a directory")
        with io_failure("replace", destination):
            destination.unlink()
    with io_failure("create symlink", destination):
        target = os.readlink(source)
        os.symlink(target, destination, target_is_directory=source.is_dir())


def copy_directory(
    source: PathArg,
    destination: PathArg,
    path_filter: PathFilter | None = None,
    preserve_timestamps: bool = True,
    *,
    buffer_size: int = DEFAULT_COPY_BUFFER_SIZE,
) -> None:
    """Mirror the tree under ``source`` into ``destination``.

    ``path_filter`` decides both which entries are copied and which
    subdirectories are entered. An existing destination directory is merged
    into. Fails with ``SelfReference`` before touching anything when the
    destination is the source or lies inside it. Partially copied content is
    not rolled back on failure.
    """
    source = Path(source)
    destination = Path(destination)
    _existing_directory(source)
    _directory_or_absent(destination)
    check_containment(source, destination)

    ensure_directory(destination)
    logger.debug("copying directory %s -> %s", source, destination)
    stamped: list[tuple[Path, int]] = []

    def mirror(entry: Entry) -> Path:
        return destination / entry.path.relative_to(source)

    def on_entry(entry: Entry, depth: int) -> None:
        target = mirror(entry)
        if entry.kind is EntryKind.DIRECTORY:
            ensure_directory(target)
        elif entry.kind is EntryKind.SYMLINK:
            copy_symlink(entry.path, target)
        else:
            copy_file(entry.path, target, preserve_timestamps, buffer_size=buffer_size)

    def on_directory_end(entry: Entry, depth: int) -> None:
        stamped.append((mirror(entry), entry.mtime_ns))

    walk_tree(
        source,
        FilterPair.same(path_filter),
        TreeVisitor(on_entry=on_entry, on_directory_end=on_directory_end),
    )

    if preserve_timestamps:
        for target, mtime_ns in stamped:
            set_mtime(target, mtime_ns)


def copy_directory_to_directory(
    source: PathArg,
    target_directory: PathArg,
    preserve_timestamps: bool = True,
    *,
    buffer_size: int = DEFAULT_COPY_BUFFER_SIZE,
) -> Path:
    """Copy directory ``source`` to ``target_directory / source.name``."""
    source = Path(source)
    target_directory = Path(target_directory)
    _existing_directory(source)
    _directory_or_absent(target_directory)
    destination = target_directory / source.name
    copy_directory(source, destination, None, preserve_timestamps, buffer_size=buffer_size)
    return destination


def copy_to_directory(
    sources: PathArg | Iterable[PathArg],
    target_directory: PathArg,
    preserve_timestamps: bool = True,
    *,
    buffer_size: int = DEFAULT_COPY_BUFFER_SIZE,
) -> list[Path]:
    """Copy each file or directory in ``sources`` into ``target_directory``."""
    if isinstance(sources, (str, os.PathLike)):
        sources = [sources]
    copied: list[Path] = []
    for raw_source in sources:
        source = Path(raw_source)
        entry = stat_entry(source, follow_symlinks=True)
        if entry is None:
            raise NotFound(f"Source '{source}' does not exist")
        if entry.kind is EntryKind.DIRECTORY:
            copied.append(
                copy_directory_to_directory(source, target_directory, preserve_timestamps, buffer_size=buffer_size)
            )
        else:
            copied.append(
                copy_file_to_directory(source, target_directory, preserve_timestamps, buffer_size=buffer_size)
            )
    return copied


__all__ = [
    "DEFAULT_COPY_BUFFER_SIZE",
    "file_length",
    "set_mtime",
    "ensure_directory",
    "copy_file",
    "copy_file_to_directory",
    "copy_symlink",
    "copy_directory",
    "copy_directory_to_directory",
    "copy_to_directory",
]
