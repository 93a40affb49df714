"""Aggregators built on the traversal core: lists, lazy sequences, sizes, checksums."""

from __future__ import annotations

import zlib
from collections.abc import Iterator
from pathlib import Path
from typing import Protocol, TypeVar

from ..entries import Entry, EntryKind, stat_entry
from ..errors import IsADirectory, NotFound, io_failure
from ..filters import FilterPair, PathFilter, any_of, combine, directories_only, files_only, negate
from .core import (
    TraversalOrder,
    TreeVisitor,
    WalkEventKind,
    iter_walk_events,
    resolve_walk_root,
    walk_tree,
)

CHECKSUM_READ_BYTES = 64 * 1024


class Checksum(Protocol):
    """Streaming checksum supplied by the caller."""

    def update(self, data: bytes) -> object: ...


ChecksumT = TypeVar("ChecksumT", bound=Checksum)


def _filters(descent: PathFilter | None, inclusion: PathFilter | None, include_dirs: bool) -> FilterPair:
    """Fold the ``include_dirs`` switch into the inclusion predicate."""
    if not include_dirs:
        inclusion = combine([negate(directories_only), inclusion])
    return FilterPair.of(descent, inclusion)


def list_entries(
    root: Path,
    descent: PathFilter | None = None,
    inclusion: PathFilter | None = None,
    include_dirs: bool = False,
    *,
    order: TraversalOrder = TraversalOrder.PRE_ORDER,
    skip_errors: bool = False,
) -> list[Entry]:
    """Walk ``root`` eagerly and return every reported entry in order.

    The root directory itself is never part of the result. Directories are
    reported only with ``include_dirs`` and when ``inclusion`` accepts them.
    """
    results: list[Entry] = []

    def collect(entry: Entry, depth: int) -> None:
        results.append(entry)

    walk_tree(
        Path(root),
        _filters(descent, inclusion, include_dirs),
        TreeVisitor(on_entry=collect),
        order=order,
        skip_errors=skip_errors,
    )
    return results


class TreeIterable:
    """Lazy, finite, restartable sequence of entries under one root.

    Every ``iter()`` call starts an independent traversal over the same core
    used by ``list_entries``; iterators never share a cursor.
    """

    def __init__(
        self,
        root: Path,
        descent: PathFilter | None = None,
        inclusion: PathFilter | None = None,
        include_dirs: bool = False,
        *,
        order: TraversalOrder = TraversalOrder.PRE_ORDER,
        skip_errors: bool = False,
    ) -> None:
        self.root = Path(root)
        resolve_walk_root(self.root)
        self._filters = _filters(descent, inclusion, include_dirs)
        self._order = order
        self._skip_errors = skip_errors

    def __iter__(self) -> Iterator[Entry]:
        for event in iter_walk_events(
            self.root,
            self._filters,
            order=self._order,
            skip_errors=self._skip_errors,
        ):
            if event.kind is WalkEventKind.ENTRY:
                yield event.entry

    def __repr__(self) -> str:
        return f"TreeIterable(root={self.root!r})"


def iterate_entries(
    root: Path,
    descent: PathFilter | None = None,
    inclusion: PathFilter | None = None,
    include_dirs: bool = False,
    *,
    order: TraversalOrder = TraversalOrder.PRE_ORDER,
    skip_errors: bool = False,
) -> TreeIterable:
    """Return a lazy restartable view with the same semantics as ``list_entries``."""
    return TreeIterable(root, descent, inclusion, include_dirs, order=order, skip_errors=skip_errors)


def list_files(root: Path, file_filter: PathFilter | None = None, dir_filter: PathFilter | None = None) -> list[Path]:
    """Paths of files under ``root`` accepted by ``file_filter``.

    ``dir_filter`` limits which subdirectories are searched.
    """
    return [entry.path for entry in list_entries(root, dir_filter, file_filter)]


def list_files_and_dirs(
    root: Path,
    file_filter: PathFilter | None = None,
    dir_filter: PathFilter | None = None,
) -> list[Path]:
    """Like ``list_files`` but also reports the root and searched directories."""
    root = Path(root)
    resolve_walk_root(root)
    inclusion = any_of(
        combine([directories_only, dir_filter]),
        combine([negate(directories_only), file_filter]),
    )
    return [root] + [entry.path for entry in list_entries(root, dir_filter, inclusion, include_dirs=True)]


def size_of_directory(directory: Path) -> int:
    """Total byte size of regular files under ``directory``.

    Symlinks are never followed, so cyclic links do not inflate the total.
    """
    total = 0

    def add(entry: Entry, depth: int) -> None:
        nonlocal total
        total += entry.size

    walk_tree(Path(directory), FilterPair.of(inclusion=files_only), TreeVisitor(on_entry=add))
    return total


def size_of(path: Path) -> int:
    """Byte size of a file, or the recursive size of a directory.

    A missing path is an error, never zero.
    """
    path = Path(path)
    entry = stat_entry(path, follow_symlinks=True)
    if entry is None:
        raise NotFound(f"'{path}' does not exist")
    if entry.kind is EntryKind.DIRECTORY:
        return size_of_directory(path)
    return entry.size


def _feed_file(path: Path, checksum: Checksum) -> None:
    with io_failure("read", path):
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(CHECKSUM_READ_BYTES), b""):
                checksum.update(chunk)


def checksum_of(path: Path, checksum: ChecksumT, aggregate_tree: bool = False) -> ChecksumT:
    """Feed the bytes under ``path`` into ``checksum`` and return it.

    For a directory this requires ``aggregate_tree``; the value is then the
    checksum of all file contents concatenated in pre-order.
    """
    path = Path(path)
    entry = stat_entry(path, follow_symlinks=True)
    if entry is None:
        raise NotFound(f"'{path}' does not exist")
    if entry.kind is not EntryKind.DIRECTORY:
        _feed_file(path, checksum)
        return checksum
    if not aggregate_tree:
        raise IsADirectory(f"Checksums can't be computed on directories: '{path}'")

    def feed(file_entry: Entry, depth: int) -> None:
        _feed_file(file_entry.path, checksum)

    walk_tree(path, FilterPair.of(inclusion=files_only), TreeVisitor(on_entry=feed))
    return checksum


class CRC32:
    """Running CRC32 exposing the ``update``/``value`` checksum shape."""

    def __init__(self) -> None:
        self.value = 0

    def update(self, data: bytes) -> None:
        self.value = zlib.crc32(data, self.value)


def checksum_crc32(path: Path) -> int:
    """CRC32 of a single file."""
    return checksum_of(Path(path), CRC32()).value


__all__ = [
    "Checksum",
    "CRC32",
    "TreeIterable",
    "list_entries",
    "iterate_entries",
    "list_files",
    "list_files_and_dirs",
    "size_of",
    "size_of_directory",
    "checksum_of",
    "checksum_crc32",
]
