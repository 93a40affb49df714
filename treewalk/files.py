"""Single-path helpers: directory creation, touch, age and content comparison."""

from __future__ import annotations

import os
import time
from datetime import datetime
from pathlib import Path

from .copying import ensure_directory
from .entries import EntryKind, stat_entry
from .errors import IsADirectory, NotFound, io_failure

COMPARE_READ_BYTES = 64 * 1024


def force_mkdir(directory: Path) -> None:
    """Create ``directory`` with parents; ``NotADirectory`` if a file is in the way."""
    ensure_directory(Path(directory))


def force_mkdir_parent(path: Path) -> None:
    """Create the parent directory of ``path`` if needed."""
    ensure_directory(Path(path).parent)


def touch(path: Path) -> None:
    """Create an empty file or bump the mtime of an existing one to now."""
    path = Path(path)
    force_mkdir_parent(path)
    with io_failure("touch", path):
        path.touch(exist_ok=True)
        now_ns = time.time_ns()
        os.utime(path, ns=(now_ns, now_ns))


def _mtime_ns(reference: Path | datetime | float | int) -> int:
    if isinstance(reference, datetime):
        return int(reference.timestamp() * 1_000_000_000)
    if isinstance(reference, (int, float)):
        return int(reference * 1_000_000_000)
    entry = stat_entry(Path(reference), follow_symlinks=True)
    if entry is None:
        raise NotFound(f"The reference file '{reference}' doesn't exist")
    return entry.mtime_ns


def is_file_newer(path: Path, reference: Path | datetime | float | int) -> bool:
    """Whether ``path`` was modified after ``reference``.

    ``reference`` is another path, a ``datetime``, or epoch seconds. A
    missing ``path`` is never newer.
    """
    entry = stat_entry(Path(path), follow_symlinks=True)
    if entry is None:
        return False
    return entry.mtime_ns > _mtime_ns(reference)


def is_file_older(path: Path, reference: Path | datetime | float | int) -> bool:
    """Whether ``path`` was modified before ``reference``."""
    entry = stat_entry(Path(path), follow_symlinks=True)
    if entry is None:
        return False
    return entry.mtime_ns < _mtime_ns(reference)


def content_equals(first: Path, second: Path) -> bool:
    """Byte-for-byte comparison of two files.

    Two missing files are equal; one missing file is not. Directories are
    rejected.
    """
    first = Path(first)
    second = Path(second)
    first_entry = stat_entry(first, follow_symlinks=True)
    second_entry = stat_entry(second, follow_symlinks=True)
    if first_entry is None or second_entry is None:
        return first_entry is None and second_entry is None
    for path, entry in ((first, first_entry), (second, second_entry)):
        if entry.kind is EntryKind.DIRECTORY:
            raise IsADirectory(f"Can't compare directories, only files: '{path}'")
    if first_entry.size != second_entry.size:
        return False
    if os.path.samefile(first, second):
        return True

    with io_failure("compare", first):
        with first.open("rb") as left, second.open("rb") as right:
            while True:
                left_chunk = left.read(COMPARE_READ_BYTES)
                right_chunk = right.read(COMPARE_READ_BYTES)
                if left_chunk != right_chunk:
                    return False
                if not left_chunk:
                    return True


__all__ = [
    "force_mkdir",
    "force_mkdir_parent",
    "touch",
    "is_file_newer",
    "is_file_older",
    "content_equals",
]
