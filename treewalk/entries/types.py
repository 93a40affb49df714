"""Domain datatypes for entries observed while walking a filesystem tree."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class EntryKind(Enum):
    """Filesystem object kind as seen without following symlinks."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"


@dataclass(frozen=True)
class Entry:
    """One filesystem object encountered during traversal.

    ``size`` is the byte length for files, the link length for symlinks, and
    ``0`` for directories.
    """

    path: Path
    kind: EntryKind
    size: int = 0
    mtime_ns: int = 0

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def is_symlink(self) -> bool:
        return self.kind is EntryKind.SYMLINK


__all__ = [
    "Entry",
    "EntryKind",
]
