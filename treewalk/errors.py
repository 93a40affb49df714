"""Error taxonomy for traversal, copy, move, and delete operations.

Every failure surfaces synchronously with a specific kind. Each class also
derives from the closest builtin ``OSError`` subclass so callers catching
``FileNotFoundError`` or ``FileExistsError`` keep working.
"""

from __future__ import annotations

import contextlib
from collections.abc import Iterator
from pathlib import Path


class FileOpsError(OSError):
    """Base class for all treewalk failures."""


class NotFound(FileOpsError, FileNotFoundError):
    """Source path does not exist."""


class NotADirectory(FileOpsError, NotADirectoryError):
    """Operation expected a directory but found something else."""


class IsADirectory(FileOpsError, IsADirectoryError):
    """Operation expected a file but found a directory."""


class AlreadyExists(FileOpsError, FileExistsError):
    """Move destination already exists."""


class SelfReference(FileOpsError):
    """Destination equals the source or lies inside the source tree."""


class IncompleteTransfer(FileOpsError):
    """Copied file length differs from the source length."""


class PermissionOrIOFailure(FileOpsError):
    """Opaque underlying filesystem failure."""


@contextlib.contextmanager
def io_failure(action: str, path: Path | str) -> Iterator[None]:
    """Re-raise raw ``OSError`` from the block as ``PermissionOrIOFailure``.

    Errors that already belong to the taxonomy pass through untouched.
    """
    try:
        yield
    except FileOpsError:
        raise
    except OSError as exc:
        raise PermissionOrIOFailure(f"Failed to {action} '{path}': {exc}") from exc


__all__ = [
    "FileOpsError",
    "NotFound",
    "NotADirectory",
    "IsADirectory",
    "AlreadyExists",
    "SelfReference",
    "IncompleteTransfer",
    "PermissionOrIOFailure",
    "io_failure",
]
