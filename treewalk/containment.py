"""Source/destination containment checks run before any mutation."""

from __future__ import annotations

import os
from pathlib import Path, PurePath

from .errors import SelfReference


def canonical_path(path: Path) -> PurePath:
    """Symlink-resolved, platform case-normalized form of ``path``.

    Missing trailing components are kept as written, so paths that do not
    exist yet still compare correctly against their existing ancestors.
    """
    resolved = Path(path).resolve()
    return PurePath(os.path.normcase(str(resolved)))


def is_same_path(first: Path, second: Path) -> bool:
    """Return whether both paths name the same filesystem object."""
    if canonical_path(first) == canonical_path(second):
        return True
    try:
        return os.path.samefile(first, second)
    except OSError:
        return False


def is_inside(path: Path, ancestor: Path) -> bool:
    """Return whether ``path`` lies strictly below ``ancestor``."""
    canonical = canonical_path(path)
    canonical_ancestor = canonical_path(ancestor)
    return canonical != canonical_ancestor and canonical.is_relative_to(canonical_ancestor)


def check_same_path(source: Path, destination: Path) -> None:
    """Reject copying or moving a path onto itself."""
    if is_same_path(source, destination):
        raise SelfReference(f"Source '{source}' and destination '{destination}' are the same")


def check_containment(source: Path, destination: Path) -> None:
    """Reject a destination equal to or nested inside ``source``.

    A source nested inside the destination is allowed.
    """
    check_same_path(source, destination)
    if is_inside(destination, source):
        raise SelfReference(
            f"Cannot copy or move directory '{source}' into its own subtree '{destination}'"
        )


__all__ = [
    "canonical_path",
    "is_same_path",
    "is_inside",
    "check_same_path",
    "check_containment",
]
