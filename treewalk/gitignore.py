"""Gitignore-aware path matching.

Builds a matcher snapshot by asking git which files and directories under a
root are ignored. ``GitIgnoreFilter`` wraps the snapshot as a path filter.
"""

from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path


def _is_within(path: Path, root: Path) -> bool:
    return path == root or root in path.parents


@dataclass(frozen=True)
class GitIgnoreMatcher:
    """Ignored-path snapshot for one subtree.

    ``ignored_dirs`` holds resolved directory paths so a parent check rejects
    whole subtrees without listing them.
    """

    root: Path
    ignored_files: frozenset[Path]
    ignored_dirs: frozenset[Path]

    def is_ignored(self, path: Path) -> bool:
        """Return whether ``path`` or one of its ancestors below the root is ignored."""
        resolved = Path(path).resolve()
        if not _is_within(resolved, self.root):
            return False
        if resolved in self.ignored_files or resolved in self.ignored_dirs:
            return True
        for ancestor in resolved.parents:
            if ancestor in self.ignored_dirs:
                return True
            if ancestor == self.root:
                break
        return False


def _git_stdout(args: list[str]) -> bytes | None:
    try:
        proc = subprocess.run(
            args,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return proc.stdout


def load_gitignore_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Build a matcher for ``root`` by asking git for its ignored paths.

    ``git ls-files`` run from ``root`` reports only the subtree below it,
    relative to it, even when the repository root is higher. Returns ``None``
    when git is unavailable or ``root`` is not inside a work tree.
    """
    if shutil.which("git") is None:
        return None

    root = Path(root).resolve()
    listing = _git_stdout(
        ["git", "-C", str(root), "ls-files", "-z", "--others", "-i", "--exclude-standard", "--directory"]
    )
    if listing is None:
        return None

    ignored_files: set[Path] = set()
    ignored_dirs: set[Path] = set()
    for raw in filter(None, listing.split(b"\x00")):
        relative = os.fsdecode(raw).rstrip("/")
        if not relative:
            continue
        path = (root / relative).resolve()
        if raw.endswith(b"/") or path.is_dir():
            ignored_dirs.add(path)
        else:
            ignored_files.add(path)
    return GitIgnoreMatcher(root, frozenset(ignored_files), frozenset(ignored_dirs))


__all__ = [
    "GitIgnoreMatcher",
    "load_gitignore_matcher",
]
