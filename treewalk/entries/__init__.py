"""Entry datatypes and the single-directory enumerator.

This package holds the leaf primitives every traversal is built from:
- ``Entry``/``EntryKind`` describing one observed filesystem object
- ``stat_entry`` for one path
- ``list_directory_entries`` for the immediate children of one directory
"""

from __future__ import annotations

from .fs import list_directory_entries, stat_entry
from .types import Entry, EntryKind

__all__ = [
    "Entry",
    "EntryKind",
    "stat_entry",
    "list_directory_entries",
]
