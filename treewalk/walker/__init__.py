"""Tree traversal engine and the aggregators built on it.

- ``core``: the shared depth-first event generator and the callback driver
- ``aggregate``: eager lists, lazy restartable iterables, sizes, checksums
"""

from __future__ import annotations

from .aggregate import (
    CRC32,
    Checksum,
    TreeIterable,
    checksum_crc32,
    checksum_of,
    iterate_entries,
    list_entries,
    list_files,
    list_files_and_dirs,
    size_of,
    size_of_directory,
)
from .core import (
    TraversalOrder,
    TreeVisitor,
    WalkControl,
    WalkEvent,
    WalkEventKind,
    WalkResult,
    iter_walk_events,
    walk_tree,
)

__all__ = [
    "TraversalOrder",
    "TreeVisitor",
    "WalkControl",
    "WalkEvent",
    "WalkEventKind",
    "WalkResult",
    "iter_walk_events",
    "walk_tree",
    "CRC32",
    "Checksum",
    "TreeIterable",
    "checksum_crc32",
    "checksum_of",
    "iterate_entries",
    "list_entries",
    "list_files",
    "list_files_and_dirs",
    "size_of",
    "size_of_directory",
]
