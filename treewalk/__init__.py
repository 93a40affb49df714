"""Public package surface for treewalk.

Re-exports the traversal, copy, move, and delete operations. ``main`` lazily
imports the CLI so library imports never touch the config machinery.
"""

from __future__ import annotations

from .containment import check_containment
from .copying import (
    copy_directory,
    copy_directory_to_directory,
    copy_file,
    copy_file_to_directory,
    copy_to_directory,
)
from .deletion import clean_directory, delete_directory, delete_quietly, force_delete
from .entries import Entry, EntryKind
from .errors import (
    AlreadyExists,
    FileOpsError,
    IncompleteTransfer,
    IsADirectory,
    NotADirectory,
    NotFound,
    PermissionOrIOFailure,
    SelfReference,
)
from .files import content_equals, force_mkdir, force_mkdir_parent, is_file_newer, is_file_older, touch
from .filters import FilterPair
from .moving import (
    move_directory,
    move_directory_to_directory,
    move_file,
    move_file_to_directory,
    move_to_directory,
)
from .walker import (
    checksum_crc32,
    checksum_of,
    iterate_entries,
    list_entries,
    size_of,
    size_of_directory,
    walk_tree,
)


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = [
    "main",
    "Entry",
    "EntryKind",
    "FilterPair",
    "FileOpsError",
    "NotFound",
    "NotADirectory",
    "IsADirectory",
    "AlreadyExists",
    "SelfReference",
    "IncompleteTransfer",
    "PermissionOrIOFailure",
    "check_containment",
    "walk_tree",
    "list_entries",
    "iterate_entries",
    "size_of",
    "size_of_directory",
    "checksum_of",
    "checksum_crc32",
    "copy_file",
    "copy_file_to_directory",
    "copy_directory",
    "copy_directory_to_directory",
    "copy_to_directory",
    "move_file",
    "move_directory",
    "move_file_to_directory",
    "move_directory_to_directory",
    "move_to_directory",
    "force_delete",
    "delete_directory",
    "delete_quietly",
    "clean_directory",
    "force_mkdir",
    "force_mkdir_parent",
    "touch",
    "is_file_newer",
    "is_file_older",
    "content_equals",
]
