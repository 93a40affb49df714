"""Depth-first traversal core shared by every tree operation.

``iter_walk_events`` is the single step machine: an explicit stack of
directory frames advanced one child at a time, yielding events as it goes.
``walk_tree`` drives it to completion against a callback visitor, while the
lazy iterables in ``aggregate`` suspend it between yielded entries. Both see
exactly the same event stream.

Symlinks are terminal entries and never descended, so traversal terminates on
cyclic link graphs without tracking visited inodes. Symlinked subtrees are
not traversed as a consequence.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..entries import Entry, EntryKind, list_directory_entries, stat_entry
from ..errors import NotADirectory, NotFound, PermissionOrIOFailure
from ..filters import FilterPair


class WalkEventKind(Enum):
    DIRECTORY_START = "directory_start"
    ENTRY = "entry"
    DIRECTORY_END = "directory_end"
    ERROR = "error"


class WalkControl(Enum):
    """Visitor verdict after an event; ``None`` means continue."""

    CONTINUE = "continue"
    STOP = "stop"


class TraversalOrder(Enum):
    """Where included directories are reported relative to their contents."""

    PRE_ORDER = "pre_order"
    POST_ORDER = "post_order"


@dataclass(frozen=True)
class WalkEvent:
    """One traversal step.

    ``depth`` is ``0`` for the root directory and grows by one per level.
    ``error`` is set only for ``ERROR`` events.
    """

    kind: WalkEventKind
    entry: Entry
    depth: int
    error: OSError | None = None


EventCallback = Callable[[Entry, int], "WalkControl | None"]
ErrorCallback = Callable[[Entry, OSError, int], "WalkControl | None"]


@dataclass(frozen=True)
class TreeVisitor:
    """Bundle of optional callbacks driven by ``walk_tree``.

    Any callback may return ``WalkControl.STOP`` to end the walk early.
    """

    on_directory_start: EventCallback | None = None
    on_entry: EventCallback | None = None
    on_directory_end: EventCallback | None = None
    on_error: ErrorCallback | None = None


@dataclass(frozen=True)
class WalkResult:
    """Number of reported entries and whether the visitor stopped early."""

    count: int
    stopped: bool


@dataclass
class _Frame:
    entry: Entry
    depth: int
    children: list[Entry]
    included: bool
    index: int = 0


def resolve_walk_root(root: Path) -> Entry:
    """Stat ``root`` following symlinks and require an existing directory."""
    root = Path(root)
    entry = stat_entry(root, follow_symlinks=True)
    if entry is None:
        raise NotFound(f"Directory '{root}' does not exist")
    if entry.kind is not EntryKind.DIRECTORY:
        raise NotADirectory(f"'{root}' is not a directory")
    return entry


def iter_walk_events(
    root: Path,
    filters: FilterPair | None = None,
    *,
    order: TraversalOrder = TraversalOrder.PRE_ORDER,
    skip_errors: bool = False,
) -> Iterator[WalkEvent]:
    """Yield traversal events for the tree under ``root``.

    The root is announced with ``DIRECTORY_START``/``DIRECTORY_END`` only; it
    is never itself an ``ENTRY``. Children are listed right after their
    directory start event, so no directory handle stays open while the
    generator is suspended.

    Enumeration failures raise ``PermissionOrIOFailure`` unless
    ``skip_errors`` is set, in which case an ``ERROR`` event is yielded and
    the failed directory is closed with an empty child list.
    """
    filters = filters or FilterPair()
    root_entry = resolve_walk_root(root)
    post_order = order is TraversalOrder.POST_ORDER

    def open_frame(entry: Entry, depth: int, included: bool) -> Iterator[WalkEvent]:
        yield WalkEvent(WalkEventKind.DIRECTORY_START, entry, depth)
        children, scan_error = list_directory_entries(entry.path)
        if scan_error is not None:
            if not skip_errors:
                raise PermissionOrIOFailure(
                    f"Cannot list directory '{entry.path}': {scan_error}"
                ) from scan_error
            yield WalkEvent(WalkEventKind.ERROR, entry, depth, scan_error)
        stack.append(_Frame(entry, depth, children, included))

    stack: list[_Frame] = []
    yield from open_frame(root_entry, 0, included=False)

    while stack:
        frame = stack[-1]
        if frame.index >= len(frame.children):
            stack.pop()
            yield WalkEvent(WalkEventKind.DIRECTORY_END, frame.entry, frame.depth)
            if post_order and frame.included:
                yield WalkEvent(WalkEventKind.ENTRY, frame.entry, frame.depth)
            continue

        child = frame.children[frame.index]
        frame.index += 1
        depth = frame.depth + 1
        included = filters.includes(child)

        if child.kind is not EntryKind.DIRECTORY:
            if included:
                yield WalkEvent(WalkEventKind.ENTRY, child, depth)
            continue

        descend = filters.descends(child)
        if included and (not post_order or not descend):
            yield WalkEvent(WalkEventKind.ENTRY, child, depth)
        if descend:
            yield from open_frame(child, depth, included)


def walk_tree(
    root: Path,
    filters: FilterPair | None,
    visitor: TreeVisitor,
    *,
    order: TraversalOrder = TraversalOrder.PRE_ORDER,
    skip_errors: bool = False,
) -> WalkResult:
    """Drive ``visitor`` over the tree under ``root``.

    ``count`` in the result is the number of ``ENTRY`` events delivered.
    Without an ``on_error`` callback, skipped enumeration failures are
    silently passed over only when ``skip_errors`` is set.
    """
    events = iter_walk_events(root, filters, order=order, skip_errors=skip_errors)
    count = 0
    try:
        for event in events:
            verdict: WalkControl | None = None
            if event.kind is WalkEventKind.ENTRY:
                count += 1
                if visitor.on_entry is not None:
                    verdict = visitor.on_entry(event.entry, event.depth)
            elif event.kind is WalkEventKind.DIRECTORY_START:
                if visitor.on_directory_start is not None:
                    verdict = visitor.on_directory_start(event.entry, event.depth)
            elif event.kind is WalkEventKind.DIRECTORY_END:
                if visitor.on_directory_end is not None:
                    verdict = visitor.on_directory_end(event.entry, event.depth)
            elif visitor.on_error is not None and event.error is not None:
                verdict = visitor.on_error(event.entry, event.error, event.depth)
            if verdict is WalkControl.STOP:
                return WalkResult(count=count, stopped=True)
    finally:
        events.close()
    return WalkResult(count=count, stopped=False)


__all__ = [
    "WalkEventKind",
    "WalkControl",
    "TraversalOrder",
    "WalkEvent",
    "TreeVisitor",
    "WalkResult",
    "resolve_walk_root",
    "iter_walk_events",
    "walk_tree",
]
