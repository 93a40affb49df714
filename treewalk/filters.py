"""Path filter predicates and the descent/inclusion filter pair.

A filter is any callable taking an ``Entry`` and returning ``bool``. The
walker composes two independent filters: the descent filter decides whether
a directory's children are enumerated, the inclusion filter decides whether
an entry is reported. Concrete filters here are frozen dataclasses so they
stay stateless and reusable across calls.
"""

from __future__ import annotations

import fnmatch
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from .entries import Entry, EntryKind
from .gitignore import GitIgnoreMatcher, load_gitignore_matcher

PathFilter = Callable[[Entry], bool]


def accept_all(entry: Entry) -> bool:
    """Filter accepting every entry."""
    return True


@dataclass(frozen=True)
class NameFilter:
    """Accept entries whose base name is one of ``names``."""

    names: frozenset[str]
    case_sensitive: bool = True

    @classmethod
    def of(cls, *names: str, case_sensitive: bool = True) -> NameFilter:
        if case_sensitive:
            return cls(frozenset(names), True)
        return cls(frozenset(name.casefold() for name in names), False)

    def __call__(self, entry: Entry) -> bool:
        name = entry.name if self.case_sensitive else entry.name.casefold()
        return name in self.names


@dataclass(frozen=True)
class WildcardFilter:
    """Accept entries whose base name matches any shell-style pattern.

    ``*`` matches any run of characters, ``?`` one character, ``[seq]`` a
    character set. Matching is case-sensitive on every platform unless
    ``case_sensitive`` is false.
    """

    patterns: tuple[str, ...]
    case_sensitive: bool = True

    @classmethod
    def of(cls, *patterns: str, case_sensitive: bool = True) -> WildcardFilter:
        return cls(tuple(patterns), case_sensitive)

    def __call__(self, entry: Entry) -> bool:
        name = entry.name
        for pattern in self.patterns:
            if self.case_sensitive:
                if fnmatch.fnmatchcase(name, pattern):
                    return True
            elif fnmatch.fnmatchcase(name.casefold(), pattern.casefold()):
                return True
        return False


@dataclass(frozen=True)
class SuffixFilter:
    """Accept entries whose base name ends with any of ``suffixes``."""

    suffixes: tuple[str, ...]
    case_sensitive: bool = True

    @classmethod
    def of(cls, *suffixes: str, case_sensitive: bool = True) -> SuffixFilter:
        return cls(tuple(suffixes), case_sensitive)

    def __call__(self, entry: Entry) -> bool:
        if self.case_sensitive:
            return entry.name.endswith(self.suffixes)
        return entry.name.casefold().endswith(tuple(suffix.casefold() for suffix in self.suffixes))


@dataclass(frozen=True)
class KindFilter:
    """Accept entries of the given kinds."""

    kinds: frozenset[EntryKind]

    def __call__(self, entry: Entry) -> bool:
        return entry.kind in self.kinds


files_only = KindFilter(frozenset({EntryKind.FILE}))
directories_only = KindFilter(frozenset({EntryKind.DIRECTORY}))


@dataclass(frozen=True)
class HiddenFilter:
    """Accept dotfiles when ``hidden`` is true, everything else otherwise."""

    hidden: bool = False

    def __call__(self, entry: Entry) -> bool:
        return entry.name.startswith(".") is self.hidden


visible_only = HiddenFilter(hidden=False)


@dataclass(frozen=True)
class _AllOf:
    filters: tuple[PathFilter, ...]

    def __call__(self, entry: Entry) -> bool:
        return all(item(entry) for item in self.filters)


@dataclass(frozen=True)
class _AnyOf:
    filters: tuple[PathFilter, ...]

    def __call__(self, entry: Entry) -> bool:
        return any(item(entry) for item in self.filters)


@dataclass(frozen=True)
class _Not:
    inner: PathFilter

    def __call__(self, entry: Entry) -> bool:
        return not self.inner(entry)


def all_of(*filters: PathFilter) -> PathFilter:
    """Accept entries accepted by every filter (accept-all when empty)."""
    return _AllOf(tuple(filters))


def any_of(*filters: PathFilter) -> PathFilter:
    """Accept entries accepted by at least one filter."""
    return _AnyOf(tuple(filters))


def negate(inner: PathFilter) -> PathFilter:
    """Invert ``inner``."""
    return _Not(inner)


@dataclass(frozen=True)
class GitIgnoreFilter:
    """Reject entries git reports as ignored below ``matcher.root``.

    A ``None`` matcher (no git, not a repository) accepts everything.
    """

    matcher: GitIgnoreMatcher | None

    @classmethod
    def for_root(cls, root: Path) -> GitIgnoreFilter:
        return cls(load_gitignore_matcher(Path(root)))

    def __call__(self, entry: Entry) -> bool:
        if self.matcher is None:
            return True
        return not self.matcher.is_ignored(entry.path)


@dataclass(frozen=True)
class FilterPair:
    """Descent and inclusion predicates composed by the walker."""

    descent: PathFilter = field(default=accept_all)
    inclusion: PathFilter = field(default=accept_all)

    @classmethod
    def of(cls, descent: PathFilter | None = None, inclusion: PathFilter | None = None) -> FilterPair:
        return cls(descent or accept_all, inclusion or accept_all)

    @classmethod
    def same(cls, path_filter: PathFilter | None) -> FilterPair:
        """Use one predicate for both roles, as directory copy does."""
        chosen = path_filter or accept_all
        return cls(chosen, chosen)

    def descends(self, entry: Entry) -> bool:
        return bool(self.descent(entry))

    def includes(self, entry: Entry) -> bool:
        return bool(self.inclusion(entry))


def combine(filters: Iterable[PathFilter | None]) -> PathFilter:
    """AND together the non-``None`` filters; accept-all when none remain."""
    chosen = tuple(item for item in filters if item is not None)
    if not chosen:
        return accept_all
    if len(chosen) == 1:
        return chosen[0]
    return all_of(*chosen)


__all__ = [
    "PathFilter",
    "accept_all",
    "NameFilter",
    "WildcardFilter",
    "SuffixFilter",
    "KindFilter",
    "files_only",
    "directories_only",
    "HiddenFilter",
    "visible_only",
    "all_of",
    "any_of",
    "negate",
    "combine",
    "GitIgnoreFilter",
    "FilterPair",
]
