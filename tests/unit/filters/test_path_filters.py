from __future__ import annotations

import unittest
from pathlib import Path

from treewalk.entries import Entry, EntryKind
from treewalk.filters import (
    FilterPair,
    GitIgnoreFilter,
    HiddenFilter,
    NameFilter,
    SuffixFilter,
    WildcardFilter,
    accept_all,
    all_of,
    any_of,
    combine,
    directories_only,
    files_only,
    negate,
    visible_only,
)
from treewalk.gitignore import GitIgnoreMatcher


def _file(name: str) -> Entry:
    return Entry(Path("/data") / name, EntryKind.FILE, size=1)


def _dir(name: str) -> Entry:
    return Entry(Path("/data") / name, EntryKind.DIRECTORY)


class PathFilterTests(unittest.TestCase):
    def test_name_filter_matches_exact_base_names(self) -> None:
        path_filter = NameFilter.of("parent", "file3.txt")

        self.assertTrue(path_filter(_dir("parent")))
        self.assertTrue(path_filter(_file("file3.txt")))
        self.assertFalse(path_filter(_file("File3.txt")))

    def test_name_filter_case_insensitive(self) -> None:
        path_filter = NameFilter.of("README.md", case_sensitive=False)

        self.assertTrue(path_filter(_file("readme.MD")))
        self.assertFalse(path_filter(_file("readme.txt")))

    def test_wildcard_filter_supports_star_and_question_mark(self) -> None:
        path_filter = WildcardFilter.of("*.txt", "log?.bin")

        self.assertTrue(path_filter(_file("notes.txt")))
        self.assertTrue(path_filter(_file("log1.bin")))
        self.assertFalse(path_filter(_file("log12.bin")))
        self.assertFalse(path_filter(_file("NOTES.TXT")))
        self.assertTrue(WildcardFilter.of("*.txt", case_sensitive=False)(_file("NOTES.TXT")))

    def test_suffix_filter(self) -> None:
        self.assertTrue(SuffixFilter.of(".py", ".pyi")(_file("module.pyi")))
        self.assertFalse(SuffixFilter.of(".py")(_file("module.PY")))
        self.assertTrue(SuffixFilter.of(".py", case_sensitive=False)(_file("module.PY")))

    def test_kind_filters(self) -> None:
        self.assertTrue(files_only(_file("a")))
        self.assertFalse(files_only(_dir("a")))
        self.assertTrue(directories_only(_dir("a")))
        symlink = Entry(Path("/data/link"), EntryKind.SYMLINK)
        self.assertFalse(files_only(symlink))
        self.assertFalse(directories_only(symlink))

    def test_hidden_filters(self) -> None:
        self.assertFalse(visible_only(_file(".env")))
        self.assertTrue(visible_only(_file("env")))
        self.assertTrue(HiddenFilter(hidden=True)(_dir(".git")))

    def test_combinators(self) -> None:
        txt = WildcardFilter.of("*.txt")

        self.assertTrue(all_of(txt, files_only)(_file("a.txt")))
        self.assertFalse(all_of(txt, directories_only)(_file("a.txt")))
        self.assertTrue(all_of()(_file("anything")))
        self.assertTrue(any_of(txt, directories_only)(_dir("sub")))
        self.assertFalse(any_of()(_file("a.txt")))
        self.assertFalse(negate(txt)(_file("a.txt")))

    def test_combine_skips_none_and_defaults_to_accept_all(self) -> None:
        self.assertIs(combine([None, None]), accept_all)
        self.assertIs(combine([files_only, None]), files_only)
        combined = combine([files_only, WildcardFilter.of("*.txt")])
        self.assertTrue(combined(_file("a.txt")))
        self.assertFalse(combined(_file("a.bin")))

    def test_filters_are_reusable_values(self) -> None:
        self.assertEqual(NameFilter.of("a", "b"), NameFilter.of("b", "a"))
        self.assertEqual(hash(WildcardFilter.of("*.txt")), hash(WildcardFilter.of("*.txt")))


class FilterPairTests(unittest.TestCase):
    def test_defaults_accept_everything(self) -> None:
        pair = FilterPair()

        self.assertTrue(pair.descends(_dir("sub")))
        self.assertTrue(pair.includes(_file("a")))

    def test_of_replaces_none_with_accept_all(self) -> None:
        pair = FilterPair.of(None, files_only)

        self.assertIs(pair.descent, accept_all)
        self.assertIs(pair.inclusion, files_only)

    def test_same_uses_one_predicate_for_both_roles(self) -> None:
        pair = FilterPair.same(NameFilter.of("keep"))

        self.assertTrue(pair.descends(_dir("keep")))
        self.assertFalse(pair.descends(_dir("drop")))
        self.assertFalse(pair.includes(_file("drop")))


class GitIgnoreFilterTests(unittest.TestCase):
    def test_missing_matcher_accepts_everything(self) -> None:
        self.assertTrue(GitIgnoreFilter(None)(_file("build.log")))

    def test_rejects_paths_reported_by_matcher(self) -> None:
        root = Path("/data").resolve()
        matcher = GitIgnoreMatcher(
            root=root,
            ignored_files=frozenset({root / "build.log"}),
            ignored_dirs=frozenset({root / "dist"}),
        )
        path_filter = GitIgnoreFilter(matcher)

        self.assertFalse(path_filter(Entry(root / "build.log", EntryKind.FILE)))
        self.assertFalse(path_filter(Entry(root / "dist" / "pkg.whl", EntryKind.FILE)))
        self.assertTrue(path_filter(Entry(root / "src.py", EntryKind.FILE)))


if __name__ == "__main__":
    unittest.main()
