"""Tests for rename-first moves and the copy-then-delete fallback."""

from __future__ import annotations

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from treewalk.errors import (
    AlreadyExists,
    IncompleteTransfer,
    IsADirectory,
    NotADirectory,
    NotFound,
    PermissionOrIOFailure,
    SelfReference,
)
from treewalk.moving import (
    move_directory,
    move_directory_to_directory,
    move_file,
    move_file_to_directory,
    move_to_directory,
)

OLD_MTIME_NS = 1_000_000_000 * 1_000_000_000


def _no_rename():
    return mock.patch("treewalk.moving.try_rename", return_value=False)


def _build_tree(source: Path) -> None:
    (source / "sub").mkdir(parents=True)
    (source / "a.txt").write_text("a", encoding="utf-8")
    (source / "sub" / "b.txt").write_text("b", encoding="utf-8")


class MoveFileTests(unittest.TestCase):
    def test_rename_moves_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "a.txt"
            source.write_text("payload", encoding="utf-8")
            destination = root / "nested" / "b.txt"

            move_file(source, destination)

            self.assertFalse(source.exists())
            self.assertEqual(destination.read_text(encoding="utf-8"), "payload")

    def test_fallback_copies_then_deletes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "a.txt"
            source.write_text("payload", encoding="utf-8")
            os.utime(source, ns=(OLD_MTIME_NS, OLD_MTIME_NS))
            destination = root / "b.txt"

            with _no_rename():
                move_file(source, destination)

            self.assertFalse(source.exists())
            self.assertEqual(destination.read_text(encoding="utf-8"), "payload")
            self.assertEqual(destination.stat().st_mtime_ns, OLD_MTIME_NS)

    def test_failed_source_delete_rolls_back_destination(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "a.txt"
            source.write_text("payload", encoding="utf-8")
            destination = root / "b.txt"

            with _no_rename(), mock.patch(
                "treewalk.moving.force_delete", side_effect=PermissionOrIOFailure("denied")
            ):
                with self.assertRaises(PermissionOrIOFailure):
                    move_file(source, destination)

            self.assertTrue(source.exists())
            self.assertFalse(destination.exists())

    def test_failed_delete_after_source_vanished_keeps_destination(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "a.txt"
            source.write_text("payload", encoding="utf-8")
            destination = root / "b.txt"

            def unlink_then_fail(path):
                Path(path).unlink()
                raise NotFound(f"File does not exist: '{path}'")

            with _no_rename(), mock.patch("treewalk.moving.force_delete", side_effect=unlink_then_fail):
                with self.assertRaises(PermissionOrIOFailure) as caught:
                    move_file(source, destination)

            self.assertIn("only copy", str(caught.exception))
            self.assertFalse(source.exists())
            self.assertEqual(destination.read_text(encoding="utf-8"), "payload")

    def test_failed_copy_leaves_no_partial_destination(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "a.txt"
            source.write_text("payload", encoding="utf-8")
            destination = root / "b.txt"

            def partial_copy(src, dst, preserve_timestamps=True):
                Path(dst).write_text("pay", encoding="utf-8")
                raise IncompleteTransfer("short copy")

            with _no_rename(), mock.patch("treewalk.moving.copy_file", side_effect=partial_copy):
                with self.assertRaises(IncompleteTransfer):
                    move_file(source, destination)

            self.assertEqual(source.read_text(encoding="utf-8"), "payload")
            self.assertFalse(destination.exists())

    def test_rejects_invalid_arguments(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "a.txt"
            source.write_text("a", encoding="utf-8")
            existing = root / "b.txt"
            existing.write_text("b", encoding="utf-8")
            (root / "folder").mkdir()

            with self.assertRaises(NotFound):
                move_file(root / "missing.txt", root / "out.txt")
            with self.assertRaises(IsADirectory):
                move_file(root / "folder", root / "out")
            with self.assertRaises(AlreadyExists):
                move_file(source, existing)

            self.assertEqual(existing.read_text(encoding="utf-8"), "b")
            self.assertTrue(source.exists())

    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks unsupported")
    def test_symlink_is_moved_as_link(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "target.txt").write_text("t", encoding="utf-8")
            link = root / "link.txt"
            try:
                os.symlink("target.txt", link)
            except OSError as exc:
                self.skipTest(f"cannot create symlink: {exc}")
            destination = root / "moved.txt"

            with _no_rename():
                move_file(link, destination)

            self.assertTrue(destination.is_symlink())
            self.assertEqual(os.readlink(destination), "target.txt")
            self.assertFalse(os.path.lexists(link))
            self.assertTrue((root / "target.txt").exists())


class MoveDirectoryTests(unittest.TestCase):
    def test_rename_moves_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "src"
            _build_tree(source)
            destination = root / "new" / "dst"

            move_directory(source, destination)

            self.assertFalse(source.exists())
            self.assertEqual((destination / "sub" / "b.txt").read_text(encoding="utf-8"), "b")

    def test_fallback_copies_then_deletes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "src"
            _build_tree(source)
            destination = root / "dst"

            with _no_rename():
                move_directory(source, destination)

            self.assertFalse(source.exists())
            self.assertEqual((destination / "a.txt").read_text(encoding="utf-8"), "a")
            self.assertEqual((destination / "sub" / "b.txt").read_text(encoding="utf-8"), "b")

    def test_failed_delete_of_intact_source_rolls_back(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "src"
            _build_tree(source)
            destination = root / "dst"

            with _no_rename(), mock.patch(
                "treewalk.moving.delete_directory", side_effect=PermissionOrIOFailure("denied")
            ):
                with self.assertRaises(PermissionOrIOFailure):
                    move_directory(source, destination)

            self.assertTrue((source / "sub" / "b.txt").exists())
            self.assertFalse(destination.exists())

    def test_partly_deleted_source_keeps_complete_destination(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "src"
            _build_tree(source)
            destination = root / "dst"

            def partial_delete(directory):
                (Path(directory) / "a.txt").unlink()
                raise PermissionOrIOFailure("denied halfway")

            with _no_rename(), mock.patch("treewalk.moving.delete_directory", side_effect=partial_delete):
                with self.assertRaises(PermissionOrIOFailure):
                    move_directory(source, destination)

            self.assertFalse((source / "a.txt").exists())
            self.assertEqual((destination / "a.txt").read_text(encoding="utf-8"), "a")
            self.assertEqual((destination / "sub" / "b.txt").read_text(encoding="utf-8"), "b")

    def test_existing_destination_is_never_merged(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "src"
            _build_tree(source)
            destination = root / "dst"
            destination.mkdir()

            with self.assertRaises(AlreadyExists):
                move_directory(source, destination)

            self.assertEqual(list(destination.iterdir()), [])
            self.assertTrue((source / "a.txt").exists())

    def test_destination_inside_source_is_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "src"
            _build_tree(source)

            with self.assertRaises(SelfReference):
                move_directory(source, source / "sub" / "inside")

            self.assertFalse((source / "sub" / "inside").exists())

    def test_missing_parent_without_create_parents(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "src"
            _build_tree(source)

            with self.assertRaises(NotFound):
                move_directory(source, root / "absent" / "dst", create_parents=False)

            self.assertTrue(source.exists())
            self.assertFalse((root / "absent").exists())

    def test_rejects_non_directory_source(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "plain.txt").write_text("x", encoding="utf-8")

            with self.assertRaises(NotFound):
                move_directory(root / "missing", root / "dst")
            with self.assertRaises(NotADirectory):
                move_directory(root / "plain.txt", root / "dst")


class MoveToDirectoryTests(unittest.TestCase):
    def test_dispatches_on_source_kind(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source_dir = root / "src"
            _build_tree(source_dir)
            source_file = root / "loose.txt"
            source_file.write_text("l", encoding="utf-8")
            target = root / "target"

            moved_dir = move_to_directory(source_dir, target)
            moved_file = move_to_directory(source_file, target)

            self.assertEqual(moved_dir, target / "src")
            self.assertEqual(moved_file, target / "loose.txt")
            self.assertTrue((target / "src" / "sub" / "b.txt").exists())
            self.assertFalse(source_dir.exists())
            self.assertFalse(source_file.exists())

    def test_missing_target_without_create_parents(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "a.txt"
            source.write_text("a", encoding="utf-8")

            with self.assertRaises(NotFound):
                move_file_to_directory(source, root / "absent", create_parents=False)

            self.assertTrue(source.exists())

    def test_target_that_is_a_file_is_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "a.txt"
            source.write_text("a", encoding="utf-8")
            blocker = root / "blocker"
            blocker.write_text("b", encoding="utf-8")

            with self.assertRaises(NotADirectory):
                move_to_directory(source, blocker)

    def test_move_directory_into_own_child_creates_nothing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "src"
            _build_tree(source)
            target = source / "new_child"

            with self.assertRaises(SelfReference):
                move_directory_to_directory(source, target)

            self.assertFalse(target.exists())
            self.assertTrue((source / "a.txt").exists())

    def test_existing_entry_in_target_is_conflict(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            source = root / "a.txt"
            source.write_text("new", encoding="utf-8")
            target = root / "target"
            target.mkdir()
            (target / "a.txt").write_text("old", encoding="utf-8")

            with self.assertRaises(AlreadyExists):
                move_file_to_directory(source, target)

            self.assertEqual((target / "a.txt").read_text(encoding="utf-8"), "old")


if __name__ == "__main__":
    unittest.main()
