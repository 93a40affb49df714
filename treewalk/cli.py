"""Command-line front door for treewalk.

Parses subcommands, fills unset options from the persisted config, and
dispatches into the traversal, copy, move, and delete operations. Operation
failures surface as ``SystemExit`` with the error message.
"""

from __future__ import annotations

import argparse
import hashlib
import logging
import sys
from pathlib import Path

from . import config
from .copying import copy_directory, copy_file, copy_to_directory
from .deletion import delete_quietly, force_delete
from .entries import EntryKind, stat_entry
from .errors import FileOpsError
from .filters import GitIgnoreFilter, PathFilter, WildcardFilter, combine, negate, visible_only
from .moving import move_directory, move_file, move_to_directory
from .walker import CRC32, TraversalOrder, checksum_of, iterate_entries, size_of

CHECKSUM_ALGORITHMS = ("crc32", "md5", "sha1", "sha256")


def _configure_logging(verbose: bool) -> None:
    """Send package log records to stderr, debug level with ``--verbose``."""
    package_logger = logging.getLogger("treewalk")
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _pick(value: bool | None, fallback: bool) -> bool:
    return fallback if value is None else value


def _listing_filters(root: Path, args: argparse.Namespace) -> tuple[PathFilter, PathFilter]:
    """Build ``(descent, inclusion)`` from list options and config defaults."""
    show_hidden = _pick(args.hidden, config.load_show_hidden())
    skip_gitignored = _pick(args.skip_gitignored, config.load_skip_gitignored())

    shared: list[PathFilter | None] = []
    if not show_hidden:
        shared.append(visible_only)
    if skip_gitignored:
        shared.append(GitIgnoreFilter.for_root(root))

    descent = combine(
        shared + [negate(WildcardFilter.of(*args.exclude_dir)) if args.exclude_dir else None]
    )
    inclusion = combine(shared + [WildcardFilter.of(*args.include) if args.include else None])
    return descent, inclusion


def _cmd_list(args: argparse.Namespace) -> None:
    root = Path(args.root)
    descent, inclusion = _listing_filters(root, args)
    order = TraversalOrder.POST_ORDER if args.post_order else TraversalOrder.PRE_ORDER
    entries = iterate_entries(
        root,
        descent,
        inclusion,
        include_dirs=args.dirs,
        order=order,
        skip_errors=_pick(args.skip_errors, config.load_skip_errors()),
    )
    for entry in entries:
        suffix = "/" if entry.kind is EntryKind.DIRECTORY else ""
        sys.stdout.write(f"{entry.path}{suffix}\n")


def _cmd_size(args: argparse.Namespace) -> None:
    sys.stdout.write(f"{size_of(Path(args.path))}\n")


def _cmd_checksum(args: argparse.Namespace) -> None:
    path = Path(args.path)
    if args.algorithm == "crc32":
        crc = checksum_of(path, CRC32(), aggregate_tree=args.tree)
        sys.stdout.write(f"{crc.value:08x}  {path}\n")
        return
    digest = checksum_of(path, hashlib.new(args.algorithm), aggregate_tree=args.tree)
    sys.stdout.write(f"{digest.hexdigest()}  {path}\n")


def _cmd_copy(args: argparse.Namespace) -> None:
    source = Path(args.source)
    destination = Path(args.destination)
    preserve = _pick(args.preserve_timestamps, config.load_preserve_timestamps())
    buffer_size = args.buffer_size or config.load_copy_buffer_size()
    if args.into:
        copy_to_directory(source, destination, preserve, buffer_size=buffer_size)
        return
    entry = stat_entry(source, follow_symlinks=True)
    if entry is not None and entry.kind is EntryKind.DIRECTORY:
        path_filter = WildcardFilter.of(*args.include) if args.include else None
        copy_directory(source, destination, path_filter, preserve, buffer_size=buffer_size)
    else:
        copy_file(source, destination, preserve, buffer_size=buffer_size)


def _cmd_move(args: argparse.Namespace) -> None:
    source = Path(args.source)
    destination = Path(args.destination)
    if args.into:
        move_to_directory(source, destination, create_parents=args.parents)
        return
    entry = stat_entry(source)
    if entry is not None and entry.kind is EntryKind.DIRECTORY:
        move_directory(source, destination, create_parents=args.parents)
    else:
        move_file(source, destination)


def _cmd_delete(args: argparse.Namespace) -> None:
    path = Path(args.path)
    if args.quiet:
        delete_quietly(path)
        return
    force_delete(path)


def _cmd_config(args: argparse.Namespace) -> None:
    """Persist any given defaults, then print the effective settings."""
    if args.preserve_timestamps is not None:
        config.save_preserve_timestamps(args.preserve_timestamps)
    if args.skip_errors is not None:
        config.save_skip_errors(args.skip_errors)
    if args.hidden is not None:
        config.save_show_hidden(args.hidden)
    if args.skip_gitignored is not None:
        config.save_skip_gitignored(args.skip_gitignored)
    if args.buffer_size is not None:
        config.save_copy_buffer_size(args.buffer_size)

    settings = {
        "preserve_timestamps": config.load_preserve_timestamps(),
        "skip_errors": config.load_skip_errors(),
        "show_hidden": config.load_show_hidden(),
        "skip_gitignored": config.load_skip_gitignored(),
        "copy_buffer_size": config.load_copy_buffer_size(),
    }
    for key, value in settings.items():
        sys.stdout.write(f"{key} = {value}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="treewalk",
        description="Walk, measure, copy, move, and delete filesystem trees.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log each filesystem step to stderr.")
    commands = parser.add_subparsers(dest="command", required=True)

    list_parser = commands.add_parser("list", help="List entries under a directory in depth-first order.")
    list_parser.add_argument("root", help="Directory to walk.")
    list_parser.add_argument("--dirs", action="store_true", help="Also report directories.")
    list_parser.add_argument(
        "--include",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Only report entries whose name matches PATTERN (repeatable).",
    )
    list_parser.add_argument(
        "--exclude-dir",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Do not descend into directories whose name matches PATTERN (repeatable).",
    )
    list_parser.add_argument("--hidden", action=argparse.BooleanOptionalAction, default=None, help="Show dotfiles.")
    list_parser.add_argument(
        "--skip-gitignored",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Hide paths git reports as ignored (needs git on PATH; no effect outside a work tree).",
    )
    list_parser.add_argument(
        "--skip-errors",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Skip unreadable directories instead of aborting.",
    )
    list_parser.add_argument("--post-order", action="store_true", help="Report directories after their contents.")
    list_parser.set_defaults(handler=_cmd_list)

    size_parser = commands.add_parser("size", help="Print the size in bytes of a file or directory tree.")
    size_parser.add_argument("path")
    size_parser.set_defaults(handler=_cmd_size)

    checksum_parser = commands.add_parser("checksum", help="Print the checksum of a file or directory tree.")
    checksum_parser.add_argument("path")
    checksum_parser.add_argument("--algorithm", choices=CHECKSUM_ALGORITHMS, default="crc32")
    checksum_parser.add_argument(
        "--tree",
        action="store_true",
        help="Allow directories: checksum all file contents in depth-first order.",
    )
    checksum_parser.set_defaults(handler=_cmd_checksum)

    copy_parser = commands.add_parser("copy", help="Copy a file or directory.")
    copy_parser.add_argument("source")
    copy_parser.add_argument("destination")
    copy_parser.add_argument("--into", action="store_true", help="Treat DESTINATION as the parent directory.")
    copy_parser.add_argument(
        "--include",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Only copy entries whose name matches PATTERN (directory copies).",
    )
    copy_parser.add_argument(
        "--preserve-timestamps",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Keep source modification times.",
    )
    copy_parser.add_argument("--buffer-size", type=_positive_int, default=None, help="Copy chunk size in bytes.")
    copy_parser.set_defaults(handler=_cmd_copy)

    move_parser = commands.add_parser("move", help="Move a file or directory.")
    move_parser.add_argument("source")
    move_parser.add_argument("destination")
    move_parser.add_argument("--into", action="store_true", help="Treat DESTINATION as the parent directory.")
    move_parser.add_argument(
        "--parents",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Create missing destination parent directories.",
    )
    move_parser.set_defaults(handler=_cmd_move)

    delete_parser = commands.add_parser("delete", help="Delete a file or directory tree.")
    delete_parser.add_argument("path")
    delete_parser.add_argument("--quiet", action="store_true", help="Ignore every failure.")
    delete_parser.set_defaults(handler=_cmd_delete)

    config_parser = commands.add_parser(
        "config",
        help="Show saved defaults; any option given is saved first.",
    )
    for flag, help_text in (
        ("--preserve-timestamps", "Keep source modification times on copy."),
        ("--skip-errors", "Skip unreadable directories while listing."),
        ("--hidden", "Show dotfiles while listing."),
        ("--skip-gitignored", "Hide git-ignored paths while listing."),
    ):
        config_parser.add_argument(flag, action=argparse.BooleanOptionalAction, default=None, help=help_text)
    config_parser.add_argument("--buffer-size", type=_positive_int, default=None, help="Copy chunk size in bytes.")
    config_parser.set_defaults(handler=_cmd_config)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse arguments and run one subcommand."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    try:
        args.handler(args)
    except FileOpsError as exc:
        raise SystemExit(str(exc)) from exc
