"""
Directory traversal shared by the file tree and the search engines.

Two configurations of the same pruning rules:

- ``build_file_tree`` walks depth-first up to ``max_depth`` levels and returns
  nested ``TreeNode`` lists for the sidebar.
- ``iter_search_files`` walks the whole subtree with an explicit frame stack
  and yields entries lazily; the consumer stops the walk through
  ``should_stop``, which is checked before every directory and every file.

Entries named ``.git`` or ``node_modules`` are never visited. Entries whose
stat fails are skipped, and a directory that cannot be listed only loses its
own subtree.
"""

import logging
import os
import pathlib
import stat
from dataclasses import dataclass
from typing import Callable, Iterator

from repo_browser_mcp.models.scan import IgnoreRule, TreeNode

from .constants import DEFAULT_TREE_DEPTH
from .file_utils import is_always_excluded, is_hidden, locale_sort_key
from .gitignore_utils import is_ignored_by_gitignore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalkEntry:
    path: pathlib.Path
    relative_path: str
    name: str
    is_directory: bool
    stat_result: os.stat_result


@dataclass
class _DirectoryFrame:
    path: pathlib.Path
    relative_path: str
    names: Iterator[str]


def list_directory(dir_path: str | pathlib.Path) -> list[str]:
    """Entry names of a directory in name order. OSError propagates."""
    return sorted(os.listdir(dir_path))


def _join(relative_path: str, name: str) -> str:
    return f"{relative_path}/{name}" if relative_path else name


def scan_entry(
    dir_path: pathlib.Path,
    relative_path: str,
    name: str,
    rules: list[IgnoreRule] | None,
    working_dir: str | pathlib.Path,
    *,
    hide_dotfiles: bool,
    respect_gitignore: bool,
) -> WalkEntry | None:
    """
    Apply the pruning rules to one directory entry.

    Returns:
        A WalkEntry for a visible entry, or None if the entry is excluded or
        its stat failed.
    """
    if is_always_excluded(name):
        return None
    if hide_dotfiles and is_hidden(name):
        return None

    full_path = dir_path / name
    try:
        stat_result = full_path.stat()
    except OSError as e:
        logger.debug(f"Skipping {full_path}: {e}")
        return None

    is_directory = stat.S_ISDIR(stat_result.st_mode)
    if respect_gitignore and is_ignored_by_gitignore(full_path, rules, working_dir, is_directory):
        return None

    return WalkEntry(
        path=full_path,
        relative_path=_join(relative_path, name),
        name=name,
        is_directory=is_directory,
        stat_result=stat_result,
    )


def build_file_tree(
    dir_path: str | pathlib.Path,
    relative_path: str = "",
    rules: list[IgnoreRule] | None = None,
    working_dir: str | pathlib.Path | None = None,
    show_gitignored: bool = False,
    max_depth: int = DEFAULT_TREE_DEPTH,
    current_depth: int = 0,
) -> list[TreeNode]:
    """
    Build the nested file tree shown in the sidebar.

    Args:
        dir_path: Directory to list.
        relative_path: Path of `dir_path` relative to `working_dir` ("" for the root).
        rules: Ignore rules of the working directory.
        working_dir: Root the rules and relative paths refer to. Defaults to `dir_path`.
        show_gitignored: Include dotfiles and ignored entries.
        max_depth: Number of levels to include; deeper content is omitted silently.
        current_depth: Level of `dir_path`, 0 for the root.

    Returns:
        Directories first, then files, each group ordered by name.
        Listing errors are logged and produce an empty list.
    """
    if current_depth >= max_depth:
        return []

    dir_path = pathlib.Path(dir_path)
    if working_dir is None:
        working_dir = dir_path

    try:
        names = list_directory(dir_path)
    except OSError as e:
        logger.error(f"Error building file tree for {dir_path}: {e}")
        return []

    tree: list[TreeNode] = []
    for name in names:
        # Checked before the stat: entries are matched as files here, so
        # directory-only rules do not hide directories in the tree.
        if not show_gitignored and is_ignored_by_gitignore(dir_path / name, rules, working_dir, False):
            continue
        entry = scan_entry(
            dir_path,
            relative_path,
            name,
            rules,
            working_dir,
            hide_dotfiles=not show_gitignored,
            respect_gitignore=False,
        )
        if entry is None:
            continue

        children = None
        if entry.is_directory:
            children = build_file_tree(
                entry.path,
                entry.relative_path,
                rules,
                working_dir,
                show_gitignored,
                max_depth,
                current_depth + 1,
            )
        tree.append(
            TreeNode(
                name=entry.name,
                path=entry.relative_path,
                is_directory=entry.is_directory,
                children=children,
            )
        )

    tree.sort(key=lambda node: (not node.is_directory, locale_sort_key(node.name)))
    return tree


def iter_search_files(
    root: str | pathlib.Path,
    rules: list[IgnoreRule] | None,
    should_stop: Callable[[], bool] = lambda: False,
    include_directories: bool = False,
) -> Iterator[WalkEntry]:
    """
    Walk the whole subtree of `root` depth-first, in name order.

    Dotfiles are only excluded through the ignore rules. Ignored directories
    are not descended into. A directory reached a second time (through a
    symlink) is not walked again.

    Args:
        root: Directory to walk; it is also the root the rules refer to.
        rules: Ignore rules of `root`.
        should_stop: Checked before each directory and each file; once it
            returns True the whole walk ends.
        include_directories: Also yield directory entries, before their contents.

    Yields:
        Regular files (and directories when requested).

    Raises:
        OSError: If `root` itself cannot be listed.
    """
    if should_stop():
        return

    root_path = pathlib.Path(root)
    stack = [_DirectoryFrame(root_path, "", iter(list_directory(root_path)))]
    visited = {_directory_key(root_path.stat())}

    while stack:
        frame = stack[-1]
        name = next(frame.names, None)
        if name is None:
            stack.pop()
            continue

        if should_stop():
            return

        entry = scan_entry(
            frame.path,
            frame.relative_path,
            name,
            rules,
            root_path,
            hide_dotfiles=False,
            respect_gitignore=True,
        )
        if entry is None:
            continue

        if entry.is_directory:
            key = _directory_key(entry.stat_result)
            if key in visited:
                continue
            if include_directories:
                yield entry
                if should_stop():
                    return
            try:
                names = list_directory(entry.path)
            except OSError as e:
                logger.debug(f"Cannot list {entry.path}: {e}")
                continue
            visited.add(key)
            stack.append(_DirectoryFrame(entry.path, entry.relative_path, iter(names)))
        elif stat.S_ISREG(entry.stat_result.st_mode):
            yield entry


def _directory_key(stat_result: os.stat_result) -> tuple[int, int]:
    return stat_result.st_dev, stat_result.st_ino
