"""
Simplified .gitignore handling for the file tree and the search engines.

Only a subset of the real gitignore grammar is understood: one pattern per
line, ``#`` comments, ``*`` wildcards and a trailing ``/`` for directory-only
rules. There is no negation, no anchoring and no ``**``. A plain pattern
matches any path segment with the same name at any depth, and a wildcard
pattern matches either the whole relative path or any single segment.
Existing callers rely on exactly this behaviour.
"""

import functools
import logging
import os
import pathlib
import re
import time
from typing import Callable

from repo_browser_mcp.models.scan import IgnoreRule

from .constants import GITIGNORE_CACHE_TTL_MS, GITIGNORE_FILENAME

logger = logging.getLogger(__name__)


def parse_gitignore(content: str) -> list[IgnoreRule]:
    """
    Parse the text of a .gitignore file into rules, preserving file order.

    Blank lines and lines starting with '#' are dropped. A trailing '/'
    marks a directory-only rule and is stripped from the pattern.
    """
    rules: list[IgnoreRule] = []
    for raw_line in content.split("\n"):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.endswith("/"):
            rules.append(IgnoreRule(pattern=line[:-1], is_directory=True))
        else:
            rules.append(IgnoreRule(pattern=line, is_directory=False))
    return rules


def load_gitignore(gitignore_path: str | pathlib.Path) -> list[IgnoreRule]:
    """Read and parse a .gitignore file. A missing or unreadable file yields no rules."""
    path = pathlib.Path(gitignore_path)
    if not path.is_file():
        return []
    try:
        return parse_gitignore(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Cannot read {path}: {e}")
        return []


@functools.lru_cache(maxsize=256)
def _wildcard_regex(pattern: str) -> re.Pattern | None:
    # Only '*' is translated, every other character keeps its regex meaning.
    try:
        return re.compile("^" + pattern.replace("*", ".*") + "$")
    except re.error as e:
        logger.warning(f"Skipping unusable ignore pattern '{pattern}': {e}")
        return None


def _relative_posix(file_path: str | pathlib.Path, working_dir: str | pathlib.Path) -> str:
    relative_path = os.path.relpath(os.fspath(file_path), os.fspath(working_dir)).replace("\\", "/")
    return "" if relative_path == "." else relative_path


def is_ignored_by_gitignore(
    file_path: str | pathlib.Path,
    rules: list[IgnoreRule] | None,
    working_dir: str | pathlib.Path,
    is_directory: bool = False,
) -> bool:
    """
    Check whether a path is excluded by the given rules.

    Args:
        file_path: Path to check, absolute or relative to the process cwd.
        rules: Rules in file order; the first matching rule wins.
        working_dir: Directory the .gitignore belongs to.
        is_directory: Whether the path is a directory. Directory-only rules
            never match files.

    Returns:
        True if any rule matches.
    """
    if not rules:
        return False

    relative_path = _relative_posix(file_path, working_dir)
    path_parts = relative_path.split("/")

    for rule in rules:
        if rule.is_directory and not is_directory:
            continue

        pattern = rule.pattern
        if "*" in pattern:
            regex = _wildcard_regex(pattern)
            if regex is None:
                continue
            if regex.search(relative_path) or any(regex.search(part) for part in path_parts):
                return True
        elif (
            relative_path == pattern
            or relative_path.startswith(pattern + "/")
            or pattern in path_parts
        ):
            return True

    return False


class GitignoreCache:
    """
    Single-slot cache of the parsed root .gitignore of one working directory.

    Rules are re-read once they are older than the TTL; asking for another
    working directory replaces the cached entry. Edits to .gitignore are only
    picked up after the TTL expires.
    """

    def __init__(
        self,
        ttl_ms: int = GITIGNORE_CACHE_TTL_MS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_ms = ttl_ms
        self._clock = clock
        # (working_dir, rules, loaded_at_ms), replaced as a whole
        self._entry: tuple[str, list[IgnoreRule], float] | None = None

    def get_rules(self, working_dir: str | pathlib.Path) -> list[IgnoreRule]:
        root = os.path.abspath(os.fspath(working_dir))
        now_ms = self._clock() * 1000
        entry = self._entry
        if entry is not None and entry[0] == root and (now_ms - entry[2]) < self._ttl_ms:
            return list(entry[1])

        rules = load_gitignore(os.path.join(root, GITIGNORE_FILENAME))
        logger.debug(f"Loaded {len(rules)} ignore rules for {root}")
        self._entry = (root, rules, now_ms)
        return list(rules)


def get_gitignore_rules(
    working_dir: str | pathlib.Path, cache: GitignoreCache | None = None
) -> list[IgnoreRule]:
    """Rules of the root .gitignore, through `cache` when one is given."""
    if cache is None:
        return load_gitignore(os.path.join(os.fspath(working_dir), GITIGNORE_FILENAME))
    return cache.get_rules(working_dir)
