import logging
import pathlib
import re
from datetime import datetime

from repo_browser_mcp.models.scan import (
    FileNameMatch,
    FileSearchResult,
    IgnoreRule,
    SearchMatch,
    SearchOptions,
    SearchResponse,
)

from .constants import MAX_MATCHES_PER_FILE, MAX_PREVIEW_LENGTH, MAX_SEARCH_FILE_SIZE
from .file_utils import file_extension, is_text_file, locale_sort_key
from .gitignore_utils import GitignoreCache, get_gitignore_rules
from .walker import WalkEntry, iter_search_files

logger = logging.getLogger(__name__)


class SearchError(Exception):
    """A search could not be carried out."""


class InvalidPatternError(SearchError):
    """The query could not be compiled into a regular expression."""


def compile_search_pattern(query: str, regex: bool = False, case_sensitive: bool = False) -> re.Pattern:
    """
    Compile the query into the pattern used for every line.

    In literal mode all regex metacharacters are escaped first. Matching is
    case-insensitive unless `case_sensitive` is set.

    Raises:
        InvalidPatternError: If the pattern does not compile.
    """
    source = query if regex else re.escape(query)
    flags = 0 if case_sensitive else re.IGNORECASE
    try:
        return re.compile(source, flags)
    except re.error as e:
        raise InvalidPatternError(f"Invalid regular expression: {e}") from e


def find_line_matches(pattern: re.Pattern, line: str, line_number: int) -> list[SearchMatch]:
    """All non-empty matches of `pattern` in one line, with 1-based columns."""
    matches: list[SearchMatch] = []
    preview = None
    for m in pattern.finditer(line):
        if not m.group(0):
            continue
        if preview is None:
            preview = line.strip()[:MAX_PREVIEW_LENGTH]
        matches.append(SearchMatch(line=line_number, column=m.start() + 1, text=preview, match=m.group(0)))
    return matches


def _wanted_file(entry: WalkEntry, file_types: list[str] | None) -> bool:
    if entry.stat_result.st_size > MAX_SEARCH_FILE_SIZE:
        return False
    ext = file_extension(entry.name)
    if not is_text_file(ext):
        return False
    if file_types and ext not in file_types:
        return False
    return True


def _search_file(
    entry: WalkEntry, pattern: re.Pattern, results: list[FileSearchResult], max_results: int
) -> FileSearchResult | None:
    try:
        content = entry.path.read_bytes().decode("utf-8", errors="replace")
    except OSError as e:
        logger.debug(f"Skipping unreadable file {entry.path}: {e}")
        return None

    file_matches: list[SearchMatch] = []
    for index, line in enumerate(content.split("\n")):
        if len(results) >= max_results:
            break
        try:
            file_matches.extend(find_line_matches(pattern, line, index + 1))
        except (re.error, RecursionError) as e:
            logger.debug(f"Pattern failed on {entry.relative_path}:{index + 1}: {e}")

    if not file_matches:
        return None
    return FileSearchResult(
        path=entry.relative_path,
        matches=file_matches[:MAX_MATCHES_PER_FILE],
        match_count=len(file_matches),
    )


def search_content(
    working_dir: str | pathlib.Path,
    query: str,
    options: SearchOptions | dict | None = None,
    *,
    rule_cache: GitignoreCache | None = None,
) -> SearchResponse:
    """
    Full-text search over the text files of a working directory.

    The walk stops as soon as `max_results` files with matches have been
    found, so `total` is never larger than `max_results`. Results are ranked
    by match count (descending), then by path.

    Args:
        working_dir: Root of the search; its .gitignore is honoured.
        query: Text or regular expression to look for.
        options: SearchOptions or a dict of them (camelCase keys accepted).
        rule_cache: Cache for the parsed .gitignore rules.

    Returns:
        A SearchResponse. An empty or blank query gives an empty response.

    Raises:
        InvalidPatternError: If the query is not a valid regular expression.
        SearchError: If the walk itself fails, e.g. the root cannot be listed.
    """
    if options is None:
        options = SearchOptions()
    elif isinstance(options, dict):
        options = SearchOptions.model_validate(options)

    if not isinstance(query, str) or not query.strip():
        return SearchResponse()

    pattern = compile_search_pattern(query, options.regex, options.case_sensitive)
    rules: list[IgnoreRule] = get_gitignore_rules(working_dir, rule_cache)
    max_results = options.max_results
    results: list[FileSearchResult] = []

    logger.debug(
        f"Searching {working_dir} for {query!r} "
        f"(regex={options.regex}, case_sensitive={options.case_sensitive}, max_results={max_results})"
    )
    try:
        for entry in iter_search_files(working_dir, rules, lambda: len(results) >= max_results):
            if not _wanted_file(entry, options.file_types):
                continue
            file_result = _search_file(entry, pattern, results, max_results)
            if file_result is not None:
                results.append(file_result)
    except Exception as e:
        raise SearchError(f"Search failed: {e}") from e

    # Ranking: most matches first, ties by path
    results.sort(key=lambda r: (-r.match_count, locale_sort_key(r.path)))

    return SearchResponse(
        results=results[:max_results],
        total=len(results),
        query=query.strip(),
    )


def search_files(
    working_dir: str | pathlib.Path,
    query: str,
    rule_cache: GitignoreCache | None = None,
) -> list[FileNameMatch]:
    """
    Find files and directories whose name contains `query` (case-insensitive).

    Exact name matches come first, then directories, then everything else
    by path.

    Raises:
        SearchError: If the root cannot be listed.
    """
    if not isinstance(query, str) or not query.strip():
        return []

    lower_query = query.lower()
    rules = get_gitignore_rules(working_dir, rule_cache)
    matches: list[FileNameMatch] = []

    try:
        for entry in iter_search_files(working_dir, rules, include_directories=True):
            if lower_query in entry.name.lower():
                matches.append(
                    FileNameMatch(
                        path=entry.relative_path,
                        name=entry.name,
                        is_directory=entry.is_directory,
                        modified=datetime.fromtimestamp(entry.stat_result.st_mtime),
                    )
                )
    except Exception as e:
        raise SearchError(f"Search failed: {e}") from e

    matches.sort(
        key=lambda m: (
            m.name.lower() != lower_query,
            not m.is_directory,
            locale_sort_key(m.path),
        )
    )
    return matches
