#!/usr/bin/env python3
"""
Unit тесты для search_utils.py
"""

import pathlib

import pytest

from repo_browser_mcp.models.scan import SearchOptions, SearchResponse
from repo_browser_mcp.tools.utils import search_utils, walker
from repo_browser_mcp.tools.utils.gitignore_utils import GitignoreCache
from repo_browser_mcp.tools.utils.search_utils import (
    InvalidPatternError,
    SearchError,
    compile_search_pattern,
    find_line_matches,
    search_content,
    search_files,
)


class TestCompileSearchPattern:
    """Тесты для compile_search_pattern"""

    def test_literal_mode_escapes_metacharacters(self):
        pattern = compile_search_pattern("a.b(c)*", regex=False)

        assert pattern.search("a.b(c)*") is not None
        assert pattern.search("axb(c)") is None

    def test_invalid_regex(self):
        """Тест: невалидный regex даёт понятную ошибку"""
        with pytest.raises(InvalidPatternError, match=r"^Invalid regular expression: "):
            compile_search_pattern("(unclosed", regex=True)


class TestFindLineMatches:
    """Тесты для find_line_matches"""

    def test_preview_is_built_only_for_matching_lines(self):
        """Тест: превью строки считается один раз и только при совпадении"""

        class CountingLine(str):
            strips = 0

            def strip(self, *args):
                CountingLine.strips += 1
                return super().strip(*args)

        pattern = compile_search_pattern("a")

        assert find_line_matches(pattern, CountingLine("  bbb  "), 1) == []
        assert CountingLine.strips == 0

        matches = find_line_matches(pattern, CountingLine("  a a  "), 2)

        assert [m.column for m in matches] == [3, 5]
        assert {m.text for m in matches} == {"a a"}
        assert CountingLine.strips == 1


class TestSearchContent:
    """Тесты для search_content"""

    def test_end_to_end_respects_gitignore(self, tmp_path, write_files):
        """Тест: node_modules/ и *.log из .gitignore исключаются"""
        write_files(
            tmp_path,
            {
                ".gitignore": "node_modules/\n*.log\n",
                "src/app.js": "// TODO: fix\n",
                "node_modules/pkg/index.js": "// TODO\n",
                "debug.log": "TODO\n",
            },
        )

        response = search_content(tmp_path, "TODO")

        assert [result.path for result in response.results] == ["src/app.js"]
        assert response.total == 1
        assert response.query == "TODO"

    def test_literal_vs_regex(self, tmp_path, write_files):
        """Тест: a.b в литеральном режиме не совпадает с axb"""
        write_files(tmp_path, {"x.txt": "axb\n"})

        assert search_content(tmp_path, "a.b").results == []
        assert len(search_content(tmp_path, "a.b", {"regex": True}).results) == 1

    def test_case_sensitivity(self, tmp_path, write_files):
        write_files(tmp_path, {"notes.txt": "remember the todo list\n"})

        assert len(search_content(tmp_path, "TODO").results) == 1
        assert search_content(tmp_path, "TODO", SearchOptions(case_sensitive=True)).results == []

    def test_ranks_by_match_count_then_path(self, tmp_path, write_files):
        """Тест: файлы с большим числом совпадений идут первыми"""
        write_files(
            tmp_path,
            {
                "foo.txt": "one match of TODO\n",
                "bar.txt": "two matches of TODO and TODO\n",
                "baz.txt": "TODO\n",
            },
        )

        response = search_content(tmp_path, "TODO")

        assert [result.path for result in response.results] == ["bar.txt", "baz.txt", "foo.txt"]
        assert [result.match_count for result in response.results] == [2, 1, 1]

    def test_match_positions(self, tmp_path, write_files):
        write_files(tmp_path, {"a.txt": "first\n  TODO and todo\n"})

        matches = search_content(tmp_path, "todo").results[0].matches

        assert [(m.line, m.column, m.match) for m in matches] == [(2, 3, "TODO"), (2, 12, "todo")]
        assert matches[0].text == "TODO and todo"

    def test_preview_is_trimmed_and_truncated(self, tmp_path, write_files):
        write_files(tmp_path, {"long.txt": "   " + "a" * 300 + "NEEDLE\n"})

        match = search_content(tmp_path, "needle").results[0].matches[0]

        assert match.column == 304
        assert len(match.text) == 200
        assert match.text == "a" * 200

    def test_per_file_match_cap(self, tmp_path, write_files):
        """Тест: сохраняется не более 10 совпадений, matchCount честный"""
        write_files(tmp_path, {"many.txt": "hit\n" * 15})

        result = search_content(tmp_path, "hit").results[0]

        assert len(result.matches) == 10
        assert result.match_count == 15
        assert result.matches[-1].line == 10

    def test_max_results_zero(self, tmp_path, write_files):
        write_files(tmp_path, {"a.txt": "TODO\n"})

        response = search_content(tmp_path, "TODO", SearchOptions(max_results=0))

        assert response.results == []
        assert response.total == 0

    def test_max_results_caps_traversal(self, tmp_path, write_files):
        """Тест: total равен числу результатов на момент остановки обхода"""
        write_files(tmp_path, {f"f{i}.txt": "TODO\n" for i in range(5)})

        response = search_content(tmp_path, "TODO", {"maxResults": 2})

        assert len(response.results) == 2
        assert response.total == 2

    def test_blank_query_returns_empty_response(self, tmp_path, write_files):
        write_files(tmp_path, {"a.txt": "   \n"})

        assert search_content(tmp_path, "") == SearchResponse()
        assert search_content(tmp_path, "   ") == SearchResponse(results=[], total=0, query="")

    def test_query_is_trimmed_in_response(self, tmp_path, write_files):
        write_files(tmp_path, {"a.txt": "x  TODO  y\n"})

        response = search_content(tmp_path, "  TODO  ")

        assert response.query == "TODO"
        assert response.total == 1

    def test_invalid_regex_is_not_wrapped(self, tmp_path):
        with pytest.raises(InvalidPatternError, match=r"^Invalid regular expression: "):
            search_content(tmp_path, "[a-", {"regex": True})

    def test_missing_root_raises_search_error(self, tmp_path):
        """Тест: ошибка чтения корня оборачивается в SearchError"""
        with pytest.raises(SearchError, match=r"^Search failed: "):
            search_content(tmp_path / "missing", "TODO")

    def test_file_types_filter(self, tmp_path, write_files):
        write_files(tmp_path, {"a.py": "TODO\n", "b.js": "TODO\n", "c.txt": "TODO\n"})

        only_py = search_content(tmp_path, "TODO", {"fileTypes": ["PY"]})
        py_and_js = search_content(tmp_path, "TODO", {"fileTypes": "py,js"})

        assert [r.path for r in only_py.results] == ["a.py"]
        assert [r.path for r in py_and_js.results] == ["a.py", "b.js"]

    def test_binary_extensions_are_skipped(self, tmp_path, write_files):
        write_files(tmp_path, {"logo.png": "TODO\n", "archive.zip": "TODO\n", "Makefile": "TODO\n"})

        assert [r.path for r in search_content(tmp_path, "TODO").results] == ["Makefile"]

    def test_large_files_are_skipped(self, tmp_path, monkeypatch, write_files):
        monkeypatch.setattr(search_utils, "MAX_SEARCH_FILE_SIZE", 10)
        write_files(tmp_path, {"small.txt": "TODO\n", "big.txt": "TODO " * 10})

        assert [r.path for r in search_content(tmp_path, "TODO").results] == ["small.txt"]

    def test_dotfiles_are_searched(self, tmp_path, write_files):
        """Тест: dotfiles исключаются только правилами .gitignore"""
        write_files(tmp_path, {".env": "TODO\n", ".git/HEAD": "TODO\n"})

        assert [r.path for r in search_content(tmp_path, "TODO").results] == [".env"]

    def test_invalid_utf8_is_replaced(self, tmp_path):
        (tmp_path / "latin.txt").write_bytes(b"caf\xe9 TODO\n")

        match = search_content(tmp_path, "TODO").results[0].matches[0]

        assert match.column == 6

    def test_unreadable_file_is_skipped(self, tmp_path, monkeypatch, write_files):
        """Тест: ошибка чтения одного файла не прерывает поиск"""
        write_files(tmp_path, {"a.txt": "TODO\n", "locked.txt": "TODO\n", "z.txt": "TODO\n"})
        real_read_bytes = pathlib.Path.read_bytes

        def read_bytes(path):
            if path.name == "locked.txt":
                raise PermissionError(13, "Permission denied", str(path))
            return real_read_bytes(path)

        monkeypatch.setattr(pathlib.Path, "read_bytes", read_bytes)

        response = search_content(tmp_path, "TODO")

        assert [r.path for r in response.results] == ["a.txt", "z.txt"]
        assert response.total == 2

    def test_unlistable_subdirectory_is_skipped(self, tmp_path, monkeypatch, write_files):
        """Тест: недоступная поддиректория теряет только своё поддерево"""
        write_files(tmp_path, {"a.txt": "TODO\n", "locked/b.txt": "TODO\n", "open/c.txt": "TODO\n"})
        real_list_directory = walker.list_directory

        def list_directory(dir_path):
            if pathlib.Path(dir_path).name == "locked":
                raise PermissionError(13, "Permission denied", str(dir_path))
            return real_list_directory(dir_path)

        monkeypatch.setattr(walker, "list_directory", list_directory)

        response = search_content(tmp_path, "TODO")

        assert [r.path for r in response.results] == ["a.txt", "open/c.txt"]

    def test_max_results_zero_does_not_touch_root(self, tmp_path):
        response = search_content(tmp_path / "missing", "TODO", {"maxResults": 0})

        assert response == SearchResponse(results=[], total=0, query="TODO")

    def test_uses_rule_cache(self, tmp_path, write_files):
        write_files(tmp_path, {".gitignore": "*.log\n", "a.log": "TODO\n", "a.txt": "TODO\n"})
        cache = GitignoreCache()

        response = search_content(tmp_path, "TODO", rule_cache=cache)

        assert [r.path for r in response.results] == ["a.txt"]
        assert cache.get_rules(tmp_path)[0].pattern == "*.log"

    def test_camel_case_dump(self, tmp_path, write_files):
        write_files(tmp_path, {"a.txt": "TODO\n"})

        payload = search_content(tmp_path, "TODO").model_dump(by_alias=True)

        assert payload["results"][0]["matchCount"] == 1
        assert set(payload) == {"results", "total", "query"}


class TestSearchFiles:
    """Тесты для search_files"""

    def test_orders_exact_matches_then_directories(self, tmp_path, write_files):
        """Тест: точные совпадения, потом директории, потом файлы по пути"""
        write_files(
            tmp_path,
            {
                ".gitignore": "*.log\n",
                "README": "",
                "docs/readme_dir/index.md": "",
                "src/readme.py": "",
                "readme.log": "",
            },
        )

        matches = search_files(tmp_path, "readme")

        assert [m.path for m in matches] == ["README", "docs/readme_dir", "src/readme.py"]
        assert matches[1].is_directory is True

    def test_blank_query(self, tmp_path):
        assert search_files(tmp_path, "  ") == []

    def test_missing_root(self, tmp_path):
        with pytest.raises(SearchError):
            search_files(tmp_path / "missing", "x")
