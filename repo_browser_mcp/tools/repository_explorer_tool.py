import logging
import pathlib
from typing_extensions import override

from repo_browser_mcp.models.scan import SearchOptions
from repo_browser_mcp.utils.path_utils import resolve_path

from .base import Tool, ToolCallArguments, ToolError, ToolExecResult, ToolParameter
from .utils.constants import DEFAULT_MAX_RESULTS, DEFAULT_TREE_DEPTH
from .utils.formatting_utils import format_file_matches, format_search_results, format_tree
from .utils.gitignore_utils import GitignoreCache, get_gitignore_rules
from .utils.path_utils import is_restricted_path, relative_posix
from .utils.search_utils import SearchError, search_content, search_files
from .utils.walker import build_file_tree

logger = logging.getLogger(__name__)

RepositoryExplorerSubCommands = ["tree", "search", "find"]


def _as_bool(value: object) -> bool:
    # Query-string style flags arrive as "true" / "false"
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


class RepositoryExplorerTool(Tool):
    """
    Read-only tool for browsing a repository the way its web view does.

    Subcommands:
    - 'tree': nested file tree for the sidebar, honouring the root .gitignore
    - 'search': full-text content search with literal or regex queries
    - 'find': file and directory name search

    All paths are resolved inside the configured working directory, and the
    filesystem root and the home directory are refused as working directories.
    The parsed .gitignore rules are shared through a GitignoreCache.
    """

    def __init__(
        self,
        working_dir: pathlib.Path,
        rule_cache: GitignoreCache | None = None,
        tree_max_depth: int = DEFAULT_TREE_DEPTH,
        search_max_results: int = DEFAULT_MAX_RESULTS,
        model_provider: str | None = None,
    ) -> None:
        """
        Initialize the RepositoryExplorerTool.

        Args:
            working_dir: Repository root every request is resolved against.
            rule_cache: Cache for the root .gitignore; a private one is created if omitted.
            tree_max_depth: Default depth of the 'tree' subcommand.
            search_max_results: Default result cap of the 'search' subcommand.
            model_provider: Optional model provider identifier for tool configuration.
        """
        super().__init__(model_provider)
        self._working_dir = pathlib.Path(working_dir)
        self._rule_cache = rule_cache if rule_cache is not None else GitignoreCache()
        self._tree_max_depth = tree_max_depth
        self._search_max_results = search_max_results

    @property
    def working_dir(self) -> pathlib.Path:
        return self._working_dir

    @override
    def get_model_provider(self) -> str | None:
        return self._model_provider

    @override
    def get_name(self) -> str:
        return "repository_explorer"

    @override
    def get_description(self) -> str:
        return """Read-only tool for browsing the repository.
- 'tree': Nested file tree (directories first), hiding dotfiles and .gitignore'd entries unless show_gitignored is set
- 'search': Search file contents (literal text or regex, optional case sensitivity and file type filter), results ranked by match count
- 'find': Find files and directories by name

.git and node_modules are always skipped."""

    @override
    def get_parameters(self) -> list[ToolParameter]:
        return [
            ToolParameter(
                name="subcommand",
                type="string",
                description=f"The command to run. Allowed options are: {', '.join(RepositoryExplorerSubCommands)}.",
                required=True,
                enum=RepositoryExplorerSubCommands,
            ),
            ToolParameter(
                name="path",
                type="string",
                description="Directory inside the repository for the 'tree' command. Defaults to the repository root.",
                required=False,
            ),
            ToolParameter(
                name="show_gitignored",
                type="boolean",
                description="Include dotfiles and .gitignore'd entries in the tree.",
                required=False,
            ),
            ToolParameter(
                name="max_depth",
                type="integer",
                description=f"Number of tree levels to return. Default: {self._tree_max_depth}",
                required=False,
            ),
            ToolParameter(
                name="query",
                type="string",
                description="Search query for the 'search' and 'find' commands.",
                required=False,
            ),
            ToolParameter(
                name="regex",
                type="boolean",
                description="Treat the query as a regular expression.",
                required=False,
            ),
            ToolParameter(
                name="case_sensitive",
                type="boolean",
                description="Match case exactly.",
                required=False,
            ),
            ToolParameter(
                name="max_results",
                type="integer",
                description=f"Maximum number of files to return from 'search'. Default: {self._search_max_results}",
                required=False,
            ),
            ToolParameter(
                name="file_types",
                type=["array", "string"],
                description="Extensions to search, without the dot (e.g. ['py', 'js'] or 'py,js').",
                items={"type": "string"},
                required=False,
            ),
        ]

    @override
    async def execute(self, arguments: ToolCallArguments) -> ToolExecResult:
        """
        Execute the repository explorer command.

        Returns:
            ToolExecResult containing either the JSON output or error information.
        """
        subcommand = arguments.get("subcommand")
        if not isinstance(subcommand, str):
            return ToolExecResult(error="Subcommand must be a string.", error_code=-1)

        if is_restricted_path(self._working_dir):
            return ToolExecResult(
                error="Access denied: Cannot browse the root or home directory.", error_code=-1
            )

        try:
            match subcommand:
                case "tree":
                    return self._tree_handler(arguments)
                case "search":
                    return self._search_handler(arguments)
                case "find":
                    return self._find_handler(arguments)
                case _:
                    return ToolExecResult(error=f"Unknown subcommand: {subcommand}", error_code=-1)
        except (ToolError, SearchError, ValueError, PermissionError, NotADirectoryError, FileNotFoundError) as e:
            logger.warning(f"{self.get_name()} {subcommand} failed: {e}")
            return ToolExecResult(error=str(e), error_code=-1)

    def _tree_handler(self, args: ToolCallArguments) -> ToolExecResult:
        path_str = args.get("path", "")
        if path_str is not None and not isinstance(path_str, str):
            raise ValueError("Path must be a string.")

        show_gitignored = _as_bool(args.get("show_gitignored"))

        max_depth = args.get("max_depth", self._tree_max_depth)
        if not isinstance(max_depth, int) or isinstance(max_depth, bool) or max_depth <= 0:
            max_depth = self._tree_max_depth

        target_dir = resolve_path(self._working_dir, path_str)
        if not target_dir.is_dir():
            raise NotADirectoryError(f"'{path_str}' is not a directory.")

        rules = get_gitignore_rules(self._working_dir, self._rule_cache)
        tree = build_file_tree(
            target_dir,
            relative_posix(target_dir, self._working_dir),
            rules,
            self._working_dir.resolve(),
            show_gitignored,
            max_depth,
        )
        return ToolExecResult(output=format_tree(tree, target_dir.name))

    def _search_handler(self, args: ToolCallArguments) -> ToolExecResult:
        query = args.get("query")
        if query is not None and not isinstance(query, str):
            raise ValueError("Search query must be a string.")

        max_results = args.get("max_results")
        if max_results is None:
            max_results = self._search_max_results

        # Raises pydantic's ValidationError (a ValueError) on bad values
        options = SearchOptions(
            regex=_as_bool(args.get("regex")),
            case_sensitive=_as_bool(args.get("case_sensitive")),
            max_results=max_results,
            file_types=args.get("file_types"),
        )

        response = search_content(self._working_dir, query or "", options, rule_cache=self._rule_cache)
        return ToolExecResult(output=format_search_results(response, options.max_results))

    def _find_handler(self, args: ToolCallArguments) -> ToolExecResult:
        query = args.get("query")
        if query is not None and not isinstance(query, str):
            raise ValueError("Search query must be a string.")

        matches = search_files(self._working_dir, query or "", self._rule_cache)
        return ToolExecResult(output=format_file_matches(matches, query or ""))
