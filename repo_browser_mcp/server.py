"""
MCP server definition for the Repository Browser MCP.
"""

import logging
from typing import Any, List, Optional

from fastapi.middleware.cors import CORSMiddleware
from starlette.applications import Starlette
from starlette.middleware import Middleware

from mcp.server.fastmcp import Context, FastMCP

from repo_browser_mcp.prompts import get_all_prompts
from repo_browser_mcp.tools.base import ToolExecResult
from repo_browser_mcp.utils.config import ServiceConfig
from repo_browser_mcp.utils.dependencies import (
    get_base_config,
    get_repository_explorer_tool_provider,
)


# Get a module-level logger
logger = logging.getLogger(__name__)


class CustomFastMCP(FastMCP):
    """Custom FastMCP server with CORS middleware."""

    def _add_cors_middleware(self, app: Starlette) -> Starlette:
        """A helper to add CORS middleware to a Starlette app."""
        app.user_middleware.insert(
            0,
            Middleware(
                CORSMiddleware,
                allow_origin_regex=".*",  # Allow any origin
                allow_credentials=True,
                allow_methods=["*"],
                allow_headers=["*"],
            ),
        )
        app.middleware_stack = app.build_middleware_stack()
        return app

    def sse_app(self, mount_path: str | None = None) -> Starlette:
        """Overrides the default sse_app to inject CORS middleware."""
        app = super().sse_app(mount_path)
        return self._add_cors_middleware(app)

    def streamable_http_app(self) -> Starlette:
        """Overrides the default streamable_http_app to inject CORS middleware."""
        app = super().streamable_http_app()
        return self._add_cors_middleware(app)


def build_server(config: ServiceConfig) -> CustomFastMCP:
    """Build and configure the FastMCP server instance.

    Args:
        config: The server's service configuration.

    Returns:
        A configured CustomFastMCP instance.
    """
    logger.info(
        "Initializing FastMCP server",
        extra={"host": config.MCP_HOST, "port": config.MCP_PORT, "repo_root": str(config.REPO_ROOT)},
    )
    return CustomFastMCP(
        "repo-browser-mcp",
        host=config.MCP_HOST,
        port=config.MCP_PORT,
    )


def to_response(result: ToolExecResult) -> dict[str, Any]:
    """Converts a tool result into the dictionary returned over MCP."""
    if result.error:
        return {"status": "error", "error": result.error, "exit_code": result.error_code}
    return {"status": "success", "result": result.output, "exit_code": result.error_code}


# Get the base configuration for server initialization.
# This is also imported by main.py to run the server.
server_config = get_base_config()
mcp_app = build_server(server_config)


# --- Prompt Handlers ---
@mcp_app.prompt(title="Agent System Prompt for the Repository Browser")
def get_system_prompt() -> str:
    """Provides the main system prompt for the agent."""
    prompts = get_all_prompts()
    return prompts["agent-system-prompt"]

# --- Tool Definitions ---

@mcp_app.tool(name="file_tree")
async def file_tree_tool(
    context: Context,
    path: Optional[str] = None,
    show_gitignored: bool = False,
    max_depth: Optional[int] = None,
) -> dict[str, Any]:
    """
    Returns the nested file tree of the repository (directories first, then files).

    Args:
        path: Directory inside the repository to start from. Defaults to the repository root.
        show_gitignored: Include dotfiles and entries ignored by .gitignore.
        max_depth: Number of levels to return. Deeper content is omitted.

    Returns:
        A dictionary containing the JSON tree.
    """
    logger.info(f"Building file tree for path '{path or '.'}'")
    try:
        tool = get_repository_explorer_tool_provider()
        args = {
            "subcommand": "tree",
            "path": path,
            "show_gitignored": show_gitignored,
            "max_depth": max_depth,
        }
        # Filter out None values so the tool applies its defaults
        args = {k: v for k, v in args.items() if v is not None}

        result = await tool.execute(args)
        return to_response(result)

    except Exception as e:
        logger.error(f"Error building file tree: {e}", exc_info=True)
        return {"status": "error", "error": str(e), "exit_code": 1}


@mcp_app.tool(name="search_content")
async def search_content_tool(
    context: Context,
    query: str,
    regex: bool = False,
    case_sensitive: bool = False,
    max_results: Optional[int] = None,
    file_types: Optional[List[str]] = None,
) -> dict[str, Any]:
    """
    Full-text search across the repository's text files, honouring .gitignore.

    Args:
        query: Text to search for, or a regular expression when `regex` is set.
        regex: Treat the query as a regular expression.
        case_sensitive: Match case exactly.
        max_results: Maximum number of files to return.
        file_types: Extensions to search, without the dot (e.g. ["py", "js"]).

    Returns:
        A dictionary containing the ranked JSON results.
    """
    logger.info(f"Searching content for '{query}' (regex={regex}, case_sensitive={case_sensitive})")
    try:
        tool = get_repository_explorer_tool_provider()
        args = {
            "subcommand": "search",
            "query": query,
            "regex": regex,
            "case_sensitive": case_sensitive,
            "max_results": max_results,
            "file_types": file_types,
        }
        args = {k: v for k, v in args.items() if v is not None}

        result = await tool.execute(args)
        return to_response(result)

    except Exception as e:
        logger.error(f"Error searching content: {e}", exc_info=True)
        return {"status": "error", "error": str(e), "exit_code": 1}


@mcp_app.tool(name="search_files")
async def search_files_tool(
    context: Context,
    query: str,
) -> dict[str, Any]:
    """
    Finds files and directories whose name contains the query (case-insensitive).

    Args:
        query: Part of the file or directory name.

    Returns:
        A dictionary containing the JSON list of matching paths.
    """
    logger.info(f"Searching file names for '{query}'")
    try:
        tool = get_repository_explorer_tool_provider()
        result = await tool.execute({"subcommand": "find", "query": query})
        return to_response(result)

    except Exception as e:
        logger.error(f"Error searching file names: {e}", exc_info=True)
        return {"status": "error", "error": str(e), "exit_code": 1}
