"""Service configuration definition."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

from repo_browser_mcp.tools.utils.constants import (
    DEFAULT_MAX_RESULTS,
    DEFAULT_TREE_DEPTH,
    GITIGNORE_CACHE_TTL_MS,
)


class ServiceConfig(BaseSettings):
    """
    Defines the configuration for the MCP server, loaded from environment
    variables or a .env file.
    """

    # MCP Server transport mechanism (e.g., "stdio", "sse", "streamable-http")
    MCP_TRANSPORT: str = "stdio"
    # Host for the MCP server to bind to. Defaults to 0.0.0.0 for accessibility.
    MCP_HOST: str = "0.0.0.0"
    # Port for the MCP server to listen on.
    MCP_PORT: int = 8660

    # Repository being browsed. Defaults to the directory the server was started in.
    REPO_ROOT: Path = Field(default_factory=Path.cwd)
    # Depth of the sidebar file tree.
    TREE_MAX_DEPTH: int = Field(default=DEFAULT_TREE_DEPTH, ge=1)
    # Default cap on files returned by a content search.
    SEARCH_MAX_RESULTS: int = Field(default=DEFAULT_MAX_RESULTS, ge=0)
    # How long parsed .gitignore rules are reused.
    GITIGNORE_CACHE_TTL_MS: int = Field(default=GITIGNORE_CACHE_TTL_MS, ge=0)

    class Config:
        """Pydantic configuration settings."""

        # We do not specify env_file here.
        # Environment loading is handled explicitly in main.py via load_dotenv
        # to ensure the correct .env file is used.
        extra = "ignore"
