"""
Configuration and dependency management for the Repository Browser MCP server.
"""

import logging
from functools import lru_cache

from repo_browser_mcp.utils.config import ServiceConfig

from ..tools.repository_explorer_tool import RepositoryExplorerTool
from ..tools.utils.gitignore_utils import GitignoreCache

logger = logging.getLogger(__name__)


@lru_cache
def get_base_config() -> ServiceConfig:
    """
    Retrieves the base server configuration from environment variables.

    This function is cached to avoid repeatedly reading and parsing environment
    variables and .env files.

    Returns:
        A cached instance of the ServiceConfig.
    """
    return ServiceConfig()


# The rule cache is the only state shared between requests.
@lru_cache
def get_gitignore_cache() -> GitignoreCache:
    """Returns the process-wide GitignoreCache."""
    config = get_base_config()
    logger.info("Initializing GitignoreCache singleton (ttl=%sms).", config.GITIGNORE_CACHE_TTL_MS)
    return GitignoreCache(ttl_ms=config.GITIGNORE_CACHE_TTL_MS)


@lru_cache
def get_repository_explorer_tool_provider() -> RepositoryExplorerTool:
    """Returns a cached instance of the RepositoryExplorerTool sharing the GitignoreCache."""
    config = get_base_config()
    logger.info("Initializing RepositoryExplorerTool singleton for %s.", config.REPO_ROOT)
    return RepositoryExplorerTool(
        working_dir=config.REPO_ROOT,
        rule_cache=get_gitignore_cache(),
        tree_max_depth=config.TREE_MAX_DEPTH,
        search_max_results=config.SEARCH_MAX_RESULTS,
    )
