"""
Command-line entry point of the Repository Browser MCP server.

Loads `.env`, sends log output to stderr (stdout belongs to the stdio
transport), checks that the repository root to browse is a readable
directory and then starts FastMCP with the configured transport.
"""

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_environment() -> bool:
    """
    Load `.env`, configure logging and check the repository root.

    Returns:
        False if REPO_ROOT points to something that cannot be browsed.
    """
    load_dotenv()

    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    repo_root = Path(os.environ.get("REPO_ROOT") or os.getcwd())
    if not repo_root.is_dir():
        logging.error("REPO_ROOT %s is not a directory.", repo_root)
        return False
    if not os.access(repo_root, os.R_OK | os.X_OK):
        logging.error("REPO_ROOT %s is not readable.", repo_root)
        return False

    logging.debug("Environment loaded, repository root %s.", repo_root)
    return True


def run_server() -> None:
    """Start the repository browser with the transport from ServiceConfig."""
    if not setup_environment():
        sys.exit(1)

    # ServiceConfig reads the environment, so the server is imported after load_dotenv().
    from .server import mcp_app, server_config

    logger = logging.getLogger(__name__)
    logger.info(
        "Repository browser for %s (tree depth %s, search cap %s, .gitignore TTL %sms)",
        server_config.REPO_ROOT,
        server_config.TREE_MAX_DEPTH,
        server_config.SEARCH_MAX_RESULTS,
        server_config.GITIGNORE_CACHE_TTL_MS,
    )
    if server_config.MCP_TRANSPORT == "stdio":
        logger.info("Serving over stdio")
    else:
        logger.info(
            "Serving %s on %s:%s",
            server_config.MCP_TRANSPORT,
            server_config.MCP_HOST,
            server_config.MCP_PORT,
        )

    mcp_app.run(transport=server_config.MCP_TRANSPORT)


if __name__ == "__main__":
    run_server()
