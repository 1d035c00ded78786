"""Repository browser MCP server: file tree, gitignore rules and content search."""

__version__ = "0.1.0"
