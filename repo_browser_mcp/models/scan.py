"""Data model shared by the file tree builder and the search engines.

Field names are snake_case in Python and camelCase on the wire
(``isDirectory``, ``matchCount``, ``caseSensitive`` ...), so results can be
returned to the browser frontend unchanged via ``model_dump(by_alias=True)``.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from repo_browser_mcp.tools.utils.constants import DEFAULT_MAX_RESULTS


class ScanModel(BaseModel):
    """Base model: camelCase aliases, population by either name, immutable."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class IgnoreRule(ScanModel):
    """One parsed line of a .gitignore file."""

    pattern: str
    # Set when the line ended with "/"; the slash is stripped from `pattern`.
    is_directory: bool = False


class TreeNode(ScanModel):
    """A file or directory in the sidebar tree. Files carry no `children`."""

    name: str
    path: str
    is_directory: bool
    children: list[TreeNode] | None = None


class SearchMatch(ScanModel):
    line: int
    column: int
    text: str
    match: str


class FileSearchResult(ScanModel):
    path: str
    matches: list[SearchMatch] = Field(default_factory=list)
    # True number of matches in the file, `matches` only keeps the first few.
    match_count: int = 0


class SearchResponse(ScanModel):
    results: list[FileSearchResult] = Field(default_factory=list)
    total: int = 0
    query: str = ""


class FileNameMatch(ScanModel):
    """A file or directory whose name contains the file-name search query."""

    path: str
    name: str
    is_directory: bool
    modified: datetime


class SearchOptions(ScanModel):
    """Options accepted by the content search engine."""

    regex: bool = False
    case_sensitive: bool = False
    max_results: int = Field(default=DEFAULT_MAX_RESULTS, ge=0)
    file_types: list[str] | None = None

    @field_validator("file_types", mode="before")
    @classmethod
    def split_file_types(cls, value):
        # The HTTP route used to receive "js,ts,py"
        if isinstance(value, str):
            value = [part.strip() for part in value.split(",")]
        if value is None:
            return None
        cleaned = [str(part).strip().lstrip(".").lower() for part in value if str(part).strip()]
        return cleaned or None
