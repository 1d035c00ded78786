import json
from typing import List

from repo_browser_mcp.models.scan import FileNameMatch, SearchResponse, TreeNode


def _count_nodes(nodes: List[TreeNode]) -> int:
    return sum(1 + _count_nodes(node.children or []) for node in nodes)


def format_tree(tree: List[TreeNode], root_name: str) -> str:
    """
    Format the file tree as structured JSON for LLM consumption.

    Files are emitted without a "children" key, directories always carry one
    (possibly empty when the depth limit was reached).
    """
    if not tree:
        return json.dumps({
            "status": "empty",
            "root": root_name,
            "message": "Directory is empty",
            "tree": []
        }, indent=2)

    return json.dumps({
        "status": "success",
        "root": root_name,
        "count": _count_nodes(tree),
        "tree": [node.model_dump(by_alias=True, exclude_none=True) for node in tree]
    }, indent=2)


def format_search_results(response: SearchResponse, max_results: int) -> str:
    """
    Format content search results as structured JSON for LLM consumption.

    `was_truncated` is set when the walk stopped at the result cap, in which
    case more files may contain matches.
    """
    if not response.results:
        return json.dumps({
            "status": "empty",
            "message": "No search results found",
            "query": response.query,
            "results": []
        }, indent=2)

    payload = response.model_dump(by_alias=True)
    return json.dumps({
        "status": "success",
        "query": payload["query"],
        "total": payload["total"],
        "was_truncated": response.total >= max_results,
        "results": payload["results"]
    }, indent=2)


def format_file_matches(matches: List[FileNameMatch], query: str) -> str:
    """Format file-name search results as structured JSON for LLM consumption."""
    if not matches:
        return json.dumps({
            "status": "empty",
            "message": "No files found",
            "query": query,
            "results": []
        }, indent=2)

    return json.dumps({
        "status": "success",
        "query": query,
        "count": len(matches),
        "results": [match.model_dump(mode="json", by_alias=True) for match in matches]
    }, indent=2)
