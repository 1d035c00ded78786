from pathlib import Path


def resolve_path(working_dir: Path, path_str: str | None) -> Path:
    """
    Resolves a user-provided path against the working directory, ensuring it stays inside it.

    Args:
        working_dir: The repository root being browsed.
        path_str: The path string provided by the caller; empty means the root itself.

    Returns:
        A resolved, validated Path object.

    Raises:
        PermissionError: If the path escapes the working directory.
    """
    root = working_dir.resolve()
    path = Path(path_str or ".")
    target_path = path if path.is_absolute() else root / path

    resolved_path = target_path.resolve()
    if not resolved_path.is_relative_to(root):
        raise PermissionError(f"Path '{path_str}' is outside the working directory")

    return resolved_path
