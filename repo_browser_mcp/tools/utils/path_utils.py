import os
import pathlib


def is_restricted_path(path: pathlib.Path) -> bool:
    """Check if path is restricted (root or home directory)."""
    try:
        absolute_path = path.resolve()

        # Проверка на root директорию
        if os.name == 'nt':  # Windows
            root = pathlib.Path(absolute_path.drive + '\\')
        else:  # Unix-like
            root = pathlib.Path('/')

        if absolute_path == root:
            return True

        # Проверка на home директорию
        home_dir = pathlib.Path.home()
        if absolute_path == home_dir:
            return True

    except (OSError, RuntimeError):
        pass

    return False


def relative_posix(path: pathlib.Path, working_dir: pathlib.Path) -> str:
    """Path of `path` relative to `working_dir` with forward slashes, "" for the root itself."""
    relative = path.resolve().relative_to(working_dir.resolve()).as_posix()
    return "" if relative == "." else relative
