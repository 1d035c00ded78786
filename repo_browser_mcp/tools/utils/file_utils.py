import os
import pathlib

from .constants import ALWAYS_EXCLUDED_NAMES, BINARY_EXTENSIONS


def get_extension(file_path_or_ext: str) -> str:
    """
    Normalize a file path or a bare extension to a lowercase extension without the dot.

    A value without dots or path separators is treated as an extension already
    ("PY" -> "py"); anything else is treated as a path ("src/App.JS" -> "js").
    Dotfiles such as ".bashrc" have no extension.
    """
    if "." not in file_path_or_ext and "/" not in file_path_or_ext and "\\" not in file_path_or_ext:
        return file_path_or_ext.lower()
    return file_extension(file_path_or_ext)


def file_extension(file_path: str | pathlib.Path) -> str:
    """Lowercase extension of a path without the dot, or "" if it has none."""
    _, ext = os.path.splitext(os.path.basename(str(file_path)))
    return ext[1:].lower()


def is_binary_file(file_path_or_ext: str) -> bool:
    return get_extension(file_path_or_ext) in BINARY_EXTENSIONS


def is_text_file(file_path_or_ext: str) -> bool:
    """Anything not known to be binary is searched as text."""
    return not is_binary_file(file_path_or_ext)


def is_always_excluded(name: str) -> bool:
    """VCS metadata and installed packages are never shown or searched."""
    return name in ALWAYS_EXCLUDED_NAMES


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def locale_sort_key(name: str) -> tuple[str, str]:
    """Case-insensitive ordering, ties broken by the original spelling."""
    return name.casefold(), name
