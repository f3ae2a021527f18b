"""Path normalization shared by the navigator and the catalog."""

import os


def to_posix(path: str, sep: str = os.sep) -> str:
    """Replace the platform separator with '/'."""
    if sep == "/":
        return path
    return path.replace(sep, "/")


def normalize_dir(path: str, sep: str = os.sep) -> str:
    """Return a directory path with '/' separators and no trailing separator.

    The filesystem root keeps its single separator.
    """
    path = to_posix(path, sep)
    stripped = path.rstrip("/")
    return stripped if stripped else path[:1]


def extension_of(filename: str) -> str | None:
    dot_index = filename.rfind(".")
    if dot_index <= 0 or dot_index == len(filename) - 1:
        return None
    return filename[dot_index + 1 :].lower()


def join(directory: str, name: str) -> str:
    return to_posix(os.path.join(directory, name))
