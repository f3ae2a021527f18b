"""Directory navigation over image files."""

from .navigator import IMAGE_EXTENSIONS, DirectoryNavigator, NavigationResult
from .paths import normalize_dir, to_posix

__all__ = [
    "DirectoryNavigator",
    "NavigationResult",
    "IMAGE_EXTENSIONS",
    "normalize_dir",
    "to_posix",
]
