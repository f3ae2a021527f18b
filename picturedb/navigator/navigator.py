"""Ordered listing and positioning over a directory's image files."""

import logging
import os
from dataclasses import dataclass

from picturedb.errors import IOFailureError, MissingDirectoryError
from picturedb.navigator.paths import extension_of, join, to_posix

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS: frozenset[str] = frozenset({"jpg", "jpeg", "png", "gif"})

MOVES = ("first", "last", "next", "prev")


@dataclass
class NavigationResult:
    """Outcome of a single-image navigation step."""

    path: str | None
    position: int
    count: int
    message: str = ""


class DirectoryNavigator:
    """Stateless navigation over the image files of a directory.

    Each call lists the directory again. Positions are only valid at the
    moment they are returned; the directory may change between calls.
    """

    def __init__(self, extensions: frozenset[str] = IMAGE_EXTENSIONS):
        self.extensions = frozenset(ext.lower() for ext in extensions)

    def is_image(self, filename: str) -> bool:
        extension = extension_of(filename)
        return extension is not None and extension in self.extensions

    def list_images(self, directory: str) -> list[str]:
        """Return image paths in the directory, sorted by file name."""
        try:
            with os.scandir(directory) as entries:
                names = [
                    entry.name
                    for entry in entries
                    if self.is_image(entry.name) and entry.is_file()
                ]
        except FileNotFoundError as e:
            logger.warning("Directory not found: %s", directory)
            raise MissingDirectoryError(directory) from e
        except NotADirectoryError as e:
            raise IOFailureError(directory, "Not a directory") from e
        except PermissionError as e:
            logger.warning("Permission denied listing directory: %s", directory)
            raise IOFailureError(directory, "Permission denied") from e
        except OSError as e:
            logger.error("Error listing directory %s: %s", directory, e)
            raise IOFailureError(directory, str(e)) from e

        return [join(directory, name) for name in sorted(names)]

    def first_image(self, directory: str) -> str | None:
        files = self.list_images(directory)
        return files[0] if files else None

    def last_image(self, directory: str) -> str | None:
        files = self.list_images(directory)
        return files[-1] if files else None

    def position_of(self, directory: str, file: str) -> int:
        """Zero-based position of ``file``, or -1 if it is not listed."""
        return _index(self.list_images(directory), file)

    def next_image(self, directory: str, file: str) -> str | None:
        files = self.list_images(directory)
        index = _index(files, file)
        if index < 0 or index == len(files) - 1:
            return None
        return files[index + 1]

    def prev_image(self, directory: str, file: str) -> str | None:
        files = self.list_images(directory)
        index = _index(files, file)
        if index <= 0:
            return None
        return files[index - 1]

    def file_count(self, directory: str) -> int:
        return len(self.list_images(directory))

    def navigate(self, file: str, move: str = "") -> NavigationResult:
        """Move from ``file`` within its own directory.

        When there is nowhere to go, the result keeps ``file`` and explains why.
        """
        if move and move not in MOVES:
            raise ValueError(f"Unknown move: {move}. Available: {list(MOVES)}")

        file = to_posix(file)
        directory = os.path.dirname(file) or "."
        file = join(directory, os.path.basename(file))
        files = self.list_images(directory)
        index = _index(files, file)
        target: str | None = file
        message = ""

        if move in ("next", "prev") and index < 0:
            message = "Image is no longer in the directory."
        elif move == "first":
            target = files[0] if files else None
        elif move == "last":
            target = files[-1] if files else None
        elif move == "next":
            if 0 <= index < len(files) - 1:
                target = files[index + 1]
            else:
                message = "Already at the last image."
        elif move == "prev":
            if index > 0:
                target = files[index - 1]
            else:
                message = "Already at the first image."

        position = _index(files, target) if target is not None else -1
        return NavigationResult(path=target, position=position, count=len(files), message=message)


def _index(files: list[str], file: str) -> int:
    try:
        return files.index(to_posix(file))
    except ValueError:
        return -1
