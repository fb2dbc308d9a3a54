"""Path rules shared by the dispatcher and every provider.

Paths are absolute, forward-slash separated strings. A trailing separator
denotes a folder; every other non-empty path denotes a file. The root
folder is the separator itself.

Classification is purely syntactic and never consults a backend.
"""

from enum import Enum
from typing import Optional

from storage_io.core.exceptions import InvalidPathFormatError

SEPARATOR = "/"
ROOT = SEPARATOR


class PathKind(str, Enum):
    """Syntactic kind of a path."""

    FOLDER = "folder"
    FILE = "file"


def validate_path(path: Optional[str]) -> None:
    """Validate a path is non-absent and absolute.

    Args:
        path: Path to validate

    Raises:
        InvalidPathFormatError: If path is None, not a string or relative
    """
    if not isinstance(path, str) or not path.startswith(SEPARATOR):
        raise InvalidPathFormatError(f"Invalid path format: {path!r}", path=path)


def validate_segments(path: str) -> None:
    """Reject empty, '.' and '..' elements in an absolute path.

    Such elements make a path alias another entity ('//' and '/docs/../' both
    name the root), so providers refuse them.

    Raises:
        InvalidPathFormatError: If any element is empty, '.' or '..'
    """
    elements = path.split(SEPARATOR)[1:]
    if elements and elements[-1] == "":
        # Trailing separator of a folder path
        elements.pop()
    if any(element in ("", ".", "..") for element in elements):
        raise InvalidPathFormatError(
            f"Path contains empty or relative elements: {path!r}", path=path
        )


def is_folder(path: Optional[str]) -> bool:
    """Check whether a path denotes a folder (empty or ending with '/')."""
    return path is not None and (path == "" or path.endswith(SEPARATOR))


def classify(path: str) -> PathKind:
    """Classify a path as folder or file."""
    return PathKind.FOLDER if is_folder(path) else PathKind.FILE


def is_root(path: str) -> bool:
    return path in ("", ROOT)


def as_folder(path: str) -> str:
    """Return the folder form of a path (with a trailing separator)."""
    return path if path.endswith(SEPARATOR) else path + SEPARATOR


def entity_name(path: str) -> str:
    """Extract the last element of a path; the root is named '/'."""
    if is_root(path):
        return ROOT
    return path.rstrip(SEPARATOR).rsplit(SEPARATOR, 1)[-1]


def parent_path(path: str) -> Optional[str]:
    """Return the parent folder path (ending with '/'), or None for root.

    Example:
        >>> parent_path("/contents/documents/logs/trace.txt")
        '/contents/documents/logs/'
    """
    if is_root(path):
        return None
    head = path.rstrip(SEPARATOR).rsplit(SEPARATOR, 1)[0]
    return head + SEPARATOR


def join(folder: str, name: str, is_folder_entry: bool = False) -> str:
    """Join a folder path and an entry name."""
    joined = as_folder(folder) + name.strip(SEPARATOR)
    return as_folder(joined) if is_folder_entry else joined
