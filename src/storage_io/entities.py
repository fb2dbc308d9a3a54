"""Normalized entities every provider produces."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


def human_readable_size(size: int) -> str:
    """Format a byte count for display (e.g. '1.80 GB', '1,455 bytes')."""
    if size >= 1024**3:
        return f"{size / (1024**3):.2f} GB"
    elif size >= 1024**2:
        return f"{size / (1024**2):.2f} MB"
    elif size >= 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size:,} bytes"


@dataclass
class FileEntity:
    """A file as reported by a storage provider.

    Attributes:
        name: File name (last path element)
        path: Full path, e.g. /contents/documents/logs/trace.txt
        parent_path: Path of the containing folder, e.g. /contents/documents/logs/
        size: Size in bytes
        human_readable_size: Size formatted for display
        creation_date: Creation timestamp, if the backend supports it
        modification_date: Last modification timestamp, if supported
        revision: Backend version token of the content, usable for
            revision-checked writes
    """

    name: str
    path: str
    parent_path: Optional[str]
    size: int
    human_readable_size: str
    creation_date: Optional[datetime] = None
    modification_date: Optional[datetime] = None
    revision: Optional[str] = None


@dataclass
class FolderEntity:
    """A folder and its direct children.

    ``files`` and ``folders`` are always lists, empty when the folder has no
    content of that kind. The root folder is named '/' and has no parent.
    """

    name: str
    path: str
    parent_path: Optional[str]
    creation_date: Optional[datetime] = None
    files: list[FileEntity] = field(default_factory=list)
    folders: list["FolderEntity"] = field(default_factory=list)
