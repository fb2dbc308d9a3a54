"""Local file system provider.

``LocalCredentials.base_path`` names an existing directory which becomes the
storage root: ``/reports/q1.csv`` maps to ``<base_path>/reports/q1.csv``.
"""

import threading
from pathlib import Path

import fsspec

from storage_io.core import get_logger
from storage_io.core.exceptions import CredentialsError
from storage_io.credentials import LocalCredentials

from .base import AbstractFileSystemProvider, FileSystemHandle

logger = get_logger(__name__)


class LocalStorageProvider(AbstractFileSystemProvider[LocalCredentials]):
    """Provider exposing a local directory tree."""

    credentials_class = LocalCredentials

    def __init__(self) -> None:
        self._fs = fsspec.filesystem("file")
        self._locks: dict[str, threading.RLock] = {}

    def get_file_system(self, credentials: LocalCredentials) -> FileSystemHandle:
        root = Path(credentials.base_path).expanduser().resolve()
        if not root.is_dir():
            logger.warning("Local storage root unavailable", base_path=str(root))
            raise CredentialsError(f"Storage root {root} is not an existing directory")

        root_path = root.as_posix()
        lock = self._locks.setdefault(root_path, threading.RLock())
        return FileSystemHandle(fs=self._fs, root=root_path, lock=lock)
