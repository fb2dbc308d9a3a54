"""File system backed storage providers."""

from .base import AbstractFileSystemProvider, FileSystemHandle
from .local import LocalStorageProvider
from .memory import IsolatedMemoryFileSystem, MemoryStorageProvider

__all__ = [
    "AbstractFileSystemProvider",
    "FileSystemHandle",
    "IsolatedMemoryFileSystem",
    "LocalStorageProvider",
    "MemoryStorageProvider",
]
