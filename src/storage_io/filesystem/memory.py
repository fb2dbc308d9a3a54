"""Virtual in-memory file system provider.

Each set of ``MemoryCredentials`` refers to its own isolated in-memory file
system. Use :meth:`MemoryStorageProvider.create_file_system` to provision
one; nothing survives the process.
"""

from typing import Iterator

from fsspec import AbstractFileSystem
from fsspec.implementations.memory import MemoryFileSystem

from storage_io.core import get_logger, settings
from storage_io.core.exceptions import CredentialsError
from storage_io.core.ids import store_with_unique_id
from storage_io.credentials import MemoryCredentials

from .base import AbstractFileSystemProvider, FileSystemHandle

logger = get_logger(__name__)


class IsolatedMemoryFileSystem(MemoryFileSystem):
    """fsspec memory file system with a private store.

    ``MemoryFileSystem`` shares its store across all instances; this variant
    gives each instance its own and opts out of fsspec's instance cache.
    """

    cachable = False

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.store = {}
        self.pseudo_dirs = [""]


class MemoryStorageProvider(AbstractFileSystemProvider[MemoryCredentials]):
    """Provider for isolated, process-local in-memory file systems."""

    credentials_class = MemoryCredentials

    def __init__(self) -> None:
        self._file_systems: dict[str, FileSystemHandle] = {}

    def create_file_system(self, owner_id: str | None = None) -> MemoryCredentials:
        """Provision a new empty file system.

        Args:
            owner_id: Optional owner reference copied onto the credentials

        Returns:
            Unregistered credentials giving access to the new file system
        """
        handle = FileSystemHandle(fs=IsolatedMemoryFileSystem(), root="/")
        file_system_id = store_with_unique_id(self._file_systems, handle)

        logger.info(
            "In-memory file system created", file_system_count=self.file_system_count
        )
        return MemoryCredentials(file_system_id=file_system_id, owner_id=owner_id)

    def remove_file_system(self, credentials: MemoryCredentials) -> None:
        """Discard a file system; its credentials are rejected afterwards.

        Raises:
            CredentialsError: If the file system is unknown
        """
        self.validate_credentials(credentials)
        if self._file_systems.pop(credentials.file_system_id or "", None) is None:
            raise CredentialsError("Unknown credentials (no such file system)")
        logger.info(
            "In-memory file system removed", file_system_count=self.file_system_count
        )

    def get_file_system(self, credentials: MemoryCredentials) -> FileSystemHandle:
        if not credentials.file_system_id:
            raise CredentialsError("Unknown credentials (no file system id)")

        handle = self._file_systems.get(credentials.file_system_id)
        if handle is None:
            logger.warning("Unknown in-memory file system requested")
            raise CredentialsError("Unknown credentials (no such file system)")
        return handle

    def iter_content(self, fs: AbstractFileSystem, location: str) -> Iterator[bytes]:
        # cat_file copies the buffer; readers never share a seek position
        data = fs.cat_file(location)
        chunk_size = settings.read_chunk_size
        for offset in range(0, len(data), chunk_size):
            yield data[offset : offset + chunk_size]

    @property
    def file_system_count(self) -> int:
        return len(self._file_systems)
