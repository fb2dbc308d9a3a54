"""Storage manager, registries and bound storage services."""

from .registry import ProviderRegistry
from .repository import CredentialsRepository, MemoryCredentialsRepository
from .service import StorageService
from .storage_manager import StorageManager


def create_default_manager(**kwargs) -> StorageManager:
    """Create a manager with the bundled memory, local and S3 providers.

    Keyword arguments are passed to :class:`StorageManager`.
    """
    from storage_io.filesystem import LocalStorageProvider, MemoryStorageProvider
    from storage_io.objectstorage import S3StorageProvider

    manager = StorageManager(**kwargs)
    manager.register_provider(MemoryStorageProvider())
    manager.register_provider(LocalStorageProvider())
    manager.register_provider(S3StorageProvider())
    return manager


__all__ = [
    "CredentialsRepository",
    "MemoryCredentialsRepository",
    "ProviderRegistry",
    "StorageManager",
    "StorageService",
    "create_default_manager",
]
