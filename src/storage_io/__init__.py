"""Unified access to heterogeneous storage backends.

Callers register credentials once, receive an opaque identifier, and later
obtain a storage service for that identifier. The service exposes the same
file and folder operations whatever backend is behind it: an isolated
in-memory file system, a local directory or an S3 bucket.

Recommended Usage:
    >>> from storage_io import StorageManager
    >>> from storage_io.filesystem import MemoryStorageProvider
    >>> manager = StorageManager()
    >>> provider = MemoryStorageProvider()
    >>> manager.register_provider(provider)
    >>> credentials_id = manager.add_credentials(provider.create_file_system())
    >>> service = manager.lookup_service(credentials_id)
    >>> service.write_file("/contents/readme.txt", b"hello").size
    5

Providers:
    Import backend modules for provider-specific operations:

    >>> from storage_io.filesystem import LocalStorageProvider
    >>> from storage_io.objectstorage import S3StorageProvider
"""

__version__ = "0.1.0"

from .core.exceptions import (
    BackendFailureError,
    CredentialsError,
    EntityNotFoundError,
    ErrorKind,
    InvalidArgumentError,
    InvalidEntityPathError,
    InvalidPathFormatError,
    InvalidRevisionError,
    RegistryConsistencyError,
    StorageError,
    UnrecognizedStorageTypeError,
)
from .credentials import (
    Credentials,
    EmptyCredentials,
    LocalCredentials,
    MemoryCredentials,
    S3Credentials,
    StorageCredentials,
)
from .entities import FileEntity, FolderEntity
from .manager import (
    CredentialsRepository,
    MemoryCredentialsRepository,
    ProviderRegistry,
    StorageManager,
    StorageService,
    create_default_manager,
)
from .providers import StorageServiceProvider

__all__ = [
    # Errors
    "BackendFailureError",
    "CredentialsError",
    "EntityNotFoundError",
    "ErrorKind",
    "InvalidArgumentError",
    "InvalidEntityPathError",
    "InvalidPathFormatError",
    "InvalidRevisionError",
    "RegistryConsistencyError",
    "StorageError",
    "UnrecognizedStorageTypeError",
    # Credentials
    "Credentials",
    "EmptyCredentials",
    "LocalCredentials",
    "MemoryCredentials",
    "S3Credentials",
    "StorageCredentials",
    # Entities
    "FileEntity",
    "FolderEntity",
    # Manager
    "CredentialsRepository",
    "MemoryCredentialsRepository",
    "ProviderRegistry",
    "StorageManager",
    "StorageService",
    "create_default_manager",
    # Provider contract
    "StorageServiceProvider",
]
