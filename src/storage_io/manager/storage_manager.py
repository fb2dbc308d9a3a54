"""Storage manager: binds registered credentials to their provider.

Typical usage::

    manager = StorageManager()
    manager.register_provider(MemoryStorageProvider())
    credentials_id = manager.add_credentials(credentials)
    service = manager.lookup_service(credentials_id)
    service.write_file("/a.txt", b"hello")
"""

from typing import Optional

from storage_io.core import get_logger, get_tracer
from storage_io.core.exceptions import (
    InvalidArgumentError,
    RegistryConsistencyError,
    UnrecognizedStorageTypeError,
)
from storage_io.credentials import Credentials
from storage_io.providers.base import StorageServiceProvider

from .registry import ProviderRegistry
from .repository import CredentialsRepository, MemoryCredentialsRepository
from .service import StorageService

logger = get_logger(__name__)
tracer = get_tracer(__name__)


class StorageManager:
    """Top-level entry point giving access to storage services by identifier.

    The provider registry and credentials repository are owned by the
    manager instance and may be injected; by default each manager gets a
    fresh memory-backed pair.
    """

    def __init__(
        self,
        providers: Optional[ProviderRegistry] = None,
        repository: Optional[CredentialsRepository] = None,
    ):
        self.providers = providers if providers is not None else ProviderRegistry()
        self.repository = (
            repository if repository is not None else MemoryCredentialsRepository()
        )

    def register_provider(self, provider: StorageServiceProvider) -> None:
        """Register a provider for its credentials type.

        Raises:
            InvalidArgumentError: If provider is None
            UnrecognizedStorageTypeError: If the type already has a provider
        """
        self.providers.register(provider)

    def add_credentials(self, credentials: Credentials) -> str:
        """Register credentials for a known storage type.

        Args:
            credentials: Unregistered credentials

        Returns:
            Identifier assigned to the credentials

        Raises:
            InvalidArgumentError: If credentials is None or already has an id
            UnrecognizedStorageTypeError: If no provider handles its type
        """
        if credentials is None:
            raise InvalidArgumentError("Credentials cannot be None")
        if credentials.id:
            raise InvalidArgumentError("Provided credentials already assigned identifier")

        if credentials.type not in self.providers:
            error_msg = (
                f"No storage service provider found for credentials of type "
                f"'{credentials.type}'"
            )
            logger.error(error_msg, storage_type=credentials.type)
            raise UnrecognizedStorageTypeError(error_msg)

        return self.repository.add_credentials(credentials)

    def lookup_service(self, credentials_id: Optional[str]) -> StorageService:
        """Build a storage service for registered credentials.

        Each call resolves credentials and provider afresh, so changes to
        either take effect on the next lookup.

        Raises:
            InvalidArgumentError: If credentials_id is None or empty
            CredentialsError: If credentials_id is unknown
            RegistryConsistencyError: If the credentials have no provider
        """
        if not credentials_id:
            raise InvalidArgumentError("Credentials identifier cannot be empty")

        with tracer.start_as_current_span("storage.lookup_service") as span:
            credentials = self.repository.get_credentials(credentials_id)
            span.set_attribute("storage.type", credentials.type)

            try:
                provider = self.providers.resolve(credentials.type)
            except UnrecognizedStorageTypeError as e:
                error_msg = (
                    f"Unexpected: could not find storage service provider for "
                    f"registered credentials of type '{credentials.type}'"
                )
                logger.error(error_msg, storage_type=credentials.type)
                raise RegistryConsistencyError(error_msg) from e

            return StorageService(credentials, provider)
