"""Registry of storage service providers keyed by credentials type."""

from storage_io.core import get_logger
from storage_io.core.exceptions import (
    InvalidArgumentError,
    UnrecognizedStorageTypeError,
)
from storage_io.providers.base import StorageServiceProvider

logger = get_logger(__name__)


class ProviderRegistry:
    """Maps each credentials type to exactly one provider."""

    def __init__(self) -> None:
        # Values are one-element tuples created per call, so registering the same
        # provider instance twice is also detected as a duplicate.
        self._providers: dict[str, tuple[StorageServiceProvider]] = {}

    def register(self, provider: StorageServiceProvider) -> None:
        """Register a provider for its credentials type.

        The check and the insert are a single ``setdefault`` call, so of two
        concurrent registrations for the same type exactly one wins.

        Raises:
            InvalidArgumentError: If provider is None
            UnrecognizedStorageTypeError: If the type already has a provider
        """
        if provider is None:
            raise InvalidArgumentError("Provider cannot be None")

        storage_type = provider.credentials_type
        registration = (provider,)
        existing = self._providers.setdefault(storage_type, registration)
        if existing is not registration:
            raise UnrecognizedStorageTypeError(
                f"Credentials of type '{storage_type}' are already associated with "
                f"an existing provider (type: '{type(existing[0]).__name__}')"
            )

        logger.info(
            "Registered storage provider",
            storage_type=storage_type,
            provider=type(provider).__name__,
        )

    def resolve(self, storage_type: str) -> StorageServiceProvider:
        """Return the provider for a credentials type.

        Raises:
            UnrecognizedStorageTypeError: If no provider handles the type
        """
        registration = self._providers.get(storage_type)
        if registration is None:
            raise UnrecognizedStorageTypeError(
                f"No storage service provider found for credentials of type "
                f"'{storage_type}'"
            )
        return registration[0]

    def storage_types(self) -> list[str]:
        """List the credentials types that have a provider."""
        return list(self._providers.keys())

    def __contains__(self, storage_type: object) -> bool:
        return storage_type in self._providers
