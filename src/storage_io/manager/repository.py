"""Credentials repositories.

The repository issues identifiers to credentials and resolves them back.
``MemoryCredentialsRepository`` is the transient reference implementation;
it keeps state in the current process only and is therefore unsuitable for
multi-process deployments. Persistent stores implement the same protocol.
"""

from typing import Callable, Optional, Protocol

from storage_io.core import get_logger
from storage_io.core.exceptions import CredentialsError, InvalidArgumentError
from storage_io.core.ids import generate_id, store_with_unique_id
from storage_io.credentials import Credentials

logger = get_logger(__name__)


class CredentialsRepository(Protocol):
    """Protocol for repositories managing credentials."""

    def add_credentials(self, credentials: Credentials) -> str:
        """Store credentials and return their newly assigned identifier."""
        ...

    def get_credentials(self, credentials_id: str) -> Credentials:
        """Return the credentials registered under credentials_id."""
        ...


class MemoryCredentialsRepository:
    """Thread-safe, memory-only credentials repository.

    Identifiers are allocated with an insert-if-absent loop over a plain
    dict, so concurrent registrations never share an identifier and never
    wait on each other.
    """

    def __init__(self, id_generator: Callable[[], str] = generate_id):
        self._credentials: dict[str, Credentials] = {}
        self._id_generator = id_generator

    def add_credentials(self, credentials: Credentials) -> str:
        """Register credentials under a newly generated identifier.

        Args:
            credentials: Unregistered credentials (id must be empty)

        Returns:
            The assigned identifier, also set on ``credentials.id``

        Raises:
            InvalidArgumentError: If credentials is None or already has an id
        """
        if credentials is None:
            raise InvalidArgumentError("Credentials cannot be None")
        if credentials.id:
            raise InvalidArgumentError("Provided credentials already assigned identifier")

        credentials_id = store_with_unique_id(
            self._credentials, credentials, self._id_generator
        )
        credentials.id = credentials_id

        logger.info(
            "Credentials registered",
            storage_type=credentials.type,
            owner_id=credentials.owner_id,
        )
        return credentials_id

    def get_credentials(self, credentials_id: Optional[str]) -> Credentials:
        """Resolve credentials by identifier.

        Raises:
            InvalidArgumentError: If credentials_id is None or empty
            CredentialsError: If credentials_id is unknown
        """
        if not credentials_id:
            raise InvalidArgumentError("Credentials identifier cannot be empty")

        credentials = self._credentials.get(credentials_id)
        if credentials is None:
            logger.warning("Unknown credentials requested")
            raise CredentialsError("Unknown credentials")
        return credentials

    def remove_credentials(self, credentials_id: str) -> None:
        """Forget credentials; later lookups fail with CredentialsError."""
        if self._credentials.pop(credentials_id, None) is None:
            raise CredentialsError("Unknown credentials")
        logger.info("Credentials removed")

    def __contains__(self, credentials_id: object) -> bool:
        return credentials_id in self._credentials

    def __len__(self) -> int:
        return len(self._credentials)
