"""Unique identifier allocation shared by the in-memory registries."""

import secrets
from typing import Callable, MutableMapping, TypeVar

from .config import settings
from .exceptions import StorageError

R = TypeVar("R")

# Running out of attempts means the id generator is broken
MAX_ID_ATTEMPTS = 1000


def generate_id() -> str:
    """Generate an opaque, URL-safe identifier from a CSPRNG."""
    return secrets.token_urlsafe(settings.credentials_id_bytes)


def store_with_unique_id(
    store: MutableMapping[str, R],
    resource: R,
    id_generator: Callable[[], str] = generate_id,
) -> str:
    """Store a resource under a freshly generated identifier.

    ``dict.setdefault`` is the insert-if-absent primitive: a candidate is only
    taken when no other resource already holds it, so concurrent callers can
    never be handed the same identifier.

    Args:
        store: Mapping to insert into
        resource: Resource to store
        id_generator: Source of candidate identifiers

    Returns:
        The identifier the resource was stored under

    Raises:
        StorageError: If no free identifier was found within MAX_ID_ATTEMPTS
    """
    for _ in range(MAX_ID_ATTEMPTS):
        candidate = id_generator()
        if store.setdefault(candidate, resource) is resource:
            return candidate

    raise StorageError(
        f"Could not allocate a unique identifier after {MAX_ID_ATTEMPTS} attempts"
    )
