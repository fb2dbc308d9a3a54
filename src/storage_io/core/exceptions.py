"""Exception hierarchy for storage-io.

Every failure surfaced by the library is a :class:`StorageError` carrying an
:class:`ErrorKind`, a message and, optionally, the underlying cause. Each kind
has its own subclass so callers can catch precisely what they handle, or
catch :class:`StorageError` and branch on ``error.kind``.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Kinds of storage failures."""

    INVALID_ARGUMENT = "invalid_argument"
    INVALID_PATH_FORMAT = "invalid_path_format"
    ENTITY_NOT_FOUND = "entity_not_found"
    INVALID_ENTITY_PATH = "invalid_entity_path"
    CREDENTIALS = "credentials"
    INVALID_REVISION = "invalid_revision"
    UNRECOGNIZED_STORAGE_TYPE = "unrecognized_storage_type"
    BACKEND_FAILURE = "backend_failure"


class StorageError(Exception):
    """Base exception for all storage-io errors."""

    kind: Optional[ErrorKind] = None

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind}, message={self.message!r})"


class InvalidArgumentError(StorageError):
    """Raised when a required input is absent or malformed."""

    kind = ErrorKind.INVALID_ARGUMENT


class InvalidPathFormatError(StorageError):
    """Raised when a path does not follow the path rules (e.g. not absolute)."""

    kind = ErrorKind.INVALID_PATH_FORMAT

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(message, cause)
        self.path = path


class EntityNotFoundError(StorageError):
    """Raised when a referenced file or folder does not exist."""

    kind = ErrorKind.ENTITY_NOT_FOUND


class InvalidEntityPathError(StorageError):
    """Raised when a path resolves to the wrong kind of entity."""

    kind = ErrorKind.INVALID_ENTITY_PATH


class CredentialsError(StorageError):
    """Raised when credentials are unknown, of the wrong type or expired."""

    kind = ErrorKind.CREDENTIALS


class InvalidRevisionError(StorageError):
    """Raised when a revision-checked write does not match the current revision."""

    kind = ErrorKind.INVALID_REVISION


class UnrecognizedStorageTypeError(StorageError):
    """Raised when no provider handles a storage type, or one already does."""

    kind = ErrorKind.UNRECOGNIZED_STORAGE_TYPE


class BackendFailureError(StorageError):
    """Raised when the underlying transport or I/O fails."""

    kind = ErrorKind.BACKEND_FAILURE

    def __init__(self, message: str, cause: BaseException):
        super().__init__(message, cause)


class RegistryConsistencyError(RuntimeError):
    """Raised when registries disagree (credentials known, provider missing).

    This signals a bug in how the manager was assembled, not a condition
    callers are expected to handle.
    """

    pass
