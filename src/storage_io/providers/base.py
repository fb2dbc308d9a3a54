"""Storage service provider contract.

A provider adapts one backend (in-memory file system, local directory,
object store, ...) to the operations below. Each provider declares the
credentials class it accepts; the manager registers at most one provider
per credentials type.

Every public operation validates its inputs before touching the backend:

- ``InvalidArgumentError`` if credentials (or another required argument)
  are missing.
- ``CredentialsError`` if the credentials are of another type, unknown to
  the backend or expired.
- ``InvalidPathFormatError`` if the path breaks the path rules or has
  empty, ``.`` or ``..`` elements.

Backend outcomes are reported as ``EntityNotFoundError``,
``InvalidEntityPathError``, ``InvalidRevisionError`` and, for anything
else, ``BackendFailureError`` wrapping the original exception.
"""

from abc import ABC, abstractmethod
from typing import IO, Generic, Optional, TypeVar, Union

from storage_io.core.exceptions import (
    CredentialsError,
    InvalidArgumentError,
    InvalidEntityPathError,
)
from storage_io.credentials import Credentials
from storage_io.entities import FileEntity, FolderEntity, human_readable_size
from storage_io.paths import is_folder, validate_path, validate_segments

C = TypeVar("C", bound=Credentials)

ReadableSource = Union[bytes, bytearray, memoryview, IO[bytes]]
WritableSink = IO[bytes]


class StorageServiceProvider(ABC, Generic[C]):
    """Abstract base class for storage service providers.

    Subclasses set ``credentials_class`` and implement the ``_``-prefixed
    hooks; the public methods run the common validation first.
    """

    credentials_class: type[C]

    @property
    def credentials_type(self) -> str:
        """Type tag of the credentials this provider accepts."""
        return self.credentials_class.storage_type()

    def list_folder_contents(self, credentials: C, path: str) -> FolderEntity:
        """List a folder's direct children.

        Args:
            credentials: Credentials of this provider's type
            path: Folder path

        Returns:
            FolderEntity with (possibly empty) files and folders lists

        Raises:
            EntityNotFoundError: If nothing exists at path
            InvalidEntityPathError: If path resolves to a file
        """
        self._validate(credentials, path)
        return self._list_folder_contents(credentials, path)

    def exists(self, credentials: C, path: str) -> bool:
        """Check whether a file or folder exists at path."""
        self._validate(credentials, path)
        return self._exists(credentials, path)

    def read_file_meta(self, credentials: C, path: str) -> FileEntity:
        """Read a file's metadata.

        Raises:
            EntityNotFoundError: If the file does not exist
            InvalidEntityPathError: If path resolves to a folder
        """
        self._validate(credentials, path)
        self._require_file_path(path)
        return self._read_file_meta(credentials, path)

    def read_file(self, credentials: C, path: str, sink: WritableSink) -> None:
        """Stream a file's content into sink.

        Raises:
            EntityNotFoundError: If the file does not exist
            InvalidEntityPathError: If path resolves to a folder
        """
        if sink is None:
            raise InvalidArgumentError("Output sink cannot be None")
        self._validate(credentials, path)
        self._require_file_path(path)
        self._read_file(credentials, path, sink)

    def write_file(
        self,
        credentials: C,
        path: str,
        source: ReadableSource,
        revision: Optional[str] = None,
    ) -> FileEntity:
        """Create or overwrite a file.

        When ``revision`` is given the write only happens if it matches the
        file's current revision; the check and the write are atomic. Without
        a revision the write is unconditional (last write wins).

        Args:
            credentials: Credentials of this provider's type
            path: File path
            source: Bytes or a readable binary stream
            revision: Expected current revision, if any

        Returns:
            FileEntity of the written file

        Raises:
            InvalidRevisionError: If revision does not match (nothing written)
            InvalidEntityPathError: If path denotes or resolves to a folder
        """
        if source is None:
            raise InvalidArgumentError("Data source cannot be None")
        self._validate(credentials, path)
        self._require_file_path(path)
        return self._write_file(credentials, path, source, revision)

    def delete(self, credentials: C, path: str) -> None:
        """Delete a file, or a folder with everything under it.

        Raises:
            EntityNotFoundError: If nothing exists at path
        """
        self._validate(credentials, path)
        self._delete(credentials, path)

    @abstractmethod
    def _list_folder_contents(self, credentials: C, path: str) -> FolderEntity:
        pass

    @abstractmethod
    def _exists(self, credentials: C, path: str) -> bool:
        pass

    @abstractmethod
    def _read_file_meta(self, credentials: C, path: str) -> FileEntity:
        pass

    @abstractmethod
    def _read_file(self, credentials: C, path: str, sink: WritableSink) -> None:
        pass

    @abstractmethod
    def _write_file(
        self,
        credentials: C,
        path: str,
        source: ReadableSource,
        revision: Optional[str],
    ) -> FileEntity:
        pass

    @abstractmethod
    def _delete(self, credentials: C, path: str) -> None:
        pass

    def _validate(self, credentials: C, path: str) -> None:
        self.validate_credentials(credentials)
        validate_path(path)
        validate_segments(path)

    def validate_credentials(self, credentials: C) -> None:
        """Check credentials are present and of the type this provider handles.

        Raises:
            InvalidArgumentError: If credentials is None
            CredentialsError: If credentials belong to another storage type
        """
        if credentials is None:
            raise InvalidArgumentError("Missing credentials (None value)")
        if not isinstance(credentials, self.credentials_class):
            raise CredentialsError(
                f"{type(self).__name__} does not accept credentials of type "
                f"'{getattr(credentials, 'type', type(credentials).__name__)}'"
            )

    @staticmethod
    def _require_file_path(path: str) -> None:
        if is_folder(path):
            raise InvalidEntityPathError(f"Path {path} denotes a folder, not a file")

    @staticmethod
    def to_human_readable_size(size: int) -> str:
        return human_readable_size(size)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} type={self.credentials_type}>"
