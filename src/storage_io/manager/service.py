"""Storage service: credentials bound to the provider that serves them."""

from typing import Optional

from storage_io.core import get_tracer
from storage_io.credentials import Credentials
from storage_io.entities import FileEntity, FolderEntity
from storage_io.providers.base import (
    ReadableSource,
    StorageServiceProvider,
    WritableSink,
)

tracer = get_tracer(__name__)


class StorageService:
    """Forwards file and folder operations to a provider with bound credentials.

    Instances are created by ``StorageManager.lookup_service`` for each
    lookup and are not cached. Callers work with the service only, without
    knowing which provider is behind it. See ``StorageServiceProvider`` for
    the semantics and errors of each operation.
    """

    def __init__(self, credentials: Credentials, provider: StorageServiceProvider):
        self._credentials = credentials
        self._provider = provider

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def provider(self) -> StorageServiceProvider:
        return self._provider

    @property
    def storage_type(self) -> str:
        return self._credentials.type

    def list_folder_contents(self, path: str) -> FolderEntity:
        with self._span("list_folder_contents", path):
            return self._provider.list_folder_contents(self._credentials, path)

    def exists(self, path: str) -> bool:
        with self._span("exists", path):
            return self._provider.exists(self._credentials, path)

    def read_file_meta(self, path: str) -> FileEntity:
        with self._span("read_file_meta", path):
            return self._provider.read_file_meta(self._credentials, path)

    def read_file(self, path: str, sink: WritableSink) -> None:
        with self._span("read_file", path):
            self._provider.read_file(self._credentials, path, sink)

    def write_file(
        self, path: str, source: ReadableSource, revision: Optional[str] = None
    ) -> FileEntity:
        with self._span("write_file", path):
            return self._provider.write_file(self._credentials, path, source, revision)

    def delete(self, path: str) -> None:
        with self._span("delete", path):
            self._provider.delete(self._credentials, path)

    def _span(self, operation: str, path: str):
        return tracer.start_as_current_span(
            f"storage.{operation}",
            attributes={"storage.type": self.storage_type, "storage.path": str(path)},
        )

    def __repr__(self) -> str:
        return f"<StorageService type={self.storage_type} provider={self._provider!r}>"
