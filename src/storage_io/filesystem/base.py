"""Storage service providers backed by an fsspec file system.

Subclasses map credentials to a :class:`FileSystemHandle` (the fsspec file
system, the directory acting as storage root and the lock serializing
writes); this module implements the provider contract on top of it.

Revisions are MD5 digests of the file content. Writes and deletes on one
file system run under its lock, so a revision check and the write that
follows cannot interleave with another write in the same process.
"""

import hashlib
import posixpath
import shutil
import threading
from abc import abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Iterator, Optional, TypeVar

from fsspec import AbstractFileSystem

from storage_io.core import get_logger, settings
from storage_io.core.exceptions import (
    BackendFailureError,
    EntityNotFoundError,
    InvalidEntityPathError,
    InvalidPathFormatError,
    InvalidRevisionError,
    StorageError,
)
from storage_io.credentials import Credentials
from storage_io.entities import FileEntity, FolderEntity
from storage_io.paths import (
    ROOT,
    as_folder,
    entity_name,
    is_folder,
    is_root,
    join,
    parent_path,
)
from storage_io.providers.base import (
    ReadableSource,
    StorageServiceProvider,
    WritableSink,
)

logger = get_logger(__name__)

C = TypeVar("C", bound=Credentials)


@dataclass
class FileSystemHandle:
    """An fsspec file system together with its storage root and write lock."""

    fs: AbstractFileSystem
    root: str
    lock: threading.RLock = field(default_factory=threading.RLock)


class AbstractFileSystemProvider(StorageServiceProvider[C]):
    """Provider contract implemented over an fsspec file system."""

    @abstractmethod
    def get_file_system(self, credentials: C) -> FileSystemHandle:
        """Resolve credentials to a file system handle.

        Raises:
            CredentialsError: If the credentials are unknown or expired
        """
        pass

    def backend_path(self, handle: FileSystemHandle, path: str) -> str:
        """Map a storage path onto the file system, below the handle's root.

        Raises:
            InvalidPathFormatError: If the path escapes the root
        """
        relative = path.strip("/")
        if not relative:
            return handle.root

        resolved = posixpath.normpath(posixpath.join(handle.root, relative))
        if resolved != handle.root and not resolved.startswith(
            handle.root.rstrip("/") + "/"
        ):
            raise InvalidPathFormatError(f"Path escapes storage root: {path}", path=path)
        return resolved

    def _list_folder_contents(self, credentials: C, path: str) -> FolderEntity:
        handle = self.get_file_system(credentials)
        location = self.backend_path(handle, path)

        with self._backend_errors("list folder", path):
            info = self._info(handle.fs, location)
            if info is None:
                raise EntityNotFoundError(f"Unknown entity path: {path}")
            if info["type"] != "directory":
                raise InvalidEntityPathError(f"Path {path} is not a directory")

            folder_path = ROOT if is_root(path) else as_folder(path)
            folder = FolderEntity(
                name=entity_name(folder_path),
                path=folder_path,
                parent_path=parent_path(folder_path),
            )

            entries = handle.fs.ls(location, detail=True)
            for entry in sorted(entries, key=lambda e: e["name"]):
                name = posixpath.basename(entry["name"].rstrip("/"))
                if entry["type"] == "directory":
                    folder.folders.append(
                        FolderEntity(
                            name=name,
                            path=join(folder_path, name, is_folder_entry=True),
                            parent_path=folder_path,
                        )
                    )
                else:
                    folder.files.append(
                        self._to_file_entity(
                            handle.fs, entry["name"], join(folder_path, name), entry
                        )
                    )

        logger.debug(
            "Folder listed",
            path=path,
            file_count=len(folder.files),
            folder_count=len(folder.folders),
        )
        return folder

    def _exists(self, credentials: C, path: str) -> bool:
        handle = self.get_file_system(credentials)
        location = self.backend_path(handle, path)

        with self._backend_errors("exists", path):
            info = self._info(handle.fs, location)
        if info is None:
            return False
        return info["type"] == "directory" or not is_folder(path)

    def _read_file_meta(self, credentials: C, path: str) -> FileEntity:
        handle = self.get_file_system(credentials)
        location = self.backend_path(handle, path)

        with self._backend_errors("read file metadata", path):
            info = self._require_file(handle.fs, location, path)
            return self._to_file_entity(
                handle.fs, location, path, info, with_revision=True
            )

    def _read_file(self, credentials: C, path: str, sink: WritableSink) -> None:
        handle = self.get_file_system(credentials)
        location = self.backend_path(handle, path)

        with self._backend_errors("read file", path):
            self._require_file(handle.fs, location, path)
            for chunk in self.iter_content(handle.fs, location):
                sink.write(chunk)

    def _write_file(
        self,
        credentials: C,
        path: str,
        source: ReadableSource,
        revision: Optional[str],
    ) -> FileEntity:
        handle = self.get_file_system(credentials)
        location = self.backend_path(handle, path)

        with handle.lock, self._backend_errors("write file", path):
            info = self._info(handle.fs, location)
            if info is not None and info["type"] == "directory":
                raise InvalidEntityPathError(f"Path {path} is a directory")

            if revision is not None:
                current = (
                    self._revision(handle.fs, location) if info is not None else None
                )
                if current != revision:
                    logger.warning(
                        "Revision mismatch, write rejected",
                        path=path,
                        expected=revision,
                        current=current,
                    )
                    raise InvalidRevisionError(
                        f"Revision {revision} is not the latest revision of {path}"
                    )

            parent = posixpath.dirname(location)
            self._check_parents(handle.fs, parent, path)
            handle.fs.makedirs(parent, exist_ok=True)

            if isinstance(source, (bytes, bytearray, memoryview)):
                handle.fs.pipe_file(location, bytes(source))
            else:
                with handle.fs.open(location, "wb") as out:
                    shutil.copyfileobj(source, out, settings.read_chunk_size)

            entity = self._to_file_entity(
                handle.fs, location, path, handle.fs.info(location), with_revision=True
            )

        logger.info("File written", path=path, size=entity.size)
        return entity

    def _delete(self, credentials: C, path: str) -> None:
        handle = self.get_file_system(credentials)
        location = self.backend_path(handle, path)
        if location == handle.root:
            raise InvalidEntityPathError("The root folder cannot be deleted")

        with handle.lock, self._backend_errors("delete", path):
            info = self._info(handle.fs, location)
            if info is None:
                raise EntityNotFoundError(f"Unknown entity path: {path}")

            if info["type"] == "directory":
                handle.fs.rm(location, recursive=True)
            elif is_folder(path):
                raise InvalidEntityPathError(f"Path {path} is not a directory")
            else:
                handle.fs.rm_file(location)

        logger.info("Entity deleted", path=path)

    def iter_content(self, fs: AbstractFileSystem, location: str) -> Iterator[bytes]:
        """Yield a file's content in chunks."""
        with fs.open(location, "rb") as f:
            while True:
                chunk = f.read(settings.read_chunk_size)
                if not chunk:
                    break
                yield chunk

    def _revision(self, fs: AbstractFileSystem, location: str) -> str:
        digest = hashlib.md5(usedforsecurity=False)
        for chunk in self.iter_content(fs, location):
            digest.update(chunk)
        return digest.hexdigest()

    def _to_file_entity(
        self,
        fs: AbstractFileSystem,
        location: str,
        path: str,
        info: dict[str, Any],
        with_revision: bool = False,
    ) -> FileEntity:
        size = int(info.get("size") or 0)
        return FileEntity(
            name=entity_name(path),
            path=path,
            parent_path=parent_path(path),
            size=size,
            human_readable_size=self.to_human_readable_size(size),
            creation_date=_timestamp(fs.created, location),
            modification_date=_timestamp(fs.modified, location),
            revision=self._revision(fs, location) if with_revision else None,
        )

    def _require_file(
        self, fs: AbstractFileSystem, location: str, path: str
    ) -> dict[str, Any]:
        info = self._info(fs, location)
        if info is None:
            raise EntityNotFoundError(f"Unknown entity path: {path}")
        if info["type"] == "directory":
            raise InvalidEntityPathError(f"Path {path} is not a regular file")
        return info

    def _check_parents(self, fs: AbstractFileSystem, location: str, path: str) -> None:
        # The nearest existing ancestor decides: once it is a directory, all
        # of its own ancestors are directories as well.
        while True:
            info = self._info(fs, location)
            if info is not None:
                if info["type"] != "directory":
                    raise InvalidEntityPathError(
                        f"Path {path} has a file where a folder is expected"
                    )
                return
            parent = posixpath.dirname(location)
            if parent == location:
                return
            location = parent

    @staticmethod
    def _info(fs: AbstractFileSystem, location: str) -> Optional[dict[str, Any]]:
        try:
            return fs.info(location)
        except (FileNotFoundError, NotADirectoryError):
            return None

    @contextmanager
    def _backend_errors(self, operation: str, path: str) -> Iterator[None]:
        try:
            yield
        except StorageError:
            raise
        except Exception as e:
            error_msg = f"Operation '{operation}' failed (path: {path}): {e}"
            logger.error(error_msg, error=str(e))
            raise BackendFailureError(error_msg, e)


def _timestamp(getter: Callable[[str], datetime], location: str) -> Optional[datetime]:
    # Not every fsspec implementation tracks creation/modification times
    try:
        return getter(location)
    except (NotImplementedError, OSError, KeyError):
        return None
