"""S3-compatible object storage provider.

Storage paths map onto object keys below ``S3Credentials.prefix`` in
``S3Credentials.bucket``. Object stores have no real folders: a folder
exists while at least one key lives under its prefix (an empty ``name/``
marker object counts), and the root always exists once the bucket is
reachable.

The revision of a file is its ETag. Revision-checked writes compare the
ETag first and then send it as ``IfMatch``, so the store itself rejects an
overwrite that raced in between.
"""

import threading
from collections import OrderedDict
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Optional

from botocore.exceptions import ClientError, NoCredentialsError

from storage_io.core import get_logger, settings
from storage_io.core.exceptions import (
    BackendFailureError,
    CredentialsError,
    EntityNotFoundError,
    InvalidEntityPathError,
    InvalidRevisionError,
    StorageError,
)
from storage_io.credentials import S3Credentials
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

from .clients import S3ClientConfig, S3ClientManager

logger = get_logger(__name__)

CREDENTIALS_ERROR_CODES = {
    "AccessDenied",
    "AuthorizationHeaderMalformed",
    "ExpiredToken",
    "InvalidAccessKeyId",
    "InvalidToken",
    "NoSuchBucket",
    "SignatureDoesNotMatch",
    "TokenRefreshRequired",
}
NOT_FOUND_ERROR_CODES = {"404", "NoSuchKey", "NotFound"}
PRECONDITION_ERROR_CODES = {"412", "PreconditionFailed", "ConditionalRequestConflict"}

# Upper bound of keys per DeleteObjects request
DELETE_BATCH_SIZE = 1000


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def _revision(etag: Optional[str]) -> Optional[str]:
    return etag.strip('"') if etag else None


class S3StorageProvider(StorageServiceProvider[S3Credentials]):
    """Provider for S3 buckets (AWS or any S3-compatible endpoint).

    One boto3 client is kept per distinct client configuration (keys, region,
    endpoint, profile). At most ``max_clients`` are cached; the least recently
    used is dropped first, and a client is dropped as soon as S3 rejects its
    credentials.
    """

    credentials_class = S3Credentials

    def __init__(self, max_clients: Optional[int] = None) -> None:
        # Least recently used client managers, keyed by client configuration
        self._clients: OrderedDict[S3ClientConfig, S3ClientManager] = OrderedDict()
        self._clients_lock = threading.Lock()
        self._max_clients = max_clients or settings.s3_client_cache_size

    def _list_folder_contents(self, credentials: S3Credentials, path: str) -> FolderEntity:
        client = self._client(credentials)
        folder_path = ROOT if is_root(path) else as_folder(path)
        folder_key = self._key(credentials, folder_path)

        logger.info("Listing S3 folder", bucket=credentials.bucket, prefix=folder_key)

        with self._s3_errors("list folder", credentials, path):
            if not is_folder(path):
                file_key = self._key(credentials, path)
                if self._head(client, credentials, file_key) is not None:
                    raise InvalidEntityPathError(f"Path {path} is not a directory")

            folder = FolderEntity(
                name=entity_name(folder_path),
                path=folder_path,
                parent_path=parent_path(folder_path),
            )
            found = False

            # Use paginator to handle large numbers of objects
            paginator = client.get_paginator("list_objects_v2")
            page_iterator = paginator.paginate(
                Bucket=credentials.bucket, Prefix=folder_key, Delimiter="/"
            )

            for page in page_iterator:
                for prefix_info in page.get("CommonPrefixes", []):
                    found = True
                    name = prefix_info["Prefix"][len(folder_key) :].rstrip("/")
                    folder.folders.append(
                        FolderEntity(
                            name=name,
                            path=join(folder_path, name, is_folder_entry=True),
                            parent_path=folder_path,
                        )
                    )
                for obj in page.get("Contents", []):
                    found = True
                    if obj["Key"] == folder_key:
                        # Folder marker object
                        continue
                    name = obj["Key"][len(folder_key) :]
                    folder.files.append(
                        self._to_file_entity(
                            join(folder_path, name),
                            obj.get("Size", 0),
                            obj.get("LastModified"),
                            obj.get("ETag"),
                        )
                    )

        if not found and not is_root(path):
            raise EntityNotFoundError(f"Unknown entity path: {path}")

        logger.info(
            "S3 folder listed",
            bucket=credentials.bucket,
            prefix=folder_key,
            file_count=len(folder.files),
            folder_count=len(folder.folders),
        )
        return folder

    def _exists(self, credentials: S3Credentials, path: str) -> bool:
        client = self._client(credentials)
        key = self._key(credentials, path)

        with self._s3_errors("exists", credentials, path):
            if is_root(path):
                # Surfaces bucket and credential problems
                client.list_objects_v2(Bucket=credentials.bucket, Prefix=key, MaxKeys=1)
                return True
            if is_folder(path):
                return self._has_children(client, credentials, key)
            return self._head(client, credentials, key) is not None or (
                self._has_children(client, credentials, key + "/")
            )

    def _read_file_meta(self, credentials: S3Credentials, path: str) -> FileEntity:
        client = self._client(credentials)
        key = self._key(credentials, path)

        with self._s3_errors("read file metadata", credentials, path):
            head = self._head(client, credentials, key)
            if head is None:
                self._raise_missing_file(client, credentials, key, path)
            return self._to_file_entity(
                path, head["ContentLength"], head.get("LastModified"), head.get("ETag")
            )

    def _read_file(
        self, credentials: S3Credentials, path: str, sink: WritableSink
    ) -> None:
        client = self._client(credentials)
        key = self._key(credentials, path)

        with self._s3_errors("read file", credentials, path):
            try:
                response = client.get_object(Bucket=credentials.bucket, Key=key)
            except ClientError as e:
                if _error_code(e) in NOT_FOUND_ERROR_CODES:
                    self._raise_missing_file(client, credentials, key, path)
                raise

            size = 0
            for chunk in response["Body"].iter_chunks(chunk_size=settings.read_chunk_size):
                sink.write(chunk)
                size += len(chunk)

        logger.info("S3 object downloaded", bucket=credentials.bucket, key=key, size=size)

    def _write_file(
        self,
        credentials: S3Credentials,
        path: str,
        source: ReadableSource,
        revision: Optional[str],
    ) -> FileEntity:
        client = self._client(credentials)
        key = self._key(credentials, path)
        with self._s3_errors("write file", credentials, path):
            # PutObject needs the content length up front
            if isinstance(source, (bytes, bytearray, memoryview)):
                body = bytes(source)
            else:
                body = source.read()

            if self._has_children(client, credentials, key + "/"):
                raise InvalidEntityPathError(f"Path {path} is a directory")

            kwargs: dict[str, Any] = {
                "Bucket": credentials.bucket,
                "Key": key,
                "Body": body,
            }
            if revision is not None:
                head = self._head(client, credentials, key)
                current = _revision(head.get("ETag")) if head else None
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
                kwargs["IfMatch"] = head["ETag"]

            client.put_object(**kwargs)
            head = client.head_object(Bucket=credentials.bucket, Key=key)

        logger.info(
            "S3 object uploaded", bucket=credentials.bucket, key=key, size=len(body)
        )
        return self._to_file_entity(
            path, head["ContentLength"], head.get("LastModified"), head.get("ETag")
        )

    def _delete(self, credentials: S3Credentials, path: str) -> None:
        if is_root(path):
            raise InvalidEntityPathError("The root folder cannot be deleted")

        client = self._client(credentials)
        key = self._key(credentials, path)

        with self._s3_errors("delete", credentials, path):
            if not is_folder(path) and self._head(client, credentials, key) is not None:
                client.delete_object(Bucket=credentials.bucket, Key=key)
                logger.info("S3 object deleted", bucket=credentials.bucket, key=key)
                return

            folder_key = as_folder(key)
            paginator = client.get_paginator("list_objects_v2")
            keys = [
                obj["Key"]
                for page in paginator.paginate(Bucket=credentials.bucket, Prefix=folder_key)
                for obj in page.get("Contents", [])
            ]
            if not keys:
                raise EntityNotFoundError(f"Unknown entity path: {path}")

            for start in range(0, len(keys), DELETE_BATCH_SIZE):
                batch = keys[start : start + DELETE_BATCH_SIZE]
                client.delete_objects(
                    Bucket=credentials.bucket,
                    Delete={"Objects": [{"Key": k} for k in batch], "Quiet": True},
                )

        logger.info(
            "S3 prefix deleted",
            bucket=credentials.bucket,
            prefix=folder_key,
            object_count=len(keys),
        )

    def _client(self, credentials: S3Credentials):
        config = S3ClientConfig.from_credentials(credentials)
        with self._clients_lock:
            manager = self._clients.get(config)
            if manager is None:
                manager = S3ClientManager(config)
                self._clients[config] = manager
                while len(self._clients) > self._max_clients:
                    evicted, _ = self._clients.popitem(last=False)
                    logger.debug(
                        "S3 client evicted from cache", region=evicted.region_name
                    )
            else:
                self._clients.move_to_end(config)
        return manager.client

    def _expire_client(self, credentials: S3Credentials) -> None:
        with self._clients_lock:
            self._clients.pop(S3ClientConfig.from_credentials(credentials), None)

    @staticmethod
    def _key(credentials: S3Credentials, path: str) -> str:
        prefix = credentials.prefix.strip("/")
        relative = path.lstrip("/")
        return f"{prefix}/{relative}" if prefix else relative

    @staticmethod
    def _head(client, credentials: S3Credentials, key: str) -> Optional[dict[str, Any]]:
        try:
            return client.head_object(Bucket=credentials.bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_ERROR_CODES:
                return None
            raise

    @staticmethod
    def _has_children(client, credentials: S3Credentials, folder_key: str) -> bool:
        response = client.list_objects_v2(
            Bucket=credentials.bucket, Prefix=folder_key, MaxKeys=1
        )
        return response.get("KeyCount", 0) > 0

    def _raise_missing_file(
        self, client, credentials: S3Credentials, key: str, path: str
    ) -> None:
        if self._has_children(client, credentials, key + "/"):
            raise InvalidEntityPathError(f"Path {path} is not a regular file")
        raise EntityNotFoundError(f"Unknown entity path: {path}")

    def _to_file_entity(
        self,
        path: str,
        size: int,
        modified: Optional[datetime],
        etag: Optional[str],
    ) -> FileEntity:
        # S3 does not track creation time
        return FileEntity(
            name=entity_name(path),
            path=path,
            parent_path=parent_path(path),
            size=size,
            human_readable_size=self.to_human_readable_size(size),
            creation_date=None,
            modification_date=modified,
            revision=_revision(etag),
        )

    @contextmanager
    def _s3_errors(
        self, operation: str, credentials: S3Credentials, path: str
    ) -> Iterator[None]:
        try:
            yield
        except StorageError:
            raise
        except NoCredentialsError as e:
            logger.warning("No AWS credentials available", operation=operation)
            raise CredentialsError("No AWS credentials available", e)
        except ClientError as e:
            code = _error_code(e)
            if code in CREDENTIALS_ERROR_CODES:
                logger.warning(
                    "S3 rejected credentials",
                    operation=operation,
                    bucket=credentials.bucket,
                    code=code,
                )
                self._expire_client(credentials)
                raise CredentialsError(f"Invalid credentials for bucket ({code})", e)
            if code in NOT_FOUND_ERROR_CODES:
                raise EntityNotFoundError(f"Unknown entity path: {path}", e)
            if code in PRECONDITION_ERROR_CODES:
                raise InvalidRevisionError(
                    f"File {path} was modified concurrently, write rejected", e
                )
            error_msg = f"S3 operation '{operation}' failed (path: {path}): {e}"
            logger.error(error_msg, error=str(e), code=code)
            raise BackendFailureError(error_msg, e)
        except Exception as e:
            error_msg = f"S3 operation '{operation}' failed (path: {path}): {e}"
            logger.error(error_msg, error=str(e))
            raise BackendFailureError(error_msg, e)
