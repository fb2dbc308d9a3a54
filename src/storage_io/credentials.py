"""Credential schemas for storage-io.

Every credential is tagged with a ``type`` discriminator. Providers are
registered per ``type`` and the manager dispatches on it.
"""

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Common fields of every credential.

    ``id`` stays empty until the credentials are registered with a
    repository, which assigns it exactly once. ``owner_id`` is a free-text
    correlation to an external entity (such as a user) and is never
    interpreted.
    """

    id: Optional[str] = Field(default=None, description="Registry-assigned identifier")
    owner_id: Optional[str] = Field(default=None, description="External owner reference")

    @classmethod
    def storage_type(cls) -> str:
        """Return the type tag declared by this credentials class."""
        field_info = cls.model_fields.get("type")
        if field_info is None or not isinstance(field_info.default, str):
            raise TypeError(f"{cls.__name__} does not declare a storage type")
        return field_info.default


class EmptyCredentials(Credentials):
    """Credentials with no backend-specific state, mainly for testing."""

    type: Literal["empty"] = "empty"


class MemoryCredentials(Credentials):
    """Credentials for an isolated in-memory file system."""

    type: Literal["memory"] = "memory"
    file_system_id: Optional[str] = Field(
        default=None, description="Identifier of the in-memory file system"
    )


class LocalCredentials(Credentials):
    """Credentials for a directory of the local file system."""

    type: Literal["local"] = "local"
    base_path: str = Field(..., description="Directory acting as the storage root")


class S3Credentials(Credentials):
    """Credentials for S3-compatible object storage."""

    type: Literal["s3"] = "s3"
    bucket: str = Field(..., description="Bucket name")
    prefix: str = Field(default="", description="Key prefix acting as the storage root")
    access_key_id: Optional[str] = Field(default=None, description="AWS access key ID")
    secret_access_key: Optional[str] = Field(
        default=None, description="AWS secret access key", repr=False
    )
    session_token: Optional[str] = Field(
        default=None, description="AWS session token", repr=False
    )
    region_name: Optional[str] = Field(default=None, description="AWS region")
    endpoint_url: Optional[str] = Field(default=None, description="Custom S3 endpoint URL")
    aws_profile: Optional[str] = Field(default=None, description="AWS profile name")


# Discriminated union of the bundled credential types
StorageCredentials = Annotated[
    Union[EmptyCredentials, MemoryCredentials, LocalCredentials, S3Credentials],
    Field(discriminator="type"),
]
