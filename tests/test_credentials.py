"""Tests for credential schemas."""

import pytest
from pydantic import TypeAdapter, ValidationError

from storage_io.credentials import (
    Credentials,
    EmptyCredentials,
    LocalCredentials,
    MemoryCredentials,
    S3Credentials,
    StorageCredentials,
)


class TestCredentialTypes:
    """Test credential type tags."""

    def test_storage_type_per_class(self):
        """Test each credentials class declares its type tag."""
        assert EmptyCredentials.storage_type() == "empty"
        assert MemoryCredentials.storage_type() == "memory"
        assert LocalCredentials.storage_type() == "local"
        assert S3Credentials.storage_type() == "s3"

    def test_base_class_has_no_type(self):
        """Test the base class cannot be dispatched on."""
        with pytest.raises(TypeError):
            Credentials.storage_type()

    def test_unregistered_credentials_have_no_id(self):
        """Test new credentials carry no identifier."""
        credentials = EmptyCredentials(owner_id="owner")
        assert credentials.id is None
        assert credentials.owner_id == "owner"


class TestS3Credentials:
    """Test S3 credentials."""

    def test_bucket_required(self):
        """Test the bucket is mandatory."""
        with pytest.raises(ValidationError):
            S3Credentials()

    def test_defaults(self):
        """Test S3 credential defaults."""
        credentials = S3Credentials(bucket="data")
        assert credentials.prefix == ""
        assert credentials.access_key_id is None
        assert credentials.region_name is None

    def test_secrets_hidden_from_repr(self):
        """Test secrets never appear in repr."""
        credentials = S3Credentials(
            bucket="data",
            access_key_id="key123",
            secret_access_key="secret456",
            session_token="token789",
        )
        text = repr(credentials)

        assert "key123" in text
        assert "secret456" not in text
        assert "token789" not in text


class TestStorageCredentialsUnion:
    """Test discriminated credential parsing."""

    def test_parse_by_type(self):
        """Test the type tag selects the credentials class."""
        adapter = TypeAdapter(StorageCredentials)

        local = adapter.validate_python({"type": "local", "base_path": "/data"})
        s3 = adapter.validate_python({"type": "s3", "bucket": "b", "prefix": "p"})

        assert isinstance(local, LocalCredentials)
        assert isinstance(s3, S3Credentials)
        assert s3.prefix == "p"

    def test_unknown_type_rejected(self):
        """Test unknown type tags fail validation."""
        adapter = TypeAdapter(StorageCredentials)

        with pytest.raises(ValidationError):
            adapter.validate_python({"type": "ftp"})
