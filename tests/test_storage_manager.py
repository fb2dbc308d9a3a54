"""Tests for the storage manager."""

import io
from unittest.mock import MagicMock

import pytest

from storage_io.core.exceptions import (
    CredentialsError,
    EntityNotFoundError,
    InvalidArgumentError,
    RegistryConsistencyError,
    UnrecognizedStorageTypeError,
)
from storage_io.credentials import EmptyCredentials, MemoryCredentials
from storage_io.filesystem import MemoryStorageProvider
from storage_io.manager import (
    MemoryCredentialsRepository,
    StorageManager,
    StorageService,
    create_default_manager,
)
from storage_io.providers import StorageServiceProvider


def mock_provider(storage_type="empty"):
    """Create a mock provider for the given credentials type."""
    provider = MagicMock(spec=StorageServiceProvider)
    provider.credentials_type = storage_type
    return provider


class TestAddCredentials:
    """Test credential registration through the manager."""

    def test_add_credentials_for_registered_type(self, manager, memory_credentials):
        """Test credentials of a handled type get an identifier."""
        credentials_id = manager.add_credentials(memory_credentials)

        assert credentials_id == memory_credentials.id
        assert manager.repository.get_credentials(credentials_id) is memory_credentials

    def test_add_credentials_without_provider(self, manager):
        """Test credentials of an unhandled type are rejected and not stored."""
        credentials = EmptyCredentials()

        with pytest.raises(UnrecognizedStorageTypeError):
            manager.add_credentials(credentials)

        assert credentials.id is None
        assert len(manager.repository) == 0

    def test_add_none_credentials(self, manager):
        """Test None credentials are rejected."""
        with pytest.raises(InvalidArgumentError):
            manager.add_credentials(None)

    def test_add_registered_credentials_again(self, manager, memory_credentials):
        """Test already registered credentials are rejected."""
        manager.add_credentials(memory_credentials)

        with pytest.raises(InvalidArgumentError):
            manager.add_credentials(memory_credentials)


class TestRegisterProvider:
    """Test provider registration through the manager."""

    def test_duplicate_provider_rejected(self, manager):
        """Test a second provider for a type already served is rejected."""
        with pytest.raises(UnrecognizedStorageTypeError):
            manager.register_provider(MemoryStorageProvider())

    def test_none_provider_rejected(self, manager):
        """Test None providers are rejected."""
        with pytest.raises(InvalidArgumentError):
            manager.register_provider(None)


class TestLookupService:
    """Test service lookup and dispatch."""

    def test_lookup_dispatches_to_provider(self):
        """Test service operations reach the provider with the bound credentials."""
        provider = mock_provider()
        manager = StorageManager()
        manager.register_provider(provider)
        credentials = EmptyCredentials()
        credentials_id = manager.add_credentials(credentials)

        service = manager.lookup_service(credentials_id)
        service.list_folder_contents("/")

        assert isinstance(service, StorageService)
        assert service.credentials is credentials
        assert service.provider is provider
        provider.list_folder_contents.assert_called_once_with(credentials, "/")

    def test_each_lookup_builds_new_service(self, manager, memory_credentials):
        """Test services are not cached between lookups."""
        credentials_id = manager.add_credentials(memory_credentials)

        first = manager.lookup_service(credentials_id)
        second = manager.lookup_service(credentials_id)

        assert first is not second
        assert first.credentials is second.credentials

    def test_lookup_unknown_identifier(self, manager):
        """Test unknown identifiers fail with a credentials error."""
        with pytest.raises(CredentialsError, match="Unknown credentials"):
            manager.lookup_service("no-such-id")

    @pytest.mark.parametrize("credentials_id", [None, ""])
    def test_lookup_empty_identifier(self, manager, credentials_id):
        """Test absent identifiers are rejected."""
        with pytest.raises(InvalidArgumentError):
            manager.lookup_service(credentials_id)

    def test_lookup_without_provider_is_inconsistency(self, memory_provider):
        """Test credentials whose provider is missing signal a wiring bug."""
        repository = MemoryCredentialsRepository()
        registering = StorageManager(repository=repository)
        registering.register_provider(memory_provider)
        credentials_id = registering.add_credentials(
            memory_provider.create_file_system()
        )

        # Same repository, but no provider registered for 'memory'
        misconfigured = StorageManager(repository=repository)

        with pytest.raises(RegistryConsistencyError):
            misconfigured.lookup_service(credentials_id)

    def test_independent_managers(self, memory_provider, memory_credentials):
        """Test managers do not share registries."""
        first = StorageManager()
        first.register_provider(memory_provider)
        credentials_id = first.add_credentials(memory_credentials)

        second = StorageManager()
        second.register_provider(MemoryStorageProvider())

        with pytest.raises(CredentialsError):
            second.lookup_service(credentials_id)


class TestEndToEnd:
    """Test a complete register, lookup and use cycle."""

    def test_write_list_read_delete(self, manager, memory_provider):
        """Test the typical lifecycle against in-memory storage."""
        credentials_id = manager.add_credentials(
            memory_provider.create_file_system(owner_id="user-1")
        )
        service = manager.lookup_service(credentials_id)

        written = service.write_file("/contents/documents/logs/trace.txt", b"hello")
        assert written.size == 5
        assert written.parent_path == "/contents/documents/logs/"

        root = service.list_folder_contents("/")
        assert root.name == "/"
        assert root.parent_path is None
        assert [folder.path for folder in root.folders] == ["/contents/"]
        assert root.files == []

        sink = io.BytesIO()
        service.read_file("/contents/documents/logs/trace.txt", sink)
        assert sink.getvalue() == b"hello"

        service.delete("/contents/")
        assert not service.exists("/contents/documents/logs/trace.txt")
        with pytest.raises(EntityNotFoundError):
            service.read_file_meta("/contents/documents/logs/trace.txt")

    def test_removed_file_system_rejects_credentials(self, manager, memory_provider):
        """Test credentials of a discarded file system fail on use."""
        credentials = memory_provider.create_file_system()
        service = manager.lookup_service(manager.add_credentials(credentials))

        memory_provider.remove_file_system(credentials)

        with pytest.raises(CredentialsError):
            service.exists("/")


class TestDefaultManager:
    """Test the manager preloaded with bundled providers."""

    def test_bundled_providers_registered(self):
        """Test memory, local and S3 providers are available."""
        manager = create_default_manager()

        assert sorted(manager.providers.storage_types()) == ["local", "memory", "s3"]

    def test_memory_credentials_need_file_system(self):
        """Test memory credentials naming no file system fail as unknown credentials."""
        manager = create_default_manager()
        credentials_id = manager.add_credentials(MemoryCredentials())
        service = manager.lookup_service(credentials_id)

        with pytest.raises(CredentialsError):
            service.exists("/")
