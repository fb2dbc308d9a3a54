"""Tests for the in-memory storage provider."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from compat_kit import ProviderCompatibilityKit, read_bytes

from storage_io.core.exceptions import (
    CredentialsError,
    InvalidEntityPathError,
    InvalidRevisionError,
)
from storage_io.credentials import MemoryCredentials
from storage_io.filesystem import IsolatedMemoryFileSystem, MemoryStorageProvider


class TestMemoryProviderCompatibility(ProviderCompatibilityKit):
    """Run the shared provider contract against in-memory storage."""

    @pytest.fixture
    def provider(self):
        return MemoryStorageProvider()

    @pytest.fixture
    def credentials(self, provider):
        return provider.create_file_system()


class TestMemoryFileSystems:
    """Test provisioning and isolation of in-memory file systems."""

    def test_create_file_system(self, memory_provider):
        """Test new file systems come with unregistered credentials."""
        credentials = memory_provider.create_file_system(owner_id="user-1")

        assert credentials.type == "memory"
        assert credentials.file_system_id
        assert credentials.owner_id == "user-1"
        assert credentials.id is None
        assert memory_provider.file_system_count == 1

    def test_file_systems_are_isolated(self, memory_provider):
        """Test content written to one file system is invisible to another."""
        first = memory_provider.create_file_system()
        second = memory_provider.create_file_system()

        memory_provider.write_file(first, "/a.txt", b"first")

        assert memory_provider.exists(first, "/a.txt")
        assert not memory_provider.exists(second, "/a.txt")
        assert memory_provider.list_folder_contents(second, "/").files == []

    def test_isolated_stores(self):
        """Test each isolated file system instance has its own store."""
        first = IsolatedMemoryFileSystem()
        second = IsolatedMemoryFileSystem()

        first.pipe_file("/a.txt", b"a")

        assert first is not second
        assert first.exists("/a.txt")
        assert not second.exists("/a.txt")

    def test_remove_file_system(self, memory_provider):
        """Test removed file systems reject their credentials."""
        credentials = memory_provider.create_file_system()
        memory_provider.write_file(credentials, "/a.txt", b"a")

        memory_provider.remove_file_system(credentials)

        assert memory_provider.file_system_count == 0
        with pytest.raises(CredentialsError):
            memory_provider.exists(credentials, "/a.txt")
        with pytest.raises(CredentialsError):
            memory_provider.remove_file_system(credentials)

    def test_unknown_file_system(self, memory_provider):
        """Test credentials naming an unknown file system are rejected."""
        credentials = MemoryCredentials(file_system_id="does-not-exist")

        with pytest.raises(CredentialsError):
            memory_provider.list_folder_contents(credentials, "/")

    def test_credentials_without_file_system(self, memory_provider):
        """Test credentials naming no file system are unknown credentials."""
        with pytest.raises(CredentialsError):
            memory_provider.exists(MemoryCredentials(), "/")

    def test_delete_never_empties_store(self, memory_provider, memory_credentials):
        """Test a path resolving to the store root is not deleted."""
        memory_provider.write_file(memory_credentials, "/keep.txt", b"k")

        with pytest.raises(InvalidEntityPathError):
            memory_provider._delete(memory_credentials, "//")

        assert memory_provider.exists(memory_credentials, "/keep.txt")

    def test_timestamps_reported(self, memory_provider, memory_credentials):
        """Test in-memory files report creation and modification times."""
        meta = memory_provider.write_file(memory_credentials, "/a.txt", b"a")

        assert meta.creation_date is not None
        assert meta.modification_date is not None


class TestConcurrentWrites:
    """Test revision checks under concurrent writers."""

    def test_single_winner_for_same_revision(self, memory_provider, memory_credentials):
        """Test only one of several writers holding the same revision succeeds."""
        base = memory_provider.write_file(memory_credentials, "/a.txt", b"base")

        def write(index):
            try:
                memory_provider.write_file(
                    memory_credentials,
                    "/a.txt",
                    f"writer {index}".encode(),
                    revision=base.revision,
                )
                return index
            except InvalidRevisionError:
                return None

        with ThreadPoolExecutor(max_workers=8) as executor:
            outcomes = list(executor.map(write, range(16)))

        winners = [index for index in outcomes if index is not None]
        assert len(winners) == 1
        content = read_bytes(memory_provider, memory_credentials, "/a.txt")
        assert content == f"writer {winners[0]}".encode()

    def test_concurrent_reads(self, memory_provider, memory_credentials):
        """Test concurrent readers all see the complete content."""
        payload = b"x" * 300_000
        memory_provider.write_file(memory_credentials, "/big.bin", payload)

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(
                executor.map(
                    lambda _: read_bytes(memory_provider, memory_credentials, "/big.bin"),
                    range(16),
                )
            )

        assert all(result == payload for result in results)
