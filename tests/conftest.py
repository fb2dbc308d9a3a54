"""Test configuration and fixtures for storage-io."""

import pytest

from storage_io.credentials import LocalCredentials
from storage_io.filesystem import LocalStorageProvider, MemoryStorageProvider
from storage_io.manager import StorageManager


@pytest.fixture
def memory_provider():
    """Create an in-memory storage provider."""
    return MemoryStorageProvider()


@pytest.fixture
def memory_credentials(memory_provider):
    """Create credentials for a fresh in-memory file system."""
    return memory_provider.create_file_system(owner_id="user-1")


@pytest.fixture
def manager(memory_provider):
    """Create a manager serving in-memory storage."""
    manager = StorageManager()
    manager.register_provider(memory_provider)
    return manager


@pytest.fixture
def sample_file_structure(tmp_path):
    """Create a sample directory tree for local storage tests."""
    (tmp_path / "file1.txt").write_text("content1")
    (tmp_path / "file2.txt").write_text("content2" * 100)

    subdir = tmp_path / "subdir"
    subdir.mkdir()
    (subdir / "file3.txt").write_text("content3" * 50)

    return tmp_path


@pytest.fixture
def local_credentials(sample_file_structure):
    """Create credentials rooted at the sample directory tree."""
    return LocalCredentials(base_path=str(sample_file_structure))


@pytest.fixture
def local_provider():
    """Create a local storage provider."""
    return LocalStorageProvider()
