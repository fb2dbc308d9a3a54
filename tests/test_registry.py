"""Tests for the provider registry."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from storage_io.core.exceptions import (
    InvalidArgumentError,
    UnrecognizedStorageTypeError,
)
from storage_io.filesystem import LocalStorageProvider, MemoryStorageProvider
from storage_io.manager import ProviderRegistry


class TestProviderRegistry:
    """Test provider registration and resolution."""

    def test_register_and_resolve(self):
        """Test a registered provider resolves by credentials type."""
        registry = ProviderRegistry()
        memory = MemoryStorageProvider()
        local = LocalStorageProvider()

        registry.register(memory)
        registry.register(local)

        assert registry.resolve("memory") is memory
        assert registry.resolve("local") is local
        assert sorted(registry.storage_types()) == ["local", "memory"]
        assert "memory" in registry

    def test_duplicate_type_rejected(self):
        """Test a second provider for the same type is rejected."""
        registry = ProviderRegistry()
        first = MemoryStorageProvider()
        registry.register(first)

        with pytest.raises(UnrecognizedStorageTypeError, match="already associated"):
            registry.register(MemoryStorageProvider())

        assert registry.resolve("memory") is first

    def test_same_instance_twice_rejected(self):
        """Test registering the same provider twice is also a duplicate."""
        registry = ProviderRegistry()
        provider = MemoryStorageProvider()
        registry.register(provider)

        with pytest.raises(UnrecognizedStorageTypeError):
            registry.register(provider)

    def test_register_none_rejected(self):
        """Test None providers are rejected."""
        registry = ProviderRegistry()

        with pytest.raises(InvalidArgumentError):
            registry.register(None)

    def test_resolve_unknown_type(self):
        """Test resolving an unregistered type fails."""
        registry = ProviderRegistry()

        with pytest.raises(UnrecognizedStorageTypeError):
            registry.resolve("s3")

    def test_concurrent_registration_single_winner(self):
        """Test exactly one of several concurrent registrations succeeds."""
        registry = ProviderRegistry()
        providers = [MemoryStorageProvider() for _ in range(32)]

        def register(provider):
            try:
                registry.register(provider)
                return True
            except UnrecognizedStorageTypeError:
                return False

        with ThreadPoolExecutor(max_workers=8) as executor:
            outcomes = list(executor.map(register, providers))

        assert outcomes.count(True) == 1
        winner = providers[outcomes.index(True)]
        assert registry.resolve("memory") is winner
