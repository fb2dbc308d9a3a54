"""Storage service provider contract."""

from .base import ReadableSource, StorageServiceProvider, WritableSink

__all__ = ["ReadableSource", "StorageServiceProvider", "WritableSink"]
