"""Core utilities and shared components for storage-io."""

from .config import settings
from .exceptions import ErrorKind, StorageError
from .observability import get_logger, get_tracer

__all__ = ["settings", "ErrorKind", "StorageError", "get_logger", "get_tracer"]
