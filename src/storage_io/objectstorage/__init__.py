"""Object storage provider for S3-compatible services."""

from .clients import S3ClientConfig, S3ClientManager
from .s3_provider import S3StorageProvider

__all__ = ["S3ClientConfig", "S3ClientManager", "S3StorageProvider"]
