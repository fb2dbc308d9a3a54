"""Configuration management for storage-io."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    otel_enabled: bool = False
    otel_service_name: str = "storage-io"
    otel_exporter_endpoint: str = "http://localhost:4317"

    # Entropy (in bytes) of generated credential and file-system identifiers
    credentials_id_bytes: int = 32
    read_chunk_size: int = 64 * 1024
    s3_region_name: str = "us-east-1"
    # Upper bound of cached S3 clients per provider
    s3_client_cache_size: int = 32

    model_config = {
        "env_prefix": "STORAGE_IO_",
        "case_sensitive": False,
    }


settings = Settings()
