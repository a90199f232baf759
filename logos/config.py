"""
Configuration and settings for the logos service.

Field names map case-insensitively onto environment variables, so
``data_backend`` is read from ``DATA_BACKEND`` and so on.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    logos_prefix: str = Field(default="/logos")
    api_prefix: str = Field(default="/api")
    log_level: str = Field(default="INFO")

    # Record storage: "memory" or "sql"
    data_backend: str = Field(default="memory")
    database_url: str = Field(default="sqlite+pysqlite:///logos.db")
    page_size: int = Field(default=10, ge=1)

    # S3-compatible image storage. Without a bucket, images stay in memory.
    cloud_bucket: Optional[str] = Field(default=None)
    storage_endpoint: Optional[str] = Field(default=None)
    storage_region: Optional[str] = Field(default=None)
    storage_public_url: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)
    max_upload_bytes: int = Field(default=5 * 1024 * 1024)

    # Google OAuth2
    oauth2_client_id: Optional[str] = Field(default=None)
    oauth2_client_secret: Optional[str] = Field(default=None)
    oauth2_callback: str = Field(
        default="http://localhost:8080/auth/google/callback"
    )
    secret_key: str = Field(default="keyboardcat")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
