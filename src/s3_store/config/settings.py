# src/s3_store/config/settings.py
from typing import List, Optional
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_DERIVATIVE_TYPES = ["large", "medium", "square"]


class Settings(BaseSettings):
    """
    Process-level settings for the store, its API and its CLI.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Credentials and bucket options are not read from here; they live behind a
    settings provider (see ``s3_store.config.storage``) so they can be edited
    at runtime through the settings form.

    Usage:
        from s3_store.config.settings import get_settings
        settings = get_settings()
        provider_file = settings.settings_file
    """

    app_name: str = Field(
        default="S3 File Store",
        description="Application name"
    )

    # Settings provider
    settings_file: str = Field(
        default=".s3_store.json",
        description="JSON file holding the persisted storage options"
    )

    # Optional S3-compatible endpoint (MinIO, moto server, ...)
    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL"
    )

    # Archive organizer integration
    archive_repertory_active: bool = Field(
        default=False,
        description="Route the archive organizer's folder operations through the bucket"
    )

    derivative_types: List[str] = Field(
        default_factory=lambda: list(DEFAULT_DERIVATIVE_TYPES),
        description="Derivative folders created next to 'original' for each item"
    )

    files_dir: str = Field(
        default="files",
        description="Local files directory the archive organizer uses when it is not routed through the bucket"
    )

    verify_moves: bool = Field(
        default=False,
        description="Compare size and checksum of the copy before deleting the source of a move (ETag only for single-part, non-KMS objects)"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept lower-case level names from the environment."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        level = (v or "INFO").upper()
        if level not in valid_levels:
            raise ValueError(f"Invalid log_level: {v}. Must be one of {valid_levels}")
        return level

    @field_validator("aws_endpoint_url")
    @classmethod
    def strip_endpoint_url(cls, v):
        if v is None:
            return v
        v = v.strip().rstrip("/")
        return v or None

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="S3_STORE_",
        populate_by_name=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
