"""Configuration management for calcvault.

Settings are loaded with pydantic-settings from environment variables with the
CALCVAULT_ prefix, or from a .env file in the working directory.

Environment Variables:
    CALCVAULT_STORAGE_DIR: Directory for workbook records (default: in-memory)
    CALCVAULT_MAX_UPLOAD_SIZE_MB: Maximum spreadsheet upload size in MB (default: 10)
    CALCVAULT_DEFAULT_UPLOAD_NAME: Name for uploads without one (default: Uploaded Workbook)
    CALCVAULT_DXF_FILENAME_PREFIX: Prefix of generated DXF filenames (default: autocad-design)
    CALCVAULT_LOG_LEVEL: Logging level (default: INFO)
"""

import logging
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Example .env file:
        CALCVAULT_STORAGE_DIR=/var/lib/calcvault
        CALCVAULT_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="CALCVAULT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    storage_dir: Optional[str] = None
    """Directory holding one JSON file per workbook. None keeps workbooks in memory."""

    max_upload_size_mb: int = 10
    """Maximum spreadsheet upload size in megabytes."""

    default_upload_name: str = "Uploaded Workbook"
    """Workbook name used when an upload does not provide one."""

    dxf_filename_prefix: str = "autocad-design"
    """Prefix of generated DXF download filenames."""

    log_level: str = "INFO"
    """Logging level for the calcvault loggers."""

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(sorted(valid_levels))}"
            )
        return upper_v

    @field_validator("max_upload_size_mb")
    @classmethod
    def validate_upload_size(cls, v: int) -> int:
        """Validate upload size is positive and reasonable."""
        if not 1 <= v <= 500:
            raise ValueError(f"max_upload_size_mb must be between 1 and 500, got {v}")
        return v

    @field_validator("default_upload_name", "dxf_filename_prefix")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must be a non-empty string")
        return v.strip()

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level


@lru_cache
def get_settings() -> Settings:
    """Process-wide settings, read once from the environment."""
    return Settings()


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Apply the configured level to the calcvault loggers."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level_int,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("calcvault").setLevel(settings.log_level_int)
