# src/config/settings.py - v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for service selection, cache location, HTTP and
logging options. Environment variables use the IMGUP_ prefix.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="IMGUP_",
        extra="ignore",
    )

    # === Service ===
    default_service: Literal["flickr", "smugmug"] = "flickr"

    # === Duplicate detection ===
    duplicate_check: bool = True
    cache_path: Path = Path("~/.config/imgup/uploads.db")
    machine_tag_namespace: str = "imgup"

    # === Flickr ===
    flickr_user_id: str = ""
    flickr_api_url: str = "https://api.flickr.com/services/rest/"
    flickr_upload_url: str = "https://up.flickr.com/services/upload/"

    # === SmugMug ===
    smugmug_album_key: str = ""
    smugmug_api_url: str = "https://api.smugmug.com"
    smugmug_upload_url: str = "https://upload.smugmug.com/"

    # === HTTP / batch ===
    http_timeout_s: float = 60.0
    batch_concurrency: int = 4

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("machine_tag_namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:  # noqa: N805
        """Machine tag namespaces cannot contain separators or spaces."""
        if not v or any(c in v for c in " :=\""):
            raise ValueError(
                "machine_tag_namespace must be non-empty without spaces, ':' or '='"
            )
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.batch_concurrency < 1:
            errors.append("BATCH_CONCURRENCY must be >= 1")

        if self.http_timeout_s <= 0:
            errors.append("HTTP_TIMEOUT_S must be > 0")

        if self.log_retention < 0:
            errors.append("LOG_RETENTION must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def resolved_cache_path(self) -> Path:
        """Cache path with the user directory expanded."""
        return Path(self.cache_path).expanduser()


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or per-invocation config).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
