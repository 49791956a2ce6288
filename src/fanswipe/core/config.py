"""Application configuration using pydantic-settings."""
from functools import lru_cache
from typing import Literal
from urllib.parse import urlparse

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

StorageBackend = Literal["memory", "file", "redis"]
UserRole = Literal["member", "creator"]


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # API - shared with the web frontend (VITE_ prefix for Vite exposure)
    api_url: str = Field(
        default="http://localhost:5002/api",
        validation_alias="VITE_API_URL",
    )
    api_timeout: float = Field(default=30.0, validation_alias="FANSWIPE_API_TIMEOUT")
    user_role: UserRole = Field(default="member", validation_alias="FANSWIPE_USER_ROLE")

    # Local persistence for moderation state and saved filters
    storage_backend: StorageBackend = Field(
        default="memory", validation_alias="FANSWIPE_STORAGE_BACKEND",
    )
    storage_path: str = Field(
        default=".fanswipe/storage.json", validation_alias="FANSWIPE_STORAGE_PATH",
    )
    storage_prefix: str = Field(default="fanswipe_", validation_alias="FANSWIPE_STORAGE_PREFIX")
    redis_url: str = Field(default="redis://localhost:6379", validation_alias="REDIS_URL")

    # Discovery stack behaviour
    swipe_advance_delay: float = Field(
        default=0.3, ge=0, validation_alias="FANSWIPE_SWIPE_ADVANCE_DELAY",
    )
    stack_window: int = Field(default=3, ge=1, validation_alias="FANSWIPE_STACK_WINDOW")
    new_member_days: int = Field(default=30, ge=0, validation_alias="FANSWIPE_NEW_MEMBER_DAYS")

    # Connection modal
    modal_auto_close_seconds: float = Field(
        default=5.0, ge=0, validation_alias="FANSWIPE_MODAL_AUTO_CLOSE_SECONDS",
    )

    @model_validator(mode="after")
    def validate_urls_and_storage(self) -> "Settings":
        """
        Reject an API URL that is not http(s) and a file backend without a path.

        Both mistakes otherwise surface much later as confusing transport or
        I/O errors on the first request or write.
        """
        scheme = urlparse(self.api_url).scheme.lower()
        if scheme not in {"http", "https"}:
            raise ValueError(
                f"VITE_API_URL must be an http(s) URL, got '{self.api_url}'",
            )
        if self.storage_backend == "file" and not self.storage_path.strip():
            raise ValueError("FANSWIPE_STORAGE_PATH is required for the file storage backend")
        return self

    @property
    def api_base_url(self) -> str:
        """API URL without a trailing slash, for use as an httpx base_url."""
        return self.api_url.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
