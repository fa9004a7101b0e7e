"""Application configuration using Pydantic Settings.

Reads configuration from environment variables with sensible defaults.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    environment: Literal["prod", "staging", "dev"] = Field(
        default="dev",
        description="Environment name",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # =========================================================================
    # Remote catalog API
    # =========================================================================
    catalog_api_url: str = Field(
        default="https://dummyjson.com",
        description="Base URL of the remote product catalog API",
    )
    catalog_api_timeout: float = Field(
        default=10.0,
        gt=0.0,
        description="Catalog API request timeout in seconds",
    )
    page_size: int = Field(
        default=10,
        ge=1,
        description="Products requested per page in All mode",
    )

    # =========================================================================
    # Cache
    # =========================================================================
    cache_ttl_seconds: float = Field(
        default=24 * 60 * 60,
        gt=0.0,
        description="Time-to-live for cached catalog responses",
    )
    cache_key_prefix: str = Field(
        default="@ProductsCache_",
        description="Prefix applied to every cache key in the key-value store",
    )

    # =========================================================================
    # Search
    # =========================================================================
    search_debounce_seconds: float = Field(
        default=0.5,
        ge=0.0,
        description="Quiet window before a typed search query is sent",
    )

    # =========================================================================
    # Key-value storage
    # =========================================================================
    storage_backend: Literal["memory", "file"] = Field(
        default="file",
        description="Key-value store backend for cache and persisted state",
    )
    local_storage_root: str = Field(
        default="./local_storage",
        description="Root directory for the file-backed key-value store",
    )

    # =========================================================================
    # Persisted state
    # =========================================================================
    persist_key: str = Field(
        default="persist:root",
        description="Storage key for the persisted products partition",
    )
    persist_version: int = Field(
        default=1,
        ge=1,
        description="Schema version of the persisted products partition",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def storage_path(self) -> str:
        """Directory used by the file-backed store."""
        return f"{self.local_storage_root.rstrip('/')}/kv"

    # =========================================================================
    # Logging
    # =========================================================================
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_json: bool = Field(
        default=True,
        description="Output logs as JSON",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Singleton instance for convenience
settings = get_settings()
