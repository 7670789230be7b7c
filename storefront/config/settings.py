"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management using Pydantic Settings.

A single cached Settings instance is shared by the application; tests
build their own instances or clear the cache.

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

Blob Store Backends:
-------------------
- cloudinary: unsigned upload with an upload preset, returns secure_url
- local: files written under MEDIA_DIRECTORY, served from MEDIA_URL

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Module logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the application
        app_env: Environment mode (development/staging/production)
        debug: Enable debug mode for verbose logging
        host: Server bind address
        port: Server port number
        database_url: SQLAlchemy URL of the catalog document store
        blob_backend: Image storage backend (cloudinary/local)
        cloudinary_cloud_name: Cloudinary cloud used for uploads
        cloudinary_upload_preset: Unsigned upload preset identifier
        upload_timeout_seconds: HTTP timeout for blob uploads
        media_directory: Root directory of the local blob store
        media_url: Public URL prefix of the local blob store
        max_upload_bytes: Largest accepted image file
        excerpt_max_length: Longest accepted product description
        categories: Comma separated storefront categories
        cors_origins: Allowed CORS origins (JSON array string)
        seed_demo_data: Insert demo products into an empty catalog
    """

    # =========================================================================
    # PYDANTIC SETTINGS CONFIGURATION
    # =========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="Storefront API",
        description="Display name for the application"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode for verbose logging"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(
        default="0.0.0.0",
        description="Server bind address"
    )

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # =========================================================================
    # CATALOG STORE SETTINGS
    # =========================================================================
    database_url: str = Field(
        default="sqlite:///./storage/db/catalog.db",
        description="SQLAlchemy URL of the catalog document store"
    )

    # =========================================================================
    # BLOB STORE SETTINGS
    # =========================================================================
    blob_backend: str = Field(
        default="local",
        description="Image storage backend: cloudinary or local"
    )

    cloudinary_cloud_name: str = Field(
        default="demo",
        description="Cloudinary cloud name"
    )

    cloudinary_upload_preset: str = Field(
        default="storefront_preset",
        description="Unsigned upload preset identifier"
    )

    upload_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        le=300,
        description="HTTP timeout for blob uploads"
    )

    media_directory: str = Field(
        default="storage/media",
        description="Root directory of the local blob store"
    )

    media_url: str = Field(
        default="/media",
        description="Public URL prefix of the local blob store"
    )

    max_upload_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=1,
        description="Largest accepted image file in bytes"
    )

    # =========================================================================
    # CATALOG SETTINGS
    # =========================================================================
    excerpt_max_length: int = Field(
        default=500,
        ge=1,
        le=5000,
        description="Longest accepted product description"
    )

    categories: str = Field(
        default="electronics,clothing,home,books,sports",
        description="Comma separated storefront categories"
    )

    seed_demo_data: bool = Field(
        default=False,
        description="Insert demo products when the catalog is empty"
    )

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: str = Field(
        default='["*"]',
        description="Allowed CORS origins as JSON array string"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, value: str) -> str:
        """
        Validate and normalize application environment.

        Unknown values fall back to 'development'.
        """
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("blob_backend")
    @classmethod
    def validate_blob_backend(cls, value: str) -> str:
        """
        Validate the blob store backend name.

        Raises:
            ValueError: If backend is not supported
        """
        supported = {"cloudinary", "local"}
        normalized = value.lower().strip()

        if normalized not in supported:
            raise ValueError(
                f"Unsupported blob backend: {value}. "
                f"Supported: {', '.join(sorted(supported))}"
            )

        return normalized

    @field_validator("media_url")
    @classmethod
    def strip_media_url(cls, value: str) -> str:
        return value.rstrip("/") or "/media"

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def media_path(self) -> Path:
        """Local blob store directory as Path object."""
        return Path(self.media_directory)

    @property
    def category_list(self) -> List[str]:
        """Parse the configured categories into a list."""
        return [c.strip().lower() for c in self.categories.split(",") if c.strip()]

    @property
    def cloudinary_upload_url(self) -> str:
        """Unsigned image upload endpoint for the configured cloud."""
        return (
            f"https://api.cloudinary.com/v1_1/"
            f"{self.cloudinary_cloud_name}/image/upload"
        )

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS origins from JSON string to list.

        Returns:
            List of allowed origin strings
        """
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
            return ["*"]
        except json.JSONDecodeError:
            logger.warning(
                f"Invalid CORS origins JSON: {self.cors_origins}, "
                "defaulting to ['*']"
            )
            return ["*"]

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================
    def get_database_path(self) -> Optional[Path]:
        """
        Extract database file path for SQLite databases.

        Returns:
            Path to database file, or None for in-memory/non-SQLite databases
        """
        if self.database_url.startswith("sqlite:///"):
            db_path = self.database_url.replace("sqlite:///", "")
            if not db_path or db_path == ":memory:":
                return None
            if db_path.startswith("./"):
                db_path = db_path[2:]
            return Path(db_path)
        return None

    def ensure_directories(self) -> None:
        """
        Create all required directories.

        Creates:
        - Media directory (local blob store)
        - Database directory (for SQLite)
        """
        if self.blob_backend == "local":
            self.media_path.mkdir(parents=True, exist_ok=True)

        db_path = self.get_database_path()
        if db_path:
            db_path.parent.mkdir(parents=True, exist_ok=True)

        logger.debug("Required directories created/verified")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"blob_backend={self.blob_backend!r}, "
            f"debug={self.debug})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance.

    Returns:
        Cached Settings instance
    """
    settings = Settings()
    settings.ensure_directories()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings
