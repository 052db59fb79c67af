"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Nested BaseSettings don't inherit env_file, so populate os.environ up front
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


def _build_storage_settings() -> "StorageSettings":
    return StorageSettings()  # type: ignore[call-arg]


def _build_link_store_settings() -> "LinkStoreSettings":
    return LinkStoreSettings()  # type: ignore[call-arg]


def _build_app_settings() -> "AppSettings":
    return AppSettings()  # type: ignore[call-arg]


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level (DEBUG, INFO, ...)")
    format: str = Field("json", description="Log format: 'json' or 'plain'")
    output: str = Field("stdout", description="Log output: 'stdout' or 'file'")
    file_path: str | None = Field(
        None,
        description="Log file path when output is 'file' (default logs/app.log)",
    )
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
    )
    backup_count: int = Field(5, description="Number of rotated log files to keep")
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read and echo the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class StorageSettings(BaseSettings):
    """S3-compatible object storage used to presign object URLs."""

    endpoint_url: str | None = Field(
        None,
        description="Storage endpoint, e.g. https://s3.eu-central-1.amazonaws.com",
    )
    bucket: str | None = Field(None, description="Bucket holding user files")
    access_key: str | None = Field(None, description="Access key id")
    secret_key: str | None = Field(None, description="Secret access key")
    region: str | None = Field(
        None,
        description="Bucket region; avoids a region lookup request when set",
    )
    secure: bool | None = Field(
        None,
        description="Force HTTPS on/off (defaults to the endpoint URL scheme)",
    )

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        case_sensitive=False,
    )


class LinkStoreSettings(BaseSettings):
    """Document store holding shared-link records and usage logs."""

    backend: str = Field(
        "firestore",
        description="Record store backend: 'firestore' or 'memory'",
    )
    project_id: str | None = Field(
        None,
        description="Google Cloud project id (defaults to the ambient credentials project)",
    )
    collection: str = Field(
        "sharedFiles",
        description="Collection with one document per share slug",
    )
    usage_collection: str = Field(
        "linkUsage",
        description="Collection receiving one document per shared link access",
    )
    activity_collection: str = Field(
        "activityLogs",
        description="Collection receiving client-reported activity entries",
    )

    model_config = SettingsConfigDict(
        env_prefix="LINKS_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-client rate limiting on public endpoints",
    )
    rate_limit_include_headers: bool = Field(
        True,
        description="Include X-RateLimit-* and Retry-After headers when throttling",
    )
    shared_rate_limit_requests: int = Field(
        60,
        description="Requests allowed per window on the shared-file metadata endpoint",
        ge=1,
    )
    shared_rate_limit_window_ms: int = Field(
        60_000,
        description="Sliding window for the shared-file metadata endpoint, in milliseconds",
        ge=1,
    )
    public_download_rate_limit_requests: int = Field(
        60,
        description="Requests allowed per window on the public download endpoint",
        ge=1,
    )
    public_download_rate_limit_window_ms: int = Field(
        60_000,
        description="Sliding window for the public download endpoint, in milliseconds",
        ge=1,
    )
    queue_log_rate_limit_requests: int = Field(
        60,
        description="Requests allowed per window on the queue activity log endpoint",
        ge=1,
    )
    queue_log_rate_limit_window_ms: int = Field(
        60_000,
        description="Sliding window for the queue activity log endpoint, in milliseconds",
        ge=1,
    )

    download_url_ttl_seconds: int = Field(
        60,
        description="Validity of presigned URLs returned by link resolution",
        ge=1,
    )
    public_download_url_ttl_seconds: int = Field(
        300,
        description="Validity of attachment URLs returned by the public download endpoint",
        ge=1,
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if a setting has an invalid value.
    """

    app_env: str = APP_ENV
    log: LogSettings = Field(default_factory=_build_log_settings)
    storage: StorageSettings = Field(default_factory=_build_storage_settings)
    links: LinkStoreSettings = Field(default_factory=_build_link_store_settings)
    app: AppSettings = Field(default_factory=_build_app_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Nested settings are created via default_factory so env loading works.
settings = Settings()
