"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file

Rate limit variables keep the names used by existing deployments
(RATELIMIT, RATELIMIT_BLOCK_TIME, RATELIMIT_REDIS_URL, ...). Durations are
configured in milliseconds.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


def _build_rate_limit_settings() -> "RateLimitSettings":
    """Build rate limit settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    However, static type checkers often treat required fields as required
    constructor arguments, which is not how BaseSettings is intended to be used.
    """

    return RateLimitSettings()  # type: ignore[call-arg]


def _build_store_settings() -> "StoreSettings":
    """Build state store settings from environment."""

    return StoreSettings()  # type: ignore[call-arg]


def _build_server_settings() -> "ServerSettings":
    return ServerSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    return LogSettings()  # type: ignore[call-arg]


class RateLimitSettings(BaseSettings):
    """Rate decision engine configuration."""

    enabled: bool = Field(
        True,
        description="Enable rate limiting on protected routes",
    )
    default_limit: int = Field(
        10,
        description="Requests allowed per identity when no token override applies",
        ge=1,
        validation_alias=AliasChoices("RATELIMIT", "RATELIMIT_DEFAULT_LIMIT"),
    )
    cleanup_interval_ms: int = Field(
        0,
        description="Period of the counter cleanup sweep in milliseconds (0 disables it)",
        ge=0,
        validation_alias=AliasChoices("RATELIMIT_CLEANUP_INTERVAL", "RATELIMIT_CLEANUP_INTERVAL_MS"),
    )
    block_time_ms: int = Field(
        300_000,
        description="How long an identity stays blocked after exceeding its budget, in milliseconds",
        ge=0,
        validation_alias=AliasChoices("RATELIMIT_BLOCK_TIME", "RATELIMIT_BLOCK_TIME_MS"),
    )
    token_list: str = Field(
        "",
        description="Comma-separated token budgets; each value N defines token 'Token<N>'",
    )
    token_header: str = Field(
        "API_KEY",
        description="Request header carrying the client token",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATELIMIT_",
        case_sensitive=False,
        populate_by_name=True,
    )

    @property
    def cleanup_interval_seconds(self) -> float:
        return self.cleanup_interval_ms / 1000

    @property
    def block_duration_seconds(self) -> float:
        return self.block_time_ms / 1000


class StoreSettings(BaseSettings):
    """State store backend configuration.

    The Redis URL accepts either a bare ``host:port`` address or a full
    ``redis://`` URL.
    """

    store_backend: str = Field(
        "redis",
        description="State store backend (redis or memory)",
    )
    redis_url: str = Field(
        "localhost:6379",
        description="Redis address (host:port or redis:// URL)",
    )
    redis_password: str | None = Field(
        None,
        description="Redis password",
    )
    redis_db: int = Field(
        0,
        description="Redis logical database number",
        ge=0,
    )
    redis_socket_timeout: float = Field(
        5.0,
        description="Redis connect/read timeout in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="RATELIMIT_",
        case_sensitive=False,
    )


class ServerSettings(BaseSettings):
    """HTTP server bind configuration."""

    host: str = Field("0.0.0.0", description="Interface to bind")
    port: int = Field(8080, description="Port to listen on", ge=1, le=65535)

    model_config = SettingsConfigDict(
        env_prefix="RATELIMIT_HTTP_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format (json or plain)")
    output: str = Field("stdout", description="Log output (stdout or file)")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10_485_760,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Number of rotated log files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are invalid.
    """

    app_env: str = APP_ENV
    rate_limit: RateLimitSettings = Field(default_factory=_build_rate_limit_settings)
    store: StoreSettings = Field(default_factory=_build_store_settings)
    server: ServerSettings = Field(default_factory=_build_server_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
