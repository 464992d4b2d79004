"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field, field_validator
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

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    port: int = Field(
        5555,
        description="Port the HTTP server listens on",
    )
    cors_origins: str = Field(
        "*",
        description="Comma-separated list of allowed CORS origins",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


class RateLimitSettings(BaseSettings):
    """Throttling configuration shared by every rate limiting strategy."""

    enabled: bool = Field(
        True,
        description="Enable per-client rate limiting on analytics endpoints",
    )
    capacity: int = Field(
        15,
        description="Maximum number of requests allowed per window (per client)",
        ge=1,
    )
    window_ms: int = Field(
        60_000,
        description="Rate limit window size in milliseconds",
        ge=1,
    )
    default_strategy: str = Field(
        "2",
        description="Strategy used when the api query parameter is absent or unknown",
    )
    trust_forwarded_headers: bool = Field(
        False,
        description="Derive the client identity from forwarding headers set by a trusted proxy",
    )
    forwarded_headers: str = Field(
        "X-Forwarded-For,X-Real-IP",
        description="Comma-separated forwarding headers, inspected in order",
    )
    legacy_remaining_header: bool = Field(
        False,
        description="Report the fixed legacy X-RateLimit-Remaining value on the sliding log fast path",
    )
    state_ttl_multiplier: int = Field(
        2,
        description="Per-client state expires after this many windows of inactivity (0 disables)",
        ge=0,
    )
    include_reset_header: bool = Field(
        True,
        description="Include X-RateLimit-Reset when the strategy knows the reset instant",
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )

    @field_validator("default_strategy")
    @classmethod
    def _known_strategy(cls, value: str) -> str:
        if value not in {"1", "2", "3"}:
            raise ValueError("default_strategy must be one of '1', '2', '3'")
        return value

    @property
    def forwarded_header_list(self) -> list[str]:
        return [h.strip() for h in self.forwarded_headers.split(",") if h.strip()]

    @property
    def state_ttl_ms(self) -> int | None:
        if self.state_ttl_multiplier == 0:
            return None
        return self.window_ms * self.state_ttl_multiplier


class RedisSettings(BaseSettings):
    """Shared counter store (Redis) connection configuration."""

    url: str | None = Field(
        None,
        description="Full redis:// URL; takes precedence over host/port/password",
    )
    host: str = Field(
        "localhost",
        description="Redis host",
    )
    port: int = Field(
        6379,
        description="Redis port",
    )
    password: str | None = Field(
        None,
        description="Redis password",
    )
    db: int = Field(
        0,
        description="Redis logical database",
    )
    max_connections: int = Field(
        50,
        description="Upper bound of the process-wide connection pool",
        ge=1,
    )
    socket_timeout_seconds: float | None = Field(
        None,
        description="Socket timeout for store commands (unset means wait indefinitely)",
    )

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        case_sensitive=False,
    )

    @property
    def dsn(self) -> str:
        if self.url:
            return self.url
        auth = f":{self.password}@" if self.password else ""
        return f"redis://{auth}{self.host}:{self.port}/{self.db}"


class DatabaseSettings(BaseSettings):
    """Relational store configuration, read from the libpq environment variables."""

    url: str | None = Field(
        None,
        validation_alias="DATABASE_URL",
        description="SQLAlchemy URL; takes precedence over the PG* variables",
    )
    host: str = Field("localhost", validation_alias="PGHOST")
    port: int = Field(5432, validation_alias="PGPORT")
    user: str = Field("postgres", validation_alias="PGUSER")
    password: str | None = Field(None, validation_alias="PGPASSWORD")
    database: str = Field("postgres", validation_alias="PGDATABASE")
    pool_size: int = Field(5, validation_alias="DB_POOL_SIZE", ge=1)

    model_config = SettingsConfigDict(
        case_sensitive=False,
        populate_by_name=True,
    )

    @property
    def dsn(self) -> str:
        if self.url:
            return self.url
        auth = self.user if not self.password else f"{self.user}:{self.password}"
        return f"postgresql+asyncpg://{auth}@{self.host}:{self.port}/{self.database}"


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="json or plain")
    output: str = Field("stdout", description="stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(0, description="Rotate the log file after this many bytes (0 disables)")
    backup_count: int = Field(3, description="Number of rotated log files to keep")
    request_id_header: str = Field("X-Request-ID", description="Correlation header name")

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
