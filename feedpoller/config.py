"""
Configuration management for the feed poller.

This module uses pydantic-settings to manage all configuration aspects including:
- Polling intervals, cooldowns and pacing
- Storage backend selection
- The read-side HTTP API
- Logging and metrics

Configuration is loaded from environment variables or a .env file.
"""
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Log levels supported by the application."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class SelectionPolicyType(str, Enum):
    """Which parsed posts a successful poll persists."""
    FIRST = "first"
    ALL_UNSEEN = "all_unseen"


class StorageBackend(str, Enum):
    """Storage backends supported by the poller."""
    MEMORY = "memory"
    POSTGRES = "postgres"


class PollerConfig(BaseModel):
    """Configuration for the polling loop."""
    min_interval_minutes: float = 15
    rate_limit_cooldown_seconds: float = 60
    pacing_delay_seconds: float = 60
    request_timeout_seconds: float = 10
    selection_policy: SelectionPolicyType = SelectionPolicyType.FIRST

    pace_skipped_feeds: bool = False
    """Apply the pacing delay to feeds that were skipped as not yet due."""

    advance_checkpoint_on_empty: bool = True
    """Advance the checkpoint when a feed parses successfully but yields no posts."""

    feed_list_retry_seconds: float = 0
    """Wait before retrying after the feed list could not be loaded."""

    idle_pass_delay_seconds: float = 1
    """Wait after a pass in which no feed was due."""

    user_agent: str = "feed-poller/0.1.0"

    @model_validator(mode="after")
    def _non_negative(self) -> "PollerConfig":
        for name in (
            "min_interval_minutes",
            "rate_limit_cooldown_seconds",
            "pacing_delay_seconds",
            "feed_list_retry_seconds",
            "idle_pass_delay_seconds",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
        if self.request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return self


class StorageConfig(BaseModel):
    """Configuration for the feed and post store."""
    backend: StorageBackend = StorageBackend.MEMORY
    postgres_dsn: Optional[SecretStr] = None
    pool_min_size: int = 1
    pool_max_size: int = 5
    command_timeout: int = 30

    @model_validator(mode="after")
    def _require_dsn(self) -> "StorageConfig":
        """A DSN is mandatory for the PostgreSQL backend."""
        if self.backend == StorageBackend.POSTGRES and not self.postgres_dsn:
            raise ValueError("postgres_dsn is required when using the postgres backend")
        return self


class ApiConfig(BaseModel):
    """Configuration for the read-side HTTP API."""
    enabled: bool = True
    host: str = "0.0.0.0"
    port: int = 5000
    default_page_size: int = 10
    max_page_size: int = 100

    @field_validator("default_page_size", "max_page_size")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("page sizes must be positive")
        return v


class MetricsConfig(BaseModel):
    """Configuration for metrics and logging."""
    prometheus_enabled: bool = False
    prometheus_port: int = 8000
    log_level: LogLevel = LogLevel.INFO
    structured_logging: bool = True


class Settings(BaseSettings):
    """Main settings class for the feed poller."""
    # Application metadata
    app_name: str = "feed-poller"
    version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT

    # Component configurations
    poller: PollerConfig = Field(default_factory=PollerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )


def load_settings() -> Settings:
    """Load settings from environment variables and .env file."""
    return Settings()
