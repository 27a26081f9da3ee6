"""Configuration management using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseConfig(BaseSettings):
    """Database connection configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    url: str = Field(..., description="Async SQLAlchemy connection URL")
    pool_size: int = Field(default=5, description="Database connection pool size")


class ProviderConfig(BaseSettings):
    """Upstream results provider configuration."""

    model_config = SettingsConfigDict(
        env_prefix="PROVIDER_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    base_url: str = Field(
        default="https://api.casinoscores.com", description="Base URL of the results provider"
    )
    request_timeout: int = Field(default=30, description="Request timeout in seconds")
    user_agent: str = Field(
        default="casino-tracker/1.0", description="User-Agent header sent to the provider"
    )
    page_size: int = Field(default=25, description="Results requested per game per cycle")
    sort: str = Field(
        default="data.settledAt,desc", description="Sort order passed to the results endpoint"
    )


class SyncConfig(BaseSettings):
    """Periodic result sync configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SYNC_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    interval_seconds: int = Field(default=60, description="Seconds between sync cycles")
    run_on_start: bool = Field(
        default=True, description="Run one cycle immediately when the scheduler starts"
    )
    max_concurrent_games: int | None = Field(
        default=None,
        description="Maximum games fetched concurrently within a cycle (unset = unlimited)",
    )
    max_overlapping_cycles: int = Field(
        default=3,
        description="Maximum sync cycles allowed in flight at once when a cycle runs long",
    )


class MediaConfig(BaseSettings):
    """Stream clip and thumbnail URL configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MEDIA_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    base_url: str = Field(
        default="https://media.groundsplatform.com/streamer",
        description="Base URL for round clips and thumbnails",
    )


class StatsConfig(BaseSettings):
    """Statistics and leaderboard parameters."""

    model_config = SettingsConfigDict(
        env_prefix="STATS_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    big_win_min_multiplier: float = Field(
        default=50, description="Minimum max multiplier for a round to count as a big win"
    )
    leaderboard_size: int = Field(
        default=5, description="Entries kept in best multiplier / best win leaderboards"
    )
    biggest_wins_default_size: int = Field(
        default=4, description="Biggest wins returned when no size is requested"
    )
    biggest_wins_max_size: int = Field(default=10, description="Hard cap on biggest wins size")
    biggest_wins_default_duration: int = Field(
        default=1, description="Biggest wins lookback window in hours"
    )


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    level: str = Field(default="INFO", description="Logging level")
    file: str = Field(default="logs/showtrack.log", description="Log file path")


class Settings(BaseSettings):
    """
    Composed application settings loaded from environment variables.

    Example usage:
        settings = get_settings()
        db_url = settings.database.url
        interval = settings.sync.interval_seconds
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    media: MediaConfig = Field(default_factory=MediaConfig)
    stats: StatsConfig = Field(default_factory=StatsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""
    return Settings()  # type: ignore[call-arg]


def reset_settings_cache() -> None:
    """Clear cached settings; primarily for testing overrides."""
    get_settings.cache_clear()
