"""Configuration settings using Pydantic Settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = "sqlite+aiosqlite:///./mailboxes.db"

    # Retention (0 disables the scanner)
    retention_period_minutes: int = 0
    retention_sleep_millis: int = 50

    # Metrics history
    metrics_history_size: int = 50
    metrics_sample_seconds: float = 60.0

    # Logging
    log_level: str = "INFO"

    @field_validator("retention_period_minutes", "retention_sleep_millis")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("must be >= 0")
        return v

    @field_validator("metrics_history_size", "metrics_sample_seconds")
    @classmethod
    def _positive(cls, v):
        if v <= 0:
            raise ValueError("must be > 0")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def async_database_url(self) -> str:
        """Database URL with the async driver selected."""
        return self.database_url.replace("postgresql://", "postgresql+asyncpg://")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
