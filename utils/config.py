"""
Configuration Utility - Environment Variables Management

Centralized configuration loading from .env files using pydantic-settings.
Type-safe access to all environment variables with validation.

Usage:
    from utils.config import settings

    api_url = settings.SCORES_API_URL
    redis_url = settings.REDIS_URL
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Scores API Configuration
    SCORES_API_URL: str = Field(default="https://osu.ppy.sh/api/v2/scores")
    API_TOKEN: Optional[str] = Field(default=None)
    API_TIMEOUT: int = Field(default=30)
    FETCH_MAX_RETRIES: int = Field(default=3)
    MAX_BODY_BYTES: int = Field(default=16 * 1024 * 1024)

    # Scheduler Configuration
    FETCH_INTERVAL_SECONDS: int = Field(default=60)

    # Relay State
    STATE_DIR: str = Field(default="/app/data/state")
    CURSOR_FILE: str = Field(default="cursor.json")
    RETAINED_SCORES: int = Field(default=10_000)

    # Redis Configuration
    REDIS_URL: str = Field(default="redis://redis:6379/0")
    REDIS_MAX_CONNECTIONS: int = Field(default=10)
    REDIS_CHANNEL_SCORES: str = Field(default="scores.raw")
    REDIS_CHANNEL_EVENTS: str = Field(default="scores.events")

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")

    # Application Metadata
    ENVIRONMENT: str = Field(default="production")
    APP_NAME: str = Field(default="score-relay")
    APP_VERSION: str = Field(default="0.1.0")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    @property
    def cursor_path(self) -> str:
        return f"{self.STATE_DIR}/{self.CURSOR_FILE}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Singleton Settings instance
    """
    return Settings()


# Global settings instance
settings = get_settings()
