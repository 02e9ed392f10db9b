"""Application configuration using Pydantic Settings.

This module centralizes all configuration values that may vary between environments.
Values can be overridden via environment variables or .env file.
"""
from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # ===== Database =====
    DATABASE_URL: str = "sqlite:///./ratings.db"
    DATABASE_ECHO: bool = False
    # In-memory repositories unless explicitly switched to the database
    USE_DB_REPOS: bool = False

    # ===== Redis Sessions =====
    REDIS_SESSION_ENABLED: bool = False
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 4
    REDIS_PASSWORD: Optional[str] = None
    REDIS_SOCKET_TIMEOUT_SECONDS: int = 5
    SESSION_TTL_SECONDS: int = 86400  # 1 day
    SESSION_COOKIE_NAME: str = "rating_session"
    # Upper bound of sessions held in memory when Redis is disabled
    SESSION_MEMORY_MAX_ENTRIES: int = 10000

    # ===== HTTP =====
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # ===== Admin =====
    ADMIN_KEY: Optional[str] = None

    # ===== Rating Defaults (in-memory registry) =====
    DEFAULT_RATING_MAX: float = 5.0
    DEFAULT_RATING_HALF: bool = False
    DEFAULT_RATING_SORTABLE: bool = True

    # ===== Logging =====
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = True
        # Allow extra fields from .env that aren't defined here
        extra = "ignore"

    def get_redis_url(self) -> str:
        """Get Redis session connection URL."""
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache to ensure singleton pattern - settings are loaded once.
    """
    return Settings()


# Global settings instance for easy import
settings = get_settings()
