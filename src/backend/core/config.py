"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables or a local .env file.
"""

from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "ThisOrThat"
    APP_ENV: str = "development"
    DEBUG: bool = False
    SECRET_KEY: str = ""  # Required - loaded from environment

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_required_secrets(cls, v: str, info: Any) -> str:
        """Validate that required secrets are set."""
        if not v:
            raise ValueError(f"{info.field_name} must be set in environment")
        return v

    # Ledger store
    # "memory" keeps everything in process (local runs, tests),
    # "sql" uses DATABASE_URL through SQLAlchemy async.
    LEDGER_BACKEND: str = "sql"
    DATABASE_URL: str = "sqlite+aiosqlite:///./thisorthat.db"
    DATABASE_ECHO: bool = False

    @field_validator("LEDGER_BACKEND")
    @classmethod
    def validate_ledger_backend(cls, v: str) -> str:
        """Only the in-memory and SQL ledgers exist."""
        if v not in ("memory", "sql"):
            raise ValueError("LEDGER_BACKEND must be 'memory' or 'sql'")
        return v

    # Optimistic transaction retries
    TRANSACTION_MAX_ATTEMPTS: int = 5
    TRANSACTION_RETRY_BASE_DELAY: float = 0.01  # seconds, doubled per attempt

    # Authentication
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 30

    # CORS - stored as comma-separated string to avoid pydantic-settings JSON parsing issues
    CORS_ORIGINS: str = "http://localhost:8081"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        import json

        try:
            return json.loads(self.CORS_ORIGINS)
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    # Game rules
    STARTING_SCORE: int = 3
    QUESTION_CREATION_COST: int = 3
    DAILY_QUESTION_LIMIT: int = 5

    # Paging
    QUESTIONS_PAGE_SIZE: int = 20
    HISTORY_PAGE_SIZE: int = 50
    LEADERBOARD_SIZE: int = 50
    MAX_PAGE_SIZE: int = 100


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
