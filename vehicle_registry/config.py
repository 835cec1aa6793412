"""
Configuration module for the vehicle registry service.

This module provides centralized configuration management using Pydantic settings.
All configuration values can be overridden via environment variables or .env file.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings for the vehicle registry service.

    Attributes:
        APP_NAME: Display name for the service
        VERSION: Service version reported by the API
        DEBUG: Enable debug mode (human-readable logs, API docs)
        HOST: Server bind address
        PORT: Server port number
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_JSON: Emit JSON logs instead of console output
        STORAGE_BACKEND: Repository implementation ("memory" or "sql")
        DATABASE_URL: SQLAlchemy URL used by the "sql" backend
        SLOW_QUERY_THRESHOLD_MS: Queries slower than this are logged
        CORS_ORIGINS: Comma-separated list of allowed origins
        RESTRICT_COLORS: Only accept colors from the fixed palette
    """

    APP_NAME: str = Field(
        default="Vehicle Registry Service",
        description="Display name for the service",
    )
    VERSION: str = Field(default="1.0.0", description="Service version")
    DEBUG: bool = Field(default=False, description="Enable debug mode")

    # Server configuration
    HOST: str = Field(default="0.0.0.0", description="Server bind address")
    PORT: int = Field(default=8000, ge=1, le=65535, description="Server port number")

    # Logging configuration
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    LOG_JSON: bool = Field(default=True, description="Render logs as JSON")

    # Storage configuration
    STORAGE_BACKEND: Literal["memory", "sql"] = Field(
        default="memory",
        description="Vehicle repository implementation",
    )
    DATABASE_URL: str = Field(
        default="sqlite:///./vehicles.db",
        description="Database URL for the sql storage backend",
    )
    SLOW_QUERY_THRESHOLD_MS: int = Field(
        default=100,
        ge=0,
        description="Log queries slower than this many milliseconds",
    )

    CORS_ORIGINS: str = Field(default="*", description="Allowed CORS origins")
    RESTRICT_COLORS: bool = Field(
        default=False,
        description="Reject colors outside the fixed palette",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("STORAGE_BACKEND", mode="before")
    @classmethod
    def normalize_backend(cls, value: str) -> str:
        """Accept the backend name in any case."""
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("DATABASE_URL")
    @classmethod
    def validate_database_url(cls, value: str) -> str:
        """
        Validate that the database URL is usable.

        Raises:
            ValueError: If URL is empty
        """
        value = value.strip()
        if not value:
            raise ValueError("DATABASE_URL cannot be empty")
        return value

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
