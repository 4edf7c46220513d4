"""Centralized configuration management using pydantic-settings.

Configuration is loaded from environment variables with sensible defaults.
All settings can be overridden via environment variables or a .env file.
"""

from decimal import Decimal
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(str, Enum):
    """Log level options."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Override via environment variables (prefixed with HHL_) or .env file.

    Examples:
        HHL_LOG_LEVEL=DEBUG
        HHL_LOG_FORMAT=json
        HHL_MAX_REBALANCE_ITERATIONS=20
    """

    model_config = SettingsConfigDict(
        env_prefix="HHL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Household Ledger"
    app_version: str = "0.1.0"
    environment: Environment = Environment.DEVELOPMENT

    # Logging
    log_level: LogLevel = LogLevel.WARNING
    log_format: Literal["json", "console"] | None = Field(
        default=None,
        validate_default=True,
        description="Log output format: 'json' for production, 'console' for development",
    )
    log_file: Path | None = Field(default=None, description="Optional log file path")

    # Unit method
    allocation_tolerance: Decimal = Field(
        default=Decimal("0.01"),
        gt=0,
        description="Largest acceptable gap between the sum of shares and the core total",
    )
    max_rebalance_iterations: int = Field(default=10, ge=1, le=100)

    # Vision and buffers
    core_estimate_base: Decimal = Field(
        default=Decimal("2000"),
        ge=0,
        description="Base monthly amount used to approximate core spend",
    )
    core_estimate_adult_factor: Decimal = Field(default=Decimal("0.8"), ge=0)
    core_estimate_child_factor: Decimal = Field(default=Decimal("0.4"), ge=0)
    long_horizon_months: int = Field(
        default=24,
        ge=1,
        description="Funds needing more months than this get an acceleration recommendation",
    )
    accelerated_horizon_months: int = Field(default=18, ge=1)

    @field_validator("log_format", mode="before")
    @classmethod
    def set_log_format_from_environment(cls, v: str | None, info) -> str:
        """Default to JSON logging in production."""
        if not v:
            env = info.data.get("environment")
            return "json" if env == Environment.PRODUCTION else "console"
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
