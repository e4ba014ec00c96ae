"""
Configuration settings for PickLock.
Uses pydantic-settings for environment variable management.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Default safety cap on search work for a single analysis.
DEFAULT_MAX_ITERATIONS = 1000

# Hard ceiling accepted for any iteration cap.
MAX_ITERATIONS_CEILING = 99_999_999_999_999

# Candidate bit-size offsets absorbing rounding in bits(n) ~ bits(p) + bits(q).
BIT_OFFSETS = (0, 1, 2)

# Progress is reported after this many distinct candidates.
REPORT_EVERY = 25


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PICKLOCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "PickLock"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = Field(default="production", description="development/staging/production")

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Search
    max_iterations: int = Field(
        default=DEFAULT_MAX_ITERATIONS,
        ge=0,
        le=MAX_ITERATIONS_CEILING,
        description="Cap on Fermat steps or distinct candidate primes examined"
    )
    report: bool = Field(
        default=False,
        description="Print a progress table during the concurrent search"
    )
    workers_per_offset: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Candidate generator threads started per bit offset"
    )
    search_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Optional wall-clock ceiling for the concurrent search"
    )

    # Monitoring
    enable_metrics: bool = True
    metrics_path: str = "/metrics"

    # Logging
    log_level: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
