"""Configuration models for Species Hub.

This module contains all configuration-related Pydantic models used throughout the application.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_SESSION_SECRET = "change-me-before-deploying"


class LoggingConfig(BaseModel):
    """Structlog-based logging configuration."""

    level: str = "INFO"
    json_logs: bool | None = None  # None = auto-detect based on environment
    include_caller: bool = False  # Include file:line info (useful for debugging)
    extra_fields: dict[str, str] = Field(default_factory=lambda: {"service": "specieshub"})

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level name."""
        if v.upper() not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level '{v}'.")
        return v.upper()


class SessionConfig(BaseModel):
    """Session storage settings for signed-in accounts."""

    backend: Literal["cookie", "redis"] = "cookie"
    secret_key: str = DEFAULT_SESSION_SECRET  # Signs cookie-store sessions
    redis_url: str = "redis://127.0.0.1:6379/0"
    cookie_name: str = "specieshub_session"
    lifetime_seconds: int = Field(default=14 * 24 * 3600, ge=0)  # 0 = browser session
    https_only: bool = False


class SpeedChartConfig(BaseModel):
    """Where the species-speed chart reads its CSV from."""

    # Either an http(s) URL or a path relative to the static directory
    csv_source: str = "sample_animals.csv"
    fetch_timeout_seconds: float = Field(default=10.0, gt=0)


class SpeciesHubConfig(BaseModel):
    """Configuration settings for the Species Hub application."""

    config_version: str = "1.0.0"

    site_name: str = "Species Hub"

    # Rows with id <= this value are seed data and cannot be edited (0 disables)
    locked_species_through_id: int = Field(default=0, ge=0)

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    speed_chart: SpeedChartConfig = Field(default_factory=SpeedChartConfig)
