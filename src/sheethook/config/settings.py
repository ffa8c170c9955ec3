"""
Module: settings.py
Description: Application configuration using pydantic-settings.

Loads relay settings from environment variables with validation and
defaults. Supports .env files for local development.

Key Components:
- Settings: endpoint, secret and delivery pacing options
- load_settings(): build Settings, failing with ConfigurationError
"""

from typing import Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sheethook.errors import ConfigurationError


class Settings(BaseSettings):
    """Relay settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="Sheet Webhook Relay", description="Application name")
    app_version: str = Field(default="0.3.0", description="Application version")
    log_level: str = Field(default="INFO", description="Logging level")

    # Endpoint settings
    webhook_endpoint: str = Field(
        ...,
        description="URL that receives signed change payloads"
    )
    webhook_secret: str = Field(
        ...,
        description="Shared secret used to sign payloads"
    )

    # Change detection
    watched_column: Optional[int] = Field(
        default=None,
        ge=1,
        description="1-based column whose edits are relayed (unset = last column)"
    )

    # Delivery settings
    max_attempts: int = Field(
        default=3,
        ge=1,
        description="Delivery attempts per payload"
    )
    base_delay_ms: int = Field(
        default=1000,
        ge=0,
        description="Delay unit between attempts; attempt N waits N times this"
    )
    pacing_interval_ms: int = Field(
        default=5000,
        ge=0,
        description="Pause between consecutive payload deliveries"
    )
    delivery_timeout: float = Field(
        default=5.0,
        gt=0,
        le=60,
        description="HTTP timeout in seconds for each delivery attempt"
    )

    @field_validator('webhook_endpoint')
    @classmethod
    def validate_webhook_endpoint(cls, v: str) -> str:
        """Validate endpoint is an HTTP(S) URL."""
        v = v.strip()
        if not v:
            raise ValueError("webhook_endpoint must be a non-empty string")
        if not v.startswith(('http://', 'https://')):
            raise ValueError("webhook_endpoint must be a valid HTTP/HTTPS URL")
        return v

    @field_validator('webhook_secret')
    @classmethod
    def validate_webhook_secret(cls, v: str) -> str:
        """Reject empty or whitespace-only secrets."""
        if not v or not v.strip():
            raise ValueError("webhook_secret must be a non-empty string")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @property
    def base_delay_seconds(self) -> float:
        return self.base_delay_ms / 1000.0

    @property
    def pacing_interval_seconds(self) -> float:
        return self.pacing_interval_ms / 1000.0


def load_settings(**overrides) -> Settings:
    """
    Load settings from the environment, applying keyword overrides.

    Args:
        **overrides: Field values taking precedence over the environment

    Returns:
        Validated Settings instance

    Raises:
        ConfigurationError: If any setting is missing or invalid
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from e
