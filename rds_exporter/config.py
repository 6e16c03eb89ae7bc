"""
Exporter settings using Pydantic.

Provides environment-based configuration loading with RDS_EXPORTER_ prefix.
Command-line flags in app.py override individual fields.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rds_exporter.aws.client import DEFAULT_MAX_ATTEMPTS
from rds_exporter.core.errors import ConfigurationError
from rds_exporter.services.collector import DEFAULT_MAX_PAGES
from rds_exporter.services.metrics import DEFAULT_NAMESPACE


class ExporterSettings(BaseSettings):
    """Exporter settings."""

    model_config = SettingsConfigDict(env_prefix="RDS_EXPORTER_")

    # AWS (regions as a JSON list in the environment)
    regions: list[str] = Field(default_factory=lambda: ["us-east-1"], min_length=1)
    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1)

    # Collection
    namespace: str = DEFAULT_NAMESPACE
    max_pages: int = Field(default=DEFAULT_MAX_PAGES, ge=0)
    page_size: int | None = Field(default=None, ge=20, le=100)
    max_connections_file: Path | None = None

    # HTTP
    listen_address: str = "0.0.0.0"
    listen_port: int = Field(default=9687, ge=1, le=65535)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


def load_settings(**overrides: Any) -> ExporterSettings:
    """Load settings from the environment, applying non-None overrides.

    Args:
        **overrides: Field values taking precedence over the environment

    Returns:
        Validated ExporterSettings

    Raises:
        ConfigurationError: If any value fails validation
    """
    values = {k: v for k, v in overrides.items() if v is not None}
    try:
        return ExporterSettings(**values)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid exporter configuration: {e}",
            details={"errors": e.errors()},
        ) from e
