"""Exporter exception hierarchy."""

from typing import Any


class ExporterError(Exception):
    """Base exception for RDS exporter errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ExporterError):
    """Raised for invalid settings or a malformed max-connections file."""


class InstanceSourceError(ExporterError):
    """Raised when a DB instance listing call fails."""


class PaginationLimitError(InstanceSourceError):
    """Raised when pagination runs past the configured page ceiling."""
