"""Root test configuration."""

import logging
from datetime import datetime, timezone

import pytest
import structlog

from rds_exporter.aws.rds import DBInstance


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


RESTORABLE_AT = datetime(2024, 3, 1, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def make_instance():
    """Factory for DBInstance records with sensible defaults."""

    def _make(identifier: str = "db-1", **overrides) -> DBInstance:
        fields = {
            "identifier": identifier,
            "instance_class": "db.t2.small",
            "allocated_storage": 20,
            "storage_encrypted": True,
            "publicly_accessible": False,
            "status": "available",
            "engine": "mysql",
            "engine_version": "5.7.44",
            "latest_restorable_time": RESTORABLE_AT,
            "parameter_groups": ("default",),
        }
        fields.update(overrides)
        return DBInstance(**fields)

    return _make
