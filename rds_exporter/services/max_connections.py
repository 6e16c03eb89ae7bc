"""Instance class to max_connections lookup.

RDS does not expose the effective ``max_connections`` value: the default
parameter groups define it as a formula over ``DBInstanceClassMemory``.
This table holds hand-maintained values per instance class and
parameter group name instead.
"""

from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import structlog
import yaml

from rds_exporter.core.errors import ConfigurationError

logger = structlog.get_logger()


# Format: {instance_class: {parameter_group_name: max_connections}}
DEFAULT_MAX_CONNECTIONS = {
    "db.t2.small": {
        "default": 150,
        "default.mysql5.7": 150,
    },
    "db.m5.2xlarge": {
        "default": 3429,
        "default.postgres10": 3429,
        "default.postgres11": 3429,
    },
    "db.m5.large": {
        "default": 823,
        "default.postgres10": 823,
        "default.postgres11": 823,
    },
}


class LookupOutcome(Enum):
    """Result of a two-level table lookup."""
    FOUND = "found"
    UNKNOWN_CLASS = "unknown_class"
    UNKNOWN_PARAMETER_GROUP = "unknown_parameter_group"


class ConnectionLimitTable:
    """Immutable (instance class, parameter group) -> max_connections table."""

    def __init__(self, limits: Mapping[str, Mapping[str, int]]) -> None:
        self._limits = MappingProxyType({
            instance_class: MappingProxyType(dict(groups))
            for instance_class, groups in limits.items()
        })

    @classmethod
    def default(cls) -> "ConnectionLimitTable":
        return cls(DEFAULT_MAX_CONNECTIONS)

    def resolve(self, instance_class: str, parameter_group: str | None) -> tuple[int, LookupOutcome]:
        """Look up the max_connections value and report which level, if any, misses.

        Args:
            instance_class: DB instance class (e.g. 'db.t2.small')
            parameter_group: Parameter group name, None if the instance has none

        Returns:
            Tuple of (limit, LookupOutcome); limit is 0 unless FOUND
        """
        groups = self._limits.get(instance_class)
        if groups is None:
            return 0, LookupOutcome.UNKNOWN_CLASS
        if parameter_group is None or parameter_group not in groups:
            return 0, LookupOutcome.UNKNOWN_PARAMETER_GROUP
        return groups[parameter_group], LookupOutcome.FOUND

    def outcome(self, instance_class: str, parameter_group: str | None) -> LookupOutcome:
        """Report which level of the table, if any, misses."""
        return self.resolve(instance_class, parameter_group)[1]

    def lookup(self, instance_class: str, parameter_group: str | None) -> tuple[int, bool]:
        """Look up the max_connections value.

        Args:
            instance_class: DB instance class
            parameter_group: Parameter group name, None if the instance has none

        Returns:
            Tuple of (limit, found); limit is 0 when not found
        """
        limit, outcome = self.resolve(instance_class, parameter_group)
        return limit, outcome is LookupOutcome.FOUND

    def instance_classes(self) -> list[str]:
        return sorted(self._limits)

    def __len__(self) -> int:
        return len(self._limits)


def load_connection_limits(path: str | Path) -> ConnectionLimitTable:
    """Load a ConnectionLimitTable from a YAML or JSON file.

    The document has the same shape as DEFAULT_MAX_CONNECTIONS:

        db.t3.medium:
          default: 450
          default.mysql8.0: 450

    Args:
        path: Path to the file

    Returns:
        ConnectionLimitTable replacing the built-in defaults

    Raises:
        ConfigurationError: If the file is missing or malformed
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read max connections file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in max connections file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Max connections file {path} must map instance classes to parameter groups"
        )

    limits: dict[str, dict[str, int]] = {}
    for instance_class, groups in data.items():
        if not isinstance(groups, dict):
            raise ConfigurationError(
                f"Instance class {instance_class!r} must map parameter groups to limits",
                details={"path": str(path)},
            )
        limits[str(instance_class)] = {}
        for group, value in groups.items():
            # bool is an int subclass; reject it explicitly
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigurationError(
                    f"Limit for {instance_class!r}/{group!r} must be a non-negative integer, "
                    f"got {value!r}",
                    details={"path": str(path)},
                )
            limits[str(instance_class)][str(group)] = value

    logger.info("max_connections_table_loaded", path=str(path), instance_classes=len(limits))
    return ConnectionLimitTable(limits)
