"""RDS metric catalog."""

from dataclasses import dataclass
from enum import Enum

DEFAULT_NAMESPACE = "aws"

GIB = 1024 * 1024 * 1024


class MetricKind(Enum):
    GAUGE = "gauge"
    COUNTER = "counter"


@dataclass(frozen=True)
class MetricDescriptor:
    name: str
    help: str
    labels: tuple[str, ...]
    kind: MetricKind = MetricKind.GAUGE


@dataclass(frozen=True)
class Observation:
    descriptor: MetricDescriptor
    value: float
    label_values: tuple[str, ...]

    def __post_init__(self):
        if len(self.label_values) != len(self.descriptor.labels):
            raise ValueError(
                f"{self.descriptor.name} expects labels {self.descriptor.labels}, "
                f"got {len(self.label_values)} values"
            )

    @property
    def labels(self) -> dict[str, str]:
        return dict(zip(self.descriptor.labels, self.label_values))


@dataclass(frozen=True)
class RDSMetricCatalog:
    """The fixed set of descriptors one RDS collector can emit."""

    allocated_storage: MetricDescriptor
    db_instance_class: MetricDescriptor
    db_instance_status: MetricDescriptor
    engine_version: MetricDescriptor
    latest_restorable_time: MetricDescriptor
    max_connections: MetricDescriptor
    max_connections_error: MetricDescriptor
    publicly_accessible: MetricDescriptor
    storage_encrypted: MetricDescriptor

    def all(self) -> list[MetricDescriptor]:
        return [
            self.allocated_storage,
            self.db_instance_class,
            self.db_instance_status,
            self.engine_version,
            self.latest_restorable_time,
            self.max_connections,
            self.max_connections_error,
            self.publicly_accessible,
            self.storage_encrypted,
        ]


def build_fq_name(namespace: str, name: str) -> str:
    """Join namespace and name with '_', skipping an empty namespace."""
    return "_".join(part for part in (namespace, name) if part)


def build_catalog(namespace: str = DEFAULT_NAMESPACE) -> RDSMetricCatalog:
    """Build the RDS metric descriptors under a namespace prefix.

    Args:
        namespace: Metric name prefix (e.g. 'aws' -> 'aws_rds_allocatedstorage')

    Returns:
        RDSMetricCatalog with all nine descriptors
    """
    base = ("aws_region", "dbinstance_identifier")

    return RDSMetricCatalog(
        allocated_storage=MetricDescriptor(
            build_fq_name(namespace, "rds_allocatedstorage"),
            "The amount of allocated storage in bytes.",
            base,
        ),
        db_instance_class=MetricDescriptor(
            build_fq_name(namespace, "rds_dbinstanceclass"),
            "The DB instance class (type).",
            base + ("instance_class",),
        ),
        db_instance_status=MetricDescriptor(
            build_fq_name(namespace, "rds_dbinstancestatus"),
            "The instance status.",
            base + ("instance_status",),
        ),
        engine_version=MetricDescriptor(
            build_fq_name(namespace, "rds_engineversion"),
            "The DB engine type and version.",
            base + ("engine", "engine_version"),
        ),
        # Counter kind kept for compatibility with existing dashboards
        latest_restorable_time=MetricDescriptor(
            build_fq_name(namespace, "rds_latestrestorabletime"),
            "Latest restorable time (UTC date timestamp).",
            base,
            MetricKind.COUNTER,
        ),
        max_connections=MetricDescriptor(
            build_fq_name(namespace, "rds_maxconnections"),
            "The DB's max_connections value.",
            base,
        ),
        max_connections_error=MetricDescriptor(
            build_fq_name(namespace, "rds_maxconnections_error"),
            "Indicates no mapping found for instance/parameter group.",
            base + ("instance_class",),
        ),
        publicly_accessible=MetricDescriptor(
            build_fq_name(namespace, "rds_publiclyaccessible"),
            "Indicates if the DB is publicly accessible.",
            base,
        ),
        storage_encrypted=MetricDescriptor(
            build_fq_name(namespace, "rds_storageencrypted"),
            "Indicates if the DB storage is encrypted.",
            base,
        ),
    )
