"""RDS metrics collection for one region."""

import threading

import structlog

from rds_exporter.aws.rds import DBInstance
from rds_exporter.core.errors import InstanceSourceError, PaginationLimitError
from rds_exporter.core.protocols import ExporterMetrics, InstanceSource, MetricSink
from rds_exporter.services.max_connections import ConnectionLimitTable, LookupOutcome
from rds_exporter.services.metrics import (
    DEFAULT_NAMESPACE,
    GIB,
    MetricDescriptor,
    Observation,
    build_catalog,
)

logger = structlog.get_logger()

# 1000 pages of 100 records covers 100k instances per region
DEFAULT_MAX_PAGES = 1000


class RDSCollector:
    """Translate every DB instance in a region into metric observations.

    Each ``collect()`` is one poll: page through DescribeDBInstances until
    no marker is returned, then emit all observations. A failed page
    abandons the poll before anything is emitted.

    Usage:
        collector = RDSCollector(source, "eu-west-1", ConnectionLimitTable.default(), metrics)
        collector.describe(sink)
        collector.collect(sink)
    """

    def __init__(
        self,
        source: InstanceSource,
        region: str,
        limits: ConnectionLimitTable,
        exporter_metrics: ExporterMetrics,
        namespace: str = DEFAULT_NAMESPACE,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> None:
        self.source = source
        self.region = region
        self.limits = limits
        self.exporter_metrics = exporter_metrics
        self.max_pages = max_pages
        self.catalog = build_catalog(namespace)
        self._lock = threading.Lock()
        logger.info("rds_collector_initialized", region=region, namespace=namespace)

    def describe(self, sink: MetricSink) -> None:
        """Register every descriptor this collector can emit."""
        for descriptor in self.catalog.all():
            sink.register(descriptor)

    def collect(self, sink: MetricSink) -> None:
        """Run one poll and emit observations to the sink.

        Errors are logged and counted, never raised.

        Args:
            sink: Destination for observations
        """
        with self._lock:
            try:
                instances = self.fetch_instances()
            except InstanceSourceError as e:
                logger.error(
                    "describe_db_instances_failed",
                    region=self.region,
                    error=e.message,
                    **e.details,
                )
                self.exporter_metrics.inc_errors()
                return

            for instance in instances:
                self._emit_instance(sink, instance)

            logger.debug("rds_poll_complete", region=self.region, instances=len(instances))

    def fetch_instances(self) -> list[DBInstance]:
        """Fetch all DB instances, following markers until the last page.

        Returns:
            All instances in API order

        Raises:
            InstanceSourceError: If any page fails or the page ceiling is hit
        """
        instances: list[DBInstance] = []
        marker = None
        pages = 0

        while True:
            if self.max_pages and pages >= self.max_pages:
                raise PaginationLimitError(
                    f"Pagination exceeded {self.max_pages} pages",
                    details={"marker": marker},
                )
            self.exporter_metrics.inc_requests()
            page, marker = self.source.describe_db_instances(marker)
            pages += 1
            instances.extend(page)
            if marker is None:
                break

        return instances

    def _emit_instance(self, sink: MetricSink, instance: DBInstance) -> None:
        catalog = self.catalog
        parameter_group = instance.parameter_group
        max_connections, outcome = self.limits.resolve(instance.instance_class, parameter_group)
        found = outcome is LookupOutcome.FOUND

        if found:
            logger.debug(
                "max_connections_mapping_found",
                instance_class=instance.instance_class,
                parameter_group=parameter_group,
                value=max_connections,
            )
        elif outcome is LookupOutcome.UNKNOWN_CLASS:
            logger.error(
                "max_connections_mapping_missing",
                instance_class=instance.instance_class,
            )
        else:
            logger.error(
                "max_connections_mapping_missing",
                instance_class=instance.instance_class,
                parameter_group=parameter_group,
            )

        self._emit(sink, catalog.max_connections_error, 0 if found else 1, instance, instance.instance_class)
        self._emit(sink, catalog.publicly_accessible, 1 if instance.publicly_accessible else 0, instance)
        self._emit(sink, catalog.storage_encrypted, 1 if instance.storage_encrypted else 0, instance)
        self._emit(sink, catalog.max_connections, max_connections, instance)
        self._emit(sink, catalog.allocated_storage, instance.allocated_storage * GIB, instance)
        self._emit(sink, catalog.db_instance_status, 1, instance, instance.status)
        self._emit(sink, catalog.engine_version, 1, instance, instance.engine, instance.engine_version)
        self._emit(sink, catalog.db_instance_class, 1, instance, instance.instance_class)

        # Unset while the instance is still being created
        if instance.latest_restorable_time is not None:
            self._emit(
                sink,
                catalog.latest_restorable_time,
                int(instance.latest_restorable_time.timestamp()),
                instance,
            )

    def _emit(
        self,
        sink: MetricSink,
        descriptor: MetricDescriptor,
        value: float,
        instance: DBInstance,
        *extra_labels: str,
    ) -> None:
        sink.emit(Observation(
            descriptor=descriptor,
            value=value,
            label_values=(self.region, instance.identifier) + extra_labels,
        ))
