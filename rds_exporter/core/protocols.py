"""Protocols the RDS collector depends on.

The collector talks to the AWS API, the metrics library, and the
exporter's own request counters only through these protocols.
Production wires boto3 and prometheus_client adapters; tests inject the
in-memory fakes from ``rds_exporter.adapters.fake``.
"""

from typing import Protocol, runtime_checkable

from rds_exporter.aws.rds import DBInstance
from rds_exporter.services.metrics import MetricDescriptor, Observation


@runtime_checkable
class InstanceSource(Protocol):
    """Paginated provider of DB instances for one region."""

    def describe_db_instances(self, marker: str | None) -> tuple[list[DBInstance], str | None]:
        """Fetch one page.

        Args:
            marker: Continuation marker from the previous page, None for the first.

        Returns:
            Tuple of (instances, next marker or None on the last page).

        Raises:
            InstanceSourceError: If the call fails.
        """
        ...


@runtime_checkable
class MetricSink(Protocol):
    """Write-only destination for descriptors and observations."""

    def register(self, descriptor: MetricDescriptor) -> None:
        """Declare a metric the caller may later emit."""
        ...

    def emit(self, observation: Observation) -> None:
        """Record one observation of a registered metric."""
        ...


@runtime_checkable
class ExporterMetrics(Protocol):
    """Process-wide counters for the exporter's own API calls."""

    def inc_requests(self) -> None:
        ...

    def inc_errors(self) -> None:
        ...
