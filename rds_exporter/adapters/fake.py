"""Fake collaborators for testing the RDS collector.

Each fake records calls in memory so tests can assert on observations,
counters and pagination without boto3 or prometheus-client.
"""

from rds_exporter.aws.rds import DBInstance
from rds_exporter.services.metrics import MetricDescriptor, Observation


class FakeMetricSink:
    """In-memory spy implementing the MetricSink protocol.

    Usage:
        sink = FakeMetricSink()
        collector.collect(sink)
        assert sink.value("aws_rds_maxconnections", dbinstance_identifier="db-1") == 150
    """

    def __init__(self) -> None:
        self.descriptors: list[MetricDescriptor] = []
        self.observations: list[Observation] = []

    def register(self, descriptor: MetricDescriptor) -> None:
        self.descriptors.append(descriptor)

    def emit(self, observation: Observation) -> None:
        self.observations.append(observation)

    # -- test helpers --

    def named(self, name: str) -> list[Observation]:
        """All observations of the metric with the given name."""
        return [o for o in self.observations if o.descriptor.name == name]

    def value(self, name: str, **labels: str) -> float | None:
        """Value of the single observation matching name and labels, or None."""
        matches = [
            o for o in self.named(name)
            if all(o.labels.get(k) == v for k, v in labels.items())
        ]
        if not matches:
            return None
        assert len(matches) == 1, f"{len(matches)} observations match {name} {labels}"
        return matches[0].value

    def clear(self) -> None:
        self.descriptors.clear()
        self.observations.clear()


class FakeExporterMetrics:
    """In-memory counter spy implementing the ExporterMetrics protocol."""

    def __init__(self) -> None:
        self.requests: int = 0
        self.errors: int = 0

    def inc_requests(self) -> None:
        self.requests += 1

    def inc_errors(self) -> None:
        self.errors += 1


class FakeInstanceSource:
    """Scripted InstanceSource returning pages in order.

    Each entry in ``pages`` is either ``(instances, next_marker)`` or an
    exception instance to raise for that call.

    Usage:
        source = FakeInstanceSource([([db1], "m1"), ([db2], None)])
    """

    def __init__(self, pages: list) -> None:
        self._pages = list(pages)
        self.markers: list[str | None] = []

    @property
    def calls(self) -> int:
        return len(self.markers)

    def describe_db_instances(self, marker: str | None) -> tuple[list[DBInstance], str | None]:
        self.markers.append(marker)
        # Repeat the last entry once the script runs out
        page = self._pages[min(len(self.markers), len(self._pages)) - 1]
        if isinstance(page, Exception):
            raise page
        instances, next_marker = page
        return list(instances), next_marker
