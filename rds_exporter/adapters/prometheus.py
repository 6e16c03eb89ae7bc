"""Prometheus implementations of the MetricSink and ExporterMetrics protocols.

``PrometheusRDSCollector`` is a prometheus_client custom collector: on
every scrape it runs one poll per region into a fresh
``PrometheusMetricSink`` and hands the resulting metric families to the
registry.  Counter families are exposed with prometheus_client's
``_total`` sample suffix.
"""

from prometheus_client import CollectorRegistry, Counter
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric
from prometheus_client.registry import Collector

from rds_exporter.core.protocols import ExporterMetrics, MetricSink
from rds_exporter.services.collector import RDSCollector
from rds_exporter.services.metrics import (
    DEFAULT_NAMESPACE,
    MetricDescriptor,
    MetricKind,
    Observation,
    build_fq_name,
)


class PrometheusMetricSink(MetricSink):
    """Accumulate observations into prometheus_client metric families.

    Descriptors registered more than once (one RDSCollector per region)
    share a single family.
    """

    def __init__(self) -> None:
        self._families: dict[str, Metric] = {}

    # -- MetricSink protocol methods --

    def register(self, descriptor: MetricDescriptor) -> None:
        if descriptor.name in self._families:
            return
        family_cls = CounterMetricFamily if descriptor.kind is MetricKind.COUNTER else GaugeMetricFamily
        self._families[descriptor.name] = family_cls(
            descriptor.name,
            descriptor.help,
            labels=list(descriptor.labels),
        )

    def emit(self, observation: Observation) -> None:
        self.register(observation.descriptor)
        family = self._families[observation.descriptor.name]
        family.add_metric(list(observation.label_values), observation.value)

    # -- helpers --

    def families(self) -> list[Metric]:
        return list(self._families.values())


class PrometheusExporterMetrics(ExporterMetrics):
    """Prometheus-backed request/error counters for DescribeDBInstances calls.

    The counters live on a private registry by default. Pass this object to
    ``PrometheusRDSCollector`` so they are exposed after the scrape's polls
    have incremented them.
    """

    def __init__(
        self,
        registry: CollectorRegistry | None = None,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self._registry = registry or CollectorRegistry()

        self._requests = Counter(
            build_fq_name(namespace, "exporter_requests"),
            "Total AWS API requests made by the exporter",
            registry=self._registry,
        )

        self._errors = Counter(
            build_fq_name(namespace, "exporter_errors"),
            "Total AWS API requests that failed",
            registry=self._registry,
        )

    # -- ExporterMetrics protocol methods --

    def inc_requests(self) -> None:
        self._requests.inc()

    def inc_errors(self) -> None:
        self._errors.inc()

    # -- helpers --

    def families(self) -> list[Metric]:
        return list(self._registry.collect())


class PrometheusRDSCollector(Collector):
    """prometheus_client collector polling one RDSCollector per region.

    Exporter counters, when given, are appended after the polls so a
    scrape reports its own requests and errors.
    """

    def __init__(
        self,
        collectors: list[RDSCollector],
        exporter_metrics: PrometheusExporterMetrics | None = None,
    ) -> None:
        self._collectors = list(collectors)
        self._exporter_metrics = exporter_metrics

    def describe(self) -> list[Metric]:
        sink = PrometheusMetricSink()
        for collector in self._collectors:
            collector.describe(sink)
        return sink.families() + self._counter_families()

    def collect(self) -> list[Metric]:
        sink = PrometheusMetricSink()
        for collector in self._collectors:
            collector.describe(sink)
            collector.collect(sink)
        return sink.families() + self._counter_families()

    def _counter_families(self) -> list[Metric]:
        if self._exporter_metrics is None:
            return []
        return self._exporter_metrics.families()
