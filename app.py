"""
AWS RDS Prometheus Exporter

Polls DescribeDBInstances in each configured region on every scrape and
serves instance metadata (storage, class, status, engine, encryption,
public access, max_connections) as Prometheus metrics.
"""

import argparse
import sys
import threading

import structlog
from prometheus_client import CollectorRegistry, start_http_server

from rds_exporter.adapters.prometheus import PrometheusExporterMetrics, PrometheusRDSCollector
from rds_exporter.aws.client import build_retry_config, get_client
from rds_exporter.aws.rds import RdsInstanceSource
from rds_exporter.config import ExporterSettings, load_settings
from rds_exporter.core.errors import ConfigurationError
from rds_exporter.core.protocols import ExporterMetrics
from rds_exporter.logging import configure_logging
from rds_exporter.services.collector import RDSCollector
from rds_exporter.services.max_connections import ConnectionLimitTable, load_connection_limits

logger = structlog.get_logger()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags. Unset flags fall back to RDS_EXPORTER_* env vars."""
    parser = argparse.ArgumentParser(
        prog="rds-exporter",
        description="Export AWS RDS instance metadata as Prometheus metrics.",
    )
    parser.add_argument(
        "--region",
        dest="regions",
        action="append",
        help="AWS region to poll (repeatable)",
    )
    parser.add_argument("--namespace", help="Metric name prefix (default: aws)")
    parser.add_argument("--listen-address", help="HTTP bind address")
    parser.add_argument("--listen-port", type=int, help="HTTP port")
    parser.add_argument("--max-pages", type=int, help="Pagination ceiling per poll, 0 = unbounded")
    parser.add_argument("--page-size", type=int, help="MaxRecords per DescribeDBInstances call")
    parser.add_argument("--max-attempts", type=int, help="Total attempts per AWS API call, including the first")
    parser.add_argument(
        "--max-connections-file",
        help="YAML/JSON max_connections table replacing the built-in one",
    )
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL (default: INFO)")
    parser.add_argument("--log-format", choices=["json", "console"], help="Log renderer")
    return parser.parse_args(argv)


def build_collectors(
    settings: ExporterSettings,
    exporter_metrics: ExporterMetrics,
    limits: ConnectionLimitTable,
    client_factory=get_client,
) -> list[RDSCollector]:
    """Create one RDSCollector per configured region.

    Args:
        settings: Exporter settings
        exporter_metrics: Shared request/error counters
        limits: max_connections lookup table
        client_factory: Callable(service, region, config) returning a boto3 client

    Returns:
        List of collectors in region order
    """
    config = build_retry_config(settings.max_attempts)
    collectors = []
    for region in settings.regions:
        source = RdsInstanceSource(
            client_factory("rds", region, config),
            page_size=settings.page_size,
        )
        collectors.append(RDSCollector(
            source,
            region,
            limits,
            exporter_metrics,
            namespace=settings.namespace,
            max_pages=settings.max_pages,
        ))
    return collectors


def build_registry(settings: ExporterSettings, client_factory=get_client) -> CollectorRegistry:
    """Build a registry holding the exporter counters and the RDS collector."""
    if settings.max_connections_file:
        limits = load_connection_limits(settings.max_connections_file)
    else:
        limits = ConnectionLimitTable.default()

    registry = CollectorRegistry()
    exporter_metrics = PrometheusExporterMetrics(namespace=settings.namespace)
    collectors = build_collectors(settings, exporter_metrics, limits, client_factory)
    registry.register(PrometheusRDSCollector(collectors, exporter_metrics))
    return registry


def main(argv: list[str] | None = None) -> int:
    """Main application entry point."""
    args = parse_args(argv)

    try:
        settings = load_settings(**vars(args))
    except ConfigurationError as e:
        print(e.message, file=sys.stderr)
        return 2

    configure_logging(settings.log_level, settings.log_format)

    try:
        registry = build_registry(settings)
    except ConfigurationError as e:
        logger.error("configuration_error", error=e.message, **e.details)
        return 2

    start_http_server(settings.listen_port, addr=settings.listen_address, registry=registry)
    logger.info(
        "rds_exporter_listening",
        address=settings.listen_address,
        port=settings.listen_port,
        regions=settings.regions,
    )

    # Scrapes are served from the HTTP server's threads
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        logger.info("rds_exporter_stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
