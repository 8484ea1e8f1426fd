"""Prometheus metrics for the config store client."""

from __future__ import annotations

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    Info,
    start_http_server,
    REGISTRY,
    CollectorRegistry,
)


class MetricsRegistry:
    """Registry of all config store client metrics."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """Initialize metrics registry."""
        self._registry = registry or REGISTRY

        # Operation metrics
        self.operations_total = Counter(
            "config_db_operations_total",
            "Total number of config store operations",
            ["operation", "strategy", "status"],  # status: success, error
            registry=self._registry,
        )

        self.operation_latency_seconds = Histogram(
            "config_db_operation_latency_seconds",
            "Config store operation latency in seconds",
            ["operation", "strategy"],
            buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
            registry=self._registry,
        )

        # Batch metrics
        self.batch_commands_total = Counter(
            "config_db_batch_commands_total",
            "Total commands queued into MULTI/EXEC batches",
            registry=self._registry,
        )

        self.batch_commits_total = Counter(
            "config_db_batch_commits_total",
            "Total MULTI/EXEC batches committed",
            registry=self._registry,
        )

        self.scan_pages_total = Counter(
            "config_db_scan_pages_total",
            "Total SCAN pages fetched",
            registry=self._registry,
        )

        # Connection metrics
        self.connect_attempts_total = Counter(
            "config_db_connect_attempts_total",
            "Total connection attempts",
            ["db_name", "status"],
            registry=self._registry,
        )

        self.connected = Gauge(
            "config_db_connected",
            "Whether the handle holds an open connection",
            ["db_name"],
            registry=self._registry,
        )

        # Readiness metrics
        self.readiness_wait_seconds = Histogram(
            "config_db_readiness_wait_seconds",
            "Time spent waiting for the initialization sentinel",
            ["db_name"],
            buckets=(0.001, 0.01, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 300.0),
            registry=self._registry,
        )

        # Client info
        self.info = Info(
            "config_db",
            "Config store client information",
            registry=self._registry,
        )


# Global metrics registry
_metrics: MetricsRegistry | None = None


def setup_metrics(port: int = 8001, registry: CollectorRegistry | None = None) -> MetricsRegistry:
    """
    Set up Prometheus metrics server.

    Args:
        port: Port for the metrics HTTP server
        registry: Optional custom registry

    Returns:
        The metrics registry
    """
    global _metrics
    _metrics = MetricsRegistry(registry)

    from config_db import __version__
    _metrics.info.info({
        "version": __version__,
    })

    # Start HTTP server for Prometheus scraping
    start_http_server(port, registry=registry or REGISTRY)

    return _metrics


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsRegistry()
    return _metrics
