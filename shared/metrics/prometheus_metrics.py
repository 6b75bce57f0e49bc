"""Prometheus metrics definitions and helpers.

Provides HTTP and catalog metric definitions for the library service.
"""

from typing import Callable

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    REGISTRY,
    CollectorRegistry,
)


class HTTPMetrics:
    """Request-level metrics recorded by the logging middleware."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize HTTP metrics.

        Args:
            registry: Prometheus registry to use
        """
        self.requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status"],
            registry=registry,
        )

        self.request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=registry,
        )

        self.requests_in_progress = Gauge(
            "http_requests_in_progress",
            "HTTP requests currently in progress",
            ["method", "endpoint"],
            registry=registry,
        )


class CatalogMetrics:
    """Catalog entity metrics."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize catalog metrics.

        Args:
            registry: Prometheus registry to use
        """
        # Successful writes
        self.mutations = Counter(
            "catalog_mutations_total",
            "Total number of persisted catalog changes",
            ["entity", "operation"],
            registry=registry,
        )

        # Deletes refused because dependents exist
        self.deletes_blocked = Counter(
            "catalog_deletes_blocked_total",
            "Delete requests refused because dependent records exist",
            ["entity"],
            registry=registry,
        )

        # Forms re-rendered with violations
        self.validation_failures = Counter(
            "catalog_validation_failures_total",
            "Form submissions rejected by validation",
            ["entity"],
            registry=registry,
        )

        # Fan-out join duration
        self.fanout_duration = Histogram(
            "catalog_fanout_duration_seconds",
            "Time spent waiting on concurrent catalog fetches",
            ["queries"],
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
            registry=registry,
        )


def setup_metrics(registry: CollectorRegistry = REGISTRY) -> tuple[HTTPMetrics, CatalogMetrics]:
    """Setup and return metric instances.

    Returns:
        Tuple of (HTTPMetrics, CatalogMetrics)
    """
    return HTTPMetrics(registry), CatalogMetrics(registry)


def get_metrics_handler(registry: CollectorRegistry = REGISTRY) -> Callable[[], bytes]:
    """Get metrics handler for HTTP endpoint.

    Returns:
        Function that generates Prometheus metrics output
    """

    def metrics_handler() -> bytes:
        return generate_latest(registry)

    return metrics_handler


http_metrics, catalog_metrics = setup_metrics()
