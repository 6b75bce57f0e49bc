"""Metrics module using Prometheus."""

from .prometheus_metrics import (
    CatalogMetrics,
    HTTPMetrics,
    catalog_metrics,
    get_metrics_handler,
    http_metrics,
    setup_metrics,
)

__all__ = [
    "CatalogMetrics",
    "HTTPMetrics",
    "catalog_metrics",
    "get_metrics_handler",
    "http_metrics",
    "setup_metrics",
]
