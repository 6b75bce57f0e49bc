"""Shared Pydantic models for the library services."""

from .common import HealthStatus, ServiceInfo

__all__ = [
    "HealthStatus",
    "ServiceInfo",
]
