"""Observability: in-memory run metrics."""

from guid_sharder.observability.metrics import MetricsCollector

__all__ = ["MetricsCollector"]
