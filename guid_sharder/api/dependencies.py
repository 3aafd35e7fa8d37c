"""FastAPI dependency injection: metrics registry and ShardService."""

import logging
from typing import Annotated

from fastapi import Depends

from guid_sharder.application.shard_service import ShardService
from guid_sharder.observability.metrics import MetricsCollector

_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Return singleton metrics registry."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics


def get_shard_service(
    metrics: Annotated[MetricsCollector, Depends(get_metrics)],
) -> ShardService:
    """ShardService for caller-supplied IDs; the API never fetches from Jamf Pro."""
    return ShardService(
        inventory=None,
        logger=logging.getLogger(__name__),
        metrics=metrics,
    )

