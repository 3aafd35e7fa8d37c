# guid_sharder/api/routers/metrics.py

from typing import Annotated

from fastapi import APIRouter, Depends

from guid_sharder.api.dependencies import get_metrics
from guid_sharder.observability.metrics import MetricsCollector

router = APIRouter()


@router.get("/metrics")
async def metrics(collector: Annotated[MetricsCollector, Depends(get_metrics)]):
    """Snapshot of shard run counters and latencies."""
    return collector.export_metrics()
