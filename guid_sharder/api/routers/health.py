# guid_sharder/api/routers/health.py

from fastapi import APIRouter, Request

from guid_sharder.config.settings import get_settings
from guid_sharder.domain.models.shard import STRATEGY_NAMES

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    """Liveness plus what this instance can do."""
    settings = get_settings()
    return {
        "status": "ok",
        "service": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
        "strategies": list(STRATEGY_NAMES),
        "correlation_id": request.state.correlation_id,
    }
