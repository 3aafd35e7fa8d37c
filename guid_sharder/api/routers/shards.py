"""Shards API router: POST /shards computes an assignment over caller-supplied IDs."""

from typing import Annotated

from fastapi import APIRouter, Depends

from guid_sharder.api.dependencies import get_shard_service
from guid_sharder.application.shard_service import ShardService
from guid_sharder.domain.schemas.shard import ShardCreateRequest, ShardResult
from guid_sharder.domain.validators.config_validator import validate_shard_create_request

router = APIRouter()


@router.post("", response_model=ShardResult, response_model_exclude_none=True)
async def create_shards(
    body: ShardCreateRequest,
    shard_service: Annotated[ShardService, Depends(get_shard_service)],
):
    """
    Validate the request (all problems reported at once), then run the partition
    engine. Validation and sharding errors are mapped by the app's exception handlers.
    """
    validate_shard_create_request(body)
    return shard_service.compute(body.to_shard_request(), body.ids, source_type=body.source)
