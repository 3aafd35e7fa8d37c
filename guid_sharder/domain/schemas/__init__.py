"""Domain schemas. Request/response and validation."""

from guid_sharder.domain.schemas.shard import (
    ShardCreateRequest,
    ShardMetadata,
    ShardResult,
)

__all__ = [
    "ShardCreateRequest",
    "ShardMetadata",
    "ShardResult",
]
