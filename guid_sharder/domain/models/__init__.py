"""Domain models. Pure business entities."""

from guid_sharder.domain.models.shard import (
    GROUP_SOURCE_TYPES,
    SOURCE_TYPES,
    STRATEGY_NAMES,
    ShardAssignment,
    ShardRequest,
    SourceType,
    Strategy,
    decode_reservations,
    parse_shard_name,
    parse_strategy,
    shard_name,
)

__all__ = [
    "GROUP_SOURCE_TYPES",
    "SOURCE_TYPES",
    "STRATEGY_NAMES",
    "ShardAssignment",
    "ShardRequest",
    "SourceType",
    "Strategy",
    "decode_reservations",
    "parse_shard_name",
    "parse_strategy",
    "shard_name",
]
