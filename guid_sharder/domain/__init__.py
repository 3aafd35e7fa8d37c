"""Domain layer: models, schemas, validators, exceptions. Pure business logic only."""

from guid_sharder.domain.exceptions import (
    ConfigValidationError,
    DomainError,
    DomainValidationError,
    DuplicateReservationError,
    InvalidReservationError,
    ShardingError,
    UnknownStrategyError,
)
from guid_sharder.domain.models import ShardAssignment, ShardRequest, SourceType, Strategy
from guid_sharder.domain.schemas import ShardCreateRequest, ShardMetadata, ShardResult

__all__ = [
    "ConfigValidationError",
    "DomainError",
    "DomainValidationError",
    "DuplicateReservationError",
    "InvalidReservationError",
    "ShardAssignment",
    "ShardCreateRequest",
    "ShardMetadata",
    "ShardRequest",
    "ShardResult",
    "ShardingError",
    "SourceType",
    "Strategy",
    "UnknownStrategyError",
]
