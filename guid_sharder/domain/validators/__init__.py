"""Domain validators. Pure validation functions."""

from guid_sharder.domain.validators.config_validator import (
    collect_config_issues,
    collect_request_issues,
    validate_shard_config,
    validate_shard_create_request,
)

__all__ = [
    "collect_config_issues",
    "collect_request_issues",
    "validate_shard_config",
    "validate_shard_create_request",
]
