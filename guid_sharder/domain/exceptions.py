"""Domain-specific exceptions. Pure domain layer: no infrastructure."""

from typing import Sequence


class DomainError(Exception):
    """Base for all domain-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DomainValidationError(DomainError):
    """Raised when domain validation rules are violated."""


class ConfigValidationError(DomainValidationError):
    """Raised when configuration validation finds one or more problems. Carries every issue."""

    def __init__(self, issues: Sequence[str]) -> None:
        self.issues = list(issues)
        bullet = "\n  • "
        message = (
            f"configuration validation failed with {len(self.issues)} error(s):"
            f"{bullet}{bullet.join(self.issues)}"
        )
        super().__init__(message)


class ShardingError(DomainError):
    """Base for partition engine errors. Each instance describes exactly one problem."""


class InvalidReservationError(ShardingError):
    """Raised when a reservation refers to a shard outside the declared range."""


class DuplicateReservationError(ShardingError):
    """Raised when the same ID is reserved more than once, in one shard or across shards."""

    def __init__(self, identifier: str, first_shard: str, second_shard: str) -> None:
        self.identifier = identifier
        self.first_shard = first_shard
        self.second_shard = second_shard
        super().__init__(
            f"ID {identifier!r} appears in multiple reserved_ids shards: "
            f"{first_shard!r} and {second_shard!r}; each ID may only be reserved for one shard"
        )


class UnknownStrategyError(ShardingError):
    """Raised when the strategy name is not one of the recognised strategies."""

    def __init__(self, strategy: str, valid: Sequence[str]) -> None:
        self.strategy = strategy
        self.valid = list(valid)
        quoted = ", ".join(f'"{s}"' for s in self.valid)
        super().__init__(f"unknown strategy {strategy!r}: must be one of [{quoted}]")
