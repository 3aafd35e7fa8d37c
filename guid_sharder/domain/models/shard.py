"""Domain model for shard runs. Pure business semantics: no I/O or serialization."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Tuple

from guid_sharder.domain.exceptions import InvalidReservationError, UnknownStrategyError

SHARD_NAME_PREFIX = "shard_"
_SHARD_NAME_RE = re.compile(r"shard_([0-9]+)")


class Strategy(str, Enum):
    """Distribution strategies understood by the partition engine."""

    ROUND_ROBIN = "round-robin"
    PERCENTAGE = "percentage"
    SIZE = "size"
    RENDEZVOUS = "rendezvous"


STRATEGY_NAMES: Tuple[str, ...] = tuple(s.value for s in Strategy)


class SourceType(str, Enum):
    """Inventory sources IDs can be fetched from."""

    COMPUTER_INVENTORY = "computer_inventory"
    MOBILE_DEVICE_INVENTORY = "mobile_device_inventory"
    COMPUTER_GROUP_MEMBERSHIP = "computer_group_membership"
    MOBILE_DEVICE_GROUP_MEMBERSHIP = "mobile_device_group_membership"
    USER_ACCOUNTS = "user_accounts"


SOURCE_TYPES: Tuple[str, ...] = tuple(s.value for s in SourceType)
GROUP_SOURCE_TYPES = frozenset(
    {SourceType.COMPUTER_GROUP_MEMBERSHIP.value, SourceType.MOBILE_DEVICE_GROUP_MEMBERSHIP.value}
)


def parse_strategy(name: str) -> Strategy:
    """Resolve a strategy name. Raises UnknownStrategyError for anything unrecognised."""
    try:
        return Strategy(name)
    except ValueError:
        raise UnknownStrategyError(name, STRATEGY_NAMES) from None


def shard_name(index: int) -> str:
    """Boundary encoding of a shard index, e.g. 2 -> 'shard_2'."""
    return f"{SHARD_NAME_PREFIX}{index}"


def parse_shard_name(name: str) -> int:
    """Decode 'shard_<N>' into N. Raises InvalidReservationError on any other shape."""
    match = _SHARD_NAME_RE.fullmatch(name)
    if match is None:
        raise InvalidReservationError(
            f"invalid shard name {name!r} in reserved_ids: must be 'shard_0', 'shard_1', etc."
        )
    return int(match.group(1))


def decode_reservations(reserved: Mapping[str, List[str]]) -> Dict[int, Tuple[str, ...]]:
    """Convert a boundary reservation map keyed by shard name into one keyed by index."""
    return {parse_shard_name(name): tuple(ids) for name, ids in reserved.items()}


@dataclass(frozen=True)
class ShardRequest:
    """
    Everything the partition engine needs besides the fetched pool.
    Reservations are keyed by plain shard index; names are a boundary concern.
    """

    strategy: str
    shard_count: int = 0
    percentages: Tuple[int, ...] = ()
    sizes: Tuple[int, ...] = ()
    seed: str = ""
    exclude_ids: Tuple[str, ...] = ()
    reserved_ids: Mapping[int, Tuple[str, ...]] = field(default_factory=dict)

    def resolved_shard_count(self) -> int:
        """
        Shard count implied by the strategy's own parameter, never below 1.
        Raises UnknownStrategyError for an unrecognised strategy.
        """
        strategy = parse_strategy(self.strategy)
        if strategy is Strategy.PERCENTAGE:
            count = len(self.percentages)
        elif strategy is Strategy.SIZE:
            count = len(self.sizes)
        else:
            count = self.shard_count
        return max(count, 1)


@dataclass(frozen=True)
class ShardAssignment:
    """Final engine output: sorted buckets by index plus the counts at each stage."""

    shards: Tuple[Tuple[str, ...], ...]
    total_fetched: int
    excluded_count: int
    reserved_count: int
    distributed_count: int

    @property
    def shard_count(self) -> int:
        return len(self.shards)

    def named(self) -> Dict[str, List[str]]:
        """Shards keyed by boundary name, in index order."""
        return {shard_name(i): list(bucket) for i, bucket in enumerate(self.shards)}
