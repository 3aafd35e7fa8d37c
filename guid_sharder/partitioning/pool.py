"""Pool partitioning: exclusions first, then reservations, leaving the distributable pool."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Sequence, Tuple

from guid_sharder.domain.exceptions import DuplicateReservationError, InvalidReservationError
from guid_sharder.domain.models.shard import shard_name


@dataclass(frozen=True)
class PartitionResult:
    """Outcome of splitting the fetched pool. Counts feed the run metadata."""

    total_fetched: int
    filtered: Tuple[str, ...]
    distributable: Tuple[str, ...]
    reserved_by_shard: Mapping[int, Tuple[str, ...]] = field(default_factory=dict)

    @property
    def excluded_count(self) -> int:
        return self.total_fetched - len(self.filtered)

    @property
    def reserved_count(self) -> int:
        """Reserved IDs that were taken out of the filtered pool."""
        return len(self.filtered) - len(self.distributable)

    @property
    def distributable_count(self) -> int:
        return len(self.distributable)

    @property
    def reserved_count_by_shard(self) -> Dict[int, int]:
        return {index: len(ids) for index, ids in self.reserved_by_shard.items()}


def apply_exclusions(pool: Sequence[str], exclusions: Iterable[str]) -> Tuple[str, ...]:
    """Drop every excluded ID, keeping the order of the rest."""
    excluded = set(exclusions)
    if not excluded:
        return tuple(pool)
    return tuple(identifier for identifier in pool if identifier not in excluded)


def check_reservations(reservations: Mapping[int, Sequence[str]], shard_count: int) -> None:
    """
    Raise on the first reservation problem: a shard index outside [0, shard_count)
    or an ID reserved more than once, whether in two shards or twice in one.
    Shards are checked in index order.
    """
    seen: Dict[str, int] = {}
    for index in sorted(reservations):
        if index < 0 or index >= shard_count:
            raise InvalidReservationError(
                f"shard name {shard_name(index)!r} in reserved_ids is out of range: "
                f"with shard_count={shard_count}, valid names are shard_0 to {shard_name(shard_count - 1)}"
            )
        for identifier in reservations[index]:
            if identifier in seen:
                raise DuplicateReservationError(identifier, shard_name(seen[identifier]), shard_name(index))
            seen[identifier] = index


def partition(
    pool: Sequence[str],
    exclusions: Iterable[str],
    reservations: Mapping[int, Sequence[str]],
    shard_count: int,
) -> PartitionResult:
    """
    Split the pool into excluded, reserved and distributable IDs.

    Exclusion is applied first and wins over reservation: an ID that is both
    excluded and reserved is absent from the pool and from the reservation
    output. Reserved IDs missing from the pool are still pinned to their shard.
    """
    shard_count = max(shard_count, 1)
    check_reservations(reservations, shard_count)

    excluded = set(exclusions)
    filtered = apply_exclusions(pool, excluded)

    reserved_by_shard: Dict[int, Tuple[str, ...]] = {}
    reserved: set = set()
    for index in sorted(reservations):
        kept = tuple(i for i in reservations[index] if i not in excluded)
        reserved_by_shard[index] = kept
        reserved.update(kept)

    distributable = tuple(identifier for identifier in filtered if identifier not in reserved)

    return PartitionResult(
        total_fetched=len(pool),
        filtered=filtered,
        distributable=distributable,
        reserved_by_shard=reserved_by_shard,
    )
