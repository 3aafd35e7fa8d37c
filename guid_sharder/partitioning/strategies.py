"""
Distribution strategies over the distributable pool.

Every strategy returns exactly one list per shard (possibly empty). Reserved IDs
never enter here; the assembler merges them afterwards. Round-robin, percentage
and size sequence the pool once through the seeded shuffle. Rendezvous hashes
each ID independently with the seed folded into every candidate weight, which is
what gives it minimal movement when the shard count changes.
"""

import hashlib
from typing import Callable, Dict, List, Mapping, Sequence

from guid_sharder.domain.models.shard import ShardRequest, Strategy, parse_strategy
from guid_sharder.partitioning.pool import PartitionResult
from guid_sharder.partitioning.sequencer import sequence

REMAINDER = -1

Buckets = List[List[str]]


def _clamp_shard_count(shard_count: int) -> int:
    return shard_count if shard_count > 0 else 1


def _carve(ordered: Sequence[str], targets: Sequence[int]) -> Buckets:
    """
    Cut contiguous slices off the front of ordered, one per target, left to right.
    A target of REMAINDER takes everything left; others are clamped to [0, remaining].
    """
    buckets: Buckets = []
    start = 0
    total = len(ordered)
    for target in targets:
        available = total - start
        size = available if target == REMAINDER else max(0, min(target, available))
        buckets.append(list(ordered[start:start + size]))
        start += size
    return buckets


def round_robin(ids: Sequence[str], shard_count: int, seed: str = "") -> Buckets:
    """Position i of the sequenced pool goes to shard i mod shard_count. Sizes differ by at most one."""
    shard_count = _clamp_shard_count(shard_count)
    buckets: Buckets = [[] for _ in range(shard_count)]
    for i, identifier in enumerate(sequence(ids, seed)):
        buckets[i % shard_count].append(identifier)
    return buckets


def by_percentage(
    ids: Sequence[str],
    percentages: Sequence[int],
    seed: str = "",
    population: int | None = None,
    reserved_counts: Mapping[int, int] | None = None,
) -> Buckets:
    """
    Carve shards proportionally.

    Targets use the exclusion-filtered population before reservations were
    removed (population), minus what each shard already holds in reservations,
    so the stated percentages match the real fleet share. The last shard takes
    whatever is left so rounding never drops an ID.
    """
    if not percentages:
        percentages = (100,)
    if population is None:
        population = len(ids)
    reserved_counts = reserved_counts or {}

    last = len(percentages) - 1
    targets = [
        REMAINDER if i == last else population * pct // 100 - reserved_counts.get(i, 0)
        for i, pct in enumerate(percentages)
    ]
    return _carve(sequence(ids, seed), targets)


def by_size(
    ids: Sequence[str],
    sizes: Sequence[int],
    seed: str = "",
    reserved_counts: Mapping[int, int] | None = None,
) -> Buckets:
    """
    Carve shards of literal sizes net of reservations. REMAINDER (-1) takes
    everything still unassigned. An undersized pool fills what it can.
    """
    if not sizes:
        sizes = (REMAINDER,)
    reserved_counts = reserved_counts or {}

    targets = [
        REMAINDER if size == REMAINDER else size - reserved_counts.get(i, 0)
        for i, size in enumerate(sizes)
    ]
    return _carve(sequence(ids, seed), targets)


def rendezvous_weight(identifier: str, shard_index: int, seed: str) -> int:
    """First 8 bytes, big-endian unsigned, of SHA-256('<id>:shard_<s>:<seed>')."""
    digest = hashlib.sha256(f"{identifier}:shard_{shard_index}:{seed}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


def rendezvous_shard(identifier: str, shard_count: int, seed: str = "") -> int:
    """Highest-random-weight winner for one ID. Ties keep the lowest shard index."""
    best_weight = 0
    best_shard = 0
    for shard_index in range(_clamp_shard_count(shard_count)):
        weight = rendezvous_weight(identifier, shard_index, seed)
        if weight > best_weight:
            best_weight = weight
            best_shard = shard_index
    return best_shard


def rendezvous(ids: Sequence[str], shard_count: int, seed: str = "") -> Buckets:
    """Assign each ID independently to its highest-weight shard. No global ordering step."""
    shard_count = _clamp_shard_count(shard_count)
    buckets: Buckets = [[] for _ in range(shard_count)]
    for identifier in ids:
        buckets[rendezvous_shard(identifier, shard_count, seed)].append(identifier)
    return buckets


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def _run_round_robin(request: ShardRequest, pool: PartitionResult) -> Buckets:
    return round_robin(pool.distributable, request.shard_count, request.seed)


def _run_percentage(request: ShardRequest, pool: PartitionResult) -> Buckets:
    return by_percentage(
        pool.distributable,
        request.percentages,
        request.seed,
        population=len(pool.filtered),
        reserved_counts=pool.reserved_count_by_shard,
    )


def _run_size(request: ShardRequest, pool: PartitionResult) -> Buckets:
    return by_size(
        pool.distributable,
        request.sizes,
        request.seed,
        reserved_counts=pool.reserved_count_by_shard,
    )


def _run_rendezvous(request: ShardRequest, pool: PartitionResult) -> Buckets:
    return rendezvous(pool.distributable, request.shard_count, request.seed)


_STRATEGIES: Dict[Strategy, Callable[[ShardRequest, PartitionResult], Buckets]] = {
    Strategy.ROUND_ROBIN: _run_round_robin,
    Strategy.PERCENTAGE: _run_percentage,
    Strategy.SIZE: _run_size,
    Strategy.RENDEZVOUS: _run_rendezvous,
}


def distribute(request: ShardRequest, pool: PartitionResult) -> Buckets:
    """Route the distributable pool through the requested strategy. Raises UnknownStrategyError."""
    return _STRATEGIES[parse_strategy(request.strategy)](request, pool)
