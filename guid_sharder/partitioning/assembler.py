"""Final shard assembly: merge reservations into distributed buckets and sort."""

from typing import List, Sequence

from guid_sharder.domain.models.shard import ShardAssignment
from guid_sharder.partitioning.pool import PartitionResult
from guid_sharder.partitioning.sequencer import sort_numerically


def assemble(buckets: Sequence[Sequence[str]], pool: PartitionResult) -> ShardAssignment:
    """
    Add each shard's reserved IDs to its distributed bucket and sort every bucket
    ascending by numeric value. Order inside a bucket before sorting is irrelevant.
    """
    merged: List[List[str]] = [list(bucket) for bucket in buckets]
    for index, reserved in pool.reserved_by_shard.items():
        merged[index] = list(reserved) + merged[index]

    return ShardAssignment(
        shards=tuple(tuple(sort_numerically(bucket)) for bucket in merged),
        total_fetched=pool.total_fetched,
        excluded_count=pool.excluded_count,
        reserved_count=pool.reserved_count,
        distributed_count=pool.distributable_count,
    )
