"""Partition engine entry point: partition -> distribute -> assemble. Pure and synchronous."""

from typing import Sequence

from guid_sharder.domain.models.shard import ShardAssignment, ShardRequest
from guid_sharder.partitioning.assembler import assemble
from guid_sharder.partitioning.pool import partition
from guid_sharder.partitioning.strategies import distribute


def build_shards(pool: Sequence[str], request: ShardRequest) -> ShardAssignment:
    """
    Turn a fetched ID pool into a shard assignment.
    Raises a ShardingError subclass for an unknown strategy or bad reservations;
    nothing is returned in that case.
    """
    shard_count = request.resolved_shard_count()
    parts = partition(pool, request.exclude_ids, request.reserved_ids, shard_count)
    buckets = distribute(request, parts)
    return assemble(buckets, parts)
