"""Partition engine: sequencer, pool partitioner, strategies, assembler. No I/O."""

from guid_sharder.partitioning.assembler import assemble
from guid_sharder.partitioning.engine import build_shards
from guid_sharder.partitioning.pool import PartitionResult, partition
from guid_sharder.partitioning.sequencer import sequence, sort_numerically
from guid_sharder.partitioning.strategies import (
    by_percentage,
    by_size,
    distribute,
    rendezvous,
    rendezvous_shard,
    round_robin,
)

__all__ = [
    "PartitionResult",
    "assemble",
    "build_shards",
    "by_percentage",
    "by_size",
    "distribute",
    "partition",
    "rendezvous",
    "rendezvous_shard",
    "round_robin",
    "sequence",
    "sort_numerically",
]
