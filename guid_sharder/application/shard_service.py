"""Shard application service. Orchestrates inventory fetch, partition engine, metadata, metrics."""

import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from guid_sharder.application.exceptions import InventoryFetchError
from guid_sharder.application.inventory import InventorySource
from guid_sharder.core.context import run_id_ctx
from guid_sharder.domain.exceptions import ShardingError
from guid_sharder.domain.models.shard import ShardAssignment, ShardRequest
from guid_sharder.domain.schemas.shard import ShardMetadata, ShardResult
from guid_sharder.observability.metrics import MetricsCollector
from guid_sharder.partitioning.engine import build_shards


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _assignment_to_result(
    assignment: ShardAssignment,
    request: ShardRequest,
    source_type: str,
    group_id: str,
    generated_at: datetime,
) -> ShardResult:
    return ShardResult(
        metadata=ShardMetadata(
            generated_at=generated_at,
            source_type=source_type,
            group_id=group_id or None,
            strategy=request.strategy,
            seed=request.seed,
            total_ids_fetched=assignment.total_fetched,
            excluded_id_count=assignment.excluded_count,
            reserved_id_count=assignment.reserved_count,
            unreserved_ids_distributed=assignment.distributed_count,
            shard_count=assignment.shard_count,
        ),
        shards=assignment.named(),
    )


class ShardService:
    """
    Application-layer orchestration only. No HTTP, no argument parsing, no serialization.
    Fetch failures surface as InventoryFetchError; engine failures propagate unchanged
    and no result is produced.
    """

    def __init__(
        self,
        inventory: Optional[InventorySource],
        logger: logging.Logger,
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._inventory = inventory
        self._logger = logger
        self._metrics = metrics
        self._clock = clock

    async def run(self, request: ShardRequest, source_type: str, group_id: str = "") -> ShardResult:
        """Fetch IDs for source_type, then compute shards over them."""
        if self._inventory is None:
            raise InventoryFetchError("no inventory source configured")
        run_id_ctx.set(str(uuid.uuid4()))

        started = time.perf_counter()
        try:
            ids = await self._inventory.fetch_ids(source_type, group_id)
        except InventoryFetchError as e:
            self._logger.error(
                "inventory_fetch_failed",
                extra={"source_type": source_type, "group_id": group_id, "error": e.message},
            )
            self._count_failure("InventoryFetchError")
            raise
        latency_ms = (time.perf_counter() - started) * 1000
        if self._metrics:
            self._metrics.observe_latency("inventory_fetch_latency_ms", latency_ms)
        self._logger.info(
            "inventory_fetched",
            extra={"source_type": source_type, "group_id": group_id, "total_ids": len(ids)},
        )

        return self.compute(request, ids, source_type, group_id)

    def compute(
        self,
        request: ShardRequest,
        ids: Sequence[str],
        source_type: str,
        group_id: str = "",
    ) -> ShardResult:
        """Run the partition engine over an already materialised pool and stamp metadata."""
        if run_id_ctx.get() is None:
            run_id_ctx.set(str(uuid.uuid4()))

        try:
            assignment = build_shards(ids, request)
        except ShardingError as e:
            self._logger.error(
                "shard_run_failed",
                extra={"strategy": request.strategy, "error": e.message, "error_type": type(e).__name__},
            )
            self._count_failure(type(e).__name__)
            raise

        self._logger.info(
            "pool_partitioned",
            extra={
                "total_ids": assignment.total_fetched,
                "excluded": assignment.excluded_count,
                "reserved": assignment.reserved_count,
                "distributable": assignment.distributed_count,
            },
        )
        sizes: List[int] = [len(bucket) for bucket in assignment.shards]
        self._logger.info(
            "shards_assembled",
            extra={"strategy": request.strategy, "seeded": bool(request.seed), "shard_sizes": sizes},
        )
        if self._metrics:
            self._metrics.increment("shard_runs_total", strategy=request.strategy)
            self._metrics.increment("ids_distributed_total", float(assignment.distributed_count))

        return _assignment_to_result(assignment, request, source_type, group_id, self._clock())

    def _count_failure(self, category: str) -> None:
        if self._metrics:
            self._metrics.increment("shard_runs_failed", category=category)
