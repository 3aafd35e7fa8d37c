"""Pydantic schemas for shard API input and run output. Strict validation, no I/O."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from guid_sharder.domain.models.shard import ShardRequest, decode_reservations


# ---------------------------------------------------------------------------
# Request schema
# ---------------------------------------------------------------------------

class ShardCreateRequest(BaseModel):
    """Request schema for computing shards over caller-supplied IDs (no inventory fetch)."""

    ids: List[str] = Field(..., description="Decimal-integer identifiers to distribute")
    strategy: str = Field(..., min_length=1, description="round-robin | percentage | size | rendezvous")
    shard_count: int = Field(0, ge=0, description="Shard count for round-robin and rendezvous")
    shard_percentages: List[int] = Field(default_factory=list)
    shard_sizes: List[int] = Field(default_factory=list)
    seed: str = ""
    exclude_ids: List[str] = Field(default_factory=list)
    reserved_ids: Dict[str, List[str]] = Field(
        default_factory=dict, description="Shard name (shard_N) to IDs pinned there"
    )
    source: str = Field("api", min_length=1, description="Free-form description of where the IDs came from")

    @field_validator("ids")
    @classmethod
    def ids_must_be_unique(cls, v: List[str]) -> List[str]:
        """The pool is a set; repeated IDs would be distributed twice."""
        if len(set(v)) != len(v):
            raise ValueError("ids must not contain duplicates")
        return v

    def to_shard_request(self) -> ShardRequest:
        """Build the engine input. Reservation keys are decoded to shard indices."""
        return ShardRequest(
            strategy=self.strategy,
            shard_count=self.shard_count,
            percentages=tuple(self.shard_percentages),
            sizes=tuple(self.shard_sizes),
            seed=self.seed,
            exclude_ids=tuple(self.exclude_ids),
            reserved_ids=decode_reservations(self.reserved_ids),
        )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

class ShardMetadata(BaseModel):
    """Parameters and statistics of a sharding run."""

    generated_at: datetime
    source_type: str
    group_id: Optional[str] = None
    strategy: str
    seed: str = ""
    total_ids_fetched: int
    excluded_id_count: int
    reserved_id_count: int
    unreserved_ids_distributed: int
    shard_count: int


class ShardResult(BaseModel):
    """Serialisable top-level output of a sharding run."""

    metadata: ShardMetadata
    shards: Dict[str, List[str]]
