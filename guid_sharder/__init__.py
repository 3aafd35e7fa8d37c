"""guid-sharder: deterministic shard planning for staged Jamf Pro rollouts."""

__version__ = "0.1.0"
