# Application layer: services that orchestrate domain and infrastructure.

from guid_sharder.application.exceptions import (
    ApplicationError,
    InventoryFetchError,
    OutputWriteError,
)
from guid_sharder.application.inventory import InventorySource
from guid_sharder.application.shard_service import ShardService

__all__ = [
    "ApplicationError",
    "InventoryFetchError",
    "InventorySource",
    "OutputWriteError",
    "ShardService",
]
