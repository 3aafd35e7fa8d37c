"""Inventory source protocol. Application layer depends on this; infrastructure implements it."""

from typing import List, Protocol


class InventorySource(Protocol):
    """Anything that can list the identifiers of a source type."""

    async def fetch_ids(self, source_type: str, group_id: str = "") -> List[str]:
        """Return the IDs for source_type (group_id only for group membership sources)."""
        ...
