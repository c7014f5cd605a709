"""
Events Sync - Persistence Contract.

The engine only needs a handful of persistence operations; the
SQL implementation lives in `storage.event_store`. Implementations
report failures as `core.exceptions.StorageError`.
"""

from abc import ABC, abstractmethod
from typing import List

from events_sync.models import OnChainData
from onchain_adapters.models import BlockHeader


class RecordStore(ABC):
    """Durable storage of blocks and canonical records."""

    # ---------------------------------------------------------
    # Blocks
    # ---------------------------------------------------------

    @abstractmethod
    def save_block(self, block: BlockHeader) -> BlockHeader:
        """Insert a block (first writer wins) and return the stored row."""
        pass

    @abstractmethod
    def get_blocks(self, number: int) -> List[BlockHeader]:
        """All stored blocks at a height (more than one after a reorg)."""
        pass

    @abstractmethod
    def delete_block(self, number: int, block_hash: str) -> int:
        pass

    # ---------------------------------------------------------
    # Records
    # ---------------------------------------------------------

    @abstractmethod
    def persist(self, data: OnChainData) -> dict:
        """Insert every record of a sync pass atomically; replays are no-ops."""
        pass

    @abstractmethod
    def remove_events(self, block: int, block_hash: str) -> dict:
        """Remove every record stored for exactly this (block, block_hash)."""
        pass

    def unsync(self, block: int, block_hash: str) -> dict:
        """Roll back an orphaned block: its records, then its header."""
        removed = dict(self.remove_events(block, block_hash))
        removed["blocks"] = self.delete_block(block, block_hash)
        return removed
