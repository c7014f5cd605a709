"""
Events Sync - Block Cache.

============================================================
RESPONSIBILITY
============================================================
Per-pass cache of block metadata.

- First writer wins per block number
- A block is persisted the first time it is seen, before any
  event of that block is classified
- Owned by exactly one sync pass

============================================================
"""

import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from core.exceptions import BlockFetchError, StorageError
from events_sync.store import RecordStore
from onchain_adapters.base import BaseChainDataSource
from onchain_adapters.exceptions import OnchainAdapterError
from onchain_adapters.models import BlockHeader


logger = logging.getLogger(__name__)


class BlockCache:
    """Write-once-per-block cache backed by the chain and the record store."""

    def __init__(
        self,
        chain_data: BaseChainDataSource,
        store: Optional[RecordStore] = None,
    ) -> None:
        self._chain_data = chain_data
        self._store = store
        self._blocks: Dict[int, BlockHeader] = {}

    def __contains__(self, number: int) -> bool:
        return number in self._blocks

    def __len__(self) -> int:
        return len(self._blocks)

    def peek(self, number: int) -> Optional[BlockHeader]:
        return self._blocks.get(number)

    def put(self, block: BlockHeader) -> BlockHeader:
        """Cache a block unless its number is already cached."""
        return self._blocks.setdefault(block.number, block)

    async def get(self, number: int) -> BlockHeader:
        """
        Cached block, fetched and persisted on first sight.

        Raises:
            BlockFetchError: The block could not be fetched or persisted
        """
        cached = self._blocks.get(number)
        if cached is not None:
            return cached

        try:
            block = await self._chain_data.get_block(number)
        except OnchainAdapterError as e:
            raise BlockFetchError(
                f"Failed to fetch block {number}",
                from_block=number,
                to_block=number,
                cause=e,
            ) from e

        if self._store is not None:
            try:
                block = self._store.save_block(block)
            except StorageError as e:
                raise BlockFetchError(
                    f"Failed to persist block {number}",
                    from_block=number,
                    to_block=number,
                    cause=e,
                ) from e

        # Another coroutine may have populated the entry meanwhile
        return self.put(block)

    async def prewarm(self, numbers: Iterable[int], concurrency: int) -> int:
        """
        Fetch several blocks concurrently with a bounded fan-out.

        Returns:
            Number of blocks cached afterwards
        """
        semaphore = asyncio.Semaphore(concurrency)

        async def fetch(number: int) -> None:
            async with semaphore:
                await self.get(number)

        await asyncio.gather(*(fetch(number) for number in numbers))
        logger.debug(f"[block_cache] Pre-warmed, {len(self._blocks)} blocks cached")
        return len(self._blocks)

    def blocks(self) -> List[BlockHeader]:
        """Cached blocks ordered by number."""
        return [self._blocks[number] for number in sorted(self._blocks)]
