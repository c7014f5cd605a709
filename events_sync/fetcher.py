"""
Events Sync - Log Fetcher.

============================================================
RESPONSIBILITY
============================================================
Builds the log filter for a block range and retrieves the
matching logs in (block, log index) order.

- Default: topic-0 union of every catalog entry
- Subset: topic-0 union of the requested kinds
- Address: every log emitted by one contract

Small live ranges pre-warm the block cache up front; large or
backfill ranges skip it.

============================================================
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from core.exceptions import LogFetchError
from events_sync.block_cache import BlockCache
from events_sync.catalog import EventCatalog
from onchain_adapters.base import BaseChainDataSource
from onchain_adapters.exceptions import OnchainAdapterError
from onchain_adapters.models import LogFilter, RawLog


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PrewarmPolicy:
    """When and how wide block headers are fetched ahead of classification."""
    max_blocks: int = 32
    concurrency: int = 32

    def applies(self, from_block: int, to_block: int, backfill: bool) -> bool:
        return not backfill and to_block - from_block + 1 <= self.max_blocks


class LogFetcher:
    """Retrieves raw logs for a block range."""

    def __init__(
        self,
        chain_data: BaseChainDataSource,
        catalog: EventCatalog,
        prewarm: Optional[PrewarmPolicy] = None,
    ) -> None:
        self._chain_data = chain_data
        self._catalog = catalog
        self._prewarm = prewarm or PrewarmPolicy()

    def build_filter(
        self,
        from_block: int,
        to_block: int,
        kinds: Optional[Iterable[str]] = None,
        address: Optional[str] = None,
    ) -> LogFilter:
        """Filter for a range: by address when given, otherwise by topic-0."""
        if address is not None:
            return LogFilter(from_block=from_block, to_block=to_block, address=address.lower())

        topics = self._catalog.topics(kinds)
        return LogFilter(from_block=from_block, to_block=to_block, topics=(topics,))

    async def fetch(
        self,
        from_block: int,
        to_block: int,
        block_cache: BlockCache,
        backfill: bool = False,
        kinds: Optional[Iterable[str]] = None,
        address: Optional[str] = None,
    ) -> List[RawLog]:
        """
        Fetch ordered logs for `[from_block, to_block]`.

        Raises:
            LogFetchError: The logs could not be retrieved
            BlockFetchError: Pre-warming failed
        """
        if self._prewarm.applies(from_block, to_block, backfill):
            await block_cache.prewarm(range(from_block, to_block + 1), self._prewarm.concurrency)

        log_filter = self.build_filter(from_block, to_block, kinds, address)
        if log_filter.topics is not None and not log_filter.topics[0]:
            logger.info(f"[fetcher] No topics selected for {from_block}-{to_block}")
            return []

        try:
            logs = await self._chain_data.get_logs(log_filter)
        except OnchainAdapterError as e:
            raise LogFetchError(
                f"Failed to fetch logs for blocks {from_block}-{to_block}",
                from_block=from_block,
                to_block=to_block,
                cause=e,
            ) from e

        logs = sorted(logs, key=lambda log: (log.block_number, log.log_index))
        logger.debug(f"[fetcher] Fetched {len(logs)} logs for {from_block}-{to_block}")
        return logs
