"""
Events Sync - Orchestrator.

============================================================
RESPONSIBILITY
============================================================
Drives one sync pass over a block range:

  fetch logs -> classify -> partition by protocol family
  -> run handlers -> persist -> enqueue downstream jobs
  -> schedule reorg re-checks (live mode only)

and the reverse path for a block orphaned by a reorg.

============================================================
FAILURE MODEL
============================================================
- Per-event failures are absorbed by the handlers
- Log or block retrieval failures abort the whole pass; the
  caller retries the range wholesale
- No checkpoint is kept inside a pass

============================================================
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from core.constants import DUPLICATE_BLOCK_RECHECK_DELAYS_SECONDS
from core.exceptions import EventsSyncError
from events_sync.block_cache import BlockCache
from events_sync.catalog import EventCatalog
from events_sync.classifier import EventClassifier
from events_sync.config import SyncConfig
from events_sync.fetcher import LogFetcher, PrewarmPolicy
from events_sync.handlers import HandlerContext, build_handlers
from events_sync.kinds import partition_events
from events_sync.models import ClassifiedEvent, FillEvent, OnChainData
from events_sync.queues import DownstreamQueues, QueueJob
from events_sync.store import RecordStore
from onchain_adapters.base import BaseChainDataSource
from onchain_adapters.models import BlockHeader


logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Summary of one sync pass."""
    from_block: int
    to_block: int
    backfill: bool
    logs_fetched: int = 0
    events_classified: int = 0
    records: Dict[str, int] = field(default_factory=dict)
    persisted: Dict[str, int] = field(default_factory=dict)
    block_checks_scheduled: int = 0
    data: Optional[OnChainData] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from_block": self.from_block,
            "to_block": self.to_block,
            "backfill": self.backfill,
            "logs_fetched": self.logs_fetched,
            "events_classified": self.events_classified,
            "records": self.records,
            "persisted": self.persisted,
            "block_checks_scheduled": self.block_checks_scheduled,
        }


class EventsSyncOrchestrator:
    """
    Coordinates a sync pass. Holds no per-pass state: every call
    gets its own block cache and handler outputs.
    """

    def __init__(
        self,
        config: SyncConfig,
        catalog: EventCatalog,
        chain_data: BaseChainDataSource,
        store: RecordStore,
        queues: DownstreamQueues,
        context: HandlerContext,
    ) -> None:
        self.config = config
        self.catalog = catalog
        self.chain_data = chain_data
        self.store = store
        self.queues = queues
        self.context = context

        self._fetcher = LogFetcher(
            chain_data,
            catalog,
            PrewarmPolicy(
                max_blocks=config.prewarm_max_blocks,
                concurrency=config.prewarm_concurrency,
            ),
        )
        self._classifier = EventClassifier(catalog)
        self._handlers = build_handlers(context)

    # =========================================================
    # SYNC
    # =========================================================

    async def sync_events(
        self,
        from_block: int,
        to_block: int,
        backfill: bool = False,
        kinds: Optional[Iterable[str]] = None,
        address: Optional[str] = None,
    ) -> SyncResult:
        """
        Sync `[from_block, to_block]`.

        Args:
            backfill: Historical mode; no header pre-warming and no
                reorg re-checks, otherwise identical output
            kinds: Restrict the topic filter to these event kinds
            address: Fetch every log of one contract instead

        Raises:
            LogFetchError: The logs could not be fetched
            BlockFetchError: A block header could not be fetched or stored
        """
        result = SyncResult(from_block=from_block, to_block=to_block, backfill=backfill)
        block_cache = BlockCache(self.chain_data, self.store)

        try:
            logs = await self._fetcher.fetch(
                from_block,
                to_block,
                block_cache,
                backfill=backfill,
                kinds=kinds,
                address=address,
            )
            result.logs_fetched = len(logs)

            events: List[ClassifiedEvent] = []
            for log in logs:
                event = await self._classifier.classify(log, block_cache)
                if event is not None:
                    events.append(event)
            result.events_classified = len(events)
        except EventsSyncError as e:
            logger.error(f"[orchestrator] Sync of {from_block}-{to_block} failed: {e}")
            raise

        data = await self._run_handlers(events)
        result.data = data
        result.records = data.counts()
        result.persisted = self.store.persist(data)

        await self._enqueue(data)

        if not backfill and self.config.enable_reorg_check:
            result.block_checks_scheduled = await self._schedule_block_checks(block_cache.blocks())

        logger.info(
            f"[orchestrator] Synced {from_block}-{to_block}: "
            f"{result.logs_fetched} logs, {result.events_classified} events, "
            f"{len(data.fill_events)} fills"
        )
        return result

    async def _run_handlers(self, events: List[ClassifiedEvent]) -> OnChainData:
        """Run every handler on its own partition concurrently and merge the outputs."""
        partitions = partition_events(events)
        outputs = await asyncio.gather(*(
            self._handlers[family].handle(partition)
            for family, partition in partitions.items()
        ))

        data = OnChainData()
        for output in outputs:
            data.merge(output)
        return data

    # =========================================================
    # DOWNSTREAM
    # =========================================================

    async def _enqueue(self, data: OnChainData) -> None:
        await self.queues.fill_updates.add([
            QueueJob(job_id=info.context, payload=info.to_dict())
            for info in data.fill_infos
        ])
        await self.queues.order_updates.add([
            QueueJob(job_id=info.context, payload=info.to_dict())
            for info in data.order_infos
        ])
        await self.queues.maker_updates.add([
            QueueJob(job_id=f"{info.context}-{info.maker}", payload=info.to_dict())
            for info in data.maker_infos
        ])
        await self.queues.orderbook.add([
            QueueJob(job_id=f"{order.kind}-{order.order_id}", payload=order.to_dict())
            for order in data.orders
        ])
        await self.queues.activities.add([
            fill_activity_job(fill) for fill in data.fill_events
        ])

    async def _schedule_block_checks(self, blocks: List[BlockHeader]) -> int:
        """
        Queue delayed re-checks of every block seen in the pass.

        Heights already holding more than one hash get two quick
        re-checks first.
        """
        jobs: List[QueueJob] = []

        for block in blocks:
            if len(self.store.get_blocks(block.number)) > 1:
                logger.warning(f"[orchestrator] Duplicate block at height {block.number}")
                jobs.extend(
                    block_check_job(block, delay)
                    for delay in DUPLICATE_BLOCK_RECHECK_DELAYS_SECONDS
                )

        for block in blocks:
            jobs.extend(
                block_check_job(block, minutes * 60)
                for minutes in self.config.reorg_check_frequency
            )

        return await self.queues.block_checks.add(jobs)

    # =========================================================
    # UNSYNC
    # =========================================================

    async def unsync_events(self, block: int, block_hash: str) -> Dict[str, int]:
        """Remove everything derived from an orphaned (block, block_hash)."""
        block_hash = block_hash.lower()
        removed = self.store.unsync(block, block_hash)

        await self.queues.removed_activities.add([
            QueueJob(
                job_id=f"removed-{block_hash}",
                payload={"block": block, "blockHash": block_hash},
            )
        ])

        logger.info(f"[orchestrator] Unsynced block {block} ({block_hash}): {removed}")
        return removed


# =============================================================
# JOB BUILDERS
# =============================================================

def fill_activity_job(fill: FillEvent) -> QueueJob:
    """Activity feed entry of a fill; `from` is always the seller."""
    params = fill.base_event_params
    seller, buyer = (fill.maker, fill.taker) if fill.order_side == "sell" else (fill.taker, fill.maker)
    return QueueJob(
        job_id=f"{params.tx_hash}-{params.log_index}-{params.batch_index}",
        payload={
            "kind": "fill-event",
            "data": {
                **fill.to_dict(),
                "fromAddress": seller,
                "toAddress": buyer,
            },
        },
    )


def block_check_job(block: BlockHeader, delay_seconds: int) -> QueueJob:
    return QueueJob(
        job_id=f"{block.number}-{block.hash}-{delay_seconds}",
        payload={"block": block.number, "blockHash": block.hash},
        delay_seconds=delay_seconds,
    )


def create_orchestrator(
    config: SyncConfig,
    chain_data: BaseChainDataSource,
    store: RecordStore,
    queues: Optional[DownstreamQueues] = None,
    prices=None,
    attribution=None,
) -> EventsSyncOrchestrator:
    """
    Wire an orchestrator from configuration, defaulting the price
    oracle, attribution service and queues.
    """
    from events_sync.attribution import NoAttributionService
    from events_sync.prices import NativePriceOracle

    settings = config.chain_settings()
    context = HandlerContext(
        chain_data=chain_data,
        prices=prices or NativePriceOracle(settings, config.native_usd_price),
        attribution=attribution or NoAttributionService(),
        settings=settings,
        max_validate_calls=config.max_validate_calls,
    )
    return EventsSyncOrchestrator(
        config=config,
        catalog=EventCatalog.from_settings(settings),
        chain_data=chain_data,
        store=store,
        queues=queues or DownstreamQueues(),
        context=context,
    )
