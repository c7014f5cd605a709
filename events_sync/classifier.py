"""
Events Sync - Event Classifier.

Matches raw logs against the catalog. Block metadata is resolved
(and persisted) before a log is classified, so downstream
handlers can rely on it being durable.
"""

import logging
from typing import Optional

from events_sync.block_cache import BlockCache
from events_sync.catalog import EventCatalog
from events_sync.models import BaseEventParams, ClassifiedEvent
from onchain_adapters.models import RawLog


logger = logging.getLogger(__name__)


class EventClassifier:
    """First-match-wins classification of raw logs."""

    def __init__(self, catalog: EventCatalog) -> None:
        self._catalog = catalog

    async def classify(self, log: RawLog, block_cache: BlockCache) -> Optional[ClassifiedEvent]:
        """
        Classify a raw log.

        Returns:
            The classified event, or None when no catalog entry matches
        """
        block = await block_cache.get(log.block_number)

        base_event_params = BaseEventParams(
            address=log.address.lower(),
            block=log.block_number,
            block_hash=log.block_hash.lower(),
            tx_hash=log.transaction_hash.lower(),
            tx_index=log.transaction_index,
            log_index=log.log_index,
            timestamp=block.timestamp,
        )

        entry = self._catalog.match(log.topics, log.address)
        if entry is None:
            return None

        return ClassifiedEvent(
            kind=entry.kind,
            family=entry.family,
            base_event_params=base_event_params,
            log=log,
            entry=entry,
        )
