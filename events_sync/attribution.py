"""
Events Sync - Attribution.

Resolves who should be credited for a trade (order source,
aggregator, filling application) and, for aggregated fills,
the real taker behind a router contract.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AttributionData:
    """Attribution of a single fill."""
    taker: Optional[str] = None
    order_source_id: Optional[int] = None
    aggregator_source_id: Optional[int] = None
    fill_source_id: Optional[int] = None


class AttributionService(ABC):
    """Resolves attribution for fills of a transaction."""

    @abstractmethod
    async def resolve_attribution(
        self,
        tx_hash: str,
        order_kind: str,
        order_id: Optional[str] = None,
    ) -> AttributionData:
        pass


class NoAttributionService(AttributionService):
    """Attribution service that never attributes anything."""

    async def resolve_attribution(
        self,
        tx_hash: str,
        order_kind: str,
        order_id: Optional[str] = None,
    ) -> AttributionData:
        return AttributionData()
