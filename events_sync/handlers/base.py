"""
Protocol Handlers - Base.

============================================================
RESPONSIBILITY
============================================================
Shared machinery of every protocol handler.

- Single pass over the partition, in the order received
- Rolling buffer of the logs of the current transaction
- Per-event isolation: one failing event is logged and skipped
- Fill emission with the native price guard
- Common order / maker triggers

============================================================
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from core.constants import ETH_PLACEHOLDER_ADDRESS
from core.exceptions import classify_exception
from events_sync.attribution import AttributionData, AttributionService
from events_sync.catalog.erc20 import transfer as erc20_transfer
from events_sync.config import ChainSettings
from events_sync.kinds import ProtocolFamily
from events_sync.models import (
    ClassifiedEvent,
    FillEvent,
    FillInfo,
    MakerApprovalTrigger,
    OnChainData,
    OrderTrigger,
)
from events_sync.prices import PriceOracle
from onchain_adapters.base import BaseChainDataSource
from onchain_adapters.models import RawLog


logger = logging.getLogger(__name__)


@dataclass
class HandlerContext:
    """Collaborators shared by every handler."""
    chain_data: BaseChainDataSource
    prices: PriceOracle
    attribution: AttributionService
    settings: ChainSettings
    max_validate_calls: int = 100


@dataclass
class EventCursor:
    """Position of a handler inside its partition."""
    events: Sequence[ClassifiedEvent]
    index: int = 0
    tx_hash: Optional[str] = None
    tx_logs: List[RawLog] = field(default_factory=list)
    order_ids_to_skip: set = field(default_factory=set)

    @property
    def current(self) -> ClassifiedEvent:
        return self.events[self.index]

    def peek_next(self) -> Optional[ClassifiedEvent]:
        if self.index + 1 < len(self.events):
            return self.events[self.index + 1]
        return None

    def advance_to(self, index: int) -> ClassifiedEvent:
        """Move to `index`, resetting the transaction buffer on a new tx."""
        self.index = index
        event = self.events[index]
        if event.base_event_params.tx_hash != self.tx_hash:
            self.tx_hash = event.base_event_params.tx_hash
            self.tx_logs = []
        self.tx_logs.append(event.log)
        return event


class BaseEventHandler(ABC):
    """
    Base class of all protocol handlers.

    Subclasses implement `handle_event()` for a single classified
    event; events of kinds they do not know are ignored (they are
    only there to fill the transaction buffer).
    """

    family: ProtocolFamily

    def __init__(self, context: HandlerContext) -> None:
        self.context = context

    @property
    def name(self) -> str:
        return self.family.value

    async def handle(self, events: Sequence[ClassifiedEvent]) -> OnChainData:
        """Process a partition in order and collect the produced records."""
        data = OnChainData()
        cursor = EventCursor(events=events)

        for index in range(len(events)):
            event = cursor.advance_to(index)
            try:
                await self.handle_event(event, cursor, data)
            except Exception as e:
                logger.warning(
                    f"[{self.name}] Skipped {event.kind} "
                    f"tx={event.base_event_params.tx_hash} "
                    f"log={event.base_event_params.log_index} "
                    f"({classify_exception(e).value}): {e}"
                )

        return data

    @abstractmethod
    async def handle_event(
        self,
        event: ClassifiedEvent,
        cursor: EventCursor,
        data: OnChainData,
    ) -> None:
        pass

    # ─────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────

    def normalize_currency(self, currency: str) -> str:
        """Map native-token placeholders to the canonical sentinel."""
        currency = currency.lower()
        if currency == ETH_PLACEHOLDER_ADDRESS:
            return self.context.settings.native_currency
        return currency

    async def resolve_attribution(
        self,
        event: ClassifiedEvent,
        order_kind: str,
        order_id: Optional[str] = None,
    ) -> AttributionData:
        return await self.context.attribution.resolve_attribution(
            event.base_event_params.tx_hash,
            order_kind,
            order_id,
        )

    async def push_fill(
        self,
        data: OnChainData,
        event: ClassifiedEvent,
        *,
        order_kind: str,
        order_id: Optional[str],
        order_side: str,
        maker: str,
        taker: str,
        currency: str,
        currency_price: str,
        contract: str,
        token_id: str,
        amount: str,
        attribution: Optional[AttributionData] = None,
        fill_context: Optional[str] = None,
    ) -> Optional[FillEvent]:
        """
        Emit a fill and its fill-update payload.

        The fill is dropped (None returned) when the oracle cannot
        resolve a native-token price.
        """
        params = event.base_event_params
        prices = await self.context.prices.resolve_prices(currency, currency_price, params.timestamp)
        if prices.native_price is None:
            logger.info(
                f"[{self.name}] Dropped fill without native price "
                f"tx={params.tx_hash} log={params.log_index} currency={currency}"
            )
            return None

        attribution = attribution or AttributionData()
        fill = FillEvent(
            order_kind=order_kind,
            order_id=order_id,
            order_side=order_side,
            maker=maker,
            taker=taker,
            price=prices.native_price,
            currency=currency,
            currency_price=currency_price,
            usd_price=prices.usd_price,
            contract=contract,
            token_id=token_id,
            amount=amount,
            base_event_params=params,
            order_source_id=attribution.order_source_id,
            aggregator_source_id=attribution.aggregator_source_id,
            fill_source_id=attribution.fill_source_id,
        )
        data.fill_events.append(fill)

        data.fill_infos.append(
            FillInfo(
                context=fill_context or f"{order_id}-{params.tx_hash}",
                order_id=order_id,
                order_side=order_side,
                contract=contract,
                token_id=token_id,
                amount=amount,
                price=prices.native_price,
                timestamp=params.timestamp,
                maker=maker,
                taker=taker,
            )
        )
        return fill

    def push_sale_trigger(self, data: OnChainData, event: ClassifiedEvent, order_id: str) -> None:
        params = event.base_event_params
        data.order_infos.append(
            OrderTrigger(
                context=f"filled-{order_id}-{params.tx_hash}",
                id=order_id,
                kind="sale",
                tx_hash=params.tx_hash,
                tx_timestamp=params.timestamp,
            )
        )

    def push_cancel_trigger(self, data: OnChainData, event: ClassifiedEvent, order_id: str) -> None:
        params = event.base_event_params
        data.order_infos.append(
            OrderTrigger(
                context=f"cancelled-{order_id}",
                id=order_id,
                kind="cancel",
                tx_hash=params.tx_hash,
                tx_timestamp=params.timestamp,
                log_index=params.log_index,
                batch_index=params.batch_index,
                block_hash=params.block_hash,
            )
        )

    def push_buy_approval_recheck(
        self,
        data: OnChainData,
        event: ClassifiedEvent,
        cursor: EventCursor,
        maker: str,
        order_kind: str,
    ) -> None:
        """
        Recheck the maker's ERC20 approval when the transaction moved
        an ERC20 token before this fill.
        """
        erc20 = find_erc20_transfer(cursor.tx_logs)
        if erc20 is None:
            return

        params = event.base_event_params
        data.add_maker_info(
            MakerApprovalTrigger(
                context=f"{params.tx_hash}-buy-approval",
                maker=maker,
                data_kind="buy-approval",
                contract=erc20,
                order_kind=order_kind,
                tx_hash=params.tx_hash,
                tx_timestamp=params.timestamp,
            )
        )


def find_erc20_transfer(logs: Sequence[RawLog]) -> Optional[str]:
    """Contract of the first ERC20 transfer among the logs, if any."""
    for log in logs:
        if log.topics and log.topics[0] == erc20_transfer.topic and len(log.topics) == erc20_transfer.num_topics:
            return log.address.lower()
    return None


def apply_taker_overrides(
    taker: str,
    attribution: AttributionData,
    recipient_override: Optional[str] = None,
) -> str:
    """Taker priority: log value, then attribution, then the order's own recipient."""
    if attribution.taker:
        taker = attribution.taker
    if recipient_override:
        taker = recipient_override
    return taker.lower()
