"""
Protocol Handlers - Seaport (v1.1 and v1.4).

============================================================
EVENTS
============================================================
order-cancelled      -> cancel + cancel trigger
counter-incremented  -> bulk cancel
order-filled         -> fill (matched pairs merged) + sale trigger
order-validated      -> order reconstructed and hash-verified

============================================================
"""

import logging
from typing import Any, List, Optional

from core.constants import ZERO_ADDRESS
from core.exceptions import (
    CandidateRejectedError,
    EventDecodeError,
    OrderHashMismatchError,
    TraceUnavailableError,
)
from events_sync.abi import FunctionAbi
from events_sync.catalog.seaport import ORDER_PARAMETERS
from events_sync.handlers.base import (
    BaseEventHandler,
    EventCursor,
    apply_taker_overrides,
)
from events_sync.kinds import ProtocolFamily
from events_sync.models import (
    BulkCancelEvent,
    CancelEvent,
    ClassifiedEvent,
    NewOrderInfo,
    OnChainData,
)
from events_sync.seaport_hashing import (
    OrderParameters,
    ReceivedItem,
    SpentItem,
    compute_order_hash,
    derive_basic_sale,
)
from onchain_adapters.exceptions import OnchainAdapterError


logger = logging.getLogger(__name__)

VALIDATE = FunctionAbi("validate", [f"({ORDER_PARAMETERS},bytes)[]"], ["bool"])
GET_COUNTER = FunctionAbi("getCounter", ["address"], ["uint256"])


def order_kind_of(kind: str) -> str:
    return "seaport-v1.4" if kind.startswith("seaport-v1.4") else "seaport"


class SeaportHandler(BaseEventHandler):
    """Handler for both Seaport versions."""

    family = ProtocolFamily.SEAPORT

    async def handle_event(
        self,
        event: ClassifiedEvent,
        cursor: EventCursor,
        data: OnChainData,
    ) -> None:
        if event.kind.endswith("-order-cancelled"):
            self._on_cancelled(event, data)
        elif event.kind.endswith("-counter-incremented"):
            self._on_counter_incremented(event, data)
        elif event.kind.endswith("-order-filled"):
            await self._on_filled(event, cursor, data)
        elif event.kind.endswith("-order-validated"):
            await self._on_validated(event, data)

    # ─────────────────────────────────────────────────────────────
    # Cancels
    # ─────────────────────────────────────────────────────────────

    def _on_cancelled(self, event: ClassifiedEvent, data: OnChainData) -> None:
        args = event.decode()
        order_id = args["orderHash"].lower()

        data.cancel_events.append(
            CancelEvent(
                order_kind=order_kind_of(event.kind),
                order_id=order_id,
                base_event_params=event.base_event_params,
            )
        )
        self.push_cancel_trigger(data, event, order_id)

    def _on_counter_incremented(self, event: ClassifiedEvent, data: OnChainData) -> None:
        args = event.decode()
        data.bulk_cancel_events.append(
            BulkCancelEvent(
                order_kind=order_kind_of(event.kind),
                maker=args["offerer"].lower(),
                min_nonce=str(args["newCounter"]),
                base_event_params=event.base_event_params,
            )
        )

    # ─────────────────────────────────────────────────────────────
    # Fills
    # ─────────────────────────────────────────────────────────────

    async def _on_filled(
        self,
        event: ClassifiedEvent,
        cursor: EventCursor,
        data: OnChainData,
    ) -> None:
        args = event.decode()
        order_id = args["orderHash"].lower()
        if order_id in cursor.order_ids_to_skip:
            return

        order_kind = order_kind_of(event.kind)
        maker = args["offerer"].lower()
        taker = args["recipient"].lower()
        offer = [SpentItem.from_abi(item) for item in args["offer"]]
        consideration = [ReceivedItem.from_abi(item) for item in args["consideration"]]

        sale = derive_basic_sale(offer, consideration)
        if sale is not None:
            if taker == ZERO_ADDRESS:
                matched = self._matched_counterpart(event, cursor, consideration)
                if matched is not None:
                    taker, matched_order_id = matched
                    cursor.order_ids_to_skip.add(matched_order_id)

            attribution = await self.resolve_attribution(event, order_kind, order_id)
            taker = apply_taker_overrides(taker, attribution, sale.recipient_override)

            currency = self.normalize_currency(sale.payment_token)
            currency_price = str(int(sale.price) // int(sale.amount))

            fill = await self.push_fill(
                data,
                event,
                order_kind=order_kind,
                order_id=order_id,
                order_side=sale.side,
                maker=maker,
                taker=taker,
                currency=currency,
                currency_price=currency_price,
                contract=sale.contract,
                token_id=sale.token_id,
                amount=sale.amount,
                attribution=attribution,
            )
            if fill is None:
                return

        self.push_sale_trigger(data, event, order_id)
        self.push_buy_approval_recheck(data, event, cursor, maker, order_kind)

    def _matched_counterpart(
        self,
        event: ClassifiedEvent,
        cursor: EventCursor,
        consideration: List[ReceivedItem],
    ) -> Optional[tuple]:
        """
        Detect the second half of a `matchOrders` fill.

        Only the event at exactly log index + 1 of the same transaction
        and kind qualifies, and its first offer item must equal our first
        consideration item.

        Returns:
            (offerer, order hash) of the counterpart, or None
        """
        following = cursor.peek_next()
        if following is None or not consideration:
            return None

        params = event.base_event_params
        if (
            following.kind != event.kind
            or following.base_event_params.tx_hash != params.tx_hash
            or following.base_event_params.log_index != params.log_index + 1
        ):
            return None

        args = following.decode()
        offer = [SpentItem.from_abi(item) for item in args["offer"]]
        if not offer:
            return None

        first = consideration[0]
        if offer[0].same_asset(first) and offer[0].amount == first.amount:
            return args["offerer"].lower(), args["orderHash"].lower()
        return None

    # ─────────────────────────────────────────────────────────────
    # Validation
    # ─────────────────────────────────────────────────────────────

    async def _on_validated(self, event: ClassifiedEvent, data: OnChainData) -> None:
        args = event.decode()
        order_id = args["orderHash"].lower()
        order_kind = order_kind_of(event.kind)

        if order_kind == "seaport-v1.4":
            candidates = [args["orderParameters"]]
        else:
            candidates = await self._validate_candidates(event)

        for raw in candidates:
            try:
                params = OrderParameters.from_abi(raw)
                counter = await self._verify_candidate(event, params, order_id)
            except (CandidateRejectedError, EventDecodeError, OnchainAdapterError, ValueError) as e:
                logger.debug(f"[{self.name}] Discarded candidate for {order_id}: {e}")
                continue

            data.orders.append(
                NewOrderInfo(
                    kind=order_kind,
                    order_id=order_id,
                    order_params={**params.to_dict(counter), "signature": "0x"},
                    metadata={},
                )
            )
            return

        logger.debug(f"[{self.name}] No candidate matched validated order {order_id}")

    async def _validate_candidates(self, event: ClassifiedEvent) -> List[Any]:
        """Order parameters of the `validate` calls found in the transaction trace."""
        tx_hash = event.base_event_params.tx_hash
        try:
            trace = await self.context.chain_data.get_call_trace(tx_hash)
        except OnchainAdapterError as e:
            raise TraceUnavailableError(
                "Failed to fetch transaction trace",
                kind=event.kind,
                tx_hash=tx_hash,
                cause=e,
            ) from e

        candidates: List[Any] = []
        calls = 0
        for frame in trace.walk():
            if calls >= self.context.max_validate_calls:
                break
            if not VALIDATE.matches(frame.input):
                continue
            calls += 1
            try:
                (orders,) = VALIDATE.decode_input(frame.input)
            except EventDecodeError as e:
                logger.debug(f"[{self.name}] Undecodable validate call in {tx_hash}: {e}")
                continue
            candidates.extend(order[0] for order in orders)
        return candidates

    async def _verify_candidate(
        self,
        event: ClassifiedEvent,
        params: OrderParameters,
        order_id: str,
    ) -> int:
        """
        Recompute the candidate's hash with the offerer's current counter.

        Raises:
            OrderHashMismatchError: The recomputed hash differs
        """
        output = await self.context.chain_data.call(
            event.base_event_params.address,
            GET_COUNTER.encode_input([params.offerer]),
        )
        (counter,) = GET_COUNTER.decode_output(output)

        order_hash = compute_order_hash(params, counter)
        if order_hash != order_id:
            raise OrderHashMismatchError(expected=order_id, actual=order_hash)
        return counter
