"""
Protocol Handlers - X2Y2.

============================================================
NOTES
============================================================
EvInventory carries the order item blob; its layout depends on
the delegate type:

- 1: ERC721 items  (address token, uint256 tokenId)[]
- 2: ERC1155 items (address token, uint256 tokenId, uint256 amount)[]

Only single-item orders are treated as fills.

============================================================
"""

import logging

from core.exceptions import EventDecodeError
from events_sync.abi import ABI_DECODE_ERRORS, decode_values
from events_sync.handlers.base import BaseEventHandler, EventCursor, apply_taker_overrides
from events_sync.kinds import ProtocolFamily
from events_sync.models import CancelEvent, ClassifiedEvent, OnChainData


logger = logging.getLogger(__name__)

ORDER_KIND = "x2y2"

INTENT_SELL = 1
INTENT_BUY = 3

DELEGATE_ERC721 = 1
DELEGATE_ERC1155 = 2

ITEM_LAYOUTS = {
    DELEGATE_ERC721: "(address,uint256)[]",
    DELEGATE_ERC1155: "(address,uint256,uint256)[]",
}


class X2Y2Handler(BaseEventHandler):
    family = ProtocolFamily.X2Y2

    async def handle_event(
        self,
        event: ClassifiedEvent,
        cursor: EventCursor,
        data: OnChainData,
    ) -> None:
        if event.kind == "x2y2-order-cancelled":
            order_id = event.decode()["itemHash"].lower()
            data.cancel_events.append(
                CancelEvent(
                    order_kind=ORDER_KIND,
                    order_id=order_id,
                    base_event_params=event.base_event_params,
                )
            )
            self.push_cancel_trigger(data, event, order_id)

        elif event.kind == "x2y2-order-inventory":
            await self._on_inventory(event, cursor, data)

    async def _on_inventory(self, event: ClassifiedEvent, cursor: EventCursor, data: OnChainData) -> None:
        args = event.decode()
        order_id = args["itemHash"].lower()

        intent = args["intent"]
        if intent == INTENT_SELL:
            side = "sell"
        elif intent == INTENT_BUY:
            side = "buy"
        else:
            logger.debug(f"[{self.name}] Ignored intent {intent} for {order_id}")
            return

        layout = ITEM_LAYOUTS.get(args["delegateType"])
        if layout is None:
            logger.debug(f"[{self.name}] Ignored delegate type {args['delegateType']} for {order_id}")
            return

        item_price, item_data = args["item"]
        try:
            (items,) = decode_values([layout], item_data)
        except ABI_DECODE_ERRORS as e:
            raise EventDecodeError(
                "Cannot decode X2Y2 order item",
                kind=event.kind,
                tx_hash=event.base_event_params.tx_hash,
                log_index=event.base_event_params.log_index,
                cause=e,
            ) from e

        if len(items) != 1:
            return

        item = items[0]
        contract = item[0].lower()
        token_id = str(item[1])
        amount = item[2] if len(item) > 2 else 1

        detail = args["detail"]
        price = detail[3] or item_price
        maker = args["maker"].lower()
        currency = self.normalize_currency(args["currency"])

        attribution = await self.resolve_attribution(event, ORDER_KIND, order_id)
        taker = apply_taker_overrides(args["taker"], attribution)

        fill = await self.push_fill(
            data,
            event,
            order_kind=ORDER_KIND,
            order_id=order_id,
            order_side=side,
            maker=maker,
            taker=taker,
            currency=currency,
            currency_price=str(price // amount),
            contract=contract,
            token_id=token_id,
            amount=str(amount),
            attribution=attribution,
        )
        if fill is None:
            return
        self.push_sale_trigger(data, event, order_id)
        self.push_buy_approval_recheck(data, event, cursor, maker, ORDER_KIND)
