"""
Protocol Handlers - LooksRare.
"""

from events_sync.handlers.base import BaseEventHandler, EventCursor, apply_taker_overrides
from events_sync.kinds import ProtocolFamily
from events_sync.models import (
    BulkCancelEvent,
    ClassifiedEvent,
    NonceCancelEvent,
    OnChainData,
)


ORDER_KIND = "looks-rare"


class LooksRareHandler(BaseEventHandler):
    family = ProtocolFamily.LOOKS_RARE

    async def handle_event(
        self,
        event: ClassifiedEvent,
        cursor: EventCursor,
        data: OnChainData,
    ) -> None:
        if event.kind == "looks-rare-cancel-all-orders":
            args = event.decode()
            data.bulk_cancel_events.append(
                BulkCancelEvent(
                    order_kind=ORDER_KIND,
                    maker=args["user"].lower(),
                    min_nonce=str(args["newMinNonce"]),
                    base_event_params=event.base_event_params,
                )
            )

        elif event.kind == "looks-rare-cancel-multiple-orders":
            args = event.decode()
            maker = args["user"].lower()
            for batch_index, nonce in enumerate(args["orderNonces"], start=1):
                data.nonce_cancel_events.append(
                    NonceCancelEvent(
                        order_kind=ORDER_KIND,
                        maker=maker,
                        nonce=str(nonce),
                        base_event_params=event.base_event_params.with_batch_index(batch_index),
                    )
                )

        elif event.kind in ("looks-rare-taker-ask", "looks-rare-taker-bid"):
            await self._on_taker_fill(event, cursor, data)

    async def _on_taker_fill(self, event: ClassifiedEvent, cursor: EventCursor, data: OnChainData) -> None:
        args = event.decode()
        # The taker of an ask sells into the maker's bid
        side = "buy" if event.kind == "looks-rare-taker-ask" else "sell"
        order_id = args["orderHash"].lower()
        maker = args["maker"].lower()
        amount = args["amount"]

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
            currency=self.normalize_currency(args["currency"]),
            currency_price=str(args["price"] // amount),
            contract=args["collection"].lower(),
            token_id=str(args["tokenId"]),
            amount=str(amount),
            attribution=attribution,
        )
        if fill is None:
            return
        self.push_sale_trigger(data, event, order_id)
        self.push_buy_approval_recheck(data, event, cursor, maker, ORDER_KIND)
