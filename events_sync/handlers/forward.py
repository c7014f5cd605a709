"""
Protocol Handlers - Forward.

Forward only supports bids, always paid in the wrapped native token.
"""

from events_sync.handlers.base import BaseEventHandler, EventCursor, apply_taker_overrides
from events_sync.kinds import ProtocolFamily
from events_sync.models import (
    BulkCancelEvent,
    CancelEvent,
    ClassifiedEvent,
    OnChainData,
)


ORDER_KIND = "forward"


class ForwardHandler(BaseEventHandler):
    family = ProtocolFamily.FORWARD

    async def handle_event(
        self,
        event: ClassifiedEvent,
        cursor: EventCursor,
        data: OnChainData,
    ) -> None:
        args = event.decode()

        if event.kind == "forward-order-cancelled":
            order_id = args["orderHash"].lower()
            data.cancel_events.append(
                CancelEvent(
                    order_kind=ORDER_KIND,
                    order_id=order_id,
                    base_event_params=event.base_event_params,
                )
            )
            self.push_cancel_trigger(data, event, order_id)

        elif event.kind == "forward-counter-incremented":
            data.bulk_cancel_events.append(
                BulkCancelEvent(
                    order_kind=ORDER_KIND,
                    maker=args["maker"].lower(),
                    min_nonce=str(args["newCounter"]),
                    base_event_params=event.base_event_params,
                )
            )

        elif event.kind == "forward-order-filled":
            order_id = args["orderHash"].lower()
            maker = args["maker"].lower()

            attribution = await self.resolve_attribution(event, ORDER_KIND, order_id)
            taker = apply_taker_overrides(args["taker"], attribution)

            fill = await self.push_fill(
                data,
                event,
                order_kind=ORDER_KIND,
                order_id=order_id,
                order_side="buy",
                maker=maker,
                taker=taker,
                currency=self.context.settings.weth,
                currency_price=str(args["unitPrice"]),
                contract=args["token"].lower(),
                token_id=str(args["identifier"]),
                amount=str(args["filledAmount"]),
                attribution=attribution,
            )
            if fill is None:
                return
            self.push_sale_trigger(data, event, order_id)
            self.push_buy_approval_recheck(data, event, cursor, maker, ORDER_KIND)
