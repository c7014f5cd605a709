"""
Protocol Handlers - Element.

Element orders are invalidated per nonce; a hash nonce increment
invalidates every order of the maker, for both token standards.
"""

from events_sync.handlers.base import BaseEventHandler, EventCursor, apply_taker_overrides
from events_sync.kinds import ProtocolFamily
from events_sync.models import (
    BulkCancelEvent,
    ClassifiedEvent,
    NonceCancelEvent,
    OnChainData,
)


ERC721_ORDER_KIND = "element-erc721"
ERC1155_ORDER_KIND = "element-erc1155"


class ElementHandler(BaseEventHandler):
    family = ProtocolFamily.ELEMENT

    async def handle_event(
        self,
        event: ClassifiedEvent,
        cursor: EventCursor,
        data: OnChainData,
    ) -> None:
        kind = event.kind
        order_kind = ERC1155_ORDER_KIND if "-erc1155-" in kind else ERC721_ORDER_KIND

        if kind.endswith("-order-cancelled"):
            args = event.decode()
            data.nonce_cancel_events.append(
                NonceCancelEvent(
                    order_kind=order_kind,
                    maker=args["maker"].lower(),
                    nonce=str(args["nonce"]),
                    base_event_params=event.base_event_params,
                )
            )

        elif kind == "element-hash-nonce-incremented":
            args = event.decode()
            # One record per order kind, told apart by batch index
            for batch_index, bulk_kind in enumerate((ERC721_ORDER_KIND, ERC1155_ORDER_KIND), start=1):
                data.bulk_cancel_events.append(
                    BulkCancelEvent(
                        order_kind=bulk_kind,
                        maker=args["maker"].lower(),
                        min_nonce=str(args["newHashNonce"]),
                        base_event_params=event.base_event_params.with_batch_index(batch_index),
                    )
                )

        elif kind.endswith("-order-filled"):
            await self._on_filled(event, cursor, data, order_kind)

    async def _on_filled(
        self,
        event: ClassifiedEvent,
        cursor: EventCursor,
        data: OnChainData,
        order_kind: str,
    ) -> None:
        args = event.decode()
        side = "sell" if "-sell-" in event.kind else "buy"
        order_id = args["orderHash"].lower()
        maker = args["maker"].lower()
        currency = self.normalize_currency(args["erc20Token"])

        if order_kind == ERC1155_ORDER_KIND:
            contract = args["erc1155Token"].lower()
            token_id = str(args["erc1155TokenId"])
            amount = args["erc1155FillAmount"]
            currency_price = str(args["erc20FillAmount"] // amount)
        else:
            contract = args["erc721Token"].lower()
            token_id = str(args["erc721TokenId"])
            amount = 1
            currency_price = str(args["erc20TokenAmount"])

        attribution = await self.resolve_attribution(event, order_kind, order_id)
        taker = apply_taker_overrides(args["taker"], attribution)

        fill = await self.push_fill(
            data,
            event,
            order_kind=order_kind,
            order_id=order_id,
            order_side=side,
            maker=maker,
            taker=taker,
            currency=currency,
            currency_price=currency_price,
            contract=contract,
            token_id=token_id,
            amount=str(amount),
            attribution=attribution,
        )
        if fill is None:
            return
        self.push_sale_trigger(data, event, order_id)
        self.push_buy_approval_recheck(data, event, cursor, maker, order_kind)
