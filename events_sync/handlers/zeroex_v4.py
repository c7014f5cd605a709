"""
Protocol Handlers - ZeroEx v4 NFT orders.

Fill events carry no order hash: fills are keyed on maker and
nonce, and ERC721 fills also consume the nonce.
"""

from events_sync.handlers.base import BaseEventHandler, EventCursor, apply_taker_overrides
from events_sync.kinds import ProtocolFamily
from events_sync.models import ClassifiedEvent, NonceCancelEvent, OnChainData


ERC721_ORDER_KIND = "zeroex-v4-erc721"
ERC1155_ORDER_KIND = "zeroex-v4-erc1155"

# TradeDirection enum of the exchange
DIRECTION_SELL = 0
DIRECTION_BUY = 1


class ZeroExV4Handler(BaseEventHandler):
    family = ProtocolFamily.ZEROEX_V4

    async def handle_event(
        self,
        event: ClassifiedEvent,
        cursor: EventCursor,
        data: OnChainData,
    ) -> None:
        order_kind = ERC1155_ORDER_KIND if "-erc1155-" in event.kind else ERC721_ORDER_KIND

        if event.kind.endswith("-order-cancelled"):
            args = event.decode()
            self._push_nonce_cancel(data, event, order_kind, args["maker"], args["nonce"])
        elif event.kind.endswith("-order-filled"):
            await self._on_filled(event, cursor, data, order_kind)

    def _push_nonce_cancel(
        self,
        data: OnChainData,
        event: ClassifiedEvent,
        order_kind: str,
        maker: str,
        nonce: int,
    ) -> None:
        data.nonce_cancel_events.append(
            NonceCancelEvent(
                order_kind=order_kind,
                maker=maker.lower(),
                nonce=str(nonce),
                base_event_params=event.base_event_params,
            )
        )

    async def _on_filled(
        self,
        event: ClassifiedEvent,
        cursor: EventCursor,
        data: OnChainData,
        order_kind: str,
    ) -> None:
        args = event.decode()
        direction = args["direction"]
        if direction not in (DIRECTION_SELL, DIRECTION_BUY):
            return

        side = "sell" if direction == DIRECTION_SELL else "buy"
        maker = args["maker"].lower()
        nonce = args["nonce"]
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
            # A filled ERC721 order can never be filled again
            self._push_nonce_cancel(data, event, order_kind, maker, nonce)

        attribution = await self.resolve_attribution(event, order_kind)
        taker = apply_taker_overrides(args["taker"], attribution)
        tx_hash = event.base_event_params.tx_hash

        fill = await self.push_fill(
            data,
            event,
            order_kind=order_kind,
            order_id=None,
            order_side=side,
            maker=maker,
            taker=taker,
            currency=currency,
            currency_price=currency_price,
            contract=contract,
            token_id=token_id,
            amount=str(amount),
            attribution=attribution,
            fill_context=f"{order_kind}-{maker}-{nonce}-{tx_hash}",
        )
        if fill is None:
            return
        self.push_buy_approval_recheck(data, event, cursor, maker, order_kind)
