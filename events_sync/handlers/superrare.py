"""
Protocol Handlers - SuperRare.

SuperRare has no order hashes on-chain; a deterministic id is
derived from the sale itself so replays map to the same order.
"""

from eth_abi.packed import encode_packed
from eth_utils import encode_hex, keccak

from events_sync.handlers.base import BaseEventHandler, EventCursor, apply_taker_overrides
from events_sync.kinds import ProtocolFamily
from events_sync.models import ClassifiedEvent, OnChainData


ORDER_KIND = "superrare"


def superrare_order_id(contract: str, token_id: int, currency: str, price: int) -> str:
    return encode_hex(keccak(encode_packed(
        ["string", "address", "uint256", "address", "uint256"],
        [ORDER_KIND, contract, token_id, currency, price],
    )))


class SuperRareHandler(BaseEventHandler):
    family = ProtocolFamily.SUPERRARE

    async def handle_event(
        self,
        event: ClassifiedEvent,
        cursor: EventCursor,
        data: OnChainData,
    ) -> None:
        args = event.decode()
        native = self.context.settings.native_currency

        if event.kind == "superrare-listing-filled":
            side, maker, taker = "sell", args["seller"], args["buyer"]
            contract, currency = args["originContract"], args["currencyAddress"]
        elif event.kind == "superrare-sold":
            side, maker, taker = "sell", args["seller"], args["buyer"]
            contract, currency = args["originContract"], native
        elif event.kind == "superrare-accept-offer":
            side, maker, taker = "buy", args["bidder"], args["seller"]
            contract, currency = args["originContract"], args["currencyAddress"]
        elif event.kind == "superrare-auction-settled":
            side, maker, taker = "sell", args["seller"], args["bidder"]
            contract, currency = args["contractAddress"], args["currencyAddress"]
        else:
            return

        contract = contract.lower()
        currency = self.normalize_currency(currency)
        maker = maker.lower()
        price = args["amount"]
        token_id = args["tokenId"]
        order_id = superrare_order_id(contract, token_id, currency, price)

        attribution = await self.resolve_attribution(event, ORDER_KIND, order_id)
        taker = apply_taker_overrides(taker, attribution)

        await self.push_fill(
            data,
            event,
            order_kind=ORDER_KIND,
            order_id=order_id,
            order_side=side,
            maker=maker,
            taker=taker,
            currency=currency,
            currency_price=str(price),
            contract=contract,
            token_id=str(token_id),
            amount="1",
            attribution=attribution,
        )
