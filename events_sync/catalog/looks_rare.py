"""
Event Catalog - LooksRare.
"""

from events_sync.abi import EventAbi, EventParam as P
from events_sync.catalog.base import EventDefinition
from events_sync.kinds import ProtocolFamily


def _taker_fill(name: str) -> EventAbi:
    return EventAbi(name, [
        P("orderHash", "bytes32"),
        P("orderNonce", "uint256"),
        P("taker", "address", indexed=True),
        P("maker", "address", indexed=True),
        P("strategy", "address", indexed=True),
        P("currency", "address"),
        P("collection", "address"),
        P("tokenId", "uint256"),
        P("amount", "uint256"),
        P("price", "uint256"),
    ])


cancel_all_orders = EventDefinition(
    kind="looks-rare-cancel-all-orders",
    family=ProtocolFamily.LOOKS_RARE,
    abi=EventAbi("CancelAllOrders", [
        P("user", "address", indexed=True),
        P("newMinNonce", "uint256"),
    ]),
    exchange="looks-rare",
)

cancel_multiple_orders = EventDefinition(
    kind="looks-rare-cancel-multiple-orders",
    family=ProtocolFamily.LOOKS_RARE,
    abi=EventAbi("CancelMultipleOrders", [
        P("user", "address", indexed=True),
        P("orderNonces", "uint256[]"),
    ]),
    exchange="looks-rare",
)

taker_ask = EventDefinition(
    kind="looks-rare-taker-ask",
    family=ProtocolFamily.LOOKS_RARE,
    abi=_taker_fill("TakerAsk"),
    exchange="looks-rare",
)

taker_bid = EventDefinition(
    kind="looks-rare-taker-bid",
    family=ProtocolFamily.LOOKS_RARE,
    abi=_taker_fill("TakerBid"),
    exchange="looks-rare",
)

DEFINITIONS = (cancel_all_orders, cancel_multiple_orders, taker_ask, taker_bid)
