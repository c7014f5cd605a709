"""
Event Catalog - Element.
"""

from events_sync.abi import EventAbi, EventParam as P
from events_sync.catalog.base import EventDefinition
from events_sync.kinds import ProtocolFamily


def _erc721_filled(name: str) -> EventAbi:
    return EventAbi(name, [
        P("maker", "address"),
        P("taker", "address"),
        P("erc20Token", "address"),
        P("erc20TokenAmount", "uint256"),
        P("erc721Token", "address"),
        P("erc721TokenId", "uint256"),
        P("orderHash", "bytes32"),
    ])


def _erc1155_filled(name: str) -> EventAbi:
    return EventAbi(name, [
        P("maker", "address"),
        P("taker", "address"),
        P("erc20Token", "address"),
        P("erc20FillAmount", "uint256"),
        P("erc1155Token", "address"),
        P("erc1155TokenId", "uint256"),
        P("erc1155FillAmount", "uint128"),
        P("orderHash", "bytes32"),
    ])


erc721_order_cancelled = EventDefinition(
    kind="element-erc721-order-cancelled",
    family=ProtocolFamily.ELEMENT,
    abi=EventAbi("ERC721OrderCancelled", [P("maker", "address"), P("nonce", "uint256")]),
    exchange="element",
)

hash_nonce_incremented = EventDefinition(
    kind="element-hash-nonce-incremented",
    family=ProtocolFamily.ELEMENT,
    abi=EventAbi("HashNonceIncremented", [P("maker", "address"), P("newHashNonce", "uint256")]),
    exchange="element",
)

erc1155_order_cancelled = EventDefinition(
    kind="element-erc1155-order-cancelled",
    family=ProtocolFamily.ELEMENT,
    abi=EventAbi("ERC1155OrderCancelled", [P("maker", "address"), P("nonce", "uint256")]),
    exchange="element",
)

erc721_sell_order_filled = EventDefinition(
    kind="element-erc721-sell-order-filled",
    family=ProtocolFamily.ELEMENT,
    abi=_erc721_filled("ERC721SellOrderFilled"),
    exchange="element",
)

erc721_buy_order_filled = EventDefinition(
    kind="element-erc721-buy-order-filled",
    family=ProtocolFamily.ELEMENT,
    abi=_erc721_filled("ERC721BuyOrderFilled"),
    exchange="element",
)

erc1155_sell_order_filled = EventDefinition(
    kind="element-erc1155-sell-order-filled",
    family=ProtocolFamily.ELEMENT,
    abi=_erc1155_filled("ERC1155SellOrderFilled"),
    exchange="element",
)

erc1155_buy_order_filled = EventDefinition(
    kind="element-erc1155-buy-order-filled",
    family=ProtocolFamily.ELEMENT,
    abi=_erc1155_filled("ERC1155BuyOrderFilled"),
    exchange="element",
)

DEFINITIONS = (
    erc721_order_cancelled,
    hash_nonce_incremented,
    erc1155_order_cancelled,
    erc721_sell_order_filled,
    erc721_buy_order_filled,
    erc1155_sell_order_filled,
    erc1155_buy_order_filled,
)
