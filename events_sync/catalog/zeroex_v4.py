"""
Event Catalog - ZeroEx v4 NFT orders.

The cancel events share their signature with Element; the address
allow-list is what tells them apart.
"""

from events_sync.abi import EventAbi, EventParam as P
from events_sync.catalog.base import EventDefinition
from events_sync.kinds import ProtocolFamily


erc721_order_cancelled = EventDefinition(
    kind="zeroex-v4-erc721-order-cancelled",
    family=ProtocolFamily.ZEROEX_V4,
    abi=EventAbi("ERC721OrderCancelled", [P("maker", "address"), P("nonce", "uint256")]),
    exchange="zeroex-v4",
)

erc1155_order_cancelled = EventDefinition(
    kind="zeroex-v4-erc1155-order-cancelled",
    family=ProtocolFamily.ZEROEX_V4,
    abi=EventAbi("ERC1155OrderCancelled", [P("maker", "address"), P("nonce", "uint256")]),
    exchange="zeroex-v4",
)

erc721_order_filled = EventDefinition(
    kind="zeroex-v4-erc721-order-filled",
    family=ProtocolFamily.ZEROEX_V4,
    abi=EventAbi("ERC721OrderFilled", [
        P("direction", "uint8"),
        P("maker", "address"),
        P("taker", "address"),
        P("nonce", "uint256"),
        P("erc20Token", "address"),
        P("erc20TokenAmount", "uint256"),
        P("erc721Token", "address"),
        P("erc721TokenId", "uint256"),
        P("matcher", "address"),
    ]),
    exchange="zeroex-v4",
)

erc1155_order_filled = EventDefinition(
    kind="zeroex-v4-erc1155-order-filled",
    family=ProtocolFamily.ZEROEX_V4,
    abi=EventAbi("ERC1155OrderFilled", [
        P("direction", "uint8"),
        P("maker", "address"),
        P("taker", "address"),
        P("nonce", "uint256"),
        P("erc20Token", "address"),
        P("erc20FillAmount", "uint256"),
        P("erc1155Token", "address"),
        P("erc1155TokenId", "uint256"),
        P("erc1155FillAmount", "uint128"),
        P("matcher", "address"),
    ]),
    exchange="zeroex-v4",
)

DEFINITIONS = (
    erc721_order_cancelled,
    erc1155_order_cancelled,
    erc721_order_filled,
    erc1155_order_filled,
)
