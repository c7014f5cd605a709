"""
Event Catalog - X2Y2.
"""

from events_sync.abi import EventAbi, EventParam as P
from events_sync.catalog.base import EventDefinition
from events_sync.kinds import ProtocolFamily


# (price, data)
ORDER_ITEM = "(uint256,bytes)"

# op, orderIdx, itemIdx, price, itemHash, executionDelegate, dataReplacement,
# bidIncentivePct, aucMinIncrementPct, aucIncDurationSecs, fees[(percentage, to)]
SETTLE_DETAIL = (
    "(uint8,uint256,uint256,uint256,bytes32,address,bytes,"
    "uint256,uint256,uint256,(uint256,address)[])"
)

order_cancelled = EventDefinition(
    kind="x2y2-order-cancelled",
    family=ProtocolFamily.X2Y2,
    abi=EventAbi("EvCancel", [P("itemHash", "bytes32", indexed=True)]),
    exchange="x2y2",
)

order_inventory = EventDefinition(
    kind="x2y2-order-inventory",
    family=ProtocolFamily.X2Y2,
    abi=EventAbi("EvInventory", [
        P("itemHash", "bytes32", indexed=True),
        P("maker", "address"),
        P("taker", "address"),
        P("orderSalt", "uint256"),
        P("settleSalt", "uint256"),
        P("intent", "uint256"),
        P("delegateType", "uint256"),
        P("deadline", "uint256"),
        P("currency", "address"),
        P("dataMask", "bytes"),
        P("item", ORDER_ITEM),
        P("detail", SETTLE_DETAIL),
    ]),
    exchange="x2y2",
)

DEFINITIONS = (order_cancelled, order_inventory)
