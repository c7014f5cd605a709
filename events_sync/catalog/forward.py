"""
Event Catalog - Forward (bid-only exchange paying in wrapped native).
"""

from events_sync.abi import EventAbi, EventParam as P
from events_sync.catalog.base import EventDefinition
from events_sync.kinds import ProtocolFamily


order_filled = EventDefinition(
    kind="forward-order-filled",
    family=ProtocolFamily.FORWARD,
    abi=EventAbi("OrderFilled", [
        P("orderHash", "bytes32"),
        P("maker", "address"),
        P("taker", "address"),
        P("token", "address"),
        P("identifier", "uint256"),
        P("filledAmount", "uint128"),
        P("unitPrice", "uint256"),
    ]),
    exchange="forward",
)

order_cancelled = EventDefinition(
    kind="forward-order-cancelled",
    family=ProtocolFamily.FORWARD,
    abi=EventAbi("OrderCancelled", [P("orderHash", "bytes32")]),
    exchange="forward",
)

counter_incremented = EventDefinition(
    kind="forward-counter-incremented",
    family=ProtocolFamily.FORWARD,
    abi=EventAbi("CounterIncremented", [
        P("maker", "address"),
        P("newCounter", "uint256"),
    ]),
    exchange="forward",
)

DEFINITIONS = (order_filled, order_cancelled, counter_incremented)
