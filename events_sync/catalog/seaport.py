"""
Event Catalog - Seaport v1.1 and v1.4.

Both versions share most event shapes; they are registered as
distinct kinds restricted to their own exchange address.
"""

from events_sync.abi import EventAbi, EventParam as P
from events_sync.catalog.base import EventDefinition
from events_sync.kinds import ProtocolFamily


SPENT_ITEM = "(uint8,address,uint256,uint256)"
RECEIVED_ITEM = "(uint8,address,uint256,uint256,address)"
OFFER_ITEM = "(uint8,address,uint256,uint256,uint256)"
CONSIDERATION_ITEM = "(uint8,address,uint256,uint256,uint256,address)"

# offerer, zone, offer, consideration, orderType, startTime, endTime,
# zoneHash, salt, conduitKey, totalOriginalConsiderationItems
ORDER_PARAMETERS = (
    f"(address,address,{OFFER_ITEM}[],{CONSIDERATION_ITEM}[],"
    "uint8,uint256,uint256,bytes32,uint256,bytes32,uint256)"
)


def _order_cancelled() -> EventAbi:
    return EventAbi("OrderCancelled", [
        P("orderHash", "bytes32"),
        P("offerer", "address", indexed=True),
        P("zone", "address", indexed=True),
    ])


def _counter_incremented() -> EventAbi:
    return EventAbi("CounterIncremented", [
        P("newCounter", "uint256"),
        P("offerer", "address", indexed=True),
    ])


def _order_fulfilled() -> EventAbi:
    return EventAbi("OrderFulfilled", [
        P("orderHash", "bytes32"),
        P("offerer", "address", indexed=True),
        P("zone", "address", indexed=True),
        P("recipient", "address"),
        P("offer", f"{SPENT_ITEM}[]"),
        P("consideration", f"{RECEIVED_ITEM}[]"),
    ])


# =============================================================
# SEAPORT v1.1
# =============================================================

order_cancelled = EventDefinition(
    kind="seaport-order-cancelled",
    family=ProtocolFamily.SEAPORT,
    abi=_order_cancelled(),
    exchange="seaport",
)

counter_incremented = EventDefinition(
    kind="seaport-counter-incremented",
    family=ProtocolFamily.SEAPORT,
    abi=_counter_incremented(),
    exchange="seaport",
)

order_filled = EventDefinition(
    kind="seaport-order-filled",
    family=ProtocolFamily.SEAPORT,
    abi=_order_fulfilled(),
    exchange="seaport",
)

order_validated = EventDefinition(
    kind="seaport-order-validated",
    family=ProtocolFamily.SEAPORT,
    abi=EventAbi("OrderValidated", [
        P("orderHash", "bytes32"),
        P("offerer", "address", indexed=True),
        P("zone", "address", indexed=True),
    ]),
    exchange="seaport",
)

# =============================================================
# SEAPORT v1.4
# =============================================================

v14_order_cancelled = EventDefinition(
    kind="seaport-v1.4-order-cancelled",
    family=ProtocolFamily.SEAPORT,
    abi=_order_cancelled(),
    exchange="seaport-v1.4",
)

v14_counter_incremented = EventDefinition(
    kind="seaport-v1.4-counter-incremented",
    family=ProtocolFamily.SEAPORT,
    abi=_counter_incremented(),
    exchange="seaport-v1.4",
)

v14_order_filled = EventDefinition(
    kind="seaport-v1.4-order-filled",
    family=ProtocolFamily.SEAPORT,
    abi=_order_fulfilled(),
    exchange="seaport-v1.4",
)

# v1.4 embeds the full order parameters in the event
v14_order_validated = EventDefinition(
    kind="seaport-v1.4-order-validated",
    family=ProtocolFamily.SEAPORT,
    abi=EventAbi("OrderValidated", [
        P("orderHash", "bytes32"),
        P("orderParameters", ORDER_PARAMETERS),
    ]),
    exchange="seaport-v1.4",
)

DEFINITIONS = (
    order_cancelled,
    counter_incremented,
    order_filled,
    order_validated,
    v14_order_cancelled,
    v14_counter_incremented,
    v14_order_filled,
    v14_order_validated,
)
