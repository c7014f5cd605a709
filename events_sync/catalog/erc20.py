"""
Event Catalog - ERC20 and wrapped native token events.
"""

from events_sync.abi import EventAbi, EventParam as P
from events_sync.catalog.base import EventDefinition
from events_sync.kinds import ProtocolFamily


transfer = EventDefinition(
    kind="erc20-transfer",
    family=ProtocolFamily.ERC20,
    abi=EventAbi("Transfer", [
        P("from", "address", indexed=True),
        P("to", "address", indexed=True),
        P("amount", "uint256"),
    ]),
)

approval = EventDefinition(
    kind="erc20-approval",
    family=ProtocolFamily.ERC20,
    abi=EventAbi("Approval", [
        P("owner", "address", indexed=True),
        P("spender", "address", indexed=True),
        P("value", "uint256"),
    ]),
)

deposit = EventDefinition(
    kind="weth-deposit",
    family=ProtocolFamily.ERC20,
    abi=EventAbi("Deposit", [
        P("to", "address", indexed=True),
        P("amount", "uint256"),
    ]),
    exchange="weth",
)

withdrawal = EventDefinition(
    kind="weth-withdrawal",
    family=ProtocolFamily.ERC20,
    abi=EventAbi("Withdrawal", [
        P("from", "address", indexed=True),
        P("amount", "uint256"),
    ]),
    exchange="weth",
)

DEFINITIONS = (transfer, approval, deposit, withdrawal)
