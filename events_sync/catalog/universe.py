"""
Event Catalog - Universe (Rarible-style exchange with rich events).
"""

from events_sync.abi import EventAbi, EventParam as P
from events_sync.catalog.base import EventDefinition
from events_sync.kinds import ProtocolFamily


ASSET_TYPE = "(bytes4,bytes)"
ASSET = f"({ASSET_TYPE},uint256)"

cancel = EventDefinition(
    kind="universe-cancel",
    family=ProtocolFamily.UNIVERSE,
    abi=EventAbi("Cancel", [
        P("hash", "bytes32"),
        P("maker", "address"),
        P("makeAssetType", ASSET_TYPE),
        P("takeAssetType", ASSET_TYPE),
    ]),
    exchange="universe",
)

match = EventDefinition(
    kind="universe-match",
    family=ProtocolFamily.UNIVERSE,
    abi=EventAbi("Match", [
        P("leftHash", "bytes32"),
        P("rightHash", "bytes32"),
        P("leftMaker", "address"),
        P("rightMaker", "address"),
        P("newLeftFill", "uint256"),
        P("newRightFill", "uint256"),
        P("leftAsset", ASSET),
        P("rightAsset", ASSET),
    ]),
    exchange="universe",
)

DEFINITIONS = (cancel, match)
