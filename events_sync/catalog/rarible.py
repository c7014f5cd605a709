"""
Event Catalog - Rarible exchange v2.

The match event only carries hashes and fill amounts; everything
else is recovered from the transaction calldata.
"""

from events_sync.abi import EventAbi, EventParam as P
from events_sync.catalog.base import EventDefinition
from events_sync.kinds import ProtocolFamily


cancel = EventDefinition(
    kind="rarible-cancel",
    family=ProtocolFamily.RARIBLE,
    abi=EventAbi("Cancel", [P("hash", "bytes32")]),
    exchange="rarible",
)

match = EventDefinition(
    kind="rarible-match",
    family=ProtocolFamily.RARIBLE,
    abi=EventAbi("Match", [
        P("leftHash", "bytes32"),
        P("rightHash", "bytes32"),
        P("newLeftFill", "uint256"),
        P("newRightFill", "uint256"),
    ]),
    exchange="rarible",
)

DEFINITIONS = (cancel, match)
