"""
Events Sync - Protocol Families.

============================================================
RESPONSIBILITY
============================================================
Closed set of protocol families the engine understands and the
rules used to partition classified events between handlers.

- Every catalog entry belongs to exactly one family
- Every family has exactly one handler
- Some families additionally receive ERC20 transfers so they
  can correlate payments with fills inside a transaction

============================================================
"""

from enum import Enum
from typing import Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from events_sync.models import ClassifiedEvent


class ProtocolFamily(Enum):
    """Protocol family (one handler per member)."""

    ERC20 = "erc20"
    NFT = "nft"
    SEAPORT = "seaport"
    ELEMENT = "element"
    ZEROEX_V4 = "zeroex-v4"
    X2Y2 = "x2y2"
    LOOKS_RARE = "looks-rare"
    RARIBLE = "rarible"
    UNIVERSE = "universe"
    FORWARD = "forward"
    SUPERRARE = "superrare"


ERC20_TRANSFER_KIND = "erc20-transfer"

# Families that also see ERC20 transfers to detect buy-side approval changes
FAMILIES_WITH_ERC20_TRANSFERS = frozenset({
    ProtocolFamily.SEAPORT,
    ProtocolFamily.ELEMENT,
    ProtocolFamily.X2Y2,
    ProtocolFamily.LOOKS_RARE,
    ProtocolFamily.ZEROEX_V4,
    ProtocolFamily.FORWARD,
})


def partition_events(
    events: Sequence["ClassifiedEvent"],
) -> dict[ProtocolFamily, list["ClassifiedEvent"]]:
    """
    Split classified events by protocol family.

    The relative order of events is preserved inside every
    partition.
    """
    partitions: dict[ProtocolFamily, list["ClassifiedEvent"]] = {}

    for event in events:
        partitions.setdefault(event.family, []).append(event)

        if event.kind == ERC20_TRANSFER_KIND:
            for family in FAMILIES_WITH_ERC20_TRANSFERS:
                partitions.setdefault(family, []).append(event)

    return partitions
