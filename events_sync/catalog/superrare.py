"""
Event Catalog - SuperRare bazaar and legacy marketplace.
"""

from events_sync.abi import EventAbi, EventParam as P
from events_sync.catalog.base import EventDefinition
from events_sync.kinds import ProtocolFamily


listing_filled = EventDefinition(
    kind="superrare-listing-filled",
    family=ProtocolFamily.SUPERRARE,
    abi=EventAbi("Sold", [
        P("originContract", "address", indexed=True),
        P("buyer", "address", indexed=True),
        P("seller", "address", indexed=True),
        P("currencyAddress", "address"),
        P("amount", "uint256"),
        P("tokenId", "uint256"),
    ]),
    exchange="superrare",
)

# Legacy marketplace, native currency only
sold = EventDefinition(
    kind="superrare-sold",
    family=ProtocolFamily.SUPERRARE,
    abi=EventAbi("Sold", [
        P("originContract", "address", indexed=True),
        P("buyer", "address", indexed=True),
        P("seller", "address", indexed=True),
        P("amount", "uint256"),
        P("tokenId", "uint256"),
    ]),
    exchange="superrare-legacy",
)

accept_offer = EventDefinition(
    kind="superrare-accept-offer",
    family=ProtocolFamily.SUPERRARE,
    abi=EventAbi("AcceptOffer", [
        P("originContract", "address", indexed=True),
        P("bidder", "address", indexed=True),
        P("seller", "address", indexed=True),
        P("currencyAddress", "address"),
        P("amount", "uint256"),
        P("tokenId", "uint256"),
        P("splitAddresses", "address[]"),
        P("splitRatios", "uint8[]"),
    ]),
    exchange="superrare",
)

auction_settled = EventDefinition(
    kind="superrare-auction-settled",
    family=ProtocolFamily.SUPERRARE,
    abi=EventAbi("AuctionSettled", [
        P("contractAddress", "address", indexed=True),
        P("bidder", "address", indexed=True),
        P("seller", "address"),
        P("tokenId", "uint256", indexed=True),
        P("currencyAddress", "address"),
        P("amount", "uint256"),
    ]),
    exchange="superrare",
)

DEFINITIONS = (listing_filled, sold, accept_offer, auction_settled)
