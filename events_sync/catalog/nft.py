"""
Event Catalog - ERC721 / ERC1155 events.
"""

from events_sync.abi import EventAbi, EventParam as P
from events_sync.catalog.base import EventDefinition
from events_sync.kinds import ProtocolFamily


erc721_transfer = EventDefinition(
    kind="erc721-transfer",
    family=ProtocolFamily.NFT,
    abi=EventAbi("Transfer", [
        P("from", "address", indexed=True),
        P("to", "address", indexed=True),
        P("tokenId", "uint256", indexed=True),
    ]),
)

erc1155_transfer_single = EventDefinition(
    kind="erc1155-transfer-single",
    family=ProtocolFamily.NFT,
    abi=EventAbi("TransferSingle", [
        P("operator", "address", indexed=True),
        P("from", "address", indexed=True),
        P("to", "address", indexed=True),
        P("tokenId", "uint256"),
        P("amount", "uint256"),
    ]),
)

erc1155_transfer_batch = EventDefinition(
    kind="erc1155-transfer-batch",
    family=ProtocolFamily.NFT,
    abi=EventAbi("TransferBatch", [
        P("operator", "address", indexed=True),
        P("from", "address", indexed=True),
        P("to", "address", indexed=True),
        P("tokenIds", "uint256[]"),
        P("amounts", "uint256[]"),
    ]),
)

# ERC721 and ERC1155 share the exact same signature
approval_for_all = EventDefinition(
    kind="erc721/1155-approval-for-all",
    family=ProtocolFamily.NFT,
    abi=EventAbi("ApprovalForAll", [
        P("owner", "address", indexed=True),
        P("operator", "address", indexed=True),
        P("approved", "bool"),
    ]),
)

DEFINITIONS = (
    erc721_transfer,
    erc1155_transfer_single,
    erc1155_transfer_batch,
    approval_for_all,
)
