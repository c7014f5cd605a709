"""
Seaport Order Hashing.

============================================================
PURPOSE
============================================================
Recomputes Seaport order hashes (EIP-712 struct hash of the
OrderComponents) and derives basic sale information from the
spent / received items of an OrderFulfilled event.

============================================================
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

from eth_abi import encode
from eth_utils import decode_hex, encode_hex, keccak

from core.constants import SEAPORT_ITEM_ERC721, ZERO_ADDRESS


OFFER_ITEM_TYPE = (
    "OfferItem(uint8 itemType,address token,uint256 identifierOrCriteria,"
    "uint256 startAmount,uint256 endAmount)"
)
CONSIDERATION_ITEM_TYPE = (
    "ConsiderationItem(uint8 itemType,address token,uint256 identifierOrCriteria,"
    "uint256 startAmount,uint256 endAmount,address recipient)"
)
ORDER_COMPONENTS_TYPE = (
    "OrderComponents(address offerer,address zone,OfferItem[] offer,"
    "ConsiderationItem[] consideration,uint8 orderType,uint256 startTime,"
    "uint256 endTime,bytes32 zoneHash,uint256 salt,bytes32 conduitKey,uint256 counter)"
)

OFFER_ITEM_TYPEHASH = keccak(text=OFFER_ITEM_TYPE)
CONSIDERATION_ITEM_TYPEHASH = keccak(text=CONSIDERATION_ITEM_TYPE)
# Referenced struct types are appended in alphabetical order
ORDER_TYPEHASH = keccak(text=ORDER_COMPONENTS_TYPE + CONSIDERATION_ITEM_TYPE + OFFER_ITEM_TYPE)


def _bytes32(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).rjust(32, b"\0")
    return decode_hex(value).rjust(32, b"\0")


# =============================================================
# ORDER PARAMETERS
# =============================================================

@dataclass(frozen=True)
class OfferItem:
    item_type: int
    token: str
    identifier_or_criteria: int
    start_amount: int
    end_amount: int

    def struct_hash(self) -> bytes:
        return keccak(encode(
            ["bytes32", "uint8", "address", "uint256", "uint256", "uint256"],
            [
                OFFER_ITEM_TYPEHASH,
                self.item_type,
                self.token,
                self.identifier_or_criteria,
                self.start_amount,
                self.end_amount,
            ],
        ))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "itemType": self.item_type,
            "token": self.token,
            "identifierOrCriteria": str(self.identifier_or_criteria),
            "startAmount": str(self.start_amount),
            "endAmount": str(self.end_amount),
        }


@dataclass(frozen=True)
class ConsiderationItem(OfferItem):
    recipient: str = ZERO_ADDRESS

    def struct_hash(self) -> bytes:
        return keccak(encode(
            ["bytes32", "uint8", "address", "uint256", "uint256", "uint256", "address"],
            [
                CONSIDERATION_ITEM_TYPEHASH,
                self.item_type,
                self.token,
                self.identifier_or_criteria,
                self.start_amount,
                self.end_amount,
                self.recipient,
            ],
        ))

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "recipient": self.recipient}


@dataclass(frozen=True)
class OrderParameters:
    """Seaport OrderParameters (the signed order minus the counter)."""
    offerer: str
    zone: str
    offer: Tuple[OfferItem, ...]
    consideration: Tuple[ConsiderationItem, ...]
    order_type: int
    start_time: int
    end_time: int
    zone_hash: str
    salt: int
    conduit_key: str
    total_original_consideration_items: int

    @classmethod
    def from_abi(cls, value: Sequence[Any]) -> "OrderParameters":
        """Build from the decoded `OrderParameters` tuple."""
        (
            offerer, zone, offer, consideration, order_type, start_time,
            end_time, zone_hash, salt, conduit_key, total_original,
        ) = value
        return cls(
            offerer=offerer.lower(),
            zone=zone.lower(),
            offer=tuple(OfferItem(int(i[0]), i[1].lower(), i[2], i[3], i[4]) for i in offer),
            consideration=tuple(
                ConsiderationItem(int(i[0]), i[1].lower(), i[2], i[3], i[4], i[5].lower())
                for i in consideration
            ),
            order_type=int(order_type),
            start_time=start_time,
            end_time=end_time,
            zone_hash=zone_hash if isinstance(zone_hash, str) else encode_hex(zone_hash),
            salt=salt,
            conduit_key=conduit_key if isinstance(conduit_key, str) else encode_hex(conduit_key),
            total_original_consideration_items=total_original,
        )

    def to_dict(self, counter: Optional[int] = None) -> Dict[str, Any]:
        data = {
            "offerer": self.offerer,
            "zone": self.zone,
            "offer": [item.to_dict() for item in self.offer],
            "consideration": [item.to_dict() for item in self.consideration],
            "orderType": self.order_type,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "zoneHash": self.zone_hash,
            "salt": str(self.salt),
            "conduitKey": self.conduit_key,
        }
        if counter is not None:
            data["counter"] = str(counter)
        return data


def compute_order_hash(params: OrderParameters, counter: int) -> str:
    """Seaport order hash of the parameters signed with `counter`."""
    offer_hash = keccak(b"".join(item.struct_hash() for item in params.offer))
    consideration_hash = keccak(b"".join(item.struct_hash() for item in params.consideration))

    encoded = encode(
        [
            "bytes32", "address", "address", "bytes32", "bytes32", "uint8",
            "uint256", "uint256", "bytes32", "uint256", "bytes32", "uint256",
        ],
        [
            ORDER_TYPEHASH,
            params.offerer,
            params.zone,
            offer_hash,
            consideration_hash,
            params.order_type,
            params.start_time,
            params.end_time,
            _bytes32(params.zone_hash),
            params.salt,
            _bytes32(params.conduit_key),
            counter,
        ],
    )
    return encode_hex(keccak(encoded))


# =============================================================
# BASIC SALE DERIVATION
# =============================================================

@dataclass(frozen=True)
class SpentItem:
    item_type: int
    token: str
    identifier: int
    amount: int

    @classmethod
    def from_abi(cls, value: Sequence[Any]) -> "SpentItem":
        return cls(int(value[0]), value[1].lower(), int(value[2]), int(value[3]))

    def same_asset(self, other: "SpentItem") -> bool:
        return (
            self.item_type == other.item_type
            and self.token == other.token
            and self.identifier == other.identifier
        )


@dataclass(frozen=True)
class ReceivedItem(SpentItem):
    recipient: str = ZERO_ADDRESS

    @classmethod
    def from_abi(cls, value: Sequence[Any]) -> "ReceivedItem":
        return cls(int(value[0]), value[1].lower(), int(value[2]), int(value[3]), value[4].lower())


@dataclass(frozen=True)
class SaleInfo:
    side: str
    contract: str
    token_id: str
    amount: str
    payment_token: str
    price: str
    recipient_override: Optional[str] = None


def derive_basic_sale(
    offer: Sequence[SpentItem],
    consideration: Sequence[ReceivedItem],
) -> Optional[SaleInfo]:
    """
    Interpret a fulfilled order as a single-token sale.

    A single NFT offered against currency is a filled listing; a
    single currency offer against an NFT is a filled bid. Anything
    else (bundles, swaps) is not a basic sale and yields None.
    """
    if len(offer) != 1 or not consideration:
        return None

    spent = offer[0]
    main = consideration[0]

    if spent.item_type >= SEAPORT_ITEM_ERC721:
        # Listing got filled
        if main.item_type >= SEAPORT_ITEM_ERC721:
            return None

        # Consideration items returning the offered NFT are not payments
        false_items = set()
        recipient_override = None
        for index, item in enumerate(consideration[1:], start=1):
            if item.same_asset(spent):
                recipient_override = item.recipient
                false_items.add(index)
            elif item.item_type != main.item_type or item.token != main.token:
                return None

        price = sum(item.amount for i, item in enumerate(consideration) if i not in false_items)
        return SaleInfo(
            side="sell",
            contract=spent.token,
            token_id=str(spent.identifier),
            amount=str(spent.amount),
            payment_token=main.token,
            price=str(price),
            recipient_override=(
                recipient_override
                if recipient_override and recipient_override != ZERO_ADDRESS
                else None
            ),
        )

    # Bid got filled
    if main.item_type < SEAPORT_ITEM_ERC721:
        return None

    for item in consideration[1:]:
        if item.item_type != spent.item_type or item.token != spent.token:
            return None

    return SaleInfo(
        side="buy",
        contract=main.token,
        token_id=str(main.identifier),
        amount=str(main.amount),
        payment_token=spent.token,
        price=str(spent.amount),
    )
