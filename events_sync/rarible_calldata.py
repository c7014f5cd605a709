"""
Rarible Calldata Decoding.

============================================================
PURPOSE
============================================================
The Rarible Match event only carries hashes and fill amounts.
Maker, side, currency and token are recovered from the calldata
of the transaction, trying each known entry point in a fixed
priority order.

============================================================
POLICY
============================================================
1. directPurchase
2. directAcceptBid
3. matchOrders

The first decoder whose selector matches and whose payload
decodes wins. Only the asset classes listed in
SUPPORTED_ASSET_CLASSES are accepted.

============================================================
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from eth_abi import encode

from core.constants import (
    ASSET_CLASS_ERC20,
    ASSET_CLASS_ERC721,
    ASSET_CLASS_ERC721_LAZY,
    ASSET_CLASS_ERC1155,
    ASSET_CLASS_ERC1155_LAZY,
    ASSET_CLASS_ETH,
    NFT_ASSET_CLASSES,
    SUPPORTED_ASSET_CLASSES,
    ZERO_ADDRESS,
)
from core.exceptions import EventDecodeError, UnsupportedAssetError
from events_sync.abi import ABI_DECODE_ERRORS, FunctionAbi, decode_values
from onchain_adapters.models import Transaction


logger = logging.getLogger(__name__)


# =============================================================
# ABI SHAPES
# =============================================================

# sellOrderMaker / bidMaker, nftAmount, nftAssetClass, nftData, paymentAmount,
# paymentToken, salt, start, end, dataType, data, signature,
# counterPaymentAmount, counterNftAmount, counterData
DIRECT_ORDER = (
    "(address,uint256,bytes4,bytes,uint256,address,uint256,uint256,uint256,"
    "bytes4,bytes,bytes,uint256,uint256,bytes)"
)

ASSET = "((bytes4,bytes),uint256)"

# maker, makeAsset, taker, takeAsset, salt, start, end, dataType, data
ORDER = f"(address,{ASSET},address,{ASSET},uint256,uint256,uint256,bytes4,bytes)"

DIRECT_PURCHASE = FunctionAbi("directPurchase", [DIRECT_ORDER])
DIRECT_ACCEPT_BID = FunctionAbi("directAcceptBid", [DIRECT_ORDER])
MATCH_ORDERS = FunctionAbi("matchOrders", [ORDER, "bytes", ORDER, "bytes"])

# tokenId, tokenURI, creators, royalties, signatures
LAZY_ERC721_DATA = ["address", "(uint256,string,(address,uint96)[],(address,uint96)[],bytes[])"]
# tokenId, tokenURI, supply, creators, royalties, signatures
LAZY_ERC1155_DATA = [
    "address",
    "(uint256,string,uint256,(address,uint96)[],(address,uint96)[],bytes[])",
]


# =============================================================
# MODELS
# =============================================================

@dataclass(frozen=True)
class RaribleAsset:
    """Asset class tag, class-specific payload and value."""
    asset_class: str
    data: str
    value: int

    @property
    def is_nft(self) -> bool:
        return self.asset_class in NFT_ASSET_CLASSES


@dataclass(frozen=True)
class DecodedOrder:
    """Left order of a match, as recovered from calldata."""
    entry_point: str
    maker: str
    taker: Optional[str]
    make_asset: RaribleAsset
    take_asset: RaribleAsset

    @property
    def asset_classes(self) -> Tuple[str, str]:
        return (self.make_asset.asset_class, self.take_asset.asset_class)


def _payment_asset(token: str, amount: int) -> RaribleAsset:
    if token.lower() == ZERO_ADDRESS:
        return RaribleAsset(ASSET_CLASS_ETH, "0x", amount)
    return RaribleAsset(ASSET_CLASS_ERC20, "0x" + encode(["address"], [token]).hex(), amount)


def _asset(value) -> RaribleAsset:
    (asset_class, data), amount = value
    return RaribleAsset(asset_class.lower(), data, amount)


def _from_direct_purchase(args: tuple, tx: Transaction) -> DecodedOrder:
    purchase = args[0]
    return DecodedOrder(
        entry_point=DIRECT_PURCHASE.name,
        maker=purchase[0].lower(),
        taker=tx.from_address,
        make_asset=RaribleAsset(purchase[2].lower(), purchase[3], purchase[1]),
        take_asset=_payment_asset(purchase[5], purchase[4]),
    )


def _from_direct_accept_bid(args: tuple, tx: Transaction) -> DecodedOrder:
    bid = args[0]
    return DecodedOrder(
        entry_point=DIRECT_ACCEPT_BID.name,
        maker=bid[0].lower(),
        taker=tx.from_address,
        make_asset=_payment_asset(bid[5], bid[4]),
        take_asset=RaribleAsset(bid[2].lower(), bid[3], bid[1]),
    )


def _from_match_orders(args: tuple, tx: Transaction) -> DecodedOrder:
    left, _, right, _ = args
    right_maker = right[0].lower()
    return DecodedOrder(
        entry_point=MATCH_ORDERS.name,
        maker=left[0].lower(),
        taker=right_maker if right_maker != ZERO_ADDRESS else tx.from_address,
        make_asset=_asset(left[1]),
        take_asset=_asset(left[3]),
    )


@dataclass(frozen=True)
class CalldataDecoder:
    """One entry of the decoding policy table."""
    function: FunctionAbi
    build: Callable[[tuple, Transaction], DecodedOrder]

    @property
    def name(self) -> str:
        return self.function.name

    def decode(self, tx: Transaction) -> DecodedOrder:
        return self.build(self.function.decode_input(tx.input), tx)


DECODERS: Tuple[CalldataDecoder, ...] = (
    CalldataDecoder(DIRECT_PURCHASE, _from_direct_purchase),
    CalldataDecoder(DIRECT_ACCEPT_BID, _from_direct_accept_bid),
    CalldataDecoder(MATCH_ORDERS, _from_match_orders),
)


# =============================================================
# POLICY
# =============================================================

def decode_match_calldata(
    tx: Transaction,
    decoders: Tuple[CalldataDecoder, ...] = DECODERS,
) -> Optional[DecodedOrder]:
    """First successful decode in policy order, None when nothing matches."""
    for decoder in decoders:
        if not decoder.function.matches(tx.input):
            continue
        try:
            return decoder.decode(tx)
        except EventDecodeError as e:
            logger.debug(f"[rarible] {decoder.name} did not decode {tx.hash}: {e}")
    return None


def ensure_supported(order: DecodedOrder) -> DecodedOrder:
    """
    Raises:
        UnsupportedAssetError: Either side uses an unknown asset class
    """
    for asset_class in order.asset_classes:
        if asset_class not in SUPPORTED_ASSET_CLASSES:
            raise UnsupportedAssetError(
                f"Unsupported asset class {asset_class}",
                asset_class=asset_class,
            )
    return order


# =============================================================
# ASSET PAYLOADS
# =============================================================

def decode_currency(asset: RaribleAsset, native_currency: str) -> str:
    """Currency address of a payment asset."""
    if asset.asset_class == ASSET_CLASS_ETH:
        return native_currency
    if asset.asset_class == ASSET_CLASS_ERC20:
        try:
            return decode_values(["address"], asset.data)[0].lower()
        except ABI_DECODE_ERRORS as e:
            raise EventDecodeError("Cannot decode ERC20 asset data", cause=e) from e
    raise UnsupportedAssetError(
        f"Asset class {asset.asset_class} is not a currency",
        asset_class=asset.asset_class,
    )


def decode_nft(asset: RaribleAsset) -> Tuple[str, str]:
    """(contract, token id) of an NFT asset, lazy-minted variants included."""
    try:
        if asset.asset_class in (ASSET_CLASS_ERC721, ASSET_CLASS_ERC1155):
            contract, token_id = decode_values(["address", "uint256"], asset.data)
        elif asset.asset_class == ASSET_CLASS_ERC721_LAZY:
            contract, mint = decode_values(LAZY_ERC721_DATA, asset.data)
            token_id = mint[0]
        elif asset.asset_class == ASSET_CLASS_ERC1155_LAZY:
            contract, mint = decode_values(LAZY_ERC1155_DATA, asset.data)
            token_id = mint[0]
        else:
            raise UnsupportedAssetError(
                f"Asset class {asset.asset_class} is not an NFT",
                asset_class=asset.asset_class,
            )
    except ABI_DECODE_ERRORS as e:
        raise EventDecodeError("Cannot decode NFT asset data", cause=e) from e

    return contract.lower(), str(token_id)
