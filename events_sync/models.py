"""
Events Sync - Data Models.

============================================================
RESPONSIBILITY
============================================================
Canonical records produced by the protocol handlers and the
payloads handed to downstream queues.

- Records are created per sync pass and never mutated
  afterwards; OnChainData is the only accumulator
- Prices and amounts are decimal strings (arbitrary precision)
- Addresses and hashes are lowercase 0x-prefixed hex

============================================================
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from core.constants import DEFAULT_BATCH_INDEX
from events_sync.kinds import ProtocolFamily
from onchain_adapters.models import RawLog

if TYPE_CHECKING:
    from events_sync.catalog.base import CatalogEntry


# =============================================================
# CLASSIFICATION
# =============================================================

@dataclass(frozen=True)
class BaseEventParams:
    """Block and transaction coordinates shared by every record."""
    address: str
    block: int
    block_hash: str
    tx_hash: str
    tx_index: int
    log_index: int
    timestamp: int
    batch_index: int = DEFAULT_BATCH_INDEX

    def with_batch_index(self, batch_index: int) -> "BaseEventParams":
        return replace(self, batch_index=batch_index)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "block": self.block,
            "block_hash": self.block_hash,
            "tx_hash": self.tx_hash,
            "tx_index": self.tx_index,
            "log_index": self.log_index,
            "timestamp": self.timestamp,
            "batch_index": self.batch_index,
        }


@dataclass(frozen=True)
class ClassifiedEvent:
    """A raw log matched against the catalog."""
    kind: str
    family: ProtocolFamily
    base_event_params: BaseEventParams
    log: RawLog
    entry: "CatalogEntry"

    def decode(self) -> Dict[str, Any]:
        """Decode the log with the ABI of its catalog entry."""
        return self.entry.abi.decode(self.log)


# =============================================================
# CANONICAL RECORDS
# =============================================================

@dataclass(frozen=True)
class FillEvent:
    """Unified trade record."""
    order_kind: str
    order_id: Optional[str]
    order_side: str
    maker: str
    taker: str
    price: str
    currency: str
    currency_price: str
    usd_price: Optional[str]
    contract: str
    token_id: str
    amount: str
    base_event_params: BaseEventParams
    order_source_id: Optional[int] = None
    aggregator_source_id: Optional[int] = None
    fill_source_id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order_kind": self.order_kind,
            "order_id": self.order_id,
            "order_side": self.order_side,
            "maker": self.maker,
            "taker": self.taker,
            "price": self.price,
            "currency": self.currency,
            "currency_price": self.currency_price,
            "usd_price": self.usd_price,
            "contract": self.contract,
            "token_id": self.token_id,
            "amount": self.amount,
            "order_source_id": self.order_source_id,
            "aggregator_source_id": self.aggregator_source_id,
            "fill_source_id": self.fill_source_id,
            **self.base_event_params.to_dict(),
        }


@dataclass(frozen=True)
class CancelEvent:
    """A single order invalidated on-chain."""
    order_kind: str
    order_id: str
    base_event_params: BaseEventParams


@dataclass(frozen=True)
class BulkCancelEvent:
    """Every order of `maker` with a nonce below `min_nonce` is invalid."""
    order_kind: str
    maker: str
    min_nonce: str
    base_event_params: BaseEventParams


@dataclass(frozen=True)
class NonceCancelEvent:
    """Every order of `maker` signed with exactly `nonce` is invalid."""
    order_kind: str
    maker: str
    nonce: str
    base_event_params: BaseEventParams


@dataclass(frozen=True)
class FtTransferEvent:
    """Fungible token movement (contract is the emitting address)."""
    from_address: str
    to_address: str
    amount: str
    base_event_params: BaseEventParams


@dataclass(frozen=True)
class NftTransferEvent:
    """ERC721 / ERC1155 token movement."""
    kind: str
    from_address: str
    to_address: str
    token_id: str
    amount: str
    base_event_params: BaseEventParams


@dataclass(frozen=True)
class NftApprovalEvent:
    """Operator approval for all tokens of a collection."""
    owner: str
    operator: str
    approved: bool
    base_event_params: BaseEventParams


# =============================================================
# QUEUE PAYLOADS
# =============================================================

@dataclass(frozen=True)
class FillInfo:
    """Fill-update queue payload."""
    context: str
    order_id: Optional[str]
    order_side: str
    contract: str
    token_id: str
    amount: str
    price: str
    timestamp: int
    maker: str
    taker: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "context": self.context,
            "orderId": self.order_id,
            "orderSide": self.order_side,
            "contract": self.contract,
            "tokenId": self.token_id,
            "amount": self.amount,
            "price": self.price,
            "timestamp": self.timestamp,
            "maker": self.maker,
            "taker": self.taker,
        }


@dataclass(frozen=True)
class OrderTrigger:
    """
    Order-update queue payload.

    `context` is the idempotence key: replaying the same on-chain
    event yields the same context.
    """
    context: str
    id: str
    kind: str
    tx_hash: str
    tx_timestamp: int
    log_index: Optional[int] = None
    batch_index: Optional[int] = None
    block_hash: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        trigger: Dict[str, Any] = {
            "kind": self.kind,
            "txHash": self.tx_hash,
            "txTimestamp": self.tx_timestamp,
        }
        if self.log_index is not None:
            trigger["logIndex"] = self.log_index
        if self.batch_index is not None:
            trigger["batchIndex"] = self.batch_index
        if self.block_hash is not None:
            trigger["blockHash"] = self.block_hash
        return {"context": self.context, "id": self.id, "trigger": trigger}


@dataclass(frozen=True)
class MakerApprovalTrigger:
    """Request to recheck a maker's approval or balance."""
    context: str
    maker: str
    data_kind: str
    contract: str
    tx_hash: str
    tx_timestamp: int
    order_kind: Optional[str] = None
    kind: str = "approval-change"

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.data_kind, "contract": self.contract}
        if self.order_kind is not None:
            data["orderKind"] = self.order_kind
        return {
            "context": self.context,
            "maker": self.maker,
            "trigger": {
                "kind": self.kind,
                "txHash": self.tx_hash,
                "txTimestamp": self.tx_timestamp,
            },
            "data": data,
        }


@dataclass(frozen=True)
class NewOrderInfo:
    """Order reconstructed from on-chain data, for the orderbook queue."""
    kind: str
    order_id: str
    order_params: Dict[str, Any]
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "info": {
                "kind": "full",
                "orderId": self.order_id,
                "orderParams": self.order_params,
                "metadata": self.metadata,
            },
        }


# =============================================================
# HANDLER OUTPUT
# =============================================================

@dataclass
class OnChainData:
    """Everything one or more handlers produced for a block range."""

    fill_events: List[FillEvent] = field(default_factory=list)
    cancel_events: List[CancelEvent] = field(default_factory=list)
    bulk_cancel_events: List[BulkCancelEvent] = field(default_factory=list)
    nonce_cancel_events: List[NonceCancelEvent] = field(default_factory=list)
    ft_transfer_events: List[FtTransferEvent] = field(default_factory=list)
    nft_transfer_events: List[NftTransferEvent] = field(default_factory=list)
    nft_approval_events: List[NftApprovalEvent] = field(default_factory=list)

    fill_infos: List[FillInfo] = field(default_factory=list)
    order_infos: List[OrderTrigger] = field(default_factory=list)
    maker_infos: List[MakerApprovalTrigger] = field(default_factory=list)
    orders: List[NewOrderInfo] = field(default_factory=list)

    def add_maker_info(self, info: MakerApprovalTrigger) -> bool:
        """Append a maker trigger unless one with the same (context, maker) exists."""
        key = (info.context, info.maker)
        if any((existing.context, existing.maker) == key for existing in self.maker_infos):
            return False
        self.maker_infos.append(info)
        return True

    def merge(self, other: "OnChainData") -> "OnChainData":
        """Append another handler's output (maker triggers stay de-duplicated)."""
        self.fill_events.extend(other.fill_events)
        self.cancel_events.extend(other.cancel_events)
        self.bulk_cancel_events.extend(other.bulk_cancel_events)
        self.nonce_cancel_events.extend(other.nonce_cancel_events)
        self.ft_transfer_events.extend(other.ft_transfer_events)
        self.nft_transfer_events.extend(other.nft_transfer_events)
        self.nft_approval_events.extend(other.nft_approval_events)
        self.fill_infos.extend(other.fill_infos)
        self.order_infos.extend(other.order_infos)
        for info in other.maker_infos:
            self.add_maker_info(info)
        self.orders.extend(other.orders)
        return self

    def counts(self) -> Dict[str, int]:
        return {
            "fill_events": len(self.fill_events),
            "cancel_events": len(self.cancel_events),
            "bulk_cancel_events": len(self.bulk_cancel_events),
            "nonce_cancel_events": len(self.nonce_cancel_events),
            "ft_transfer_events": len(self.ft_transfer_events),
            "nft_transfer_events": len(self.nft_transfer_events),
            "nft_approval_events": len(self.nft_approval_events),
            "fill_infos": len(self.fill_infos),
            "order_infos": len(self.order_infos),
            "maker_infos": len(self.maker_infos),
            "orders": len(self.orders),
        }

    def is_empty(self) -> bool:
        return not any(self.counts().values())
