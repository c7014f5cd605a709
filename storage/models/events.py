"""
On-Chain Event ORM Models.

============================================================
PURPOSE
============================================================
Tables holding the canonical records produced by a sync pass.

============================================================
DATA LIFECYCLE ROLE
============================================================
- Mutability: append-only, rows are removed only when the block
  they belong to is orphaned by a reorg
- Source: events_sync handlers
- Consumers: order book maintenance, activity feeds

============================================================
"""

from typing import Optional

from sqlalchemy import BigInteger, Boolean, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from storage.models.base import UINT256, Base, EventMixin, TimestampMixin


class BlockRecord(Base, TimestampMixin):
    """
    Block header seen by a sync pass.

    Several hashes may coexist for one height after a reorg.
    """

    __tablename__ = "blocks"

    number: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    hash: Mapped[str] = mapped_column(String(66), primary_key=True)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (Index("ix_blocks_number", "number"),)

    def __repr__(self) -> str:
        return f"<BlockRecord {self.number} {self.hash}>"


class FillEventRecord(Base, EventMixin):
    __tablename__ = "fill_events"

    order_kind: Mapped[str] = mapped_column(String(32), nullable=False)
    order_id: Mapped[Optional[str]] = mapped_column(String(66), nullable=True)
    order_side: Mapped[str] = mapped_column(String(4), nullable=False)
    maker: Mapped[str] = mapped_column(String(42), nullable=False)
    taker: Mapped[str] = mapped_column(String(42), nullable=False)
    price: Mapped[str] = mapped_column(UINT256, nullable=False, comment="Native-token price per unit")
    currency: Mapped[str] = mapped_column(String(42), nullable=False)
    currency_price: Mapped[str] = mapped_column(UINT256, nullable=False)
    usd_price: Mapped[Optional[str]] = mapped_column(UINT256, nullable=True)
    contract: Mapped[str] = mapped_column(String(42), nullable=False)
    token_id: Mapped[str] = mapped_column(UINT256, nullable=False)
    amount: Mapped[str] = mapped_column(UINT256, nullable=False)
    order_source_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    aggregator_source_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    fill_source_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)


class CancelEventRecord(Base, EventMixin):
    __tablename__ = "cancel_events"

    order_kind: Mapped[str] = mapped_column(String(32), nullable=False)
    order_id: Mapped[str] = mapped_column(String(66), nullable=False)


class BulkCancelEventRecord(Base, EventMixin):
    __tablename__ = "bulk_cancel_events"

    order_kind: Mapped[str] = mapped_column(String(32), nullable=False)
    maker: Mapped[str] = mapped_column(String(42), nullable=False)
    min_nonce: Mapped[str] = mapped_column(UINT256, nullable=False)


class NonceCancelEventRecord(Base, EventMixin):
    __tablename__ = "nonce_cancel_events"

    order_kind: Mapped[str] = mapped_column(String(32), nullable=False)
    maker: Mapped[str] = mapped_column(String(42), nullable=False)
    nonce: Mapped[str] = mapped_column(UINT256, nullable=False)


class FtTransferEventRecord(Base, EventMixin):
    __tablename__ = "ft_transfer_events"

    from_address: Mapped[str] = mapped_column("from", String(42), nullable=False)
    to_address: Mapped[str] = mapped_column("to", String(42), nullable=False)
    amount: Mapped[str] = mapped_column(UINT256, nullable=False)


class NftTransferEventRecord(Base, EventMixin):
    __tablename__ = "nft_transfer_events"

    kind: Mapped[str] = mapped_column(String(8), nullable=False)
    from_address: Mapped[str] = mapped_column("from", String(42), nullable=False)
    to_address: Mapped[str] = mapped_column("to", String(42), nullable=False)
    token_id: Mapped[str] = mapped_column(UINT256, nullable=False)
    amount: Mapped[str] = mapped_column(UINT256, nullable=False)


class NftApprovalEventRecord(Base, EventMixin):
    __tablename__ = "nft_approval_events"

    owner: Mapped[str] = mapped_column(String(42), nullable=False)
    operator: Mapped[str] = mapped_column(String(42), nullable=False)
    approved: Mapped[bool] = mapped_column(Boolean, nullable=False)
