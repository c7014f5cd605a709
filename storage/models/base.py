"""
Base ORM Model and Mixins.

============================================================
PURPOSE
============================================================
Declarative base and the columns shared by every on-chain
event table.

============================================================
COMPONENTS
============================================================
- Base: SQLAlchemy declarative base for all models
- TimestampMixin: Row creation timestamp
- EventMixin: Block / transaction coordinates of a record

============================================================
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


# Large enough for any uint256 rendered in base 10
UINT256 = String(78)


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""

    type_annotation_map = {
        datetime: DateTime(timezone=True),
    }


class TimestampMixin:
    """Adds a `created_at` column."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="Row creation timestamp (UTC)"
    )


class EventMixin(TimestampMixin):
    """
    Coordinates of a record derived from an on-chain log.

    ============================================================
    KEYS
    ============================================================
    - Primary key: (tx_hash, log_index, batch_index), so
      re-inserting the same log is a no-op
    - Index on (block, block_hash) for reorg rollbacks

    ============================================================
    """

    tx_hash: Mapped[str] = mapped_column(String(66), primary_key=True)
    log_index: Mapped[int] = mapped_column(Integer, primary_key=True)
    batch_index: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)

    address: Mapped[str] = mapped_column(String(42), nullable=False)
    block: Mapped[int] = mapped_column(BigInteger, nullable=False)
    block_hash: Mapped[str] = mapped_column(String(66), nullable=False)
    tx_index: Mapped[int] = mapped_column(Integer, nullable=False)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False, comment="Block timestamp (unix seconds)")

    @declared_attr.directive
    def __table_args__(cls):
        return (Index(f"ix_{cls.__tablename__}_block_block_hash", "block", "block_hash"),)
