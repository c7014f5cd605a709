"""
Event Repositories.

============================================================
PURPOSE
============================================================
One repository per canonical record table. Each converts the
engine's frozen dataclasses into rows and inserts them with
conflicts on (tx_hash, log_index, batch_index) ignored, which
makes re-syncing a block range idempotent.

============================================================
"""

from abc import abstractmethod
from typing import Any, Dict, Generic, Optional, Sequence, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from events_sync.models import (
    BaseEventParams,
    BulkCancelEvent,
    CancelEvent,
    FillEvent,
    FtTransferEvent,
    NftApprovalEvent,
    NftTransferEvent,
    NonceCancelEvent,
)
from storage.models.base import EventMixin
from storage.models.events import (
    BulkCancelEventRecord,
    CancelEventRecord,
    FillEventRecord,
    FtTransferEventRecord,
    NftApprovalEventRecord,
    NftTransferEventRecord,
    NonceCancelEventRecord,
)
from storage.repositories.base import BaseRepository


E = TypeVar("E")


def _coordinates(params: BaseEventParams) -> Dict[str, Any]:
    return {
        "address": params.address,
        "block": params.block,
        "block_hash": params.block_hash,
        "tx_hash": params.tx_hash,
        "tx_index": params.tx_index,
        "log_index": params.log_index,
        "timestamp": params.timestamp,
        "batch_index": params.batch_index,
    }


class EventRepository(BaseRepository, Generic[E]):
    """Insert-ignore and reorg rollback for one event table."""

    def __init__(self, session: Session, model_class: Type[EventMixin], repository_name: str) -> None:
        super().__init__(session, model_class, repository_name)

    @abstractmethod
    def to_row(self, event: E) -> Dict[str, Any]:
        """Row of the event without its coordinates, keyed by column name."""
        pass

    def insert(self, events: Sequence[E]) -> int:
        rows = [
            {**_coordinates(event.base_event_params), **self.to_row(event)}
            for event in events
        ]
        return self._insert_ignore(rows)

    def remove_events(self, block: int, block_hash: str) -> int:
        """Delete every row stored for exactly this block identity."""
        removed = self._delete_where(
            "remove_events",
            self._model_class.block == block,
            self._model_class.block_hash == block_hash.lower(),
        )
        if removed:
            self._logger.info(f"Removed {removed} rows of block {block} ({block_hash})")
        return removed

    def count(self) -> int:
        return self._count()


class FillEventRepository(EventRepository[FillEvent]):

    def __init__(self, session: Session) -> None:
        super().__init__(session, FillEventRecord, "fill_events")

    def to_row(self, event: FillEvent) -> Dict[str, Any]:
        return {
            "order_kind": event.order_kind,
            "order_id": event.order_id,
            "order_side": event.order_side,
            "maker": event.maker,
            "taker": event.taker,
            "price": event.price,
            "currency": event.currency,
            "currency_price": event.currency_price,
            "usd_price": event.usd_price,
            "contract": event.contract,
            "token_id": event.token_id,
            "amount": event.amount,
            "order_source_id": event.order_source_id,
            "aggregator_source_id": event.aggregator_source_id,
            "fill_source_id": event.fill_source_id,
        }


class CancelEventRepository(EventRepository[CancelEvent]):

    def __init__(self, session: Session) -> None:
        super().__init__(session, CancelEventRecord, "cancel_events")

    def to_row(self, event: CancelEvent) -> Dict[str, Any]:
        return {"order_kind": event.order_kind, "order_id": event.order_id}


class BulkCancelRepository(EventRepository[BulkCancelEvent]):

    def __init__(self, session: Session) -> None:
        super().__init__(session, BulkCancelEventRecord, "bulk_cancel_events")

    def to_row(self, event: BulkCancelEvent) -> Dict[str, Any]:
        return {
            "order_kind": event.order_kind,
            "maker": event.maker,
            "min_nonce": event.min_nonce,
        }

    def get_min_nonce(self, order_kind: str, maker: str) -> Optional[int]:
        """
        Current minimum valid nonce of a maker.

        Bulk cancels only ever raise the bound, so this is the
        largest value recorded (None when the maker never cancelled).
        """
        stmt = select(BulkCancelEventRecord.min_nonce).where(
            BulkCancelEventRecord.order_kind == order_kind,
            BulkCancelEventRecord.maker == maker.lower(),
        )
        nonces = self._execute_query(stmt)
        if not nonces:
            return None
        return max(int(nonce) for nonce in nonces)


class NonceCancelRepository(EventRepository[NonceCancelEvent]):

    def __init__(self, session: Session) -> None:
        super().__init__(session, NonceCancelEventRecord, "nonce_cancel_events")

    def to_row(self, event: NonceCancelEvent) -> Dict[str, Any]:
        return {
            "order_kind": event.order_kind,
            "maker": event.maker,
            "nonce": event.nonce,
        }


class FtTransferRepository(EventRepository[FtTransferEvent]):

    def __init__(self, session: Session) -> None:
        super().__init__(session, FtTransferEventRecord, "ft_transfer_events")

    def to_row(self, event: FtTransferEvent) -> Dict[str, Any]:
        return {"from": event.from_address, "to": event.to_address, "amount": event.amount}


class NftTransferRepository(EventRepository[NftTransferEvent]):

    def __init__(self, session: Session) -> None:
        super().__init__(session, NftTransferEventRecord, "nft_transfer_events")

    def to_row(self, event: NftTransferEvent) -> Dict[str, Any]:
        return {
            "kind": event.kind,
            "from": event.from_address,
            "to": event.to_address,
            "token_id": event.token_id,
            "amount": event.amount,
        }


class NftApprovalRepository(EventRepository[NftApprovalEvent]):

    def __init__(self, session: Session) -> None:
        super().__init__(session, NftApprovalEventRecord, "nft_approval_events")

    def to_row(self, event: NftApprovalEvent) -> Dict[str, Any]:
        return {
            "owner": event.owner,
            "operator": event.operator,
            "approved": event.approved,
        }
