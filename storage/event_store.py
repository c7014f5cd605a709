"""
Storage - Event Store.

============================================================
RESPONSIBILITY
============================================================
SQL implementation of the sync engine's RecordStore.

- Every record of a sync pass is written in one transaction
- Replaying a pass inserts nothing new
- Unsyncing a block removes its records and its header together
- Repository failures surface as StorageError

============================================================
"""

import logging
from contextlib import contextmanager
from typing import Dict, Generator, List

from sqlalchemy.orm import Session

from core.exceptions import StorageError
from events_sync.models import OnChainData
from events_sync.store import RecordStore
from onchain_adapters.models import BlockHeader
from storage.database import Database
from storage.repositories.blocks import BlockRepository
from storage.repositories.events import (
    BulkCancelRepository,
    CancelEventRepository,
    EventRepository,
    FillEventRepository,
    FtTransferRepository,
    NftApprovalRepository,
    NftTransferRepository,
    NonceCancelRepository,
)
from storage.repositories.exceptions import RepositoryException


logger = logging.getLogger(__name__)

# OnChainData attribute -> repository class
RECORD_REPOSITORIES = {
    "fill_events": FillEventRepository,
    "cancel_events": CancelEventRepository,
    "bulk_cancel_events": BulkCancelRepository,
    "nonce_cancel_events": NonceCancelRepository,
    "ft_transfer_events": FtTransferRepository,
    "nft_transfer_events": NftTransferRepository,
    "nft_approval_events": NftApprovalRepository,
}


class EventStore(RecordStore):
    """RecordStore backed by a SQLAlchemy database."""

    def __init__(self, database: Database) -> None:
        self.database = database

    @contextmanager
    def _session(self, operation: str) -> Generator[Session, None, None]:
        try:
            with self.database.session_scope() as session:
                yield session
        except RepositoryException as e:
            logger.error(f"[event_store] {operation} failed: {e}")
            raise StorageError(
                f"Record store {operation} failed",
                context={"operation": operation},
                cause=e,
            ) from e

    @staticmethod
    def _repositories(session) -> Dict[str, EventRepository]:
        return {name: repository(session) for name, repository in RECORD_REPOSITORIES.items()}

    # ---------------------------------------------------------
    # Blocks
    # ---------------------------------------------------------

    def save_block(self, block: BlockHeader) -> BlockHeader:
        with self._session("save_block") as session:
            return BlockRepository(session).save_block(block)

    def get_blocks(self, number: int) -> List[BlockHeader]:
        with self._session("get_blocks") as session:
            return BlockRepository(session).get_blocks(number)

    def delete_block(self, number: int, block_hash: str) -> int:
        with self._session("delete_block") as session:
            return BlockRepository(session).delete_block(number, block_hash)

    # ---------------------------------------------------------
    # Records
    # ---------------------------------------------------------

    def persist(self, data: OnChainData) -> Dict[str, int]:
        with self._session("persist") as session:
            inserted = {
                name: repository.insert(getattr(data, name))
                for name, repository in self._repositories(session).items()
            }

        logger.info(f"[event_store] Persisted {sum(inserted.values())} new records")
        return inserted

    def remove_events(self, block: int, block_hash: str) -> Dict[str, int]:
        with self._session("remove_events") as session:
            return self._remove(session, block, block_hash)

    def unsync(self, block: int, block_hash: str) -> Dict[str, int]:
        """Remove the records and the header of an orphaned block atomically."""
        with self._session("unsync") as session:
            removed = self._remove(session, block, block_hash)
            removed["blocks"] = BlockRepository(session).delete_block(block, block_hash)
        return removed

    def _remove(self, session: Session, block: int, block_hash: str) -> Dict[str, int]:
        removed = {
            name: repository.remove_events(block, block_hash)
            for name, repository in self._repositories(session).items()
        }
        logger.info(f"[event_store] Removed {sum(removed.values())} records of block {block} ({block_hash})")
        return removed

    def get_min_nonce(self, order_kind: str, maker: str):
        with self._session("get_min_nonce") as session:
            return BulkCancelRepository(session).get_min_nonce(order_kind, maker)
