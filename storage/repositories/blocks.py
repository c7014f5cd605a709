"""
Block Repository.

Stores the headers of every block a sync pass has seen. The
primary key is (number, hash): a reorg adds a second row at the
same height instead of overwriting the first.
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from onchain_adapters.models import BlockHeader
from storage.models.events import BlockRecord
from storage.repositories.base import BaseRepository


class BlockRepository(BaseRepository[BlockRecord]):

    def __init__(self, session: Session) -> None:
        super().__init__(session, BlockRecord, "blocks")

    def save_block(self, block: BlockHeader) -> BlockHeader:
        """Insert a block; an existing (number, hash) row is kept as is."""
        self._insert_ignore([{
            "number": block.number,
            "hash": block.hash.lower(),
            "timestamp": block.timestamp,
        }])

        try:
            stored = self._session.get(BlockRecord, (block.number, block.hash.lower()))
        except SQLAlchemyError as e:
            self._handle_db_error(e, "save_block", {"number": block.number})
            raise

        return BlockHeader(number=stored.number, hash=stored.hash, timestamp=stored.timestamp)

    def get_blocks(self, number: int) -> List[BlockHeader]:
        stmt = select(BlockRecord).where(BlockRecord.number == number).order_by(BlockRecord.hash)
        return [
            BlockHeader(number=row.number, hash=row.hash, timestamp=row.timestamp)
            for row in self._execute_query(stmt)
        ]

    def delete_block(self, number: int, block_hash: str) -> int:
        return self._delete_where(
            "delete_block",
            BlockRecord.number == number,
            BlockRecord.hash == block_hash.lower(),
        )
