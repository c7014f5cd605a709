"""
Storage ORM Models.

Importing this package registers every table on `Base.metadata`.
"""

from storage.models.base import Base, EventMixin, TimestampMixin
from storage.models.events import (
    BlockRecord,
    BulkCancelEventRecord,
    CancelEventRecord,
    FillEventRecord,
    FtTransferEventRecord,
    NftApprovalEventRecord,
    NftTransferEventRecord,
    NonceCancelEventRecord,
)

__all__ = [
    "Base",
    "EventMixin",
    "TimestampMixin",
    "BlockRecord",
    "BulkCancelEventRecord",
    "CancelEventRecord",
    "FillEventRecord",
    "FtTransferEventRecord",
    "NftApprovalEventRecord",
    "NftTransferEventRecord",
    "NonceCancelEventRecord",
]
