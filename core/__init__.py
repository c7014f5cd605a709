"""
Core Module Package.

This package contains the infrastructure pieces every other
package depends on.

Components:
- exceptions: Exception taxonomy and classification
- constants: Chain-level constants and sync defaults
"""

from core.exceptions import (
    BlockFetchError,
    CandidateRejectedError,
    ConfigurationError,
    ErrorClassification,
    EventDecodeError,
    EventProcessingError,
    EventsSyncError,
    LogFetchError,
    OrderHashMismatchError,
    StorageError,
    SyncPassError,
    TraceUnavailableError,
    UnsupportedAssetError,
    classify_exception,
)


__all__ = [
    "BlockFetchError",
    "CandidateRejectedError",
    "ConfigurationError",
    "ErrorClassification",
    "EventDecodeError",
    "EventProcessingError",
    "EventsSyncError",
    "LogFetchError",
    "OrderHashMismatchError",
    "StorageError",
    "SyncPassError",
    "TraceUnavailableError",
    "UnsupportedAssetError",
    "classify_exception",
]
