"""
Core Module - Exceptions.

============================================================
RESPONSIBILITY
============================================================
Defines the exception taxonomy of the events sync engine.

- Provides a clear exception hierarchy
- Encodes the blast radius of every failure
- Includes context for debugging

============================================================
EXCEPTION HIERARCHY
============================================================
EventsSyncError (base)
├── ConfigurationError
├── EventProcessingError              (recoverable per event)
│   ├── EventDecodeError
│   ├── UnsupportedAssetError
│   └── TraceUnavailableError
├── CandidateRejectedError            (recoverable per candidate)
│   └── OrderHashMismatchError
└── SyncPassError                     (fatal per pass)
    ├── LogFetchError
    ├── BlockFetchError
    └── StorageError

============================================================
"""

from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, Optional


# ============================================================
# ERROR CLASSIFICATION
# ============================================================

class ErrorClassification(Enum):
    """How far a failure propagates inside a sync pass."""

    RECOVERABLE_PER_EVENT = "recoverable_per_event"
    """The single event is dropped, the pass continues."""

    RECOVERABLE_PER_CANDIDATE = "recoverable_per_candidate"
    """The reconstruction candidate is discarded, the next one is tried."""

    FATAL_PER_PASS = "fatal_per_pass"
    """The whole block range is unprocessed and must be retried."""


# ============================================================
# BASE EXCEPTION
# ============================================================

class EventsSyncError(Exception):
    """
    Base exception for all events sync errors.

    All exceptions carry:
    - classification: blast radius of the failure
    - context: for debugging
    - timestamp: when the error occurred
    """

    default_classification: ErrorClassification = ErrorClassification.RECOVERABLE_PER_EVENT

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        classification: Optional[ErrorClassification] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)

        self.message = message
        self.context = context or {}
        self.classification = classification or self.default_classification
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc)

        if cause:
            self.context["cause_type"] = type(cause).__name__
            self.context["cause_message"] = str(cause)

    @property
    def is_fatal(self) -> bool:
        """Check if the error aborts the whole sync pass."""
        return self.classification == ErrorClassification.FATAL_PER_PASS

    def to_dict(self) -> Dict[str, Any]:
        """Serialize exception for logging/storage."""
        return {
            "type": type(self).__name__,
            "message": self.message,
            "classification": self.classification.value,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "cause": str(self.cause) if self.cause else None,
        }

    def to_log_format(self) -> str:
        """Format exception for structured logging."""
        ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
        base = f"{type(self).__name__}: {self.message}"
        return f"{base} | {ctx_str}" if ctx_str else base


# ============================================================
# CONFIGURATION ERRORS
# ============================================================

class ConfigurationError(EventsSyncError):
    """Error in configuration."""

    default_classification = ErrorClassification.FATAL_PER_PASS

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if config_key:
            context["config_key"] = config_key
        super().__init__(message, context=context, **kwargs)
        self.config_key = config_key


# ============================================================
# PER-EVENT ERRORS
# ============================================================

class EventProcessingError(EventsSyncError):
    """Base class for failures isolated to a single event."""

    default_classification = ErrorClassification.RECOVERABLE_PER_EVENT

    def __init__(
        self,
        message: str,
        kind: Optional[str] = None,
        tx_hash: Optional[str] = None,
        log_index: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if kind:
            context["kind"] = kind
        if tx_hash:
            context["tx_hash"] = tx_hash
        if log_index is not None:
            context["log_index"] = log_index
        super().__init__(message, context=context, **kwargs)


class EventDecodeError(EventProcessingError):
    """Log data or calldata could not be decoded."""


class UnsupportedAssetError(EventProcessingError):
    """The event references an asset class the engine does not handle."""

    def __init__(self, message: str, asset_class: Optional[str] = None, **kwargs):
        context = kwargs.pop("context", {})
        if asset_class:
            context["asset_class"] = asset_class
        super().__init__(message, context=context, **kwargs)
        self.asset_class = asset_class


class TraceUnavailableError(EventProcessingError):
    """The transaction (or its call trace) could not be fetched."""


# ============================================================
# PER-CANDIDATE ERRORS
# ============================================================

class CandidateRejectedError(EventsSyncError):
    """A reconstructed candidate was rejected."""

    default_classification = ErrorClassification.RECOVERABLE_PER_CANDIDATE


class OrderHashMismatchError(CandidateRejectedError):
    """Recomputed order hash differs from the hash observed on-chain."""

    def __init__(self, expected: str, actual: str, **kwargs):
        super().__init__(
            f"Order hash mismatch: expected {expected}, got {actual}",
            context={"expected": expected, "actual": actual},
            **kwargs,
        )
        self.expected = expected
        self.actual = actual


# ============================================================
# FATAL ERRORS
# ============================================================

class SyncPassError(EventsSyncError):
    """Base class for failures that abort a whole sync pass."""

    default_classification = ErrorClassification.FATAL_PER_PASS

    def __init__(
        self,
        message: str,
        from_block: Optional[int] = None,
        to_block: Optional[int] = None,
        **kwargs,
    ):
        context = kwargs.pop("context", {})
        if from_block is not None:
            context["from_block"] = from_block
        if to_block is not None:
            context["to_block"] = to_block
        super().__init__(message, context=context, **kwargs)


class LogFetchError(SyncPassError):
    """Logs for the block range could not be retrieved."""


class BlockFetchError(SyncPassError):
    """Block metadata could not be retrieved or persisted."""


class StorageError(SyncPassError):
    """A record store could not read or write blocks or records."""


# ============================================================
# UTILITY FUNCTIONS
# ============================================================

def classify_exception(exc: Exception) -> ErrorClassification:
    """
    Classify any exception raised while handling a single event.

    Unknown exceptions inside a handler never escape the event,
    so they default to per-event recoverable.
    """
    if isinstance(exc, EventsSyncError):
        return exc.classification
    return ErrorClassification.RECOVERABLE_PER_EVENT
