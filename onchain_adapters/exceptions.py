"""
On-chain Adapter Exceptions - Custom exception hierarchy.

Every call to the upstream node may fail independently; these
exceptions carry enough context for the caller to decide whether
the failure is isolated to one event or fatal to a sync pass.
"""

from datetime import datetime
from typing import Any, Optional


class OnchainAdapterError(Exception):
    """Base exception for all on-chain adapter errors."""

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        method: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.adapter_name = adapter_name
        self.method = method
        self.original_error = original_error
        self.context = context or {}
        self.timestamp = datetime.utcnow()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "adapter_name": self.adapter_name,
            "method": self.method,
            "original_error": str(self.original_error) if self.original_error else None,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]
        if self.adapter_name:
            parts.append(f"[adapter={self.adapter_name}]")
        if self.method:
            parts.append(f"[method={self.method}]")
        if self.original_error:
            parts.append(f"(caused by: {self.original_error})")
        return " ".join(parts)


class FetchError(OnchainAdapterError):
    """Transport-level error while talking to the node."""

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        method: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, adapter_name, method, original_error, context)
        self.status_code = status_code
        self.response_body = response_body

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data.update({
            "status_code": self.status_code,
            "response_body": self.response_body,
        })
        return data


class RateLimitError(OnchainAdapterError):
    """Rate limit exceeded error."""

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        method: Optional[str] = None,
        retry_after_seconds: Optional[int] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, adapter_name, method, original_error, context)
        self.retry_after_seconds = retry_after_seconds

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["retry_after_seconds"] = self.retry_after_seconds
        return data


class RpcError(OnchainAdapterError):
    """The node answered with a JSON-RPC error object."""

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        method: Optional[str] = None,
        code: Optional[int] = None,
        data: Optional[Any] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, adapter_name, method, None, context)
        self.code = code
        self.data = data

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result = super().to_dict()
        result.update({"code": self.code, "data": self.data})
        return result


class NormalizationError(OnchainAdapterError):
    """The node response did not match the expected shape."""

    def __init__(
        self,
        message: str,
        adapter_name: Optional[str] = None,
        method: Optional[str] = None,
        raw_data: Optional[Any] = None,
        original_error: Optional[Exception] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, adapter_name, method, original_error, context)
        self.raw_data = raw_data

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        data = super().to_dict()
        data["raw_data"] = str(self.raw_data)[:500] if self.raw_data else None
        return data
