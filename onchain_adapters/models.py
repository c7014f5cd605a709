"""
On-chain Data Models - Immutable chain records handed to the sync engine.

Everything here is produced by a chain data source and never
mutated afterwards.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterator, Optional


class AdapterStatus(Enum):
    """Health status of a chain data source."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class RawLog:
    """
    A single on-chain log exactly as returned by the node.

    Addresses and hashes are lowercase 0x-prefixed hex strings.
    """
    address: str
    topics: tuple[str, ...]
    data: str
    block_number: int
    block_hash: str
    transaction_hash: str
    transaction_index: int
    log_index: int
    removed: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "address": self.address,
            "topics": list(self.topics),
            "data": self.data,
            "block_number": self.block_number,
            "block_hash": self.block_hash,
            "transaction_hash": self.transaction_hash,
            "transaction_index": self.transaction_index,
            "log_index": self.log_index,
            "removed": self.removed,
        }


@dataclass(frozen=True)
class BlockHeader:
    """Block metadata the sync engine persists and caches."""
    number: int
    hash: str
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return {"number": self.number, "hash": self.hash, "timestamp": self.timestamp}


@dataclass(frozen=True)
class Transaction:
    """A transaction with its calldata."""
    hash: str
    from_address: str
    to: Optional[str]
    input: str
    value: int
    block_number: Optional[int] = None


@dataclass(frozen=True)
class TransactionReceipt:
    """Receipt of a mined transaction."""
    transaction_hash: str
    status: int
    block_number: int
    logs: tuple[RawLog, ...] = ()


@dataclass(frozen=True)
class CallFrame:
    """One frame of a `callTracer` call trace."""
    call_type: str
    from_address: str
    to: Optional[str]
    input: str
    value: int = 0
    calls: tuple["CallFrame", ...] = ()

    @property
    def selector(self) -> str:
        """4-byte function selector of the call input."""
        return self.input[:10].lower()

    def walk(self) -> Iterator["CallFrame"]:
        """Depth-first, pre-order traversal of the call tree."""
        yield self
        for call in self.calls:
            yield from call.walk()


@dataclass(frozen=True)
class LogFilter:
    """Parameters of an `eth_getLogs` request."""
    from_block: int
    to_block: int
    topics: Optional[tuple[tuple[str, ...], ...]] = None
    address: Optional[str] = None

    def to_rpc_params(self) -> dict[str, Any]:
        """Convert to the JSON-RPC filter object."""
        params: dict[str, Any] = {
            "fromBlock": hex(self.from_block),
            "toBlock": hex(self.to_block),
        }
        if self.topics is not None:
            params["topics"] = [list(group) for group in self.topics]
        if self.address is not None:
            params["address"] = self.address
        return params


@dataclass
class AdapterHealth:
    """Health status of a chain data source."""
    status: AdapterStatus
    last_check: datetime
    latency_ms: Optional[float] = None
    error_count: int = 0
    last_error: Optional[str] = None
    last_error_time: Optional[datetime] = None
    consecutive_failures: int = 0
    requests_total: int = 0

    def is_healthy(self) -> bool:
        """Check if source is operational."""
        return self.status == AdapterStatus.HEALTHY

    def is_usable(self) -> bool:
        """Check if source can still be used."""
        return self.status in (AdapterStatus.HEALTHY, AdapterStatus.DEGRADED, AdapterStatus.UNKNOWN)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "status": self.status.value,
            "last_check": self.last_check.isoformat(),
            "latency_ms": self.latency_ms,
            "error_count": self.error_count,
            "last_error": self.last_error,
            "last_error_time": self.last_error_time.isoformat() if self.last_error_time else None,
            "consecutive_failures": self.consecutive_failures,
            "requests_total": self.requests_total,
        }


@dataclass
class AdapterIncident:
    """Record of a failed upstream call."""
    adapter_name: str
    incident_type: str
    timestamp: datetime
    error_message: str
    method: Optional[str] = None
    params: list[Any] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "adapter_name": self.adapter_name,
            "incident_type": self.incident_type,
            "timestamp": self.timestamp.isoformat(),
            "error_message": self.error_message,
            "method": self.method,
            "params": [str(p)[:200] for p in self.params],
        }
