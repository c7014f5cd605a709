"""
Base Chain Data Source - Abstract interface for all upstream node clients.

All data sources MUST:
- Wrap every call individually so one failure never corrupts a batch
- Retry transport errors a limited number of times
- Never retry JSON-RPC errors or client errors
- Validate responses before handing them to the sync engine
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError

from onchain_adapters.exceptions import (
    FetchError,
    NormalizationError,
    OnchainAdapterError,
    RateLimitError,
    RpcError,
)
from onchain_adapters.models import (
    AdapterHealth,
    AdapterIncident,
    AdapterStatus,
    BlockHeader,
    CallFrame,
    LogFilter,
    RawLog,
    Transaction,
    TransactionReceipt,
)
from onchain_adapters.schemas import (
    RpcBlock,
    RpcCallFrame,
    RpcLog,
    RpcReceipt,
    RpcTransaction,
)


logger = logging.getLogger(__name__)


class BaseChainDataSource(ABC):
    """
    Abstract base class for upstream chain data sources.

    Subclasses implement a single transport method, `send()`.
    Everything else (retries, health tracking, response
    validation) lives here.

    Features:
    - Limited retries with exponential backoff
    - Rate limit detection
    - Health status with degradation thresholds
    - Incident log of failed calls
    """

    # Configuration defaults
    DEFAULT_TIMEOUT = 30.0
    MAX_RETRIES = 3
    RETRY_BACKOFF_BASE = 1.5
    DEGRADED_THRESHOLD = 3
    UNAVAILABLE_THRESHOLD = 5

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self._timeout = timeout

        # Health tracking
        self._health = AdapterHealth(
            status=AdapterStatus.UNKNOWN,
            last_check=datetime.utcnow(),
        )

        # Incident log
        self._incidents: list[AdapterIncident] = []
        self._max_incidents = 100

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this data source."""
        pass

    @abstractmethod
    async def send(self, method: str, params: list[Any]) -> Any:
        """
        Send a single JSON-RPC request.

        Args:
            method: JSON-RPC method name
            params: Positional parameters

        Returns:
            The `result` member of the response

        Raises:
            FetchError: Transport failure
            RateLimitError: Upstream throttled the request
            RpcError: The node answered with an error object
        """
        pass

    # ─────────────────────────────────────────────────────────────
    # Chain Queries
    # ─────────────────────────────────────────────────────────────

    async def get_logs(self, log_filter: LogFilter) -> list[RawLog]:
        """Fetch logs matching a filter, ordered by block and log index."""
        result = await self.request("eth_getLogs", [log_filter.to_rpc_params()])
        logs = [self._parse(RpcLog, item, "eth_getLogs").to_model() for item in result or []]
        return sorted(logs, key=lambda log: (log.block_number, log.log_index))

    async def get_block(self, number: int) -> BlockHeader:
        """Fetch a block header by number."""
        result = await self.request("eth_getBlockByNumber", [hex(number), False])
        if result is None:
            raise FetchError(
                message=f"Block {number} not found",
                adapter_name=self.name,
                method="eth_getBlockByNumber",
            )
        return self._parse(RpcBlock, result, "eth_getBlockByNumber").to_model()

    async def get_transaction(self, tx_hash: str) -> Transaction:
        """Fetch a transaction (including calldata) by hash."""
        result = await self.request("eth_getTransactionByHash", [tx_hash])
        if result is None:
            raise FetchError(
                message=f"Transaction {tx_hash} not found",
                adapter_name=self.name,
                method="eth_getTransactionByHash",
            )
        return self._parse(RpcTransaction, result, "eth_getTransactionByHash").to_model()

    async def get_transaction_receipt(self, tx_hash: str) -> TransactionReceipt:
        """Fetch a transaction receipt by hash."""
        result = await self.request("eth_getTransactionReceipt", [tx_hash])
        if result is None:
            raise FetchError(
                message=f"Receipt for {tx_hash} not found",
                adapter_name=self.name,
                method="eth_getTransactionReceipt",
            )
        return self._parse(RpcReceipt, result, "eth_getTransactionReceipt").to_model()

    async def get_call_trace(self, tx_hash: str) -> CallFrame:
        """Fetch the call tree of a transaction (`callTracer`)."""
        result = await self.request(
            "debug_traceTransaction",
            [tx_hash, {"tracer": "callTracer"}],
        )
        if result is None:
            raise FetchError(
                message=f"Trace for {tx_hash} not found",
                adapter_name=self.name,
                method="debug_traceTransaction",
            )
        return self._parse(RpcCallFrame, result, "debug_traceTransaction").to_model()

    async def call(self, to: str, data: str, block: str = "latest") -> str:
        """Execute a read-only `eth_call` and return the raw hex output."""
        return await self.request("eth_call", [{"to": to, "data": data}, block])

    # ─────────────────────────────────────────────────────────────
    # Request Handling
    # ─────────────────────────────────────────────────────────────

    async def request(self, method: str, params: list[Any]) -> Any:
        """Send a request with limited retries and health tracking."""
        last_error: Optional[Exception] = None

        for attempt in range(self.MAX_RETRIES):
            self._health.requests_total += 1
            start_time = time.time()
            try:
                result = await asyncio.wait_for(
                    self.send(method, params),
                    timeout=self._timeout,
                )
                self._health.latency_ms = (time.time() - start_time) * 1000
                self._on_success()
                return result

            except (RateLimitError, RpcError) as e:
                # Don't retry - the node answered deterministically
                self._on_error(e, method, params)
                raise

            except FetchError as e:
                if e.status_code and 400 <= e.status_code < 500:
                    self._on_error(e, method, params)
                    raise
                last_error = e

            except asyncio.TimeoutError as e:
                last_error = e

            wait_time = self.RETRY_BACKOFF_BASE ** attempt
            logger.warning(
                f"[{self.name}] {method} retry {attempt + 1}/{self.MAX_RETRIES} "
                f"in {wait_time:.1f}s: {last_error!r}"
            )
            await asyncio.sleep(wait_time)

        error = FetchError(
            message=f"Failed after {self.MAX_RETRIES} retries",
            adapter_name=self.name,
            method=method,
            original_error=last_error,
        )
        self._on_error(error, method, params)
        raise error

    def _parse(self, schema: Any, payload: Any, method: str) -> Any:
        """Validate a response payload against a schema."""
        try:
            return schema.model_validate(payload)
        except ValidationError as e:
            raise NormalizationError(
                message=f"Unexpected {method} response",
                adapter_name=self.name,
                method=method,
                raw_data=payload,
                original_error=e,
            ) from e

    # ─────────────────────────────────────────────────────────────
    # Health & Error Tracking
    # ─────────────────────────────────────────────────────────────

    def _on_success(self) -> None:
        """Handle successful request."""
        self._health.consecutive_failures = 0
        self._health.last_check = datetime.utcnow()

        if self._health.status != AdapterStatus.HEALTHY:
            if self._health.status != AdapterStatus.UNKNOWN:
                logger.info(f"[{self.name}] Recovered to HEALTHY status")
            self._health.status = AdapterStatus.HEALTHY

    def _on_error(
        self,
        error: OnchainAdapterError,
        method: str,
        params: list[Any],
    ) -> None:
        """Handle request error."""
        self._health.error_count += 1
        self._health.last_error = str(error)
        self._health.last_error_time = datetime.utcnow()

        if isinstance(error, RpcError):
            # The node itself is fine
            pass
        elif isinstance(error, RateLimitError):
            self._health.status = AdapterStatus.RATE_LIMITED
        else:
            self._health.consecutive_failures += 1
            if self._health.consecutive_failures >= self.UNAVAILABLE_THRESHOLD:
                if self._health.status != AdapterStatus.UNAVAILABLE:
                    self._health.status = AdapterStatus.UNAVAILABLE
                    logger.error(f"[{self.name}] Marked UNAVAILABLE")
            elif self._health.consecutive_failures >= self.DEGRADED_THRESHOLD:
                if self._health.status != AdapterStatus.DEGRADED:
                    self._health.status = AdapterStatus.DEGRADED
                    logger.warning(f"[{self.name}] Marked DEGRADED")

        self._incidents.append(
            AdapterIncident(
                adapter_name=self.name,
                incident_type=error.__class__.__name__,
                timestamp=datetime.utcnow(),
                error_message=str(error),
                method=method,
                params=list(params),
            )
        )
        if len(self._incidents) > self._max_incidents:
            self._incidents = self._incidents[-self._max_incidents:]

    def get_health(self) -> AdapterHealth:
        """Get current health status."""
        return self._health

    def get_incidents(self, limit: int = 10) -> list[AdapterIncident]:
        """Get recent incidents."""
        return self._incidents[-limit:]

    # ─────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────

    async def close(self) -> None:
        """Close resources."""
        pass

    async def __aenter__(self) -> "BaseChainDataSource":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name}, status={self._health.status.value})>"
