"""
On-chain Adapters Package - Upstream chain data layer.

Supplies raw logs, block headers, transactions, receipts and call
traces to the events sync engine.

Features:
- Isolated, replaceable data sources
- Validated, immutable output models
- Limited retries with backoff
- Health tracking per source

Quick Start:
    from onchain_adapters import JsonRpcChainDataSource, LogFilter

    async def fetch():
        async with JsonRpcChainDataSource("https://rpc.example") as source:
            logs = await source.get_logs(LogFilter(from_block=1, to_block=2))
"""

from onchain_adapters.base import BaseChainDataSource
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
from onchain_adapters.providers import JsonRpcChainDataSource


__all__ = [
    # Base
    "BaseChainDataSource",
    # Providers
    "JsonRpcChainDataSource",
    # Models
    "AdapterHealth",
    "AdapterIncident",
    "AdapterStatus",
    "BlockHeader",
    "CallFrame",
    "LogFilter",
    "RawLog",
    "Transaction",
    "TransactionReceipt",
    # Exceptions
    "FetchError",
    "NormalizationError",
    "OnchainAdapterError",
    "RateLimitError",
    "RpcError",
]
