"""
Providers package - Chain data source implementations.
"""

from onchain_adapters.providers.json_rpc import JsonRpcChainDataSource


__all__ = [
    "JsonRpcChainDataSource",
]
