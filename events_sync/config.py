"""
Events Sync - Configuration.

============================================================
RESPONSIBILITY
============================================================
Process-level settings, loaded once at start-up and passed
explicitly to every component.

- SyncConfig: runtime knobs (environment / .env)
- ChainSettings: per-chain addresses (wrapped native token,
  exchange allow-lists)

============================================================
ENVIRONMENT
============================================================
RPC_URL                  Node endpoint (required for the CLI)
CHAIN_ID                 Default 1
DATABASE_URL             SQLAlchemy URL, default in-memory SQLite
ENABLE_REORG_CHECK       Default true
REORG_CHECK_FREQUENCY    Minutes, comma separated
PREWARM_MAX_BLOCKS       Default 32
PREWARM_CONCURRENCY      Default 32
MAX_VALIDATE_CALLS       Default 100
NATIVE_USD_PRICE         Optional fixed USD rate of the native token
EXCHANGE_ADDRESSES       Optional overrides, "key=0x..|0x..,key2=0x.."

============================================================
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from dotenv import load_dotenv

from core.constants import (
    DEFAULT_REORG_CHECK_FREQUENCY_MINUTES,
    MAX_VALIDATE_CALLS,
    NATIVE_CURRENCY,
    PREWARM_CONCURRENCY,
    PREWARM_MAX_BLOCKS,
)
from core.exceptions import ConfigurationError


# =============================================================
# CHAIN SETTINGS
# =============================================================

# Exchange key -> allow-list. A key mapped to None accepts any emitting
# address; a key missing from the mapping disables its events entirely.
ExchangeAddresses = Dict[str, Optional[Tuple[str, ...]]]

_MAINNET_EXCHANGES: ExchangeAddresses = {
    "weth": ("0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",),
    "seaport": ("0x00000000006c3852cbef3e08e8df289169ede581",),
    "seaport-v1.4": ("0x00000000000001ad428e4906ae43d8f9852d0dd6",),
    "element": ("0x20f780a973856b93f63670377900c1d2a50a77c4",),
    "zeroex-v4": ("0xdef1c0ded9bec7f1a1670819833240f027b25eff",),
    "x2y2": ("0x74312363e45dcaba76c59ec49a7aa8a65a67eed3",),
    "looks-rare": ("0x59728544b08ab483533076417fbbb2fd0b17ce3a",),
    "rarible": ("0x9757f2d2b135150bbeb65308d4a91804107cd8d6",),
    "superrare": ("0x6d7c44773c52d396f43c2d511b81aa168e9a7a42",),
    "superrare-legacy": ("0x65b49f7aee40347f5a90b714be4ef086f3fe5e2c",),
    "universe": None,
    "forward": None,
}

_GOERLI_EXCHANGES: ExchangeAddresses = {
    "weth": ("0xb4fbf271143f4fbf7b91a5ded31805e42b2208d6",),
    "seaport": ("0x00000000006c3852cbef3e08e8df289169ede581",),
    "seaport-v1.4": ("0x00000000000001ad428e4906ae43d8f9852d0dd6",),
    "zeroex-v4": ("0xf91bb752490473b8342a3e964e855b9f9a2a668e",),
    "x2y2": ("0x1891ecd5f7b1e751151d857265d6e6d08ae8989e",),
    "looks-rare": ("0xd112466471b5438c1ca2d218694200e49d81d047",),
}


@dataclass(frozen=True)
class ChainSettings:
    """Addresses the engine needs for one chain."""

    chain_id: int
    weth: str
    exchanges: ExchangeAddresses = field(default_factory=dict)
    native_currency: str = NATIVE_CURRENCY

    @classmethod
    def for_chain(
        cls,
        chain_id: int,
        overrides: Optional[ExchangeAddresses] = None,
    ) -> "ChainSettings":
        """
        Build the settings of a supported chain.

        Raises:
            ConfigurationError: Unknown chain id
        """
        known = {1: _MAINNET_EXCHANGES, 5: _GOERLI_EXCHANGES}
        if chain_id not in known:
            raise ConfigurationError(
                f"Unsupported chain id {chain_id}",
                config_key="CHAIN_ID",
            )

        exchanges = dict(known[chain_id])
        exchanges.update(overrides or {})

        weth = exchanges.get("weth")
        if not weth:
            raise ConfigurationError(
                f"Chain {chain_id} has no wrapped native token",
                config_key="EXCHANGE_ADDRESSES",
            )

        return cls(chain_id=chain_id, weth=weth[0], exchanges=exchanges)

    def is_deployed(self, exchange: str) -> bool:
        return exchange in self.exchanges

    def addresses_for(self, exchange: Optional[str]) -> Optional[frozenset]:
        """Allow-list of an exchange key (None = any address)."""
        if exchange is None:
            return None
        addresses = self.exchanges.get(exchange)
        if addresses is None:
            return None
        return frozenset(address.lower() for address in addresses)


def parse_exchange_overrides(value: Optional[str]) -> ExchangeAddresses:
    """Parse "key=0xa|0xb,key2=0xc" into an exchange mapping."""
    overrides: ExchangeAddresses = {}
    if not value:
        return overrides

    for item in value.split(","):
        item = item.strip()
        if not item:
            continue
        if "=" not in item:
            raise ConfigurationError(
                f"Invalid exchange override '{item}'",
                config_key="EXCHANGE_ADDRESSES",
            )
        key, addresses = item.split("=", 1)
        parsed = tuple(a.strip().lower() for a in addresses.split("|") if a.strip())
        overrides[key.strip()] = parsed or None
    return overrides


# =============================================================
# SYNC CONFIG
# =============================================================

@dataclass
class SyncConfig:
    """Runtime configuration of the events sync engine."""

    rpc_url: str = ""
    """JSON-RPC endpoint of the chain node."""

    chain_id: int = 1
    """Chain the engine indexes."""

    database_url: str = "sqlite://"
    """SQLAlchemy database URL."""

    enable_reorg_check: bool = True
    """Schedule delayed block re-checks for live syncs."""

    reorg_check_frequency: List[int] = field(
        default_factory=lambda: list(DEFAULT_REORG_CHECK_FREQUENCY_MINUTES)
    )
    """Re-check delays in minutes."""

    prewarm_max_blocks: int = PREWARM_MAX_BLOCKS
    """Largest live range whose block headers are fetched up front."""

    prewarm_concurrency: int = PREWARM_CONCURRENCY
    """Concurrent header requests while pre-warming."""

    max_validate_calls: int = MAX_VALIDATE_CALLS
    """Upper bound of validate calls inspected per transaction trace."""

    native_usd_price: Optional[str] = None
    """Fixed USD rate of the native token (None = no USD prices)."""

    exchange_overrides: ExchangeAddresses = field(default_factory=dict)
    """Per-exchange allow-list overrides."""

    @classmethod
    def from_env(cls) -> "SyncConfig":
        """Load configuration from environment variables (and .env)."""
        load_dotenv()

        try:
            frequency = [
                int(value)
                for value in os.getenv("REORG_CHECK_FREQUENCY", "1,5,10,30,60").split(",")
                if value.strip()
            ]
            return cls(
                rpc_url=os.getenv("RPC_URL", ""),
                chain_id=int(os.getenv("CHAIN_ID", "1")),
                database_url=os.getenv("DATABASE_URL", "sqlite://"),
                enable_reorg_check=os.getenv("ENABLE_REORG_CHECK", "true").lower() == "true",
                reorg_check_frequency=frequency,
                prewarm_max_blocks=int(os.getenv("PREWARM_MAX_BLOCKS", str(PREWARM_MAX_BLOCKS))),
                prewarm_concurrency=int(os.getenv("PREWARM_CONCURRENCY", str(PREWARM_CONCURRENCY))),
                max_validate_calls=int(os.getenv("MAX_VALIDATE_CALLS", str(MAX_VALIDATE_CALLS))),
                native_usd_price=os.getenv("NATIVE_USD_PRICE") or None,
                exchange_overrides=parse_exchange_overrides(os.getenv("EXCHANGE_ADDRESSES")),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}", cause=e) from e

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.prewarm_max_blocks < 0:
            errors.append("prewarm_max_blocks must not be negative")

        if self.prewarm_concurrency < 1:
            errors.append("prewarm_concurrency must be at least 1")

        if self.max_validate_calls < 1:
            errors.append("max_validate_calls must be at least 1")

        if any(minutes <= 0 for minutes in self.reorg_check_frequency):
            errors.append("reorg_check_frequency values must be positive")

        return errors

    def chain_settings(self) -> ChainSettings:
        """Resolve the chain settings for the configured chain."""
        return ChainSettings.for_chain(self.chain_id, self.exchange_overrides)
