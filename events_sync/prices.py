"""
Events Sync - Price Resolution.

The native-token price of a fill is mandatory: a `Prices` result
without `native_price` tells the handler to drop the fill.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

from events_sync.config import ChainSettings


logger = logging.getLogger(__name__)

NATIVE_DECIMALS = 18
USD_DECIMALS = 6


@dataclass(frozen=True)
class Prices:
    """Price of a fill converted to native token and USD (integer strings)."""
    native_price: Optional[str] = None
    usd_price: Optional[str] = None


class PriceOracle(ABC):
    """Converts a price in some currency into native / USD prices."""

    @abstractmethod
    async def resolve_prices(self, currency: str, price: str, timestamp: int) -> Prices:
        """
        Args:
            currency: Currency contract (or the native sentinel)
            price: Raw price in the currency's smallest unit
            timestamp: Block timestamp of the fill

        Returns:
            Prices, with `native_price` None when no conversion exists
        """
        pass


class NativePriceOracle(PriceOracle):
    """
    Oracle that only understands the native token and its wrapped form.

    Both convert 1:1. An optional fixed USD rate yields USD prices
    with six decimals. Any other currency is unresolved.
    """

    def __init__(self, settings: ChainSettings, native_usd_price: Optional[str] = None) -> None:
        self._native = {settings.native_currency.lower(), settings.weth.lower()}
        self._usd_rate: Optional[Decimal] = None
        if native_usd_price is not None:
            try:
                self._usd_rate = Decimal(native_usd_price)
            except InvalidOperation as e:
                raise ValueError(f"Invalid native USD price: {native_usd_price}") from e

    async def resolve_prices(self, currency: str, price: str, timestamp: int) -> Prices:
        if currency.lower() not in self._native:
            logger.debug(f"[prices] No conversion for currency {currency}")
            return Prices()

        usd_price = None
        if self._usd_rate is not None:
            usd = Decimal(price) * self._usd_rate * (Decimal(10) ** (USD_DECIMALS - NATIVE_DECIMALS))
            usd_price = str(int(usd))

        return Prices(native_price=str(int(price)), usd_price=usd_price)
