"""
Protocol Handlers.

One handler per protocol family; `HANDLERS` maps every family to
its handler class.
"""

from typing import Dict, Type

from core.exceptions import ConfigurationError
from events_sync.handlers.base import (
    BaseEventHandler,
    EventCursor,
    HandlerContext,
    apply_taker_overrides,
    find_erc20_transfer,
)
from events_sync.handlers.element import ElementHandler
from events_sync.handlers.erc20 import Erc20Handler
from events_sync.handlers.forward import ForwardHandler
from events_sync.handlers.looks_rare import LooksRareHandler
from events_sync.handlers.nft import NftHandler
from events_sync.handlers.rarible import RaribleHandler
from events_sync.handlers.seaport import SeaportHandler
from events_sync.handlers.superrare import SuperRareHandler
from events_sync.handlers.universe import UniverseHandler
from events_sync.handlers.x2y2 import X2Y2Handler
from events_sync.handlers.zeroex_v4 import ZeroExV4Handler
from events_sync.kinds import ProtocolFamily


HANDLERS: Dict[ProtocolFamily, Type[BaseEventHandler]] = {
    handler.family: handler
    for handler in (
        Erc20Handler,
        NftHandler,
        SeaportHandler,
        ElementHandler,
        ZeroExV4Handler,
        X2Y2Handler,
        LooksRareHandler,
        RaribleHandler,
        UniverseHandler,
        ForwardHandler,
        SuperRareHandler,
    )
}

_missing = set(ProtocolFamily) - set(HANDLERS)
if _missing:
    raise ConfigurationError(
        f"No handler registered for {sorted(f.value for f in _missing)}"
    )


def build_handlers(context: HandlerContext) -> Dict[ProtocolFamily, BaseEventHandler]:
    """Instantiate one handler per family, sharing the same context."""
    return {family: handler(context) for family, handler in HANDLERS.items()}


__all__ = [
    "BaseEventHandler",
    "EventCursor",
    "HandlerContext",
    "HANDLERS",
    "build_handlers",
    "apply_taker_overrides",
    "find_erc20_transfer",
    "ElementHandler",
    "Erc20Handler",
    "ForwardHandler",
    "LooksRareHandler",
    "NftHandler",
    "RaribleHandler",
    "SeaportHandler",
    "SuperRareHandler",
    "UniverseHandler",
    "X2Y2Handler",
    "ZeroExV4Handler",
]
