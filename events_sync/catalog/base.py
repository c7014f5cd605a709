"""
Event Catalog - Entry Types.
"""

from dataclasses import dataclass
from typing import Optional

from events_sync.abi import EventAbi
from events_sync.kinds import ProtocolFamily


@dataclass(frozen=True)
class EventDefinition:
    """
    Chain-independent description of a tracked event.

    `exchange` names the address allow-list (see `ChainSettings`)
    the event is restricted to; None means any emitting address.
    """
    kind: str
    family: ProtocolFamily
    abi: EventAbi
    exchange: Optional[str] = None

    @property
    def topic(self) -> str:
        return self.abi.topic

    @property
    def num_topics(self) -> int:
        return self.abi.num_topics


@dataclass(frozen=True)
class CatalogEntry:
    """A tracked event bound to the address allow-list of one chain."""
    kind: str
    family: ProtocolFamily
    topic: str
    num_topics: int
    abi: EventAbi
    addresses: Optional[frozenset[str]] = None

    def matches(self, topics: tuple[str, ...], address: str) -> bool:
        """Check topic, topic count and (when defined) the address allow-list."""
        if not topics or topics[0] != self.topic or len(topics) != self.num_topics:
            return False
        return self.addresses is None or address.lower() in self.addresses
