"""
Event Catalog - Static registry of tracked events.

============================================================
RESPONSIBILITY
============================================================
Maps every tracked event kind to its topic, topic count,
address allow-list and ABI.

- Built once at process start from the chain settings
- Never mutated afterwards (safe for concurrent readers)
- Order of entries is significant: classification is
  first-match-wins

============================================================
"""

from typing import Iterable, Optional

from events_sync.catalog import (
    element,
    erc20,
    forward,
    looks_rare,
    nft,
    rarible,
    seaport,
    superrare,
    universe,
    x2y2,
    zeroex_v4,
)
from events_sync.catalog.base import CatalogEntry, EventDefinition
from events_sync.config import ChainSettings


ALL_DEFINITIONS: tuple[EventDefinition, ...] = (
    *erc20.DEFINITIONS,
    *nft.DEFINITIONS,
    *seaport.DEFINITIONS,
    *element.DEFINITIONS,
    *zeroex_v4.DEFINITIONS,
    *x2y2.DEFINITIONS,
    *looks_rare.DEFINITIONS,
    *rarible.DEFINITIONS,
    *universe.DEFINITIONS,
    *forward.DEFINITIONS,
    *superrare.DEFINITIONS,
)


class EventCatalog:
    """Chain-bound, read-only view over the event definitions."""

    def __init__(self, entries: Iterable[CatalogEntry]) -> None:
        self._entries = tuple(entries)
        self._by_kind = {entry.kind: entry for entry in self._entries}

        if len(self._by_kind) != len(self._entries):
            raise ValueError("Duplicate event kinds in catalog")

    @classmethod
    def from_settings(
        cls,
        settings: ChainSettings,
        definitions: Iterable[EventDefinition] = ALL_DEFINITIONS,
    ) -> "EventCatalog":
        """Bind definitions to the allow-lists of a chain, skipping undeployed exchanges."""
        entries = []
        for definition in definitions:
            if definition.exchange is not None and not settings.is_deployed(definition.exchange):
                continue
            entries.append(
                CatalogEntry(
                    kind=definition.kind,
                    family=definition.family,
                    topic=definition.topic,
                    num_topics=definition.num_topics,
                    abi=definition.abi,
                    addresses=settings.addresses_for(definition.exchange),
                )
            )
        return cls(entries)

    def lookup(self, kinds: Optional[Iterable[str]] = None) -> tuple[CatalogEntry, ...]:
        """
        Entries for the given kinds, in catalog order.

        All entries are returned when `kinds` is None.
        """
        if kinds is None:
            return self._entries
        wanted = set(kinds)
        return tuple(entry for entry in self._entries if entry.kind in wanted)

    def get(self, kind: str) -> CatalogEntry:
        """Single entry by kind (KeyError if unknown)."""
        return self._by_kind[kind]

    def topics(self, kinds: Optional[Iterable[str]] = None) -> tuple[str, ...]:
        """Deduplicated topic-0 union of the selected entries, first-seen order."""
        return tuple(dict.fromkeys(entry.topic for entry in self.lookup(kinds)))

    def match(self, topics: tuple[str, ...], address: str) -> Optional[CatalogEntry]:
        """First entry matching a log's topics and emitting address."""
        for entry in self._entries:
            if entry.matches(topics, address):
                return entry
        return None

    @property
    def kinds(self) -> tuple[str, ...]:
        return tuple(self._by_kind)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = [
    "ALL_DEFINITIONS",
    "CatalogEntry",
    "EventCatalog",
    "EventDefinition",
]
