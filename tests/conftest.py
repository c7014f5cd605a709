"""
Shared fixtures.

Logs are built with eth_abi from the catalog's own event ABIs, so
every test exercises the real topic / data encoding.
"""

from typing import Any, Dict, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from events_sync.attribution import NoAttributionService
from events_sync.catalog import EventCatalog
from events_sync.catalog.base import EventDefinition
from events_sync.config import ChainSettings
from events_sync.handlers import HandlerContext
from events_sync.models import BaseEventParams, ClassifiedEvent
from events_sync.prices import NativePriceOracle
from onchain_adapters.models import RawLog
from storage.database import Database
from storage.event_store import EventStore

from tests.factories import BASE_TIMESTAMP, NFT_CONTRACT, TX_HASH, block_hash, block_header


@pytest.fixture
def settings() -> ChainSettings:
    return ChainSettings.for_chain(1)


@pytest.fixture
def catalog(settings) -> EventCatalog:
    return EventCatalog.from_settings(settings)


@pytest.fixture
def make_log(settings):
    """Build a RawLog for a catalog definition from its decoded arguments."""

    def _make_log(
        definition: EventDefinition,
        args: Dict[str, Any],
        address: Optional[str] = None,
        block: int = 100,
        log_index: int = 0,
        tx_hash: str = TX_HASH,
        tx_index: int = 0,
    ) -> RawLog:
        if address is None:
            addresses = settings.addresses_for(definition.exchange)
            address = sorted(addresses)[0] if addresses else NFT_CONTRACT
        topics, data = definition.abi.encode_log_fields(args)
        return RawLog(
            address=address,
            topics=topics,
            data=data,
            block_number=block,
            block_hash=block_hash(block),
            transaction_hash=tx_hash,
            transaction_index=tx_index,
            log_index=log_index,
        )

    return _make_log


@pytest.fixture
def make_event(catalog, make_log):
    """Build a ClassifiedEvent the way the classifier would."""

    def _make_event(definition: EventDefinition, args: Dict[str, Any], **kwargs) -> ClassifiedEvent:
        log = make_log(definition, args, **kwargs)
        entry = catalog.match(log.topics, log.address)
        assert entry is not None, f"{definition.kind} did not classify"
        return ClassifiedEvent(
            kind=entry.kind,
            family=entry.family,
            base_event_params=BaseEventParams(
                address=log.address,
                block=log.block_number,
                block_hash=log.block_hash,
                tx_hash=log.transaction_hash,
                tx_index=log.transaction_index,
                log_index=log.log_index,
                timestamp=BASE_TIMESTAMP + log.block_number,
            ),
            log=log,
            entry=entry,
        )

    return _make_event


@pytest.fixture
def chain_data():
    """Chain data source double answering blocks deterministically."""
    source = MagicMock()
    source.name = "mock"
    source.get_block = AsyncMock(side_effect=lambda number: block_header(number))
    source.get_logs = AsyncMock(return_value=[])
    source.get_transaction = AsyncMock()
    source.get_call_trace = AsyncMock()
    source.call = AsyncMock()
    return source


@pytest.fixture
def handler_context(chain_data, settings) -> HandlerContext:
    return HandlerContext(
        chain_data=chain_data,
        prices=NativePriceOracle(settings, "2000"),
        attribution=NoAttributionService(),
        settings=settings,
    )


@pytest.fixture
def database():
    """Fresh in-memory SQLite database with the schema created."""
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.dispose("test teardown")


@pytest.fixture
def event_store(database) -> EventStore:
    return EventStore(database)
