"""
Tests for the pieces a sync pass is assembled from: block cache,
log fetcher, price oracle and downstream queues.
"""

from unittest.mock import MagicMock

import pytest

from core.exceptions import BlockFetchError, LogFetchError, StorageError
from events_sync.block_cache import BlockCache
from events_sync.catalog import erc20
from events_sync.fetcher import LogFetcher, PrewarmPolicy
from events_sync.prices import NativePriceOracle
from events_sync.queues import DownstreamQueues, InMemoryQueue, QueueJob
from onchain_adapters.exceptions import FetchError

from tests.factories import ERC20_TOKEN, NFT_CONTRACT, block_header


# ============================================================
# BLOCK CACHE
# ============================================================

class TestBlockCache:
    """Tests for the per-pass block cache."""

    @pytest.mark.asyncio
    async def test_fetches_once_and_persists(self, chain_data, event_store):
        cache = BlockCache(chain_data, event_store)

        first = await cache.get(10)
        second = await cache.get(10)

        assert first is second
        assert chain_data.get_block.await_count == 1
        assert event_store.get_blocks(10) == [block_header(10)]

    def test_first_writer_wins(self, chain_data):
        cache = BlockCache(chain_data)

        cache.put(block_header(10))
        cache.put(block_header(10, fork=1))

        assert cache.peek(10) == block_header(10)

    @pytest.mark.asyncio
    async def test_prewarm_caches_every_block(self, chain_data):
        cache = BlockCache(chain_data)

        cached = await cache.prewarm(range(1, 6), concurrency=2)

        assert cached == 5
        assert [block.number for block in cache.blocks()] == [1, 2, 3, 4, 5]

    @pytest.mark.asyncio
    async def test_fetch_failure(self, chain_data):
        chain_data.get_block.side_effect = FetchError("down", adapter_name="mock")

        with pytest.raises(BlockFetchError):
            await BlockCache(chain_data).get(10)

    @pytest.mark.asyncio
    async def test_persist_failure(self, chain_data):
        store = MagicMock()
        store.save_block.side_effect = StorageError("Record store save_block failed")

        cache = BlockCache(chain_data, store)

        with pytest.raises(BlockFetchError):
            await cache.get(10)

        assert 10 not in cache


# ============================================================
# LOG FETCHER
# ============================================================

class TestLogFetcher:
    """Tests for filter building and range retrieval."""

    def test_default_filter_is_the_catalog_topic_union(self, chain_data, catalog):
        log_filter = LogFetcher(chain_data, catalog).build_filter(1, 2)

        assert log_filter.topics == (catalog.topics(),)
        assert log_filter.address is None

    def test_address_filter(self, chain_data, catalog):
        log_filter = LogFetcher(chain_data, catalog).build_filter(1, 2, address="0x" + "Ab" * 20)

        assert log_filter.address == "0x" + "ab" * 20

    @pytest.mark.asyncio
    async def test_logs_are_ordered(self, chain_data, catalog, make_log):
        logs = [
            make_log(erc20.transfer, {"from": NFT_CONTRACT, "to": ERC20_TOKEN, "amount": 1}, block=3, log_index=0),
            make_log(erc20.transfer, {"from": NFT_CONTRACT, "to": ERC20_TOKEN, "amount": 1}, block=2, log_index=5),
            make_log(erc20.transfer, {"from": NFT_CONTRACT, "to": ERC20_TOKEN, "amount": 1}, block=2, log_index=1),
        ]
        chain_data.get_logs.return_value = logs

        fetched = await LogFetcher(chain_data, catalog).fetch(2, 3, BlockCache(chain_data), backfill=True)

        assert [(log.block_number, log.log_index) for log in fetched] == [(2, 1), (2, 5), (3, 0)]

    @pytest.mark.asyncio
    async def test_small_live_range_is_prewarmed(self, chain_data, catalog):
        cache = BlockCache(chain_data)

        await LogFetcher(chain_data, catalog, PrewarmPolicy(max_blocks=4)).fetch(1, 4, cache)

        assert len(cache) == 4

    @pytest.mark.asyncio
    async def test_backfill_and_large_ranges_are_not_prewarmed(self, chain_data, catalog):
        cache = BlockCache(chain_data)
        fetcher = LogFetcher(chain_data, catalog, PrewarmPolicy(max_blocks=4))

        await fetcher.fetch(1, 4, cache, backfill=True)
        await fetcher.fetch(1, 5, cache)

        assert len(cache) == 0

    @pytest.mark.asyncio
    async def test_unknown_kinds_skip_the_request(self, chain_data, catalog):
        logs = await LogFetcher(chain_data, catalog).fetch(1, 2, BlockCache(chain_data), backfill=True, kinds=["nope"])

        assert logs == []

        chain_data.get_logs.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_rpc_failure(self, chain_data, catalog):
        chain_data.get_logs.side_effect = FetchError("down", adapter_name="mock")

        with pytest.raises(LogFetchError) as exc_info:
            await LogFetcher(chain_data, catalog).fetch(1, 2, BlockCache(chain_data), backfill=True)

        assert isinstance(exc_info.value.__cause__, FetchError)


# ============================================================
# PRICES
# ============================================================

class TestNativePriceOracle:

    @pytest.mark.asyncio
    async def test_native_and_wrapped_convert_one_to_one(self, settings):
        oracle = NativePriceOracle(settings, "1500")

        native = await oracle.resolve_prices(settings.native_currency, str(10 ** 18), 0)
        wrapped = await oracle.resolve_prices(settings.weth.upper().replace("0X", "0x"), str(10 ** 18), 0)

        assert native == wrapped
        assert native.native_price == str(10 ** 18)
        assert native.usd_price == "1500000000"

    @pytest.mark.asyncio
    async def test_unknown_currency_is_unresolved(self, settings):
        prices = await NativePriceOracle(settings).resolve_prices(ERC20_TOKEN, "1", 0)

        assert prices.native_price is None

    @pytest.mark.asyncio
    async def test_no_usd_rate(self, settings):
        prices = await NativePriceOracle(settings).resolve_prices(settings.weth, "5", 0)

        assert (prices.native_price, prices.usd_price) == ("5", None)

    def test_invalid_rate(self, settings):
        with pytest.raises(ValueError):
            NativePriceOracle(settings, "lots")


# ============================================================
# QUEUES
# ============================================================

class TestInMemoryQueue:

    @pytest.mark.asyncio
    async def test_duplicate_job_ids_are_ignored(self):
        queue = InMemoryQueue("test")

        accepted = await queue.add([QueueJob("a", {}), QueueJob("b", {}), QueueJob("a", {"x": 1})])
        again = await queue.add([QueueJob("b", {})])

        assert (accepted, again) == (2, 0)
        assert [job.job_id for job in queue.jobs] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_drain_keeps_seen_ids(self):
        queue = InMemoryQueue("test")
        await queue.add([QueueJob("a", {})])

        drained = queue.drain()
        accepted = await queue.add([QueueJob("a", {})])

        assert len(drained) == 1
        assert accepted == 0
        assert len(queue) == 0

    def test_downstream_queues_are_independent(self):
        queues = DownstreamQueues()

        assert queues.fill_updates is not queues.order_updates
        assert queues.block_checks.name == "block-checks"
