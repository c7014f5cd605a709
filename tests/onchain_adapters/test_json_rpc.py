"""
Tests for the chain data source layer.

============================================================
COVERS
============================================================
- Retry policy of BaseChainDataSource.request
- Health tracking and incident log
- Response validation into domain models
- JsonRpcChainDataSource HTTP handling

============================================================
"""

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from onchain_adapters.base import BaseChainDataSource
from onchain_adapters.exceptions import FetchError, NormalizationError, RateLimitError, RpcError
from onchain_adapters.models import AdapterStatus, LogFilter
from onchain_adapters.providers.json_rpc import JsonRpcChainDataSource


# ============================================================
# FIXTURES
# ============================================================

class ScriptedSource(BaseChainDataSource):
    """Data source whose transport is an AsyncMock."""

    def __init__(self) -> None:
        super().__init__(timeout=5)
        self.send = AsyncMock()

    @property
    def name(self) -> str:
        return "scripted"

    async def send(self, method: str, params: list[Any]) -> Any:  # replaced per instance
        pass


@pytest.fixture
def source():
    return ScriptedSource()


@pytest.fixture(autouse=True)
def no_backoff():
    with patch("onchain_adapters.base.asyncio.sleep", new=AsyncMock()) as sleep:
        yield sleep


def fake_session(status: int = 200, body: Any = None, headers: dict = None, text: str = ""):
    """aiohttp session double returning one canned response."""
    response = MagicMock()
    response.status = status
    response.headers = headers or {}
    response.json = AsyncMock(return_value=body)
    response.text = AsyncMock(return_value=text)

    context = MagicMock()
    context.__aenter__ = AsyncMock(return_value=response)
    context.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.closed = False
    session.post = MagicMock(return_value=context)
    session.close = AsyncMock()
    return session


# ============================================================
# RETRY POLICY
# ============================================================

class TestRequestRetries:
    """Tests for BaseChainDataSource.request."""

    @pytest.mark.asyncio
    async def test_transport_errors_are_retried(self, source, no_backoff):
        source.send.side_effect = [FetchError("reset", adapter_name="scripted"), "0x1"]

        result = await source.request("eth_blockNumber", [])

        assert result == "0x1"
        assert source.send.await_count == 2
        assert no_backoff.await_count == 1
        assert source.get_health().status == AdapterStatus.HEALTHY

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, source):
        source.send.side_effect = FetchError("reset", adapter_name="scripted")

        with pytest.raises(FetchError) as exc_info:
            await source.request("eth_blockNumber", [])

        assert "retries" in exc_info.value.message
        assert source.send.await_count == BaseChainDataSource.MAX_RETRIES
        assert len(source.get_incidents()) == 1

    @pytest.mark.asyncio
    async def test_rpc_errors_are_not_retried(self, source):
        source.send.side_effect = RpcError("execution reverted", adapter_name="scripted", code=3)

        with pytest.raises(RpcError):
            await source.request("eth_call", [])

        assert source.send.await_count == 1
        assert source.get_health().status != AdapterStatus.DEGRADED

    @pytest.mark.asyncio
    async def test_rate_limit_is_not_retried(self, source):
        source.send.side_effect = RateLimitError("slow down", adapter_name="scripted", retry_after_seconds=5)

        with pytest.raises(RateLimitError):
            await source.request("eth_getLogs", [])

        assert source.send.await_count == 1
        assert source.get_health().status == AdapterStatus.RATE_LIMITED

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self, source):
        source.send.side_effect = FetchError("bad request", adapter_name="scripted", status_code=400)

        with pytest.raises(FetchError):
            await source.request("eth_getLogs", [])

        assert source.send.await_count == 1

    @pytest.mark.asyncio
    async def test_repeated_failures_degrade_health(self, source):
        source.send.side_effect = FetchError("bad request", adapter_name="scripted", status_code=400)

        for _ in range(BaseChainDataSource.DEGRADED_THRESHOLD):
            with pytest.raises(FetchError):
                await source.request("eth_getLogs", [])

        assert source.get_health().status == AdapterStatus.DEGRADED


# ============================================================
# RESPONSE VALIDATION
# ============================================================

class TestChainQueries:
    """Tests for response parsing into domain models."""

    @pytest.mark.asyncio
    async def test_get_block(self, source):
        source.send.return_value = {"number": "0x64", "hash": "0xABC", "timestamp": "0x10"}

        block = await source.get_block(100)

        assert (block.number, block.hash, block.timestamp) == (100, "0xabc", 16)
        source.send.assert_awaited_with("eth_getBlockByNumber", ["0x64", False])

    @pytest.mark.asyncio
    async def test_missing_block(self, source):
        source.send.return_value = None

        with pytest.raises(FetchError):
            await source.get_block(100)

    @pytest.mark.asyncio
    async def test_get_logs_sorted_and_normalized(self, source):
        def rpc_log(block: int, index: int) -> dict:
            return {
                "address": "0xAAAA",
                "topics": ["0xDDF2"],
                "data": "0x",
                "blockNumber": hex(block),
                "blockHash": "0xB1",
                "transactionHash": "0xC1",
                "transactionIndex": "0x0",
                "logIndex": hex(index),
            }

        source.send.return_value = [rpc_log(2, 0), rpc_log(1, 3), rpc_log(1, 1)]

        logs = await source.get_logs(LogFilter(from_block=1, to_block=2, topics=(("0xddf2",),)))

        assert [(log.block_number, log.log_index) for log in logs] == [(1, 1), (1, 3), (2, 0)]
        assert logs[0].address == "0xaaaa"
        assert logs[0].topics == ("0xddf2",)

    @pytest.mark.asyncio
    async def test_malformed_payload(self, source):
        source.send.return_value = [{"address": "0x1"}]

        with pytest.raises(NormalizationError):
            await source.get_logs(LogFilter(from_block=1, to_block=1))

    @pytest.mark.asyncio
    async def test_get_call_trace(self, source):
        source.send.return_value = {
            "type": "CALL",
            "from": "0x01",
            "to": "0x02",
            "input": "0xABCDEF01",
            "calls": [{"type": "STATICCALL", "from": "0x02", "to": "0x03", "input": "0x12345678"}],
        }

        trace = await source.get_call_trace("0xaa")

        assert [frame.selector for frame in trace.walk()] == ["0xabcdef01", "0x12345678"]


# ============================================================
# JSON-RPC TRANSPORT
# ============================================================

class TestJsonRpcTransport:
    """Tests for JsonRpcChainDataSource.send."""

    @pytest.mark.asyncio
    async def test_result_is_unwrapped(self):
        session = fake_session(body={"jsonrpc": "2.0", "id": 1, "result": "0x10"})
        source = JsonRpcChainDataSource("http://node", session=session)

        assert await source.send("eth_blockNumber", []) == "0x10"

        payload = session.post.call_args.kwargs["json"]
        assert payload["method"] == "eth_blockNumber"
        assert payload["jsonrpc"] == "2.0"

    @pytest.mark.asyncio
    async def test_error_object(self):
        session = fake_session(body={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "pruned"}})
        source = JsonRpcChainDataSource("http://node", session=session)

        with pytest.raises(RpcError) as exc_info:
            await source.send("eth_getLogs", [])

        assert exc_info.value.code == -32000

    @pytest.mark.asyncio
    async def test_rate_limit(self):
        session = fake_session(status=429, headers={"Retry-After": "12"})
        source = JsonRpcChainDataSource("http://node", session=session)

        with pytest.raises(RateLimitError) as exc_info:
            await source.send("eth_getLogs", [])

        assert exc_info.value.retry_after_seconds == 12

    @pytest.mark.asyncio
    async def test_http_error(self):
        session = fake_session(status=502, text="bad gateway")
        source = JsonRpcChainDataSource("http://node", session=session)

        with pytest.raises(FetchError) as exc_info:
            await source.send("eth_getLogs", [])

        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_connection_error(self):
        session = fake_session()
        session.post.side_effect = aiohttp.ClientConnectionError("refused")
        source = JsonRpcChainDataSource("http://node", session=session)

        with pytest.raises(FetchError) as exc_info:
            await source.send("eth_getLogs", [])

        assert isinstance(exc_info.value.original_error, aiohttp.ClientConnectionError)

    @pytest.mark.asyncio
    async def test_injected_session_is_not_closed(self):
        session = fake_session()

        async with JsonRpcChainDataSource("http://node", session=session):
            pass

        session.close.assert_not_awaited()
