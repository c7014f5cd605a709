"""
JSON-RPC Chain Data Source - Ethereum node client over HTTP.

Works against any node exposing the standard `eth_*` namespace.
Call traces additionally require the `debug_traceTransaction`
method with the built-in `callTracer`.
"""

import itertools
import logging
from typing import Any, Optional

import aiohttp

from onchain_adapters.base import BaseChainDataSource
from onchain_adapters.exceptions import FetchError, RateLimitError, RpcError


logger = logging.getLogger(__name__)


class JsonRpcChainDataSource(BaseChainDataSource):
    """
    Chain data source talking JSON-RPC 2.0 over HTTP POST.

    The aiohttp session is created lazily and closed with the
    data source unless it was injected by the caller.
    """

    def __init__(
        self,
        url: str,
        timeout: float = BaseChainDataSource.DEFAULT_TIMEOUT,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        super().__init__(timeout)
        self._url = url
        self._session = session
        self._owns_session = session is None
        self._ids = itertools.count(1)

    @property
    def name(self) -> str:
        """Unique identifier."""
        return "json_rpc"

    # ─────────────────────────────────────────────────────────────
    # HTTP Helpers
    # ─────────────────────────────────────────────────────────────

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers={
                    "Accept": "application/json",
                    "Content-Type": "application/json",
                },
            )
            self._owns_session = True
        return self._session

    async def send(self, method: str, params: list[Any]) -> Any:
        """POST a single JSON-RPC request and unwrap its result."""
        session = await self._get_session()
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }

        try:
            async with session.post(self._url, json=payload) as response:
                if response.status == 429:
                    retry_after = response.headers.get("Retry-After")
                    raise RateLimitError(
                        message="Rate limit exceeded",
                        adapter_name=self.name,
                        method=method,
                        retry_after_seconds=int(retry_after) if retry_after and retry_after.isdigit() else 60,
                    )

                if response.status >= 400:
                    body = await response.text()
                    raise FetchError(
                        message=f"HTTP {response.status}",
                        adapter_name=self.name,
                        method=method,
                        status_code=response.status,
                        response_body=body[:500],
                    )

                body = await response.json(content_type=None)

        except aiohttp.ClientError as e:
            raise FetchError(
                message=f"Connection error: {e}",
                adapter_name=self.name,
                method=method,
                original_error=e,
            ) from e

        if not isinstance(body, dict):
            raise FetchError(
                message="Malformed JSON-RPC response",
                adapter_name=self.name,
                method=method,
                response_body=str(body)[:500],
            )

        error = body.get("error")
        if error:
            if not isinstance(error, dict):
                error = {"message": error}
            raise RpcError(
                message=str(error.get("message", error)),
                adapter_name=self.name,
                method=method,
                code=error.get("code"),
                data=error.get("data"),
            )

        return body.get("result")

    # ─────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────

    async def close(self) -> None:
        """Close HTTP session if we own it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
            logger.debug(f"[{self.name}] Session closed")
